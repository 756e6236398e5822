from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


OrderNo = Annotated[str, Field(min_length=1, max_length=256)]


class _Model(BaseModel):
    """
    Shared config: snake_case attributes, camelCase on the wire.

    Either form is accepted on input; routes serialize by alias.
    """
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class OrderItem(_Model):
    """
    One line of an order. Text specification fields are free-form.
    """
    sl_no: int
    item_type: str = Field(default="", alias="type")
    qty: float
    length: str = ""
    dia: str = ""
    shore: str = ""
    remarks: str = ""
    rate: float
    amount: float


class Order(_Model):
    """
    An order together with its full item set (the aggregate).

    Saving an Order replaces the stored row and every stored item.
    """
    order_no: OrderNo
    date: str
    customer_name: str
    contact_person: str = ""
    phone: str = ""
    # Free-text lifecycle label, not a closed set.
    status: str
    machine_name: str = ""
    items: list[OrderItem] = Field(default_factory=list)
    subtotal: float
    gst: float
    total: float
    remarks: str = ""
    delivery_note: str = ""
    delivery_note_date: str = ""
    buyer_order_no: str = ""
    buyer_order_date: str = ""
    created_date: str


class StatusUpdate(_Model):
    status: Annotated[str, Field(min_length=1, max_length=256)]


class OrderPage(_Model):
    """
    API output model for listOrders.

    page/page_size are null when the caller asked for the full listing.
    """
    orders: list[Order]
    total: int
    page: Optional[int] = None
    page_size: Optional[int] = None
    total_pages: int


class OrderCount(_Model):
    total: int


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str
    code: str
    details: dict = Field(default_factory=dict)
