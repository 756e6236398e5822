# src/orderstore/api/routes.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from orderstore.config import Settings
from orderstore.domain.errors import (
    NotFoundError,
    OrderStoreError,
    StorageError,
    ValidationError,
)
from orderstore.domain.models import (
    ErrorResponse,
    Order,
    OrderCount,
    OrderPage,
    StatusUpdate,
)
from orderstore.logging import get_logger
from orderstore.storage import OrderRepo
from orderstore.storage.queries import total_pages

from .deps import get_repo, get_settings

_LOG = get_logger(__name__)
router = APIRouter()


def _error_response(err: OrderStoreError, http_status: int) -> JSONResponse:
    payload = ErrorResponse(
        error=err.message,
        code=err.code,
        details=err.details or {},
    ).model_dump()
    return JSONResponse(status_code=http_status, content=payload)


def _storage_failure(err: StorageError) -> JSONResponse:
    _LOG.error("Storage operation failed: %s (%s)", err.message, err.code)
    return _error_response(err, 500)


@router.get("/healthz")
def healthz() -> dict:
    return {"ok": True}


@router.get("/orders", response_model=OrderPage)
def list_orders(
    page: Optional[int] = Query(default=None, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1, alias="pageSize"),
    status: Optional[str] = Query(default=None, min_length=1),
    repo: OrderRepo = Depends(get_repo),
    settings: Settings = Depends(get_settings),
):
    """
    listOrders.

    Neither page nor pageSize -> every order (the export form).
    Either one -> a page window; the missing one defaults to page 1 or
    the configured page size.
    """
    if page is None and page_size is None:
        try:
            orders, total = repo.list_orders(status=status)
        except StorageError as e:
            return _storage_failure(e)
        return OrderPage(orders=orders, total=total, total_pages=1 if total else 0)

    page = page or 1
    page_size = page_size or settings.default_page_size
    if page_size > settings.max_page_size:
        return _error_response(
            ValidationError(
                f"pageSize must be <= {settings.max_page_size}",
                details={"pageSize": page_size},
            ),
            400,
        )

    try:
        orders, total = repo.list_orders(page, page_size, status=status)
    except ValidationError as e:
        return _error_response(e, 400)
    except StorageError as e:
        return _storage_failure(e)

    return OrderPage(
        orders=orders,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/orders/count", response_model=OrderCount)
def count_orders(
    status: Optional[str] = Query(default=None, min_length=1),
    repo: OrderRepo = Depends(get_repo),
):
    try:
        return OrderCount(total=repo.count_orders(status=status))
    except StorageError as e:
        return _storage_failure(e)


@router.get("/orders/{order_no}", response_model=Order)
def get_order(
    order_no: str,
    repo: OrderRepo = Depends(get_repo),
):
    try:
        return repo.get_order(order_no)
    except NotFoundError as e:
        return _error_response(e, 404)
    except StorageError as e:
        return _storage_failure(e)


@router.put("/orders")
def save_order(
    order: Order,
    repo: OrderRepo = Depends(get_repo),
):
    """
    saveOrder: creates or fully replaces the order and its items.
    """
    try:
        repo.save_order(order)
    except StorageError as e:
        return _storage_failure(e)
    return {"orderNo": order.order_no}


@router.patch("/orders/{order_no}/status")
def update_status(
    order_no: str,
    payload: StatusUpdate,
    repo: OrderRepo = Depends(get_repo),
):
    """
    updateStatus. Unknown orderNo is not an error; `updated` reports whether
    a row matched.
    """
    try:
        updated = repo.update_status(order_no, payload.status)
    except StorageError as e:
        return _storage_failure(e)
    return {"orderNo": order_no, "updated": updated}


@router.delete("/orders/{order_no}")
def delete_order(
    order_no: str,
    repo: OrderRepo = Depends(get_repo),
):
    try:
        deleted = repo.delete_order(order_no)
    except StorageError as e:
        return _storage_failure(e)
    return {"orderNo": order_no, "deleted": deleted}
