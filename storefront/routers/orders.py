# storefront/routers/orders.py
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import orders as repo
from ..auth import STAFF_ROLES, get_current_admin, require_role
from ..config import Settings
from ..database import get_db, get_settings
from ..models import Admin, Order
from ..schemas import (
    CustomerSummary,
    ItemSummary,
    OrderAdminOut,
    OrderCreatedOut,
    OrderCreatedResponse,
    OrderIn,
    OrderListOut,
    OrderPublicOut,
    Pagination,
    StatusUpdateIn,
)
from ..status import OrderStatus

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _admin_out(o: Order) -> OrderAdminOut:
    public = OrderPublicOut.model_validate(o).model_dump(exclude={"items"})
    return OrderAdminOut(
        **public,
        notes=o.notes,
        payment_reference=o.payment_reference,
        whatsapp_message=o.whatsapp_message,
        admin_confirmed_by=o.admin_confirmed_by,
        customer=CustomerSummary.model_validate(o.customer),
        items=[ItemSummary(name=i.product_name, quantity=i.quantity, price=i.unit_price) for i in o.items],
    )


# -----------------------------------------------------------------------------
# Público (checkout)
# -----------------------------------------------------------------------------
@router.post("", response_model=OrderCreatedResponse, status_code=201)
def create_order(
    payload: OrderIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    order = repo.create_order(db, payload, settings)
    return OrderCreatedResponse(
        order=OrderCreatedOut(
            id=order.id,
            order_number=order.order_number,
            total=order.total,
            status=order.status,
            created_at=order.created_at,
            source=order.source,
            has_whatsapp_message=bool(order.whatsapp_message),
        ),
        message="Pedido creado exitosamente",
    )


@router.get("/{ref}", response_model=OrderPublicOut)
def get_order(ref: str, db: Session = Depends(get_db)):
    return repo.get_order(db, ref)


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------
@router.get("", response_model=OrderListOut)
def list_orders(
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    rows, total = repo.list_orders(db, status=status, page=page, limit=limit)
    return OrderListOut(
        orders=[_admin_out(o) for o in rows],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.patch("/{order_id}/status", response_model=OrderAdminOut)
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    admin: Admin = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("status") is None:
        changes.pop("status", None)
    order = repo.update_order_status(db, order_id, changes, admin_id=admin.id)
    return _admin_out(order)
