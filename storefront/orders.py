# storefront/orders.py
"""Order persistence: checkout transaction, lookups, listing and status changes."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from .config import Settings
from .database import ORDER_SEQUENCE_NAME
from .errors import ConflictError, NotFoundError, ValidationError
from .models import Category, Customer, Order, OrderItem, OrderSequence, Product
from .schemas import CustomerIn, OrderIn, OrderItemIn
from .status import INITIAL_STATUS, REVENUE_STATUSES, OrderStatus, plan_transition
from .utils import money, utcnow

logger = logging.getLogger(__name__)

ORDER_SOURCE = "whatsapp"
UPDATABLE_FIELDS = ("tracking_number", "notes", "payment_reference")

_SQL_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_ASCII_ID = re.compile(r"^[0-9]+$")
_MAX_INT_ID = 2**31 - 1


# -----------------------------------------------------------------------------
# Order numbers
# -----------------------------------------------------------------------------
def _bump_sequence(db: Session) -> int:
    # the UPDATE holds the counter row lock until the surrounding transaction ends
    res = db.execute(
        update(OrderSequence)
        .where(OrderSequence.name == ORDER_SEQUENCE_NAME)
        .values(last_value=OrderSequence.last_value + 1)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        db.add(OrderSequence(name=ORDER_SEQUENCE_NAME, last_value=1))
        db.flush()
        return 1
    return db.scalar(select(OrderSequence.last_value).where(OrderSequence.name == ORDER_SEQUENCE_NAME))


def _call_number_function(db: Session, fn: str) -> Optional[str]:
    if not _SQL_IDENTIFIER.match(fn):
        logger.error("ORDER_NUMBER_FUNCTION %r is not a valid SQL name", fn)
        return None
    try:
        # savepoint: a failing call must not abort the checkout transaction
        with db.begin_nested():
            value = db.scalar(text(f"SELECT {fn}()"))
    except SQLAlchemyError as exc:
        logger.warning("%s() failed: %s", fn, exc)
        return None
    return str(value) if value else None


def next_order_number(db: Session, settings: Settings) -> str:
    fn = settings.order_number_function
    if fn:
        value = _call_number_function(db, fn)
        if value:
            return value
        logger.warning("%s() gave no order number, falling back to the order counter", fn)

    seq = _bump_sequence(db)
    return f"{settings.order_number_prefix}-{utcnow():%Y%m%d}-{seq:05d}"


# -----------------------------------------------------------------------------
# Checkout
# -----------------------------------------------------------------------------
def _upsert_customer(db: Session, data: CustomerIn) -> Customer:
    email = str(data.email).strip().lower()
    fields = dict(
        name=data.name.strip(),
        phone=data.phone.strip(),
        street=data.street or "",
        colony=data.colony or "",
        city=data.city or "",
        state=data.state or "",
        zip_code=data.zip_code or "",
        address_references=data.address_references or "",
    )
    customer = db.scalar(select(Customer).where(Customer.email == email))
    if customer is None:
        customer = Customer(email=email, **fields)
        db.add(customer)
    else:
        # last checkout wins
        for key, value in fields.items():
            setattr(customer, key, value)
    db.flush()
    return customer


def _insert_items(db: Session, order: Order, items: List[OrderItemIn]) -> None:
    wanted = {it.product_id for it in items if it.product_id is not None}
    known = set(db.scalars(select(Product.id).where(Product.id.in_(wanted)))) if wanted else set()

    for it in items:
        unit = money(it.price)
        db.add(OrderItem(
            order_id=order.id,
            product_id=it.product_id if it.product_id in known else None,
            product_name=it.name,
            product_sku=it.sku,
            selected_options=it.options if it.options is not None else [],
            quantity=it.quantity,
            unit_price=unit,
            subtotal=unit * it.quantity,
        ))
    db.flush()


def create_order(db: Session, payload: OrderIn, settings: Settings) -> Order:
    """Customer upsert, order row and its items, all-or-nothing."""
    try:
        customer = _upsert_customer(db, payload.customer)
        order_number = next_order_number(db, settings)

        shipping = settings.default_shipping_cost if payload.shipping_cost is None else payload.shipping_cost
        order = Order(
            order_number=order_number,
            customer_id=customer.id,
            subtotal=money(payload.subtotal),
            shipping_cost=money(shipping),
            discount=money(payload.discount),
            total=money(payload.total),
            payment_method=payload.payment_method or settings.default_payment_method,
            notes=payload.notes or "",
            status=INITIAL_STATUS,
            source=ORDER_SOURCE,
            whatsapp_message=payload.whatsapp_message or "",
            last_status_changed_at=utcnow(),
        )
        db.add(order)
        db.flush()

        _insert_items(db, order, payload.items)
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Checkout rolled back (%d items)", len(payload.items))
        raise

    db.refresh(order)
    logger.info("Order %s created (%d items, total %s)", order.order_number, len(payload.items), order.total)
    return order


# -----------------------------------------------------------------------------
# Reads
# -----------------------------------------------------------------------------
def get_order(db: Session, ref: str) -> Order:
    """Look an order up by numeric id first, then by order number."""
    ref = (ref or "").strip()
    order = None
    if _ASCII_ID.match(ref) and int(ref) <= _MAX_INT_ID:
        order = db.get(Order, int(ref), options=[selectinload(Order.items)])
    if order is None and ref:
        order = db.scalar(
            select(Order).options(selectinload(Order.items)).where(Order.order_number == ref)
        )
    if order is None:
        raise NotFoundError("Pedido no encontrado")
    return order


def list_orders(
    db: Session,
    status: Optional[OrderStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Order], int]:
    count_q = select(func.count(Order.id))
    q = select(Order).options(joinedload(Order.customer), selectinload(Order.items))
    if status is not None:
        cond = Order.status.in_(status.filter_values())
        count_q = count_q.where(cond)
        q = q.where(cond)

    total = db.scalar(count_q)
    rows = db.scalars(
        q.order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    ).all()
    return list(rows), int(total or 0)


# -----------------------------------------------------------------------------
# Status changes
# -----------------------------------------------------------------------------
def update_order_status(
    db: Session,
    order_id: int,
    changes: Dict[str, Any],
    admin_id: Optional[int],
) -> Order:
    current = db.scalar(select(Order.status).where(Order.id == order_id))
    if current is None:
        raise NotFoundError("Pedido no encontrado")

    values: Dict[str, Any] = {}
    target = changes.get("status")
    if target is not None:
        values.update(plan_transition(current, OrderStatus(target), admin_id, utcnow()))
    for key in UPDATABLE_FIELDS:
        if key in changes:
            values[key] = changes[key]

    if not values:
        raise ValidationError("No hay datos para actualizar")

    # expected prior status in the WHERE clause closes the read/write race
    res = db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        db.rollback()
        raise ConflictError("El pedido fue modificado por otra persona, vuelve a intentarlo.")
    db.commit()

    if target is not None:
        logger.info("Order %s: %s -> %s (admin %s)", order_id, current.value, values["status"].value, admin_id)

    order = db.get(Order, order_id, populate_existing=True)
    return order


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------
def order_stats(db: Session) -> Dict[str, Any]:
    by_status = {s.value: 0 for s in OrderStatus if not s.is_legacy}
    total_orders = 0
    for status, count in db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status)):
        by_status[status.normalized().value] += count
        total_orders += count

    revenue = db.scalar(
        select(func.coalesce(func.sum(Order.total), 0)).where(Order.status.in_(REVENUE_STATUSES))
    )
    return {
        "total_orders": total_orders,
        "orders_by_status": by_status,
        "total_revenue": money(revenue),
        "total_products": db.scalar(select(func.count(Product.id)).where(Product.active.is_(True))),
        "total_customers": db.scalar(select(func.count(Customer.id))),
        "total_categories": db.scalar(select(func.count(Category.id)).where(Category.active.is_(True))),
    }


def recent_orders(db: Session, limit: int = 10) -> List[Order]:
    return list(db.scalars(
        select(Order)
        .options(joinedload(Order.customer))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
    ))
