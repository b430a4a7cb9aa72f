# storefront/status.py
"""Order status values and the rules for moving between them."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import TransitionError


class OrderStatus(str, enum.Enum):
    SENT_TO_WHATSAPP = "sent_to_whatsapp"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    # historical rows only, never written
    PENDING = "pending"

    @property
    def is_legacy(self) -> bool:
        return self is OrderStatus.PENDING

    def normalized(self) -> "OrderStatus":
        if self is OrderStatus.PENDING:
            return OrderStatus.SENT_TO_WHATSAPP
        return self

    def filter_values(self) -> List["OrderStatus"]:
        """Stored values a listing filter for this status has to match."""
        if self.normalized() is OrderStatus.SENT_TO_WHATSAPP:
            return [OrderStatus.PENDING, OrderStatus.SENT_TO_WHATSAPP]
        return [self]


INITIAL_STATUS = OrderStatus.SENT_TO_WHATSAPP

# statuses that count towards revenue on the dashboard
REVENUE_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED)


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    if target.is_legacy:
        raise TransitionError(f"El estado '{target.value}' ya no se puede asignar.")
    current = current.normalized()
    if current is OrderStatus.SENT_TO_WHATSAPP and target is OrderStatus.SHIPPED:
        raise TransitionError("Debe confirmar el pedido antes de enviarlo.")
    if current is OrderStatus.CONFIRMED and target is OrderStatus.SENT_TO_WHATSAPP:
        raise TransitionError("No se puede regresar un pedido confirmado a revisión.")


def plan_transition(
    current: OrderStatus,
    target: OrderStatus,
    admin_id: Optional[int],
    now: datetime,
) -> Dict[str, Any]:
    """Validate ``current -> target`` and return the order columns to write.

    Milestone stamps are only written the first time the order enters the
    state; re-applying the same status just refreshes
    ``last_status_changed_at``.
    """
    check_transition(current, target)

    values: Dict[str, Any] = {"status": target, "last_status_changed_at": now}
    if target is not current:
        if target is OrderStatus.CONFIRMED:
            values["intent_confirmed_at"] = now
            values["admin_confirmed_by"] = admin_id
        elif target is OrderStatus.SHIPPED:
            values["shipped_at"] = now
        elif target is OrderStatus.DELIVERED:
            values["delivered_at"] = now
    return values
