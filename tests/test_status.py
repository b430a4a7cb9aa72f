from datetime import datetime

import pytest

from storefront.errors import TransitionError
from storefront.status import OrderStatus, check_transition, plan_transition

NOW = datetime(2026, 2, 14, 12, 0, 0)


def test_pending_is_an_alias_of_sent_to_whatsapp():
    assert OrderStatus.PENDING.normalized() is OrderStatus.SENT_TO_WHATSAPP
    assert OrderStatus.SHIPPED.normalized() is OrderStatus.SHIPPED
    assert set(OrderStatus.PENDING.filter_values()) == {OrderStatus.PENDING, OrderStatus.SENT_TO_WHATSAPP}
    assert set(OrderStatus.SENT_TO_WHATSAPP.filter_values()) == {OrderStatus.PENDING, OrderStatus.SENT_TO_WHATSAPP}
    assert OrderStatus.CONFIRMED.filter_values() == [OrderStatus.CONFIRMED]


@pytest.mark.parametrize("current", [OrderStatus.SENT_TO_WHATSAPP, OrderStatus.PENDING])
def test_cannot_ship_before_confirming(current):
    with pytest.raises(TransitionError, match="confirmar"):
        check_transition(current, OrderStatus.SHIPPED)


def test_confirmed_cannot_go_back_to_review():
    with pytest.raises(TransitionError):
        check_transition(OrderStatus.CONFIRMED, OrderStatus.SENT_TO_WHATSAPP)


def test_legacy_status_cannot_be_written():
    with pytest.raises(TransitionError):
        check_transition(OrderStatus.SENT_TO_WHATSAPP, OrderStatus.PENDING)


@pytest.mark.parametrize("current,target", [
    (OrderStatus.SENT_TO_WHATSAPP, OrderStatus.CONFIRMED),
    (OrderStatus.SENT_TO_WHATSAPP, OrderStatus.CANCELLED),
    (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
    (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
    # denylist only: not forbidden, so accepted as given
    (OrderStatus.DELIVERED, OrderStatus.SENT_TO_WHATSAPP),
])
def test_other_transitions_are_accepted(current, target):
    check_transition(current, target)


def test_confirm_stamps_time_and_admin():
    values = plan_transition(OrderStatus.SENT_TO_WHATSAPP, OrderStatus.CONFIRMED, 7, NOW)
    assert values == {
        "status": OrderStatus.CONFIRMED,
        "last_status_changed_at": NOW,
        "intent_confirmed_at": NOW,
        "admin_confirmed_by": 7,
    }


def test_ship_and_deliver_stamps():
    assert plan_transition(OrderStatus.CONFIRMED, OrderStatus.SHIPPED, 1, NOW)["shipped_at"] == NOW
    assert plan_transition(OrderStatus.SHIPPED, OrderStatus.DELIVERED, 1, NOW)["delivered_at"] == NOW


@pytest.mark.parametrize("status", [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED])
def test_reapplying_same_status_only_touches_last_change(status):
    values = plan_transition(status, status, 1, NOW)
    assert values == {"status": status, "last_status_changed_at": NOW}
