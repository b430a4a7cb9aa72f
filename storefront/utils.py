# storefront/utils.py
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def utcnow() -> datetime:
    # naive UTC, same as what the DateTime columns hand back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
