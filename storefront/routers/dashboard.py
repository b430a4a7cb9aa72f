# storefront/routers/dashboard.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import orders as repo
from ..auth import get_current_admin
from ..database import get_db
from ..models import Admin
from ..schemas import DashboardStats, RecentOrderOut

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def stats(_: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    return DashboardStats(**repo.order_stats(db))


@router.get("/recent", response_model=List[RecentOrderOut])
def recent(
    limit: int = Query(10, ge=1, le=100),
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return [
        RecentOrderOut(
            id=o.id,
            order_number=o.order_number,
            total=o.total,
            status=o.status,
            source=o.source,
            created_at=o.created_at,
            last_status_changed_at=o.last_status_changed_at,
            customer={"name": o.customer.name, "email": o.customer.email},
        )
        for o in repo.recent_orders(db, limit)
    ]
