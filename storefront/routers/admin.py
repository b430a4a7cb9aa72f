# storefront/routers/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import catalog
from ..auth import STAFF_ROLES, authenticate, get_current_admin, require_role, token_for_admin
from ..config import Settings
from ..database import get_db, get_settings
from ..models import Admin
from ..schemas import AdminOut, LoginIn, ProductIn, ProductOut, TokenOut
from ..utils import utcnow

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    admin = authenticate(db, payload.username, payload.password)
    admin.last_login = utcnow()
    db.commit()
    db.refresh(admin)
    return TokenOut(token=token_for_admin(admin, settings), admin=AdminOut.model_validate(admin))


@router.get("/me", response_model=AdminOut)
def me(current: Admin = Depends(get_current_admin)):
    return current


# -----------------------------------------------------------------------------
# Productos
# -----------------------------------------------------------------------------
@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    _: Admin = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return catalog.create_product(db, payload)


@router.put("/products/{pid}", response_model=ProductOut)
def update_product(
    pid: int,
    payload: ProductIn,
    _: Admin = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    return catalog.update_product(db, pid, payload)


@router.delete("/products/{pid}")
def delete_product(
    pid: int,
    _: Admin = Depends(require_role(*STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    catalog.delete_product(db, pid)
    return {"ok": True}
