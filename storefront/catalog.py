# storefront/catalog.py
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from .errors import NotFoundError, ValidationError
from .models import Category, Product, ProductImage
from .schemas import ProductIn
from .utils import money

_PRODUCT_LOADS = (selectinload(Product.images), selectinload(Product.options))


def list_categories(db: Session) -> List[Category]:
    return list(db.scalars(
        select(Category).where(Category.active.is_(True)).order_by(Category.display_order, Category.id)
    ))


def get_category(db: Session, slug: str) -> Tuple[Category, List[Product]]:
    cat = db.scalar(select(Category).where(Category.slug == slug, Category.active.is_(True)))
    if not cat:
        raise NotFoundError("Categoría no encontrada")
    products = db.scalars(
        select(Product).options(*_PRODUCT_LOADS)
        .where(Product.category_id == cat.id, Product.active.is_(True))
        .order_by(Product.created_at.desc())
    )
    return cat, list(products)


def list_products(
    db: Session,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Product], int]:
    conds = [Product.active.is_(True)]
    if category:
        conds.append(Category.slug == category)
    if search:
        like = f"%{search}%"
        conds.append(or_(Product.name.ilike(like), Product.description.ilike(like)))

    base = select(Product).join(Category, Product.category_id == Category.id).where(*conds)
    total = db.scalar(select(func.count()).select_from(base.subquery()))
    rows = db.scalars(
        base.options(*_PRODUCT_LOADS)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    return list(rows), int(total or 0)


def get_product(db: Session, slug: str) -> Product:
    pr = db.scalar(select(Product).options(*_PRODUCT_LOADS).where(Product.slug == slug, Product.active.is_(True)))
    if not pr:
        raise NotFoundError("Producto no encontrado")
    return pr


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------
def _check_unique(db: Session, payload: ProductIn, pid: Optional[int] = None) -> None:
    if not db.get(Category, payload.category_id):
        raise ValidationError("Categoría no encontrada")
    clash = [Product.slug == payload.slug]
    if payload.sku:
        clash.append(Product.sku == payload.sku)
    q = select(Product.id).where(or_(*clash))
    if pid is not None:
        q = q.where(Product.id != pid)
    if db.scalar(q):
        raise ValidationError("Slug o SKU ya registrado en otro producto.")


def _apply(pr: Product, payload: ProductIn) -> None:
    pr.category_id = payload.category_id
    pr.name = payload.name
    pr.slug = payload.slug
    pr.sku = payload.sku or None
    pr.description = payload.description or ""
    pr.price = money(payload.price)
    pr.compare_at_price = money(payload.compare_at_price) if payload.compare_at_price is not None else None
    pr.featured = payload.featured
    pr.active = payload.active
    pr.images = [ProductImage(url=url, display_order=i) for i, url in enumerate(payload.images)]


def create_product(db: Session, payload: ProductIn) -> Product:
    _check_unique(db, payload)
    pr = Product()
    _apply(pr, payload)
    db.add(pr)
    db.commit()
    db.refresh(pr)
    return pr


def update_product(db: Session, pid: int, payload: ProductIn) -> Product:
    pr = db.get(Product, pid)
    if not pr:
        raise NotFoundError("Producto no encontrado")
    _check_unique(db, payload, pid)
    _apply(pr, payload)
    db.commit()
    db.refresh(pr)
    return pr


def delete_product(db: Session, pid: int) -> None:
    pr = db.get(Product, pid)
    if not pr:
        raise NotFoundError("Producto no encontrado")
    # order_items keep name/sku; their product_id is nulled by the FK
    db.delete(pr)
    db.commit()
