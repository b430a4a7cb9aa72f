# storefront/routers/catalog.py
import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import catalog
from ..database import get_db
from ..schemas import CategoryDetailOut, CategoryOut, Pagination, ProductListOut, ProductOut

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)


@router.get("/categories/{slug}", response_model=CategoryDetailOut)
def get_category(slug: str, db: Session = Depends(get_db)):
    cat, products = catalog.get_category(db, slug)
    return CategoryDetailOut(
        category=CategoryOut.model_validate(cat),
        products=[ProductOut.model_validate(p) for p in products],
    )


@router.get("/products", response_model=ProductListOut)
def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
):
    rows, total = catalog.list_products(db, category=category, search=search, page=page, limit=limit)
    return ProductListOut(
        products=[ProductOut.model_validate(p) for p in rows],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/products/{slug}", response_model=ProductOut)
def get_product(slug: str, db: Session = Depends(get_db)):
    return catalog.get_product(db, slug)
