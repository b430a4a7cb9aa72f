# storefront/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from .status import OrderStatus

# -----------------------------------------------------------------------------
# Checkout
# -----------------------------------------------------------------------------
class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=30)
    street: Optional[str] = ""
    colony: Optional[str] = ""
    city: Optional[str] = ""
    state: Optional[str] = ""
    zip_code: Optional[str] = ""
    address_references: Optional[str] = ""


class OrderItemIn(BaseModel):
    model_config = {"populate_by_name": True}

    # storefront cart sends the product id as "id"
    product_id: Optional[int] = Field(None, alias="id")
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = None
    options: Optional[Any] = None
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)


class OrderIn(BaseModel):
    customer: CustomerIn
    items: List[OrderItemIn] = Field(..., min_length=1)
    subtotal: Decimal = Field(Decimal("0"), ge=0)
    shipping_cost: Optional[Decimal] = Field(None, ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    total: Decimal = Field(Decimal("0"), ge=0)
    payment_method: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = ""
    whatsapp_message: Optional[str] = None


class OrderCreatedOut(BaseModel):
    id: int
    order_number: str
    total: Decimal
    status: OrderStatus
    created_at: datetime
    source: str
    has_whatsapp_message: bool


class OrderCreatedResponse(BaseModel):
    order: OrderCreatedOut
    message: str


# -----------------------------------------------------------------------------
# Order read models
# -----------------------------------------------------------------------------
class OrderItemOut(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    product_sku: Optional[str] = None
    selected_options: Optional[Any] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    model_config = {"from_attributes": True}


class OrderPublicOut(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    source: str
    subtotal: Decimal
    shipping_cost: Decimal
    discount: Decimal
    total: Decimal
    payment_method: str
    tracking_number: Optional[str] = None
    intent_confirmed_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    last_status_changed_at: Optional[datetime] = None
    created_at: datetime
    items: List[OrderItemOut] = []
    model_config = {"from_attributes": True}


class CustomerSummary(BaseModel):
    name: str
    email: str
    phone: str
    model_config = {"from_attributes": True}


class ItemSummary(BaseModel):
    name: str
    quantity: int
    price: Decimal


class OrderAdminOut(OrderPublicOut):
    notes: Optional[str] = ""
    payment_reference: Optional[str] = None
    whatsapp_message: Optional[str] = ""
    admin_confirmed_by: Optional[int] = None
    customer: CustomerSummary
    items: List[ItemSummary] = []


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OrderListOut(BaseModel):
    orders: List[OrderAdminOut]
    pagination: Pagination


class StatusUpdateIn(BaseModel):
    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = None
    payment_reference: Optional[str] = Field(None, max_length=120)


# -----------------------------------------------------------------------------
# Admin / auth
# -----------------------------------------------------------------------------
class LoginIn(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminOut(BaseModel):
    id: int
    username: str
    email: str
    role: str
    last_login: Optional[datetime] = None
    created_at: datetime
    model_config = {"from_attributes": True}


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    admin: AdminOut


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------
class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = ""
    image_url: Optional[str] = ""
    display_order: int
    model_config = {"from_attributes": True}


class ProductImageOut(BaseModel):
    url: str
    alt_text: Optional[str] = ""
    display_order: int
    model_config = {"from_attributes": True}


class ProductOptionOut(BaseModel):
    name: str
    values: Optional[List[Any]] = []
    display_order: int
    model_config = {"from_attributes": True}


class ProductIn(BaseModel):
    category_id: int
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=280, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    sku: Optional[str] = None
    description: Optional[str] = ""
    price: Decimal = Field(..., ge=0)
    compare_at_price: Optional[Decimal] = Field(None, ge=0)
    featured: bool = False
    active: bool = True
    images: List[str] = []


class ProductOut(BaseModel):
    id: int
    category_id: int
    name: str
    slug: str
    sku: Optional[str] = None
    description: Optional[str] = ""
    price: Decimal
    compare_at_price: Optional[Decimal] = None
    featured: bool
    active: bool
    created_at: datetime
    images: List[ProductImageOut] = []
    options: List[ProductOptionOut] = []
    model_config = {"from_attributes": True}


class ProductListOut(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class CategoryDetailOut(BaseModel):
    category: CategoryOut
    products: List[ProductOut]


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------
class DashboardStats(BaseModel):
    total_orders: int
    orders_by_status: Dict[str, int]
    total_revenue: Decimal
    total_products: int
    total_customers: int
    total_categories: int


class RecentOrderOut(BaseModel):
    id: int
    order_number: str
    total: Decimal
    status: OrderStatus
    source: str
    created_at: datetime
    last_status_changed_at: Optional[datetime] = None
    customer: Dict[str, str]
