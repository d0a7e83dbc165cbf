# shop_service/db/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer

from shop_service.db.models import RoleEnum, SexEnum

# Decimal inside, JSON number outside
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]
NonEmptyStr = Annotated[str, Field(min_length=1)]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Схема для категории (Category)
class CategoryCreate(BaseModel):
    name: NonEmptyStr
    description: Optional[str] = None
    parent_category_id: Optional[str] = None
    created_by: NonEmptyStr


class CategoryUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    parent_category_id: Optional[str] = None
    updated_by: Optional[str] = None


class CategoryOut(ORMModel):
    id: str
    name: str
    description: Optional[str] = None
    parent_category_id: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


# Схема для изображения товара
class ProductImageCreate(BaseModel):
    product_id: str
    image_url: NonEmptyStr
    is_primary: bool = False
    created_by: NonEmptyStr


class ProductImageOut(ORMModel):
    id: str
    product_id: str
    image_url: str
    is_primary: bool
    created_by: str
    created_at: Optional[datetime] = None


class ProductVideoCreate(BaseModel):
    product_id: str
    video_url: NonEmptyStr
    created_by: NonEmptyStr


class ProductVideoOut(ORMModel):
    id: str
    product_id: str
    video_url: str
    created_by: str
    created_at: Optional[datetime] = None


# Схема для товара (Product)
class ProductCreate(BaseModel):
    name: NonEmptyStr
    description: NonEmptyStr
    price: Decimal = Field(ge=0)
    stock_quantity: int = Field(ge=0)
    brand: NonEmptyStr
    is_featured: bool = False
    category_id: str
    weight: Optional[Decimal] = Field(default=None, ge=0)
    shipping_class: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    seo_url: Optional[str] = None
    created_by: NonEmptyStr


class ProductUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    brand: Optional[NonEmptyStr] = None
    is_featured: Optional[bool] = None
    category_id: Optional[str] = None
    weight: Optional[Decimal] = Field(default=None, ge=0)
    shipping_class: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    seo_url: Optional[str] = None
    updated_by: Optional[str] = None


class ProductSummary(ORMModel):
    id: str
    name: str
    description: str
    brand: str
    price: Money
    stock_quantity: int
    is_featured: bool


class ProductBrief(ProductSummary):
    category_id: str
    category: Optional[CategoryOut] = None


class ProductOut(ProductBrief):
    weight: Optional[Money] = None
    shipping_class: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    seo_url: Optional[str] = None
    product_image: Optional[ProductImageOut] = None
    product_video: Optional[ProductVideoOut] = None
    created_by: str
    created_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


# Адреса
class AddressCreate(BaseModel):
    street_address: NonEmptyStr
    city: NonEmptyStr
    state: Optional[str] = None
    postal_code: NonEmptyStr
    country: NonEmptyStr
    is_default: bool = False


class AddressUpdate(BaseModel):
    street_address: Optional[NonEmptyStr] = None
    city: Optional[NonEmptyStr] = None
    state: Optional[str] = None
    postal_code: Optional[NonEmptyStr] = None
    country: Optional[NonEmptyStr] = None
    is_default: Optional[bool] = None


class AddressOut(ORMModel):
    id: str
    user_id: str
    street_address: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str
    is_default: bool


class BillingCreate(BaseModel):
    user_id: str
    street_address: NonEmptyStr
    city: NonEmptyStr
    state: Optional[str] = None
    postal_code: NonEmptyStr
    country: NonEmptyStr


class BillingOut(ORMModel):
    id: str
    user_id: str
    street_address: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str
    updated_at: Optional[datetime] = None


# Схема пользователя
class UserRegister(BaseModel):
    username: NonEmptyStr
    email: EmailStr
    password: NonEmptyStr
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    sex: SexEnum
    phone_number: NonEmptyStr


class UserLogin(BaseModel):
    email: EmailStr
    password: NonEmptyStr


class UserUpdate(BaseModel):
    username: Optional[NonEmptyStr] = None
    email: Optional[EmailStr] = None
    first_name: Optional[NonEmptyStr] = None
    last_name: Optional[NonEmptyStr] = None
    sex: Optional[SexEnum] = None
    role: Optional[RoleEnum] = None
    is_verified: Optional[bool] = None
    profile_photo: Optional[str] = None
    phone_number: Optional[str] = None


class UserOut(ORMModel):
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    sex: SexEnum
    role: RoleEnum
    is_verified: bool
    profile_photo: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[AddressOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Корзина
class CartCreate(BaseModel):
    user_id: str
    created_by: NonEmptyStr


class CartItemCreate(BaseModel):
    cart_id: str
    product_id: str
    quantity: int = Field(default=1, ge=1)
    created_by: NonEmptyStr


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1)
    updated_by: Optional[str] = None


class CartItemOut(ORMModel):
    id: str
    cart_id: str
    product_id: str
    quantity: int
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CartOut(ORMModel):
    id: str
    user_id: str
    created_by: str
    created_at: Optional[datetime] = None
    items: List[CartItemOut] = []


# Схема для элементов заказа
class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    created_by: NonEmptyStr
    order_id: Optional[str] = None


class OrderItemOut(ORMModel):
    id: str
    order_id: Optional[str] = None
    product_id: str
    quantity: int
    unit_price: Money
    total_price: Money
    created_by: str
    created_at: Optional[datetime] = None


class OrderItemDetail(OrderItemOut):
    product: Optional[ProductBrief] = None


# Схема заказа
class OrderCreate(BaseModel):
    user_id: str
    order_item: List[str] = Field(min_length=1)
    created_by: NonEmptyStr
    shipping_address: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    order_status: NonEmptyStr
    updated_by: Optional[str] = None


class OrderOut(ORMModel):
    id: str
    user_id: str
    total_amount: Money
    order_status: str
    payment_status: str
    shipping_address: Optional[str] = None
    order_item: List[str] = []
    created_by: str
    created_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class OrderDetail(OrderOut):
    items: List[OrderItemDetail] = []
    user: Optional[UserOut] = None


# Оплата
class PaymentCreate(BaseModel):
    order_id: str
    payment_method: Optional[str] = None
    transaction_id: NonEmptyStr
    amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_status: Optional[str] = None


class PaymentOut(ORMModel):
    id: str
    order_id: str
    payment_method: Optional[str] = None
    transaction_id: str
    amount: Optional[Money] = None
    payment_status: Optional[str] = None
    payment_date: Optional[datetime] = None


# Схема для отзыва о товаре (Review)
class ReviewCreate(BaseModel):
    user_id: str
    product_id: str
    rating: int = Field(default=0, ge=0, le=5)
    review_text: NonEmptyStr


class ReviewOut(ORMModel):
    id: str
    user_id: str
    product_id: str
    rating: int
    review_text: str
    created_at: Optional[datetime] = None
