from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from services.checkout.capture import PaymentMethod


class Product(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    category: str
    stock: int = 0
    rating: float = 0
    is_free_shipping: bool = False
    created_at: Optional[datetime] = None


class ProductListResponse(BaseModel):
    items: List[Product]


class CategoryProductsResponse(BaseModel):
    category: str
    brands: List[str]
    items: List[Product]


class CatalogFilters(BaseModel):
    brands: List[str] = []
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_rating: float = 0
    in_stock_only: bool = False
    sort: str = "relevance"


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    image_url: Optional[str] = None
    category: str = Field(..., min_length=1)
    stock: int = Field(default=0, ge=0)
    rating: float = Field(default=0, ge=0, le=5)
    is_free_shipping: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    image_url: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    stock: Optional[int] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    is_free_shipping: Optional[bool] = None


class ImageUploadResponse(BaseModel):
    path: str
    public_url: str


class PricingSummary(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    total: float
    item_count: int
    currency: str


class CartLine(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    product_id: str
    quantity: int
    product: Optional[Product] = None


class CartResponse(BaseModel):
    items: List[CartLine]
    summary: PricingSummary


class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int


class CartCountResponse(BaseModel):
    count: int


class UserProfile(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    email_confirmed: bool = False
    email_confirmed_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None


class OrderItem(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    product_id: str
    quantity: int
    price: float


class Order(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    user_id: str
    email: Optional[str] = None
    total_amount: float
    subtotal: Optional[float] = None
    shipping_cost: Optional[float] = None
    tax_amount: Optional[float] = None
    currency: Optional[str] = None
    status: str
    payment_method: str
    payment_reference: Optional[str] = None
    shipping_address: Dict[str, Any] = {}
    items: List[OrderItem] = []
    created_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    items: List[Order]


class ShippingAddress(BaseModel):
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = "Canada"


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod
    shipping_address: ShippingAddress
    email: Optional[str] = None
    idempotency_key: Optional[str] = Field(
        default=None, description="Client-generated token, reused when resubmitting"
    )
    card_payment_method_id: Optional[str] = Field(
        default=None, description="Tokenized Stripe payment method"
    )
    paypal_order_id: Optional[str] = Field(
        default=None, description="Order id approved in the PayPal widget"
    )


class CheckoutResponse(BaseModel):
    state: str
    history: List[str]
    idempotency_key: str
    pricing: Optional[PricingSummary] = None
    order: Optional[Order] = None
    payment_reference: Optional[str] = None
    instructions: Optional[str] = None
    failure: Optional[str] = None
    cause: Optional[str] = None
    message: Optional[str] = None
    support_reference: Optional[str] = None


class WalletOrderRequest(BaseModel):
    idempotency_key: Optional[str] = None


class WalletOrderResponse(BaseModel):
    order_id: str
    amount: float
    currency: str
    idempotency_key: str = Field(
        ..., description="Send back unchanged when finalizing this PayPal order"
    )
