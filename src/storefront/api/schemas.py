"""Pydantic request/response schemas for the Storefront API.

Request and response bodies are the public contract of the HTTP API and are
kept apart from the Protean commands they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class SizeStockSchema(BaseModel):
    size: str
    stock: int = Field(ge=0)


class AddressSchema(BaseModel):
    first_name: str
    last_name: str
    email: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    phone: str


class CartLineSchema(BaseModel):
    product_id: str
    size: str
    quantity: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class ProductRequest(BaseModel):
    name: str
    description: str
    price: float = Field(gt=0)
    images: list[str]
    category: str
    sub_category: str
    sizes: list[SizeStockSchema]
    best_seller: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Classic Cotton Tee",
                    "description": "Crew neck, regular fit",
                    "price": 25.0,
                    "images": ["https://cdn.example.com/tee-front.png"],
                    "category": "Men",
                    "sub_category": "Topwear",
                    "sizes": [{"size": "M", "stock": 10}, {"size": "L", "stock": 4}],
                    "best_seller": False,
                }
            ]
        }
    }


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    images: list[str]
    category: str
    sub_category: str
    sizes: list[SizeStockSchema]
    best_seller: bool


class ProductIdResponse(BaseModel):
    product_id: str


class DecrementStockRequest(BaseModel):
    size: str
    quantity: int = Field(ge=1)


class DecrementResultResponse(BaseModel):
    product_id: str
    size: str
    requested: int
    outcome: str
    previous_stock: int | None = None
    new_stock: int | None = None
    applied: bool
    reason: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    size: str
    quantity: int = Field(ge=1, default=1)


class ReconciledLineResponse(BaseModel):
    product_id: str
    size: str
    quantity: int
    valid: bool
    reason: str | None = None
    name: str | None = None
    price: float | None = None
    image: str | None = None
    available: int = 0


class CartResponse(BaseModel):
    user_id: str
    items: list[ReconciledLineResponse]
    changed: bool
    subtotal: float
    delivery_fee: float
    total: float
    currency: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    user_id: str
    items: list[CartLineSchema]
    address: AddressSchema
    payment_method: str = "COD"


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    size: str
    quantity: int
    image: str | None = None


class OrderResponse(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemResponse]
    address: AddressSchema
    amount: float
    delivery_fee: float
    currency: str
    payment_method: str
    payment: bool
    status: str
    placed_at: datetime | None = None


class SetOrderStatusRequest(BaseModel):
    status: str


class StatusResponse(BaseModel):
    status: str = "ok"
