"""FastAPI routes for the Storefront — products, carts and orders."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront import settings
from storefront.api.auth import require_operator
from storefront.api.schemas import (
    AddToCartRequest,
    CartLineSchema,
    CartResponse,
    DecrementResultResponse,
    DecrementStockRequest,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductRequest,
    ProductResponse,
    SetOrderStatusRequest,
    StatusResponse,
)
from storefront.cart.items import AddToCart, ClearCart, UpdateCartQuantity
from storefront.cart.view import view_cart
from storefront.catalog import operations as catalog
from storefront.order.order import Order
from storefront.order.placement import order_placer
from storefront.order.status import RecordPayment, SetOrderStatus
from storefront.stock.ledger import stock_ledger


def _product_response(product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        images=product.image_urls,
        category=product.category,
        sub_category=product.sub_category,
        sizes=[{"size": entry.size, "stock": entry.stock} for entry in product.ordered_sizes],
        best_seller=product.best_seller,
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        user_id=str(order.user_id),
        items=[
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "price": item.price,
                "size": item.size,
                "quantity": item.quantity,
                "image": item.image,
            }
            for item in order.items
        ],
        address=order.address.to_dict(),
        amount=order.amount,
        delivery_fee=order.delivery_fee,
        currency=settings.currency(),
        payment_method=order.payment_method,
        payment=order.payment,
        status=order.status,
        placed_at=order.placed_at,
    )


def _cart_response(user_id) -> CartResponse:
    cart, snapshot = view_cart(user_id)

    items = []
    for line in cart:
        view = snapshot.get(line.product_id)
        items.append(
            {
                **line.to_dict(),
                "name": view.name if view else None,
                "price": view.price if view else None,
                "image": view.image if view else None,
                "available": (view.stock_for(line.size) or 0) if view else 0,
            }
        )

    subtotal = cart.subtotal(snapshot)
    delivery_fee = settings.delivery_fee() if cart.is_purchasable else 0.0
    return CartResponse(
        user_id=str(user_id),
        items=items,
        changed=cart.changed,
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=subtotal + delivery_fee,
        currency=settings.currency(),
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    return [_product_response(product) for product in catalog.list_products()]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(catalog.get_product(product_id))


@product_router.post(
    "",
    status_code=201,
    response_model=ProductIdResponse,
    dependencies=[Depends(require_operator)],
)
async def add_product(body: ProductRequest) -> ProductIdResponse:
    product_id = catalog.add_product(
        name=body.name,
        description=body.description,
        price=body.price,
        images=body.images,
        category=body.category,
        sub_category=body.sub_category,
        sizes=[size.model_dump() for size in body.sizes],
        best_seller=body.best_seller,
    )
    return ProductIdResponse(product_id=product_id)


@product_router.put(
    "/{product_id}",
    response_model=StatusResponse,
    dependencies=[Depends(require_operator)],
)
async def edit_product(product_id: str, body: ProductRequest) -> StatusResponse:
    catalog.edit_product(
        product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        images=body.images,
        category=body.category,
        sub_category=body.sub_category,
        sizes=[size.model_dump() for size in body.sizes],
        best_seller=body.best_seller,
    )
    return StatusResponse()


@product_router.delete(
    "/{product_id}",
    response_model=StatusResponse,
    dependencies=[Depends(require_operator)],
)
async def remove_product(product_id: str) -> StatusResponse:
    catalog.remove_product(product_id)
    return StatusResponse()


@product_router.post(
    "/{product_id}/stock/decrement",
    response_model=DecrementResultResponse,
    dependencies=[Depends(require_operator)],
)
async def decrement_stock(product_id: str, body: DecrementStockRequest) -> DecrementResultResponse:
    result = stock_ledger.decrement(product_id, body.size, body.quantity)
    return DecrementResultResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("/{user_id}", response_model=CartResponse)
async def get_cart(user_id: str) -> CartResponse:
    return _cart_response(user_id)


@cart_router.post("/{user_id}/items", response_model=CartResponse)
async def add_cart_item(user_id: str, body: AddToCartRequest) -> CartResponse:
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        size=body.size,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(user_id)


@cart_router.put("/{user_id}/items", response_model=CartResponse)
async def update_cart_item(user_id: str, body: CartLineSchema) -> CartResponse:
    command = UpdateCartQuantity(
        user_id=user_id,
        product_id=body.product_id,
        size=body.size,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(user_id)


@cart_router.delete("/{user_id}", response_model=StatusResponse)
async def clear_cart(user_id: str) -> StatusResponse:
    current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/cod", status_code=201, response_model=OrderResponse)
async def place_cod_order(body: PlaceOrderRequest) -> OrderResponse:
    order = order_placer.place_order(
        user_id=body.user_id,
        cart_lines=[line.model_dump() for line in body.items],
        address=body.address.model_dump(),
        payment_method=body.payment_method,
    )
    return _order_response(order)


@order_router.get(
    "",
    response_model=list[OrderResponse],
    dependencies=[Depends(require_operator)],
)
async def list_orders() -> list[OrderResponse]:
    return [_order_response(order) for order in current_domain.repository_for(Order).list_all()]


@order_router.put(
    "/{order_id}/status",
    response_model=StatusResponse,
    dependencies=[Depends(require_operator)],
)
async def set_order_status(order_id: str, body: SetOrderStatusRequest) -> StatusResponse:
    current_domain.process(SetOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return StatusResponse()


@order_router.put(
    "/{order_id}/payment",
    response_model=StatusResponse,
    dependencies=[Depends(require_operator)],
)
async def record_payment(order_id: str) -> StatusResponse:
    current_domain.process(RecordPayment(order_id=order_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.get("/{user_id}/orders", response_model=list[OrderResponse])
async def list_user_orders(user_id: str) -> list[OrderResponse]:
    return [_order_response(order) for order in current_domain.repository_for(Order).for_user(user_id)]
