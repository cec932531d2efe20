"""FastAPI REST API for orders and payments."""

from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from . import __version__
from .catalog_store import ProductStore
from .checkout import Checkout
from .config import Settings
from .errors import (
    ConflictError,
    DeliveryDateMissingError,
    DuplicateOrderError,
    DuplicateProductError,
    EmptyOrderError,
    ExchangeAlreadyActionedError,
    ExchangeReasonRequiredError,
    ExchangeWindowClosedError,
    ForbiddenError,
    GatewayNotConfiguredError,
    InvalidActionError,
    InvalidLineItemError,
    InvalidPriceError,
    InvalidPaymentMethodError,
    InvalidSchemaVersionError,
    InvalidSignatureError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    MissingPaymentMethodError,
    NotAwaitingApprovalError,
    OrderdeskError,
    OrderNotDeliveredError,
    OrderNotFoundError,
    PaymentAlreadyRecordedError,
    PaymentGatewayError,
    ProductNotFoundError,
    TrackingIdRequiredError,
    UnauthenticatedError,
)
from .gateway import PaymentGateway, RazorpayGateway
from .lifecycle import OrderLifecycle, _utc_clock
from .models import Identity, LineItem, Order, ShippingAddress
from .order_store import OrderStore
from .payments import PaymentVerifier
from .views import get_visible_order, populate_orders


# --- Pydantic Schemas ---


class OrderLineSchema(BaseModel):
    product_id: str
    quantity: int
    price: int  # minor units


class ProductSummarySchema(BaseModel):
    product_id: str
    product_name: str
    price: str
    images: list[str] = []
    category: str = ""
    subcategory: str = ""


class PopulatedOrderLineSchema(OrderLineSchema):
    product_details: ProductSummarySchema


class ShippingAddressSchema(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    country: str


class PaymentInfoSchema(BaseModel):
    payment_id: str
    signature: str


class ShippingInfoSchema(BaseModel):
    provider: str
    tracking_id: str


class OrderSchema(BaseModel):
    id: str
    user_id: str
    products: list[OrderLineSchema]
    amount: int
    shipping_address: ShippingAddressSchema
    payment_method: str
    receipt_id: str
    order_status: str
    is_paid: bool
    gateway_order: Optional[dict[str, Any]] = None
    payment_info: Optional[PaymentInfoSchema] = None
    delivered_at: Optional[str] = None
    shipping_info: Optional[ShippingInfoSchema] = None
    exchange_status: str
    exchange_reason: Optional[str] = None
    version: int
    created_at: str
    updated_at: str


class PopulatedOrderSchema(OrderSchema):
    products: list[PopulatedOrderLineSchema]


class LineItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class OrderCreateRequest(BaseModel):
    """Request body for placing an order. Prices are never taken from the client."""

    line_items: list[LineItemRequest] = Field(
        default_factory=list,
        validation_alias=AliasChoices("line_items", "products"),
    )
    shipping_address: ShippingAddressSchema
    payment_method: Optional[str] = Field(None, description="'Razorpay' or 'COD'")


class PaymentVerifyRequest(BaseModel):
    """Payment confirmation, in our field names or the gateway's native ones."""

    gateway_order_id: str = Field(
        ..., validation_alias=AliasChoices("gateway_order_id", "razorpay_order_id")
    )
    gateway_payment_id: str = Field(
        ..., validation_alias=AliasChoices("gateway_payment_id", "razorpay_payment_id")
    )
    signature: str = Field(
        ..., validation_alias=AliasChoices("signature", "razorpay_signature")
    )


class PaymentVerifyResponse(BaseModel):
    message: str
    order_id: str


class StatusUpdateRequest(BaseModel):
    status: str
    tracking_id: Optional[str] = None


class ExchangeRequest(BaseModel):
    reason: Optional[str] = None


class ExchangeManageRequest(BaseModel):
    action: Optional[str] = Field(None, description="'approve' or 'reject'")


class ErrorResponse(BaseModel):
    detail: str
    error_type: str


# --- Dependencies ---


def get_settings() -> Settings:
    return Settings.from_env()


def get_order_store(settings: Settings = Depends(get_settings)) -> OrderStore:
    return OrderStore(settings.data_dir)


def get_product_store(settings: Settings = Depends(get_settings)) -> ProductStore:
    return ProductStore(settings.data_dir)


def get_gateway(settings: Settings = Depends(get_settings)) -> PaymentGateway:
    return RazorpayGateway.from_settings(settings)


def get_clock() -> Callable[[], datetime]:
    return _utc_clock


def get_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    """Identity resolved upstream and forwarded in X-User-Id / X-User-Role."""
    if not x_user_id:
        raise UnauthenticatedError()
    return Identity(user_id=x_user_id, role=(x_user_role or "user").lower())


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("Admin access required")
    return identity


def get_checkout(
    orders: OrderStore = Depends(get_order_store),
    catalog: ProductStore = Depends(get_product_store),
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> Checkout:
    return Checkout(orders, catalog, gateway, settings)


def get_verifier(
    orders: OrderStore = Depends(get_order_store),
    settings: Settings = Depends(get_settings),
) -> PaymentVerifier:
    return PaymentVerifier(orders, settings)


def get_lifecycle(
    orders: OrderStore = Depends(get_order_store),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> OrderLifecycle:
    return OrderLifecycle(orders, settings, clock)


def order_to_schema(order: Order) -> OrderSchema:
    """Convert dataclass Order to Pydantic schema."""
    return OrderSchema(**order.to_dict())


# --- FastAPI App ---


app = FastAPI(
    title="orderdesk API",
    description="REST API for order placement, payment verification and fulfilment",
    version=__version__,
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handler ---


# Map exception types to HTTP status codes
ERROR_STATUS_CODES: dict[type, int] = {
    InvalidSchemaVersionError: 500,
    ConflictError: 409,
    DuplicateOrderError: 409,
    OrderNotFoundError: 404,
    ProductNotFoundError: 404,
    DuplicateProductError: 409,
    UnauthenticatedError: 401,
    ForbiddenError: 403,
    EmptyOrderError: 400,
    InvalidLineItemError: 400,
    InvalidPriceError: 400,
    MissingPaymentMethodError: 400,
    InvalidPaymentMethodError: 400,
    PaymentGatewayError: 502,
    GatewayNotConfiguredError: 500,
    InvalidSignatureError: 400,
    PaymentAlreadyRecordedError: 409,
    InvalidStatusError: 400,
    InvalidStatusTransitionError: 409,
    TrackingIdRequiredError: 400,
    ExchangeReasonRequiredError: 400,
    OrderNotDeliveredError: 400,
    DeliveryDateMissingError: 400,
    ExchangeAlreadyActionedError: 400,
    ExchangeWindowClosedError: 400,
    NotAwaitingApprovalError: 400,
    InvalidActionError: 400,
}


@app.exception_handler(OrderdeskError)
async def orderdesk_error_handler(request: Request, exc: OrderdeskError) -> JSONResponse:
    """Map OrderdeskError subclasses to appropriate HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


# --- Endpoints ---


@app.get("/api/health")
def health_check(orders: OrderStore = Depends(get_order_store)):
    """
    Health check endpoint.

    Returns basic service status and whether the order store is readable.
    """
    try:
        count = len(orders.list_orders())
        return {
            "status": "ok",
            "version": __version__,
            "order_count": count,
        }
    except Exception as e:
        return {
            "status": "error",
            "detail": str(e),
        }


# --- Payment Endpoints ---


@app.post("/api/payment/orders", response_model=OrderSchema, status_code=201)
def create_order(
    request: OrderCreateRequest,
    identity: Identity = Depends(get_identity),
    checkout: Checkout = Depends(get_checkout),
):
    """Place an order priced from the catalog."""
    order = checkout.create_order(
        user_id=identity.user_id,
        line_items=[LineItem(product_id=i.product_id, quantity=i.quantity) for i in request.line_items],
        shipping_address=ShippingAddress(**request.shipping_address.model_dump()),
        payment_method=request.payment_method,
    )
    return order_to_schema(order)


@app.post("/api/payment/verify", response_model=PaymentVerifyResponse)
def verify_payment(
    request: PaymentVerifyRequest,
    identity: Identity = Depends(get_identity),
    verifier: PaymentVerifier = Depends(get_verifier),
):
    """Record a signed payment confirmation against its order."""
    order = verifier.verify(
        request.gateway_order_id,
        request.gateway_payment_id,
        request.signature,
    )
    return PaymentVerifyResponse(message="Payment verified successfully.", order_id=order.id)


# --- Order Endpoints ---


@app.get("/api/orders/myorders", response_model=list[PopulatedOrderSchema])
def list_my_orders(
    identity: Identity = Depends(get_identity),
    orders: OrderStore = Depends(get_order_store),
    catalog: ProductStore = Depends(get_product_store),
):
    """List the caller's orders, newest first."""
    return populate_orders(orders.list_user_orders(identity.user_id), catalog)


@app.get("/api/orders", response_model=list[PopulatedOrderSchema])
def list_all_orders(
    identity: Identity = Depends(require_admin),
    orders: OrderStore = Depends(get_order_store),
    catalog: ProductStore = Depends(get_product_store),
):
    """List every order, newest first (admin)."""
    return populate_orders(orders.list_orders(), catalog)


@app.get("/api/orders/{order_id}", response_model=PopulatedOrderSchema)
def get_order(
    order_id: str,
    identity: Identity = Depends(get_identity),
    orders: OrderStore = Depends(get_order_store),
    catalog: ProductStore = Depends(get_product_store),
):
    """Get one order; visible to its owner and to admins."""
    order = get_visible_order(orders, order_id, identity)
    return populate_orders([order], catalog)[0]


@app.put("/api/orders/{order_id}/status", response_model=OrderSchema)
def update_order_status(
    order_id: str,
    request: StatusUpdateRequest,
    identity: Identity = Depends(require_admin),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    """Move an order along its fulfilment path (admin)."""
    order = lifecycle.update_status(order_id, request.status, request.tracking_id)
    return order_to_schema(order)


@app.post("/api/orders/{order_id}/request-exchange", response_model=OrderSchema)
def request_exchange(
    order_id: str,
    request: ExchangeRequest,
    identity: Identity = Depends(get_identity),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    """Ask for an exchange within the window after delivery (owner)."""
    order = lifecycle.request_exchange(order_id, identity.user_id, request.reason)
    return order_to_schema(order)


@app.put("/api/orders/{order_id}/manage-exchange", response_model=OrderSchema)
def manage_exchange(
    order_id: str,
    request: ExchangeManageRequest,
    identity: Identity = Depends(require_admin),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    """Approve or reject a requested exchange (admin)."""
    order = lifecycle.manage_exchange(order_id, request.action)
    return order_to_schema(order)
