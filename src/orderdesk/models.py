"""Data models for orderdesk."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
import uuid


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return format_timestamp(datetime.now(timezone.utc))


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp written by this package."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _generate_id() -> str:
    """Generate a new order ID."""
    return str(uuid.uuid4())


class PaymentMethod(str, Enum):
    GATEWAY = "Razorpay"
    COD = "COD"


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "Pending Payment"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    EXCHANGE_REQUESTED = "Exchange Requested"


class ExchangeStatus(str, Enum):
    NONE = "None"
    REQUESTED = "Requested"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"  # reserved, no operation reaches it


@dataclass
class LineItem:
    """A product and quantity as submitted by the client."""

    product_id: str
    quantity: int


@dataclass
class OrderLine:
    """A priced order line. `price` is the unit price in minor units at checkout."""

    product_id: str
    quantity: int
    price: int

    @property
    def total(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderLine":
        return cls(
            product_id=data["product_id"],
            quantity=data["quantity"],
            price=data["price"],
        )


@dataclass
class ShippingAddress:
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    country: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShippingAddress":
        return cls(
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            phone=data["phone"],
            address=data["address"],
            city=data["city"],
            state=data["state"],
            pincode=data["pincode"],
            country=data["country"],
        )


@dataclass
class PaymentInfo:
    """Confirmation data recorded once a gateway payment is verified."""

    payment_id: str
    signature: str

    def to_dict(self) -> dict[str, Any]:
        return {"payment_id": self.payment_id, "signature": self.signature}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaymentInfo":
        return cls(payment_id=data["payment_id"], signature=data["signature"])


@dataclass
class ShippingInfo:
    provider: str
    tracking_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"provider": self.provider, "tracking_id": self.tracking_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShippingInfo":
        return cls(provider=data["provider"], tracking_id=data["tracking_id"])


@dataclass
class Order:
    """An order placed by a user.

    Line prices and `amount` are frozen at checkout and never recomputed
    from the catalog. `version` increases on every persisted change.
    """

    id: str
    user_id: str
    products: list[OrderLine]
    amount: int  # minor units
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    receipt_id: str
    order_status: OrderStatus = OrderStatus.PENDING_PAYMENT
    is_paid: bool = False
    gateway_order: dict[str, Any] | None = None
    payment_info: PaymentInfo | None = None
    delivered_at: str | None = None
    shipping_info: ShippingInfo | None = None
    exchange_status: ExchangeStatus = ExchangeStatus.NONE
    exchange_reason: str | None = None
    version: int = 1
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    @property
    def gateway_order_id(self) -> str | None:
        """The gateway's own order id, used to correlate payment callbacks."""
        if self.gateway_order is None:
            return None
        return self.gateway_order.get("id")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "user_id": self.user_id,
            "products": [line.to_dict() for line in self.products],
            "amount": self.amount,
            "shipping_address": self.shipping_address.to_dict(),
            "payment_method": self.payment_method.value,
            "receipt_id": self.receipt_id,
            "order_status": self.order_status.value,
            "is_paid": self.is_paid,
            "exchange_status": self.exchange_status.value,
            "version": self.version,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.gateway_order is not None:
            result["gateway_order"] = self.gateway_order
        if self.payment_info is not None:
            result["payment_info"] = self.payment_info.to_dict()
        if self.delivered_at is not None:
            result["delivered_at"] = self.delivered_at
        if self.shipping_info is not None:
            result["shipping_info"] = self.shipping_info.to_dict()
        if self.exchange_reason is not None:
            result["exchange_reason"] = self.exchange_reason
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        payment_info = None
        if "payment_info" in data:
            payment_info = PaymentInfo.from_dict(data["payment_info"])
        shipping_info = None
        if "shipping_info" in data:
            shipping_info = ShippingInfo.from_dict(data["shipping_info"])
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            products=[OrderLine.from_dict(p) for p in data.get("products", [])],
            amount=data["amount"],
            shipping_address=ShippingAddress.from_dict(data["shipping_address"]),
            payment_method=PaymentMethod(data["payment_method"]),
            receipt_id=data["receipt_id"],
            order_status=OrderStatus(data.get("order_status", OrderStatus.PENDING_PAYMENT.value)),
            is_paid=data.get("is_paid", False),
            gateway_order=data.get("gateway_order"),
            payment_info=payment_info,
            delivered_at=data.get("delivered_at"),
            shipping_info=shipping_info,
            exchange_status=ExchangeStatus(data.get("exchange_status", ExchangeStatus.NONE.value)),
            exchange_reason=data.get("exchange_reason"),
            version=data.get("version", 1),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )

    @classmethod
    def create(
        cls,
        user_id: str,
        products: list[OrderLine],
        amount: int,
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        receipt_id: str,
        order_status: OrderStatus,
        gateway_order: dict[str, Any] | None = None,
    ) -> "Order":
        """Create a new unpaid order with generated ID and timestamps."""
        now = _utc_now()
        return cls(
            id=_generate_id(),
            user_id=user_id,
            products=products,
            amount=amount,
            shipping_address=shipping_address,
            payment_method=payment_method,
            receipt_id=receipt_id,
            order_status=order_status,
            is_paid=False,
            gateway_order=gateway_order,
            version=1,
            created_at=now,
            updated_at=now,
        )


@dataclass
class Product:
    """A catalog entry. `price` is in major currency units."""

    product_id: str
    product_name: str
    price: str  # decimal string, e.g. "499.99"
    category: str = ""
    subcategory: str = ""
    description: str = ""
    images: list[str] = field(default_factory=list)
    stock: int = 0
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": self.price,
            "category": self.category,
            "subcategory": self.subcategory,
            "description": self.description,
            "images": self.images,
            "stock": self.stock,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def summary(self) -> dict[str, Any]:
        """Fields shown alongside order lines."""
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": self.price,
            "images": self.images,
            "category": self.category,
            "subcategory": self.subcategory,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            product_id=data["product_id"],
            product_name=data["product_name"],
            price=str(data["price"]),
            category=data.get("category", ""),
            subcategory=data.get("subcategory", ""),
            description=data.get("description", ""),
            images=data.get("images", []),
            stock=data.get("stock", 0),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class Identity:
    """The caller as resolved by the authentication layer in front of us."""

    user_id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
