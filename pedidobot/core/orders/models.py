"""
Order models for the order ledger.
"""

import html
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pedidobot.utils.text import format_money, normalize_text


class OrderStatus(Enum):
    """Order status enum."""
    NEW = "new"                  # Payment receipt received
    PROCESSING = "processing"    # Being prepared by the operator
    COMPLETED = "completed"      # Delivered
    CANCELLED = "cancelled"      # Cancelled, excluded from revenue


STATUS_LABELS = {
    OrderStatus.NEW: "Nuevo",
    OrderStatus.PROCESSING: "En proceso",
    OrderStatus.COMPLETED: "Completado",
    OrderStatus.CANCELLED: "Cancelado",
}

STATUS_ALIASES = {
    "nuevo": OrderStatus.NEW,
    "nuevos": OrderStatus.NEW,
    "proceso": OrderStatus.PROCESSING,
    "en_proceso": OrderStatus.PROCESSING,
    "completado": OrderStatus.COMPLETED,
    "completados": OrderStatus.COMPLETED,
    "entregado": OrderStatus.COMPLETED,
    "cancelado": OrderStatus.CANCELLED,
    "cancelados": OrderStatus.CANCELLED,
}


def parse_status(value: Optional[str]) -> Optional[OrderStatus]:
    """Spanish alias or English status value; None if unknown."""
    key = normalize_text(value).strip().replace(" ", "_")
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return OrderStatus(key)
    except ValueError:
        return None


class Granularity(Enum):
    """Grouping period for sales reports."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class LedgerEvent(Enum):
    """Notifications broadcast to ledger observers."""
    NEW_ORDER = "newOrder"
    ORDER_UPDATED = "orderUpdated"


@dataclass(frozen=True)
class CustomerInfo:
    """Customer snapshot taken at confirmation time."""
    name: str
    id_number: str
    phone: str
    address: str
    neighborhood: str
    city: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "id_number": self.id_number,
            "phone": self.phone,
            "address": self.address,
            "neighborhood": self.neighborhood,
            "city": self.city,
        }


@dataclass(frozen=True)
class ProductInfo:
    """Product snapshot; later catalog edits do not change it."""
    id: Optional[str]
    name: Optional[str]
    description: Optional[str] = None
    price_minor: Optional[int] = None
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price_minor": self.price_minor,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class PaymentInfo:
    """Monetary snapshot. ``total_minor`` is always price plus delivery."""
    product_price_minor: int
    delivery_cost_minor: int
    receipt_path: Optional[str] = None

    @property
    def total_minor(self) -> int:
        return self.product_price_minor + self.delivery_cost_minor

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "product_price_minor": self.product_price_minor,
            "delivery_cost_minor": self.delivery_cost_minor,
            "total_minor": self.total_minor,
            "receipt_path": self.receipt_path,
        }


@dataclass(frozen=True)
class OrderDraft:
    """Everything needed to record an order, before ID and status exist."""
    sender: str
    customer: CustomerInfo
    product: ProductInfo
    payment: PaymentInfo
    notes: Optional[str] = None


@dataclass
class Order:
    """Recorded order."""
    id: str
    created_at: datetime
    status: OrderStatus
    sender: str
    customer: CustomerInfo
    product: ProductInfo
    payment: PaymentInfo
    notes: Optional[str] = None
    attended_by: Optional[str] = None
    attended_at: Optional[datetime] = None

    @property
    def order_number(self) -> str:
        """Human-readable order number."""
        return f"#{self.id[:8].upper()}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "order_number": self.order_number,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "sender": self.sender,
            "customer": self.customer.to_dict(),
            "product": self.product.to_dict(),
            "payment": self.payment.to_dict(),
            "notes": self.notes,
            "attended_by": self.attended_by,
            "attended_at": self.attended_at.isoformat() if self.attended_at else None,
        }

    def format_summary(self) -> str:
        """Short one-order text for operator listings."""
        lines = [
            f"📦 <b>Pedido {self.order_number}</b> ({self.status.value})",
            f"📅 {self.created_at.strftime('%d.%m.%Y %H:%M')}",
            f"👤 {html.escape(self.customer.name)} — {html.escape(self.customer.phone)}",
            f"📍 {html.escape(self.customer.address)}, {html.escape(self.customer.neighborhood)}, {html.escape(self.customer.city)}",
            f"🛒 {html.escape(self.product.name or 'N/A')} ({html.escape(self.product.id or 'N/A')})",
            f"💰 {format_money(self.payment.total_minor)}",
        ]
        if self.attended_by:
            lines.append(f"🙋 Atendido por {html.escape(self.attended_by)}")
        return "\n".join(lines)


@dataclass
class OrderSearchCriteria:
    """Ledger filters; every set field must match (AND)."""
    status: Optional[OrderStatus] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    customer_id_number: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    min_total_minor: Optional[int] = None
    max_total_minor: Optional[int] = None
    attended_by: Optional[str] = None


@dataclass
class SalesSummary:
    """Aggregated ledger figures. Cancelled orders only count in ``count_by_status``."""
    count: int = 0
    revenue_minor: int = 0
    product_revenue_minor: int = 0
    delivery_revenue_minor: int = 0
    avg_order_value_minor: float = 0.0
    count_by_status: dict[OrderStatus, int] = field(
        default_factory=lambda: {status: 0 for status in OrderStatus}
    )


@dataclass
class TopProduct:
    """Product ranking entry."""
    id: Optional[str]
    name: Optional[str]
    count: int = 0
    revenue_minor: int = 0
    image_url: Optional[str] = None


@dataclass
class PeriodSales:
    """Sales of one calendar period."""
    period: str
    count: int = 0
    revenue_minor: int = 0
