"""
Orders module: ledger of completed purchases, analytics and export.
"""

from pedidobot.core.orders.models import (
    CustomerInfo,
    Granularity,
    LedgerEvent,
    Order,
    OrderDraft,
    OrderSearchCriteria,
    OrderStatus,
    PaymentInfo,
    PeriodSales,
    ProductInfo,
    STATUS_LABELS,
    SalesSummary,
    TopProduct,
    parse_status,
)
from pedidobot.core.orders.ledger import OrderLedger, period_key
from pedidobot.core.orders.exporter import LedgerExporter, ledger_exporter

__all__ = [
    # Models
    "CustomerInfo",
    "Granularity",
    "LedgerEvent",
    "Order",
    "OrderDraft",
    "OrderSearchCriteria",
    "OrderStatus",
    "PaymentInfo",
    "PeriodSales",
    "ProductInfo",
    "SalesSummary",
    "STATUS_LABELS",
    "TopProduct",
    "parse_status",
    # Ledger
    "OrderLedger",
    "period_key",
    # Exporter
    "LedgerExporter",
    "ledger_exporter",
]
