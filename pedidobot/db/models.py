"""
SQLAlchemy models for the order bot.
Orders keep flat snapshot columns so later catalog changes never alter them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# =============================================================================
# ORDER LEDGER
# =============================================================================


class OrderRecord(Base):
    """Completed purchase with customer, product and payment snapshots."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")

    # Customer snapshot
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_id_number: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_address: Mapped[str] = mapped_column(String(500), nullable=False)
    customer_neighborhood: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_city: Mapped[str] = mapped_column(String(255), nullable=False)

    # Product snapshot
    product_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    product_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    product_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    product_price_minor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    product_image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Payment snapshot
    payment_product_price_minor: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_delivery_cost_minor: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_total_minor: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_receipt_path: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attended_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    attended_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Indexes
    __table_args__ = (
        Index("ix_orders_created_at", "created_at"),
        Index("ix_orders_status", "status"),
        Index("ix_orders_product_id", "product_id"),
    )

    def __repr__(self) -> str:
        return f"<OrderRecord(id={self.id}, status='{self.status}', total={self.payment_total_minor})>"


# =============================================================================
# SESSIONS
# =============================================================================


class SessionRecord(Base):
    """Last activity of a sender, used for idle-timeout eviction."""

    __tablename__ = "sessions"

    sender: Mapped[str] = mapped_column(String(255), primary_key=True)
    last_active_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (Index("ix_sessions_last_active_at", "last_active_at"),)

    def __repr__(self) -> str:
        return f"<SessionRecord(sender='{self.sender}', last_active_at={self.last_active_at})>"
