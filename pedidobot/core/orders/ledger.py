"""
Order ledger - durable, append-only record of completed purchases.
Provides status updates, search and sales analytics.
"""

import asyncio
import inspect
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, Union

from sqlalchemy import select

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
    SalesSummary,
    TopProduct,
)
from pedidobot.db.models import OrderRecord
from pedidobot.db.sqlite import Database, db

logger = logging.getLogger(__name__)

LedgerObserver = Callable[[LedgerEvent, Order], Union[None, Awaitable[None]]]


class OrderLedger:
    """
    Order collection on top of the async database.

    Writes are serialized through one lock; reads run without it.
    """

    def __init__(self, database: Optional[Database] = None):
        self.db = database or db
        self._write_lock = asyncio.Lock()
        self._observers: list[LedgerObserver] = []
        self._background: set[asyncio.Task] = set()

    # =========================================================================
    # OBSERVERS
    # =========================================================================

    def subscribe(self, observer: LedgerObserver) -> Callable[[], None]:
        """Register an observer; returns a function that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, event: LedgerEvent, order: Order) -> None:
        """Fire-and-forget broadcast; observer errors are only logged."""
        for observer in list(self._observers):
            try:
                result = observer(event, order)
            except Exception as e:
                logger.error(f"Ledger observer failed on {event.value}: {e}", exc_info=True)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._background.add(task)
                task.add_done_callback(self._observer_done)

    def _observer_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception():
            logger.error(f"Async ledger observer failed: {task.exception()}")

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create(self, draft: OrderDraft) -> Order:
        """Assign ID and NEW status, persist and notify observers."""
        order = Order(
            id=str(uuid.uuid4()),
            created_at=datetime.now(),
            status=OrderStatus.NEW,
            sender=draft.sender,
            customer=draft.customer,
            product=draft.product,
            payment=draft.payment,
            notes=draft.notes,
        )

        async with self._write_lock:
            async with self.db.session() as session:
                session.add(self._to_record(order))

        logger.info(f"Order {order.id} created for {order.sender}, total {order.payment.total_minor}")
        self._notify(LedgerEvent.NEW_ORDER, order)
        return order

    async def set_status(
        self,
        order_id: str,
        status: OrderStatus,
        attended_by: Optional[str] = None,
    ) -> Optional[Order]:
        """
        Change order status. Monetary snapshots are never touched.

        Returns:
            Updated order, or None if the ID is unknown
        """
        async with self._write_lock:
            async with self.db.session() as session:
                record = await session.get(OrderRecord, order_id)
                if record is None:
                    return None
                record.status = status.value
                if attended_by:
                    record.attended_by = attended_by
                    record.attended_at = datetime.now()
                order = self._to_order(record)

        logger.info(f"Order {order_id} -> {status.value}")
        self._notify(LedgerEvent.ORDER_UPDATED, order)
        return order

    # =========================================================================
    # READS
    # =========================================================================

    async def get(self, order_id: str) -> Optional[Order]:
        """Get order by ID."""
        async with self.db.session() as session:
            record = await session.get(OrderRecord, order_id)
            return self._to_order(record) if record else None

    async def search(self, criteria: Optional[OrderSearchCriteria] = None) -> list[Order]:
        """Orders matching all given filters, oldest first."""
        criteria = criteria or OrderSearchCriteria()

        stmt = select(OrderRecord)
        if criteria.status is not None:
            stmt = stmt.where(OrderRecord.status == criteria.status.value)
        if criteria.from_date is not None:
            stmt = stmt.where(OrderRecord.created_at >= criteria.from_date)
        if criteria.to_date is not None:
            stmt = stmt.where(OrderRecord.created_at <= criteria.to_date)
        if criteria.product_id is not None:
            stmt = stmt.where(OrderRecord.product_id == str(criteria.product_id))
        if criteria.min_total_minor is not None:
            stmt = stmt.where(OrderRecord.payment_total_minor >= criteria.min_total_minor)
        if criteria.max_total_minor is not None:
            stmt = stmt.where(OrderRecord.payment_total_minor <= criteria.max_total_minor)
        stmt = stmt.order_by(OrderRecord.created_at, OrderRecord.id)

        async with self.db.session() as session:
            records = (await session.execute(stmt)).scalars().all()
            orders = [self._to_order(record) for record in records]

        # Substring filters run here: SQLite lower() ignores non-ASCII letters
        text_filters = [
            (criteria.customer_id_number, lambda o: o.customer.id_number),
            (criteria.customer_name, lambda o: o.customer.name),
            (criteria.customer_phone, lambda o: o.customer.phone),
            (criteria.product_name, lambda o: o.product.name),
            (criteria.attended_by, lambda o: o.attended_by),
        ]
        for needle, getter in text_filters:
            if needle:
                orders = [o for o in orders if _contains(getter(o), needle)]

        return orders

    async def summarize(self, criteria: Optional[OrderSearchCriteria] = None) -> SalesSummary:
        """
        Totals over matching orders; cancelled ones are excluded from money sums.

        ``avg_order_value_minor`` is revenue divided by the non-cancelled
        orders only, not by ``count``, so cancellations do not drag the
        average down.
        """
        orders = await self.search(criteria)
        summary = SalesSummary(count=len(orders))

        billable = 0
        for order in orders:
            summary.count_by_status[order.status] += 1
            if order.status == OrderStatus.CANCELLED:
                continue
            billable += 1
            summary.revenue_minor += order.payment.total_minor
            summary.product_revenue_minor += order.payment.product_price_minor
            summary.delivery_revenue_minor += order.payment.delivery_cost_minor

        summary.avg_order_value_minor = summary.revenue_minor / billable if billable else 0.0
        return summary

    async def top_products(
        self,
        limit: int = 5,
        criteria: Optional[OrderSearchCriteria] = None,
    ) -> list[TopProduct]:
        """Best sellers by order count, then product revenue."""
        orders = await self.search(criteria)
        products: dict[str, TopProduct] = {}

        for order in orders:
            if order.status == OrderStatus.CANCELLED or order.product.id is None:
                continue
            entry = products.get(order.product.id)
            if entry is None:
                entry = TopProduct(
                    id=order.product.id,
                    name=order.product.name,
                    image_url=order.product.image_url,
                )
                products[order.product.id] = entry
            entry.count += 1
            entry.revenue_minor += order.payment.product_price_minor

        ranked = sorted(products.values(), key=lambda p: (-p.count, -p.revenue_minor))
        return ranked[:limit]

    async def by_period(
        self,
        granularity: Granularity,
        criteria: Optional[OrderSearchCriteria] = None,
    ) -> list[PeriodSales]:
        """Sales grouped by day, ISO week (keyed by Monday) or month, ascending."""
        orders = await self.search(criteria)
        periods: dict[str, PeriodSales] = {}

        for order in orders:
            if order.status == OrderStatus.CANCELLED:
                continue
            key = period_key(order.created_at, granularity)
            entry = periods.setdefault(key, PeriodSales(period=key))
            entry.count += 1
            entry.revenue_minor += order.payment.total_minor

        return sorted(periods.values(), key=lambda p: p.period)

    # =========================================================================
    # MAPPING
    # =========================================================================

    @staticmethod
    def _to_record(order: Order) -> OrderRecord:
        return OrderRecord(
            id=order.id,
            created_at=order.created_at,
            status=order.status.value,
            sender=order.sender,
            customer_name=order.customer.name,
            customer_id_number=order.customer.id_number,
            customer_phone=order.customer.phone,
            customer_address=order.customer.address,
            customer_neighborhood=order.customer.neighborhood,
            customer_city=order.customer.city,
            product_id=order.product.id,
            product_name=order.product.name,
            product_description=order.product.description,
            product_price_minor=order.product.price_minor,
            product_image_url=order.product.image_url,
            payment_product_price_minor=order.payment.product_price_minor,
            payment_delivery_cost_minor=order.payment.delivery_cost_minor,
            payment_total_minor=order.payment.total_minor,
            payment_receipt_path=order.payment.receipt_path,
            notes=order.notes,
            attended_by=order.attended_by,
            attended_at=order.attended_at,
        )

    @staticmethod
    def _to_order(record: OrderRecord) -> Order:
        return Order(
            id=record.id,
            created_at=record.created_at,
            status=OrderStatus(record.status),
            sender=record.sender,
            customer=CustomerInfo(
                name=record.customer_name,
                id_number=record.customer_id_number,
                phone=record.customer_phone,
                address=record.customer_address,
                neighborhood=record.customer_neighborhood,
                city=record.customer_city,
            ),
            product=ProductInfo(
                id=record.product_id,
                name=record.product_name,
                description=record.product_description,
                price_minor=record.product_price_minor,
                image_url=record.product_image_url,
            ),
            payment=PaymentInfo(
                product_price_minor=record.payment_product_price_minor,
                delivery_cost_minor=record.payment_delivery_cost_minor,
                receipt_path=record.payment_receipt_path,
            ),
            notes=record.notes,
            attended_by=record.attended_by,
            attended_at=record.attended_at,
        )


def _contains(value: Any, needle: str) -> bool:
    return value is not None and needle.casefold() in str(value).casefold()


def period_key(moment: datetime, granularity: Granularity) -> str:
    """Calendar key of a timestamp: YYYY-MM-DD, Monday's YYYY-MM-DD or YYYY-MM."""
    if granularity == Granularity.DAILY:
        return moment.date().isoformat()
    if granularity == Granularity.WEEKLY:
        monday = moment.date() - timedelta(days=moment.weekday())
        return monday.isoformat()
    return moment.strftime("%Y-%m")
