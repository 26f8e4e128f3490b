"""
Order ledger: recording, status changes, search and sales analytics.
"""

import asyncio
from datetime import datetime

import pytest
from sqlalchemy import update

from fakes import make_draft
from pedidobot.core.orders import (
    Granularity,
    LedgerEvent,
    OrderSearchCriteria,
    OrderStatus,
    parse_status,
    period_key,
)
from pedidobot.db.models import OrderRecord


async def backdate(database, order, when):
    async with database.session() as session:
        await session.execute(update(OrderRecord).where(OrderRecord.id == order.id).values(created_at=when))


@pytest.fixture
async def sales(ledger, database):
    """Five orders over two weeks; the jabón order is cancelled."""
    specs = [
        (make_draft(product_id="101", product_name="Producto X", price=4_500_000), datetime(2024, 5, 6, 9, 0)),
        (make_draft(product_id="101", product_name="Producto X", price=4_500_000, delivery=0), datetime(2024, 5, 8, 18, 30)),
        (make_draft(product_id="202", product_name="Jabón de Avena", price=1_200_000), datetime(2024, 5, 12, 23, 59)),
        (make_draft(name="Luis Gómez", product_id="303", product_name="Aceite de Coco", price=2_000_000), datetime(2024, 5, 13, 0, 1)),
        (make_draft(name="Luis Gómez", product_id="303", product_name="Aceite de Coco", price=2_000_000), datetime(2024, 6, 1, 12, 0)),
    ]
    orders = []
    for draft, when in specs:
        order = await ledger.create(draft)
        await backdate(database, order, when)
        orders.append(order)
    await ledger.set_status(orders[2].id, OrderStatus.CANCELLED)
    return orders


# =============================================================================
# WRITES
# =============================================================================

async def test_create_assigns_id_and_new_status(ledger):
    order = await ledger.create(make_draft())

    assert len(order.id) == 36
    assert order.status == OrderStatus.NEW
    assert order.order_number == f"#{order.id[:8].upper()}"
    assert order.payment.total_minor == 5_300_000


async def test_recorded_order_round_trips_every_field(ledger):
    draft = make_draft()
    created = await ledger.create(draft)

    stored = await ledger.get(created.id)

    assert stored == created
    assert stored.customer == draft.customer
    assert stored.product == draft.product
    assert stored.payment == draft.payment


async def test_order_serializes_nested_snapshots(ledger):
    order = await ledger.create(make_draft())

    data = order.to_dict()

    assert data["status"] == "new"
    assert data["order_number"] == order.order_number
    assert data["customer"]["city"] == "Bogotá"
    assert data["product"]["id"] == "101"
    assert data["payment"] == {
        "product_price_minor": 4_500_000,
        "delivery_cost_minor": 800_000,
        "total_minor": 5_300_000,
        "receipt_path": "media/payments/payment_1.jpg",
    }
    assert data["attended_at"] is None


async def test_get_unknown_order(ledger):
    assert await ledger.get("does-not-exist") is None


async def test_set_status_records_operator_and_keeps_money(ledger):
    order = await ledger.create(make_draft())

    updated = await ledger.set_status(order.id, OrderStatus.COMPLETED, attended_by="Marta")

    assert updated.status == OrderStatus.COMPLETED
    assert updated.attended_by == "Marta"
    assert updated.attended_at is not None
    assert updated.payment == order.payment
    assert (await ledger.get(order.id)).status == OrderStatus.COMPLETED


async def test_set_status_of_unknown_order(ledger):
    assert await ledger.set_status("missing", OrderStatus.CANCELLED) is None


async def test_concurrent_creates_all_land(ledger):
    orders = await asyncio.gather(*[ledger.create(make_draft(sender=str(i))) for i in range(10)])

    assert len({o.id for o in orders}) == 10
    assert len(await ledger.search()) == 10


# =============================================================================
# OBSERVERS
# =============================================================================

async def test_observers_receive_new_and_updated_events(ledger):
    received = []
    async_received = []

    async def async_observer(event, order):
        async_received.append(event)

    ledger.subscribe(lambda event, order: received.append((event, order.status)))
    ledger.subscribe(async_observer)

    order = await ledger.create(make_draft())
    await ledger.set_status(order.id, OrderStatus.PROCESSING)
    await asyncio.sleep(0)

    assert received == [
        (LedgerEvent.NEW_ORDER, OrderStatus.NEW),
        (LedgerEvent.ORDER_UPDATED, OrderStatus.PROCESSING),
    ]
    assert async_received == [LedgerEvent.NEW_ORDER, LedgerEvent.ORDER_UPDATED]


async def test_failing_observer_does_not_break_writes(ledger):
    def broken(event, order):
        raise RuntimeError("observer crashed")

    seen = []
    ledger.subscribe(broken)
    ledger.subscribe(lambda event, order: seen.append(event))

    order = await ledger.create(make_draft())

    assert await ledger.get(order.id) is not None
    assert seen == [LedgerEvent.NEW_ORDER]


async def test_unsubscribe(ledger):
    seen = []
    unsubscribe = ledger.subscribe(lambda event, order: seen.append(event))
    unsubscribe()

    await ledger.create(make_draft())
    assert seen == []


# =============================================================================
# SEARCH
# =============================================================================

async def test_search_returns_oldest_first(ledger, sales):
    orders = await ledger.search()
    assert [o.id for o in orders] == [o.id for o in sales]


async def test_search_by_status(ledger, sales):
    cancelled = await ledger.search(OrderSearchCriteria(status=OrderStatus.CANCELLED))
    assert [o.id for o in cancelled] == [sales[2].id]


async def test_search_by_date_range_is_inclusive(ledger, sales):
    criteria = OrderSearchCriteria(from_date=datetime(2024, 5, 8, 18, 30), to_date=datetime(2024, 5, 13, 0, 1))
    assert [o.id for o in await ledger.search(criteria)] == [o.id for o in sales[1:4]]


async def test_text_filters_are_case_insensitive_substrings(ledger, sales):
    by_name = await ledger.search(OrderSearchCriteria(customer_name="gómez"))
    assert [o.id for o in by_name] == [sales[3].id, sales[4].id]

    by_product = await ledger.search(OrderSearchCriteria(product_name="JABÓN"))
    assert [o.id for o in by_product] == [sales[2].id]

    by_phone = await ledger.search(OrderSearchCriteria(customer_phone="300 123"))
    assert len(by_phone) == 5


async def test_filters_combine(ledger, sales):
    criteria = OrderSearchCriteria(
        product_id="101",
        min_total_minor=5_000_000,
        max_total_minor=6_000_000,
    )
    assert [o.id for o in await ledger.search(criteria)] == [sales[0].id]


# =============================================================================
# ANALYTICS
# =============================================================================

async def test_summarize_excludes_cancelled_from_money(ledger, sales):
    summary = await ledger.summarize()

    assert summary.count == 5
    assert summary.count_by_status == {
        OrderStatus.NEW: 4,
        OrderStatus.PROCESSING: 0,
        OrderStatus.COMPLETED: 0,
        OrderStatus.CANCELLED: 1,
    }
    assert summary.product_revenue_minor == 4_500_000 * 2 + 2_000_000 * 2
    assert summary.delivery_revenue_minor == 800_000 * 3
    assert summary.revenue_minor == summary.product_revenue_minor + summary.delivery_revenue_minor
    assert summary.avg_order_value_minor == summary.revenue_minor / 4


async def test_summarize_empty_ledger(ledger):
    summary = await ledger.summarize()
    assert summary.count == 0
    assert summary.revenue_minor == 0
    assert summary.avg_order_value_minor == 0.0


async def test_top_products_rank_by_count_then_revenue(ledger, sales):
    top = await ledger.top_products()

    assert [(p.id, p.count, p.revenue_minor) for p in top] == [
        ("101", 2, 9_000_000),
        ("303", 2, 4_000_000),
    ]
    assert top[0].image_url == "https://example.com/x.jpg"
    assert len(await ledger.top_products(limit=1)) == 1


async def test_sales_by_day(ledger, sales):
    periods = await ledger.by_period(Granularity.DAILY)
    assert [(p.period, p.count) for p in periods] == [
        ("2024-05-06", 1),
        ("2024-05-08", 1),
        ("2024-05-13", 1),
        ("2024-06-01", 1),
    ]
    assert periods[1].revenue_minor == 4_500_000


async def test_sales_by_week_are_keyed_by_monday(ledger, sales):
    periods = await ledger.by_period(Granularity.WEEKLY)
    assert [(p.period, p.count, p.revenue_minor) for p in periods] == [
        ("2024-05-06", 2, 5_300_000 + 4_500_000),
        ("2024-05-13", 1, 2_800_000),
        ("2024-05-27", 1, 2_800_000),
    ]


async def test_sales_by_month(ledger, sales):
    periods = await ledger.by_period(Granularity.MONTHLY)
    assert [(p.period, p.count) for p in periods] == [("2024-05", 3), ("2024-06", 1)]


@pytest.mark.parametrize(
    "moment, granularity, expected",
    [
        (datetime(2024, 5, 12, 23, 59), Granularity.DAILY, "2024-05-12"),
        (datetime(2024, 5, 12, 23, 59), Granularity.WEEKLY, "2024-05-06"),
        (datetime(2024, 5, 13, 0, 0), Granularity.WEEKLY, "2024-05-13"),
        (datetime(2024, 1, 1, 8, 0), Granularity.WEEKLY, "2024-01-01"),
        (datetime(2023, 12, 31, 8, 0), Granularity.WEEKLY, "2023-12-25"),
        (datetime(2024, 2, 29, 8, 0), Granularity.MONTHLY, "2024-02"),
    ],
)
def test_period_key(moment, granularity, expected):
    assert period_key(moment, granularity) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("nuevo", OrderStatus.NEW),
        ("En proceso", OrderStatus.PROCESSING),
        ("COMPLETADO", OrderStatus.COMPLETED),
        ("entregado", OrderStatus.COMPLETED),
        ("cancelados", OrderStatus.CANCELLED),
        ("processing", OrderStatus.PROCESSING),
        ("pagado", None),
        (None, None),
    ],
)
def test_parse_status(value, expected):
    assert parse_status(value) == expected
