"""
Telegram adapter helpers: quick replies and operator order lookup.
"""

from datetime import datetime

from fakes import make_draft
from pedidobot.bot.handlers.operator import find_order, format_order_details
from pedidobot.bot.keyboards.replies import get_quick_reply_keyboard, parse_quick_reply
from pedidobot.core.orders import Order, OrderStatus


def test_quick_reply_keyboard_round_trip():
    keyboard = get_quick_reply_keyboard(["Si", "No"])

    buttons = keyboard.inline_keyboard[0]
    assert [b.text for b in buttons] == ["✅ Si", "❌ No"]
    assert [parse_quick_reply(b.callback_data) for b in buttons] == ["Si", "No"]


def test_no_keyboard_without_replies():
    assert get_quick_reply_keyboard([]) is None


def test_foreign_callback_data_is_not_a_reply():
    assert parse_quick_reply("page:2") is None
    assert parse_quick_reply(None) is None


async def test_find_order_by_id_or_order_number(ledger):
    order = await ledger.create(make_draft())
    await ledger.create(make_draft(sender="2002"))

    assert (await find_order(ledger, order.id)).id == order.id
    assert (await find_order(ledger, order.order_number)).id == order.id
    assert (await find_order(ledger, order.order_number.lstrip("#").lower())).id == order.id
    assert await find_order(ledger, "#") is None
    assert await find_order(ledger, "zzzzzzzz") is None


def test_order_details_escape_customer_text():
    draft = make_draft(name="Ana <b>")
    order = Order(
        id="1a2b3c4d-0000-4000-8000-000000000000",
        created_at=datetime(2024, 5, 6, 9, 30),
        status=OrderStatus.NEW,
        sender=draft.sender,
        customer=draft.customer,
        product=draft.product,
        payment=draft.payment,
    )

    details = format_order_details(order)

    assert "Ana &lt;b&gt;" in details
    assert "#1A2B3C4D" in details
    assert "$ 53.000" in details
