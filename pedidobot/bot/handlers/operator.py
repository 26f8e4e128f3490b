"""
Operator commands: order lookup, status changes, sales summary and XLSX report.
Only accepted from the configured operator chat.
"""

import asyncio
import html
import logging
from datetime import datetime, timedelta
from typing import Optional

from aiogram import Router, F
from aiogram.filters import Command, CommandObject
from aiogram.types import FSInputFile, Message

from pedidobot.config import settings
from pedidobot.core.orders import (
    Granularity,
    Order,
    OrderLedger,
    OrderSearchCriteria,
    STATUS_LABELS,
    SalesSummary,
    ledger_exporter,
    parse_status,
)
from pedidobot.utils.text import format_money

router = Router(name="operator")
logger = logging.getLogger(__name__)

router.message.filter(F.chat.id == settings.operator_chat_id)

LIST_LIMIT = 10


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def find_order(ledger: OrderLedger, reference: str) -> Optional[Order]:
    """Find by full ID or by order number prefix ("#1A2B3C4D")."""
    reference = reference.strip().lstrip("#").lower()
    if not reference:
        return None

    order = await ledger.get(reference)
    if order is not None:
        return order

    matches = [o for o in await ledger.search() if o.id.startswith(reference)]
    return matches[0] if len(matches) == 1 else None


def format_order_details(order: Order) -> str:
    """Full order card for a single order."""
    lines = [
        order.format_summary(),
        "",
        f"🪪 Identificación: {html.escape(order.customer.id_number)}",
        f"💰 Precio: {format_money(order.payment.product_price_minor)}",
        f"🚚 Domicilio: {format_money(order.payment.delivery_cost_minor)}",
        f"🆔 <code>{order.id}</code>",
    ]
    if order.payment.receipt_path:
        lines.append(f"🧾 Comprobante: <code>{html.escape(order.payment.receipt_path)}</code>")
    if order.attended_at:
        lines.append(f"🕐 Atendido: {order.attended_at.strftime('%d.%m.%Y %H:%M')}")
    return "\n".join(lines)


def format_sales_summary(title: str, summary: SalesSummary) -> str:
    by_status = ", ".join(
        f"{STATUS_LABELS[status]}: {count}" for status, count in summary.count_by_status.items()
    )
    return (
        f"<b>{title}</b>\n"
        f"📦 Pedidos: {summary.count} ({by_status})\n"
        f"💵 Ingresos: {format_money(summary.revenue_minor)}\n"
        f"🛒 Productos: {format_money(summary.product_revenue_minor)}\n"
        f"🚚 Domicilios: {format_money(summary.delivery_revenue_minor)}\n"
        f"📈 Ticket promedio: {format_money(round(summary.avg_order_value_minor))}"
    )


# =============================================================================
# COMMANDS
# =============================================================================

@router.message(Command("pedidos"))
async def handle_list_orders(message: Message, command: CommandObject, ledger: OrderLedger) -> None:
    """/pedidos [estado] - latest orders."""
    criteria = OrderSearchCriteria()
    if command.args:
        status = parse_status(command.args)
        if status is None:
            await message.answer("❌ Estado desconocido. Usa: nuevo, proceso, completado o cancelado.")
            return
        criteria.status = status

    orders = await ledger.search(criteria)
    if not orders:
        await message.answer("📭 No hay pedidos.")
        return

    latest = list(reversed(orders))[:LIST_LIMIT]
    text = f"📋 <b>Últimos pedidos</b> ({len(latest)} de {len(orders)})\n\n"
    text += "\n\n".join(order.format_summary() for order in latest)
    await message.answer(text)


@router.message(Command("pedido"))
async def handle_order_details(message: Message, command: CommandObject, ledger: OrderLedger) -> None:
    """/pedido <id> - one order."""
    if not command.args:
        await message.answer("Uso: /pedido &lt;número de pedido&gt;")
        return

    order = await find_order(ledger, command.args)
    if order is None:
        await message.answer("❌ Pedido no encontrado.")
        return

    await message.answer(format_order_details(order))


@router.message(Command("estado"))
async def handle_set_status(message: Message, command: CommandObject, ledger: OrderLedger) -> None:
    """/estado <id> <estado> - change order status."""
    args = (command.args or "").split()
    if len(args) != 2:
        await message.answer("Uso: /estado &lt;número de pedido&gt; &lt;nuevo|proceso|completado|cancelado&gt;")
        return

    status = parse_status(args[1])
    if status is None:
        await message.answer("❌ Estado desconocido. Usa: nuevo, proceso, completado o cancelado.")
        return

    order = await find_order(ledger, args[0])
    if order is None:
        await message.answer("❌ Pedido no encontrado.")
        return

    actor = message.from_user.full_name if message.from_user else None
    updated = await ledger.set_status(order.id, status, attended_by=actor)
    if updated is None:
        await message.answer("❌ Pedido no encontrado.")
        return

    await message.answer(f"✅ Pedido {updated.order_number}: {STATUS_LABELS[status]}")


@router.message(Command("resumen"))
async def handle_summary(message: Message, ledger: OrderLedger) -> None:
    """/resumen - sales dashboard."""
    now = datetime.now()
    last_month = OrderSearchCriteria(from_date=now - timedelta(days=30))
    week_start = datetime.combine(now.date() - timedelta(days=6), datetime.min.time())

    total = await ledger.summarize()
    monthly = await ledger.summarize(last_month)
    top = await ledger.top_products(5)
    daily = await ledger.by_period(Granularity.DAILY, OrderSearchCriteria(from_date=week_start))

    parts = [
        format_sales_summary("📊 Histórico", total),
        format_sales_summary("🗓️ Últimos 30 días", monthly),
    ]

    if top:
        lines = ["<b>🏆 Productos más vendidos</b>"]
        for i, product in enumerate(top, 1):
            lines.append(
                f"{i}. {html.escape(product.name or product.id)} — "
                f"{product.count} pedido(s), {format_money(product.revenue_minor)}"
            )
        parts.append("\n".join(lines))

    if daily:
        lines = ["<b>📅 Últimos 7 días</b>"]
        for period in daily:
            lines.append(f"{period.period}: {period.count} pedido(s), {format_money(period.revenue_minor)}")
        parts.append("\n".join(lines))

    await message.answer("\n\n".join(parts))


@router.message(Command("reporte"))
async def handle_report(message: Message, ledger: OrderLedger) -> None:
    """/reporte - XLSX export of every order."""
    orders = await ledger.search()
    summary = await ledger.summarize()
    top = await ledger.top_products(10)
    monthly = await ledger.by_period(Granularity.MONTHLY)

    try:
        # openpyxl is synchronous
        path = await asyncio.to_thread(
            ledger_exporter.export, orders, summary, top, monthly
        )
    except OSError as e:
        logger.error(f"Failed to export orders: {e}", exc_info=True)
        await message.answer("😔 No fue posible generar el reporte.")
        return

    await message.answer_document(
        FSInputFile(path),
        caption=f"📑 Reporte de pedidos ({len(orders)})",
    )
