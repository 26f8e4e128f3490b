"""
Customer and operator message templates (HTML parse mode).
"""

import html
from typing import Optional

from pedidobot.config import settings
from pedidobot.core.catalog.models import Product
from pedidobot.core.conversation.models import FormProgress, PendingPayment
from pedidobot.core.orders.models import Order
from pedidobot.utils.text import format_money

YES_NO_REPLIES = ["Si", "No"]


def _e(value: Optional[object]) -> str:
    """Escape a dynamic value for HTML output."""
    return html.escape(str(value)) if value is not None else "N/A"


# =============================================================================
# WELCOME AND PRODUCT SEARCH
# =============================================================================

def welcome(display_name: Optional[str]) -> str:
    name = display_name or "cliente"
    return (
        f"👋 ¡Hola <b>{_e(name)}</b>!\n\n"
        f"Bienvenido a <b>{_e(settings.business_name)}</b>. "
        "Te comparto nuestro catálogo para que conozcas los productos disponibles."
    )


CATALOG_CAPTION = "📖 Aquí tienes nuestro catálogo."

PRODUCT_PROMPT = (
    "<b>¿Qué producto te interesa del catálogo?</b>\n"
    "Escríbeme el nombre o el código del producto."
)

PRODUCT_RETRY = "¿Qué producto te interesa del catálogo? Puedes indicarme el nombre o código."

PRODUCT_TEXT_REQUIRED = "✍️ Escríbeme el nombre o el código del producto que buscas."


def product_not_found(query: str) -> str:
    return (
        f"🔍 No encontré coincidencias para \"<b>{_e(query)}</b>\".\n"
        "Intenta con otro nombre o con el código del producto."
    )


def product_card(product: Product) -> str:
    lines = [
        "✅ Encontré el producto solicitado:",
        "",
        f"🆔 <b>Código:</b> {_e(product.id)}",
        f"🛒 <b>Producto:</b> {_e(product.name)}",
    ]
    if product.description:
        lines.append(f"📝 <b>Descripción:</b> {_e(product.description)}")
    lines.append(f"💰 <b>Precio:</b> {format_money(product.price_minor)}")
    if product.stock is not None:
        lines.append(f"📦 <b>Disponibles:</b> {product.stock}")
    return "\n".join(lines)


CONFIRM_PRODUCT = "¿Es el producto que buscabas? Responde <b>Si</b> o <b>No</b>."


# =============================================================================
# INTAKE FORM
# =============================================================================

ASK_NAME = "Por favor, ingresa tu nombre completo:"
ASK_ID = "Por favor, ingresa tu número de identificación:"
RESTART_BASICS = "Reiniciemos. Por favor, ingresa tu nombre completo:"
ASK_NEIGHBORHOOD = "Por favor, ingresa tu barrio:"
ASK_ADDRESS = "Por favor, ingresa tu dirección completa:"
ASK_CITY = "Por favor, ingresa tu ciudad:"


def confirm_basics(form: FormProgress) -> str:
    return (
        "Confirma tu información básica:\n\n"
        f"👤 <b>Nombre:</b> {_e(form.name)}\n"
        f"🪪 <b>Identificación:</b> {_e(form.id_number)}\n\n"
        "Responde <b>si</b> para confirmar o <b>no</b> para reingresar."
    )


MAP_CAPTION = "📍 Esta es la ubicación encontrada para tu dirección."

QUOTE_FAILED = (
    "⚠️ Ocurrió un error calculando el costo de envío. "
    "Por favor, intenta nuevamente escribiendo tu ciudad."
)


def final_summary(form: FormProgress, product: Product) -> str:
    product_price = product.price_minor or 0
    delivery_cost = form.delivery_cost_minor or 0
    return (
        "🧾 <b>Resumen de tu pedido</b>\n\n"
        f"👤 <b>Nombre:</b> {_e(form.name)}\n"
        f"🪪 <b>Identificación:</b> {_e(form.id_number)}\n"
        f"🏘️ <b>Barrio:</b> {_e(form.neighborhood)}\n"
        f"📍 <b>Dirección:</b> {_e(form.address)}\n"
        f"🏙️ <b>Ciudad:</b> {_e(form.city)}\n\n"
        f"🛒 <b>Producto:</b> {_e(product.name)} ({_e(product.id)})\n"
        f"💰 <b>Precio:</b> {format_money(product_price)}\n"
        f"🚚 <b>Domicilio:</b> {format_money(delivery_cost)}\n"
        f"💵 <b>Total a pagar:</b> {format_money(product_price + delivery_cost)}\n\n"
        "¿Confirmas tu pedido? Responde <b>Si</b> o <b>No</b>."
    )


ORDER_RETRY = "Sin problema, intentemos de nuevo. ¿Qué producto te interesa?"


# =============================================================================
# PAYMENT
# =============================================================================

def payment_instructions(pending: PendingPayment) -> str:
    return (
        "💳 <b>Datos para el pago</b>\n\n"
        f"🛒 <b>Producto:</b> {_e(pending.product.name)}\n"
        f"💰 <b>Precio:</b> {format_money(pending.product_price_minor)}\n"
        f"🚚 <b>Domicilio:</b> {format_money(pending.delivery_cost_minor)}\n"
        f"💵 <b>Total:</b> {format_money(pending.total_minor)}\n\n"
        "Escanea el siguiente QR y envía la captura del pago."
    )


def payment_received(order: Order) -> str:
    return (
        "<b>Gracias por la compra. Hemos recibido la captura del pago.</b>\n\n"
        f"🧾 Tu número de pedido es <b>{order.order_number}</b>.\n"
        "Un asesor verificará el pago y se comunicará contigo para coordinar la entrega."
    )


ORDER_FAILED = (
    "⚠️ Recibimos tu comprobante, pero ocurrió un problema registrando el pedido. "
    "Un asesor revisará tu pago y se comunicará contigo. "
    "Si lo prefieres, puedes enviar la captura nuevamente."
)


# =============================================================================
# OPERATOR
# =============================================================================

def operator_new_order(pending: PendingPayment, order: Optional[Order] = None) -> str:
    title = f"🛍️ <b>NUEVA COMPRA RECIBIDA {order.order_number}</b>" if order else "🛍️ <b>NUEVA COMPRA RECIBIDA</b>"
    customer = pending.customer
    lines = [
        title,
        "",
        f"👤 <b>Cliente:</b> {_e(customer.name)}",
        f"🪪 <b>Identificación:</b> {_e(customer.id_number)}",
        f"📞 <b>Teléfono:</b> {_e(customer.phone)}",
        f"📍 <b>Dirección:</b> {_e(customer.address)}, {_e(customer.neighborhood)}, {_e(customer.city)}",
        "",
        f"🛒 <b>Producto:</b> {_e(pending.product.name)} ({_e(pending.product.id)})",
    ]
    if pending.product.description:
        lines.append(f"📝 {_e(pending.product.description)}")
    if pending.stock is not None:
        lines.append(f"📦 <b>Stock:</b> {pending.stock}")
    lines += [
        f"💰 <b>Precio:</b> {format_money(pending.product_price_minor)}",
        f"🚚 <b>Domicilio:</b> {format_money(pending.delivery_cost_minor)}",
        f"💵 <b>Total:</b> {format_money(pending.total_minor)}",
    ]
    return "\n".join(lines)


def operator_order_failed(pending: PendingPayment) -> str:
    return (
        "⚠️ <b>No se pudo registrar el pedido.</b> "
        "El cliente envió el comprobante de pago; haz seguimiento manual.\n\n"
        + operator_new_order(pending)
    )


RECEIPT_THUMBNAIL_CAPTION = "🧾 Comprobante de pago recibido (versión reducida)"


def operator_manual_followup(pending: PendingPayment) -> str:
    return (
        "⚠️ No fue posible reenviar el comprobante de pago de "
        f"<b>{_e(pending.customer.name)}</b> ({_e(pending.customer.phone)}). "
        "Contacta al cliente para verificarlo manualmente."
    )


# =============================================================================
# SESSION
# =============================================================================

SESSION_CLOSED = (
    "🔔 <b>Sesión finalizada por inactividad</b>\n\n"
    "Cuando quieras retomar tu compra, escríbenos de nuevo."
)

GENERIC_ERROR = "😔 Ocurrió un error procesando tu mensaje. Por favor, intenta nuevamente."
