"""
Start, restart and help commands.
"""

from aiogram import Router, F
from aiogram.enums import ChatType
from aiogram.filters import CommandStart, Command
from aiogram.types import Message

from pedidobot.bot.messenger import to_inbound
from pedidobot.config import settings
from pedidobot.core.conversation import ConversationEngine

router = Router(name="start")
router.message.filter(F.chat.type == ChatType.PRIVATE)


HELP_MESSAGE = f"""🤖 <b>¿Cómo comprar en {settings.business_name}?</b>

1. Escribe el nombre o el código del producto que te interesa.
2. Confirma el producto y completa tus datos de entrega.
3. Revisa el costo del domicilio y confirma tu pedido.
4. Paga con el QR y envía la captura del pago.

<b>Comandos:</b>
/reiniciar — empezar de nuevo
/ayuda — esta ayuda"""


@router.message(CommandStart())
@router.message(Command("reiniciar"))
async def handle_start(message: Message, engine: ConversationEngine) -> None:
    """Handle /start and /reiniciar: begin a new conversation."""
    await engine.restart(to_inbound(message, text=""))


@router.message(Command("ayuda", "help"))
async def handle_help(message: Message) -> None:
    """Handle /ayuda command."""
    await message.answer(HELP_MESSAGE)
