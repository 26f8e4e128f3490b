"""
Conversation data: inbound events and per-sender state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pedidobot.core.catalog.models import Product
from pedidobot.core.conversation.states import FormStage, Mode
from pedidobot.core.orders.models import CustomerInfo, ProductInfo


@dataclass
class InboundMessage:
    """Channel-independent view of a received message."""
    sender: str
    text: Optional[str] = None
    has_image: bool = False
    display_name: Optional[str] = None
    is_group_or_broadcast: bool = False
    from_me: bool = False
    phone: Optional[str] = None
    message_id: Optional[str] = None
    raw: Any = field(default=None, repr=False, compare=False)


@dataclass
class FormProgress:
    """Partially collected intake form. Fields fill strictly in stage order."""
    stage: FormStage = FormStage.COLLECT_NAME
    name: Optional[str] = None
    id_number: Optional[str] = None
    neighborhood: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None

    # Set only after a successful delivery quote
    delivery_cost_minor: Optional[int] = None
    map_image_path: Optional[Path] = None


@dataclass(frozen=True)
class PendingPayment:
    """Snapshot taken at final confirmation, waiting for the receipt."""
    customer: CustomerInfo
    product: ProductInfo
    product_price_minor: int
    delivery_cost_minor: int
    stock: Optional[int] = None

    @property
    def total_minor(self) -> int:
        return self.product_price_minor + self.delivery_cost_minor


@dataclass
class ConversationState:
    """Everything the engine knows about one sender."""
    sender: str
    mode: Mode = Mode.IDLE
    selected_product: Optional[Product] = None
    form: Optional[FormProgress] = None
    pending_payment: Optional[PendingPayment] = None

    def reset_to_product_choice(self) -> None:
        """Drop product and form, ask for a product again."""
        self.mode = Mode.AWAITING_PRODUCT_CHOICE
        self.selected_product = None
        self.form = None
        self.pending_payment = None
