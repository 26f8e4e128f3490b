"""
Conversation engine: per-sender purchase state machine.

Flow:
    welcome -> product choice -> product confirmation -> intake form
    (name, id, confirm, neighborhood, address, city) -> delivery quote
    -> final confirmation -> payment receipt -> order recorded

Events for one sender are serialized by that sender's lock. State is only
updated after the sends and external calls of a step have completed.
"""

import logging
import time
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Awaitable, Callable, Optional

from pedidobot.config import settings
from pedidobot.core.catalog import CatalogLookup
from pedidobot.core.conversation import messages
from pedidobot.core.conversation.messenger import BaseMessenger
from pedidobot.core.conversation.models import (
    ConversationState,
    FormProgress,
    InboundMessage,
    PendingPayment,
)
from pedidobot.core.conversation.states import FormStage, Mode
from pedidobot.core.conversation.store import ConversationStore
from pedidobot.core.conversation.validators import (
    AddressValidator,
    CityValidator,
    IdNumberValidator,
    NameValidator,
    NeighborhoodValidator,
    YesNoValidator,
)
from pedidobot.core.orders.ledger import OrderLedger
from pedidobot.core.orders.models import CustomerInfo, OrderDraft, PaymentInfo, ProductInfo
from pedidobot.db.sessions import SessionStore
from pedidobot.integrations.delivery import BaseDeliveryClient, DeliveryQuoteError

logger = logging.getLogger(__name__)


class ConversationEngine:
    """Drives each sender through the purchase flow."""

    def __init__(
        self,
        messenger: BaseMessenger,
        catalog: CatalogLookup,
        delivery: BaseDeliveryClient,
        ledger: OrderLedger,
        sessions: SessionStore,
        store: Optional[ConversationStore] = None,
        operator_id: Optional[str] = None,
        session_timeout: Optional[timedelta] = None,
        farewell_enabled: Optional[bool] = None,
        media_dir: Optional[Path] = None,
        catalog_pdf_path: Optional[Path] = None,
        qr_image_path: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.messenger = messenger
        self.catalog = catalog
        self.delivery = delivery
        self.ledger = ledger
        self.sessions = sessions
        self.store = store or ConversationStore()

        if operator_id is None and settings.operator_chat_id is not None:
            operator_id = str(settings.operator_chat_id)
        self.operator_id = operator_id

        self.session_timeout = session_timeout or timedelta(minutes=settings.session_inactivity_minutes)
        self.farewell_enabled = (
            settings.session_farewell_enabled if farewell_enabled is None else farewell_enabled
        )
        self.media_dir = media_dir or settings.media_dir
        self.catalog_pdf_path = catalog_pdf_path or settings.catalog_pdf_path
        self.qr_image_path = qr_image_path or settings.qr_image_path
        self.clock = clock

        self._form_handlers: dict[
            FormStage, Callable[[ConversationState, InboundMessage], Awaitable[None]]
        ] = {
            FormStage.COLLECT_NAME: self._collect_name,
            FormStage.COLLECT_ID: self._collect_id,
            FormStage.CONFIRM_BASICS: self._confirm_basics,
            FormStage.COLLECT_NEIGHBORHOOD: self._collect_neighborhood,
            FormStage.COLLECT_ADDRESS: self._collect_address,
            FormStage.COLLECT_CITY: self._collect_city,
            FormStage.FINAL_CONFIRM: self._final_confirm,
        }

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    async def handle(self, message: InboundMessage) -> None:
        """Process one inbound message to completion."""
        if message.from_me or message.is_group_or_broadcast:
            return

        sender = message.sender
        async with self.store.lock(sender):
            try:
                await self._dispatch(message)
            except Exception as e:
                logger.error(f"Error handling message from {sender}: {e}", exc_info=True)
                await self._try_send_text(sender, messages.GENERIC_ERROR)

    async def restart(self, message: InboundMessage) -> None:
        """Start a new conversation regardless of the current state."""
        if message.from_me or message.is_group_or_broadcast:
            return

        sender = message.sender
        async with self.store.lock(sender):
            try:
                self.store.discard(sender)
                await self._greet(message)
            except Exception as e:
                logger.error(f"Error restarting conversation for {sender}: {e}", exc_info=True)
                await self._try_send_text(sender, messages.GENERIC_ERROR)

    async def expire_sessions(self, now: Optional[datetime] = None) -> list[str]:
        """
        Evict senders whose session went idle longer than the timeout.

        Every eviction clears the in-memory state and the session record
        together under the sender's lock.

        Returns:
            Senders evicted in this run
        """
        now = now or self.clock()
        candidates = await self.sessions.list_expired(now, self.session_timeout)
        evicted = []

        for sender in candidates:
            async with self.store.lock(sender):
                last_active = await self.sessions.get(sender)
                # Removed or refreshed since the listing
                if last_active is None or now - last_active <= self.session_timeout:
                    continue
                self.store.discard(sender)
                await self.sessions.remove(sender)
            evicted.append(sender)
            logger.info(f"Session expired for {sender}")

            if self.farewell_enabled:
                await self._try_send_text(sender, messages.SESSION_CLOSED)

        return evicted

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def _dispatch(self, message: InboundMessage) -> None:
        sender = message.sender
        now = self.clock()

        state = self.store.get(sender)
        last_active = await self.sessions.get(sender)
        expired = last_active is not None and now - last_active > self.session_timeout

        if expired and state is not None:
            logger.info(f"Discarding stale conversation of {sender}")
            self.store.discard(sender)
            state = None

        if state is None or state.mode == Mode.IDLE:
            fresh = last_active is not None and not expired
            await self._handle_idle(message, fresh)
        elif state.mode == Mode.AWAITING_PRODUCT_CHOICE:
            await self._handle_product_choice(state, message)
        elif state.mode == Mode.AWAITING_ORDER_CONFIRMATION:
            if state.form is None:
                await self._handle_product_confirmation(state, message)
            else:
                await self._form_handlers[state.form.stage](state, message)
        elif state.mode == Mode.AWAITING_PAYMENT:
            await self._handle_payment(state, message)

        # Finished flows drop their session; everything else stays alive
        if sender in self.store:
            await self.sessions.touch(sender, now)

    async def _handle_idle(self, message: InboundMessage, fresh: bool) -> None:
        if not fresh:
            await self._greet(message)
            return

        if not message.text:
            return

        # Fresh session with text: go straight to product search, once
        state = ConversationState(sender=message.sender, mode=Mode.AWAITING_PRODUCT_CHOICE)
        self.store.put(state)
        await self._handle_product_choice(state, message)

    async def _greet(self, message: InboundMessage) -> None:
        sender = message.sender
        await self.messenger.send_text(sender, messages.welcome(message.display_name))

        if self.catalog_pdf_path.exists():
            try:
                await self.messenger.send_document(
                    sender,
                    self.catalog_pdf_path,
                    caption=messages.CATALOG_CAPTION,
                    filename=f"Catalogo {settings.business_name}.pdf",
                )
            except Exception as e:
                logger.error(f"Failed to send catalog to {sender}: {e}")
        else:
            logger.warning(f"Catalog PDF not found at {self.catalog_pdf_path}")

        await self.messenger.send_text(sender, messages.PRODUCT_PROMPT)

        self.store.put(ConversationState(sender=sender, mode=Mode.AWAITING_PRODUCT_CHOICE))
        await self.sessions.touch(sender, self.clock())
        logger.info(f"New conversation with {sender}")

    # =========================================================================
    # PRODUCT CHOICE
    # =========================================================================

    async def _handle_product_choice(self, state: ConversationState, message: InboundMessage) -> None:
        sender = state.sender
        query = (message.text or "").strip()
        if not query:
            await self.messenger.send_text(sender, messages.PRODUCT_TEXT_REQUIRED)
            return

        product = await self.catalog.find(query)
        if product is None:
            logger.info(f"No catalog match for '{query}' from {sender}")
            await self.messenger.send_text(sender, messages.product_not_found(query))
            return

        await self.messenger.send_text(sender, messages.product_card(product))
        if product.image_url:
            await self._try_send_image(sender, product.image_url)
        await self.messenger.send_text(
            sender, messages.CONFIRM_PRODUCT, quick_replies=messages.YES_NO_REPLIES
        )

        state.selected_product = product
        state.form = None
        state.mode = Mode.AWAITING_ORDER_CONFIRMATION
        logger.info(f"{sender} selected product {product.id}")

    async def _handle_product_confirmation(self, state: ConversationState, message: InboundMessage) -> None:
        sender = state.sender
        is_valid, answer, error = YesNoValidator.validate(message.text)

        if not is_valid:
            await self.messenger.send_text(sender, error, quick_replies=messages.YES_NO_REPLIES)
            return

        if answer:
            await self.messenger.send_text(sender, messages.ASK_NAME)
            state.form = FormProgress()
        else:
            await self.messenger.send_text(sender, messages.PRODUCT_RETRY)
            state.reset_to_product_choice()

    # =========================================================================
    # INTAKE FORM
    # =========================================================================

    async def _collect_name(self, state: ConversationState, message: InboundMessage) -> None:
        is_valid, name, error = NameValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(state.sender, f"❌ {error}\n\n{messages.ASK_NAME}")
            return

        await self.messenger.send_text(state.sender, messages.ASK_ID)
        state.form.name = name
        state.form.stage = FormStage.COLLECT_ID

    async def _collect_id(self, state: ConversationState, message: InboundMessage) -> None:
        is_valid, id_number, error = IdNumberValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(state.sender, f"❌ {error}")
            return

        form = state.form
        await self.messenger.send_text(
            state.sender,
            messages.confirm_basics(FormProgress(name=form.name, id_number=id_number)),
            quick_replies=messages.YES_NO_REPLIES,
        )
        form.id_number = id_number
        form.stage = FormStage.CONFIRM_BASICS

    async def _confirm_basics(self, state: ConversationState, message: InboundMessage) -> None:
        is_valid, answer, error = YesNoValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(state.sender, error, quick_replies=messages.YES_NO_REPLIES)
            return

        form = state.form
        if answer:
            await self.messenger.send_text(state.sender, messages.ASK_NEIGHBORHOOD)
            form.stage = FormStage.COLLECT_NEIGHBORHOOD
        else:
            # "no" re-collects exactly what this confirmation covered
            await self.messenger.send_text(state.sender, messages.RESTART_BASICS)
            form.name = None
            form.id_number = None
            form.stage = FormStage.COLLECT_NAME

    async def _collect_neighborhood(self, state: ConversationState, message: InboundMessage) -> None:
        is_valid, neighborhood, error = NeighborhoodValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(state.sender, f"❌ {error}\n\n{messages.ASK_NEIGHBORHOOD}")
            return

        await self.messenger.send_text(state.sender, messages.ASK_ADDRESS)
        state.form.neighborhood = neighborhood
        state.form.stage = FormStage.COLLECT_ADDRESS

    async def _collect_address(self, state: ConversationState, message: InboundMessage) -> None:
        is_valid, address, error = AddressValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(state.sender, f"❌ {error}\n\n{messages.ASK_ADDRESS}")
            return

        await self.messenger.send_text(state.sender, messages.ASK_CITY)
        state.form.address = address
        state.form.stage = FormStage.COLLECT_CITY

    async def _collect_city(self, state: ConversationState, message: InboundMessage) -> None:
        sender = state.sender
        is_valid, city, error = CityValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(sender, f"❌ {error}\n\n{messages.ASK_CITY}")
            return

        form = state.form
        form.city = city

        try:
            quote = await self.delivery.quote(form.address, form.neighborhood, city)
        except DeliveryQuoteError as e:
            logger.error(f"Delivery quote failed for {sender}: {e}")
            await self.messenger.send_text(sender, messages.QUOTE_FAILED)
            return

        logger.info(f"Delivery quote for {sender}: {quote.cost_minor} (distance={quote.distance_km})")

        if quote.map_image_path:
            await self._try_send_image(sender, quote.map_image_path, caption=messages.MAP_CAPTION)

        quoted = FormProgress(
            stage=FormStage.FINAL_CONFIRM,
            name=form.name,
            id_number=form.id_number,
            neighborhood=form.neighborhood,
            address=form.address,
            city=city,
            delivery_cost_minor=quote.cost_minor,
            map_image_path=quote.map_image_path,
        )
        await self.messenger.send_text(
            sender,
            messages.final_summary(quoted, state.selected_product),
            quick_replies=messages.YES_NO_REPLIES,
        )
        state.form = quoted

    async def _final_confirm(self, state: ConversationState, message: InboundMessage) -> None:
        sender = state.sender
        is_valid, answer, error = YesNoValidator.validate(message.text)
        if not is_valid:
            await self.messenger.send_text(sender, error, quick_replies=messages.YES_NO_REPLIES)
            return

        if not answer:
            await self.messenger.send_text(sender, messages.ORDER_RETRY)
            state.reset_to_product_choice()
            logger.info(f"{sender} declined the order at final confirmation")
            return

        pending = self._build_pending_payment(state, message)
        caption = messages.payment_instructions(pending)
        if self.qr_image_path.exists():
            await self.messenger.send_image(sender, self.qr_image_path, caption=caption)
        else:
            logger.warning(f"Payment QR not found at {self.qr_image_path}")
            await self.messenger.send_text(sender, caption)

        state.pending_payment = pending
        state.form = None
        state.mode = Mode.AWAITING_PAYMENT

    def _build_pending_payment(self, state: ConversationState, message: InboundMessage) -> PendingPayment:
        form = state.form
        product = state.selected_product
        customer = CustomerInfo(
            name=form.name,
            id_number=form.id_number,
            phone=message.phone or message.sender,
            address=form.address,
            neighborhood=form.neighborhood,
            city=form.city,
        )
        return PendingPayment(
            customer=customer,
            product=ProductInfo(
                id=product.id,
                name=product.name,
                description=product.description,
                price_minor=product.price_minor,
                image_url=product.image_url,
            ),
            product_price_minor=product.price_minor or 0,
            delivery_cost_minor=form.delivery_cost_minor or 0,
            stock=product.stock,
        )

    # =========================================================================
    # PAYMENT
    # =========================================================================

    async def _handle_payment(self, state: ConversationState, message: InboundMessage) -> None:
        sender = state.sender
        if not message.has_image:
            logger.debug(f"Ignoring non-image message from {sender} while awaiting payment")
            return

        pending = state.pending_payment
        receipt_path = await self._save_receipt(message)

        draft = OrderDraft(
            sender=sender,
            customer=pending.customer,
            product=pending.product,
            payment=PaymentInfo(
                product_price_minor=pending.product_price_minor,
                delivery_cost_minor=pending.delivery_cost_minor,
                receipt_path=receipt_path,
            ),
        )

        try:
            order = await self.ledger.create(draft)
        except Exception as e:
            logger.error(f"Failed to record order for {sender}: {e}", exc_info=True)
            await self._try_send_text(sender, messages.ORDER_FAILED)
            await self._notify_operator(messages.operator_order_failed(pending), message, pending)
            return

        logger.info(f"Order {order.order_number} recorded for {sender}")
        await self._notify_operator(messages.operator_new_order(pending, order), message, pending)

        # The order is recorded; the flow is over even if the thank-you fails
        self.store.discard(sender)
        await self.sessions.remove(sender)
        await self._try_send_text(sender, messages.payment_received(order))

    async def _save_receipt(self, message: InboundMessage) -> Optional[str]:
        """Store the receipt image; falls back to the thumbnail."""
        data = await self._try_download(message, thumbnail=False)
        if data is None:
            data = await self._try_download(message, thumbnail=True)
        if data is None:
            logger.warning(f"No receipt image could be downloaded for {message.sender}")
            return None

        payments_dir = self.media_dir / "payments"
        try:
            payments_dir.mkdir(parents=True, exist_ok=True)
            path = payments_dir / f"payment_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}.jpg"
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to save receipt for {message.sender}: {e}")
            return None

        logger.info(f"Receipt saved to {path}")
        return str(path)

    async def _notify_operator(self, summary: str, message: InboundMessage, pending: PendingPayment) -> None:
        """Send the order summary and relay the receipt, degrading step by step."""
        if not self.operator_id:
            logger.warning("Operator chat is not configured; skipping order notification")
            return

        await self._try_send_text(self.operator_id, summary)

        try:
            await self.messenger.forward(self.operator_id, message)
            return
        except Exception as e:
            logger.error(f"Failed to forward receipt from {message.sender}: {e}")

        thumbnail = await self._try_download(message, thumbnail=True)
        if thumbnail is not None:
            try:
                await self.messenger.send_image(
                    self.operator_id, thumbnail, caption=messages.RECEIPT_THUMBNAIL_CAPTION
                )
                return
            except Exception as e:
                logger.error(f"Failed to send receipt thumbnail from {message.sender}: {e}")

        await self._try_send_text(self.operator_id, messages.operator_manual_followup(pending))

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _try_send_text(self, to: str, text: str) -> bool:
        try:
            await self.messenger.send_text(to, text)
            return True
        except Exception as e:
            logger.error(f"Failed to send message to {to}: {e}")
            return False

    async def _try_send_image(self, to: str, image, caption: Optional[str] = None) -> bool:
        try:
            await self.messenger.send_image(to, image, caption=caption)
            return True
        except Exception as e:
            logger.error(f"Failed to send image to {to}: {e}")
            return False

    async def _try_download(self, message: InboundMessage, thumbnail: bool) -> Optional[bytes]:
        try:
            return await self.messenger.download_image(message, thumbnail=thumbnail)
        except Exception as e:
            kind = "thumbnail" if thumbnail else "image"
            logger.error(f"Failed to download {kind} from {message.sender}: {e}")
            return None
