"""
Conversation modes and intake stages.
"""

from enum import Enum


class Mode(Enum):
    """Top-level position of a sender in the purchase flow."""

    IDLE = "idle"                                  # No conversation yet, or finished
    AWAITING_PRODUCT_CHOICE = "product"            # Waiting for a product name or code
    AWAITING_ORDER_CONFIRMATION = "confirmation"   # Product shown, intake form in progress
    AWAITING_PAYMENT = "payment"                   # Waiting for the payment receipt image


class FormStage(Enum):
    """Steps of the order intake form, in collection order."""

    # Datos básicos
    COLLECT_NAME = "name"
    COLLECT_ID = "id_number"
    CONFIRM_BASICS = "confirm_basics"

    # Dirección de entrega
    COLLECT_NEIGHBORHOOD = "neighborhood"
    COLLECT_ADDRESS = "address"
    COLLECT_CITY = "city"

    # Confirmación final con costo de envío
    FINAL_CONFIRM = "final_confirm"
