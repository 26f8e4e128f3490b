"""
Text helpers shared by the catalog and the conversation engine.
"""

import re
import unicodedata
from typing import Optional

from pedidobot.config import settings


def normalize_text(value: object) -> str:
    """Lower-case text and strip diacritics ("Bogotá" -> "bogota")."""
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def format_money(amount_minor: Optional[int], currency: Optional[str] = None) -> str:
    """
    Format an amount in minor units as whole currency units.

    Uses es-CO grouping: 45000 pesos -> "$ 45.000 COP".
    """
    if amount_minor is None:
        return "N/A"
    currency = currency or settings.currency_code
    major = round(amount_minor / 100)
    grouped = f"{major:,}".replace(",", ".")
    return f"$ {grouped} {currency}"


def to_minor(amount: object) -> Optional[int]:
    """Convert a major-unit amount (int, float or numeric string) to minor units."""
    if amount is None:
        return None
    if isinstance(amount, str):
        cleaned = amount.replace("$", "").replace(" ", "").strip()
        if not cleaned:
            return None
        separators = cleaned.count(".") + cleaned.count(",")
        if "." in cleaned and "," in cleaned:
            # "1.250,50" or "1,250.50": the last separator is the decimal one
            decimal = "." if cleaned.rfind(".") > cleaned.rfind(",") else ","
            thousands = "," if decimal == "." else "."
            cleaned = cleaned.replace(thousands, "").replace(decimal, ".")
        elif separators > 1 or (separators == 1 and re.search(r"[.,]\d{3}$", cleaned)):
            # "45.000" and "1.250.000" use thousands separators
            cleaned = cleaned.replace(".", "").replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
        try:
            amount = float(cleaned)
        except ValueError:
            return None
    try:
        return int(round(float(amount) * 100))
    except (TypeError, ValueError, OverflowError):
        return None
