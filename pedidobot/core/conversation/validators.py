"""
Validators for intake form replies.
"""

import re
from typing import Optional, Tuple

from pedidobot.utils.text import normalize_text


class YesNoValidator:
    """Recognize "si" / "no" replies regardless of case, accents and punctuation."""

    YES = {"si"}
    NO = {"no"}

    @classmethod
    def validate(cls, text: Optional[str]) -> Tuple[bool, Optional[bool], Optional[str]]:
        """
        Parse a yes/no answer.

        Returns:
            Tuple of (is_valid, answer, error_message); answer is True for "si"
        """
        answer = normalize_text(text).strip().strip("¡!¿?.,;:*_ ")

        if answer in cls.YES:
            return True, True, None
        if answer in cls.NO:
            return True, False, None
        return False, None, "❌ Por favor responde solo <b>si</b> o <b>no</b>."


class NameValidator:
    """Validate customer full name."""

    MIN_LENGTH = 2
    MAX_LENGTH = 120

    @classmethod
    def validate(cls, name: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate and normalize name.

        Returns:
            Tuple of (is_valid, normalized_name, error_message)
        """
        name = " ".join((name or "").split())

        if not name:
            return False, None, "El nombre no puede estar vacío."

        if len(name) < cls.MIN_LENGTH:
            return False, None, "El nombre es demasiado corto."

        if len(name) > cls.MAX_LENGTH:
            return False, None, "El nombre es demasiado largo."

        return True, name, None


class IdNumberValidator:
    """Validate identification document number."""

    ID_PATTERN = re.compile(r"^[A-Za-z0-9.\-]{3,20}$")

    @classmethod
    def validate(cls, id_number: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate identification number.

        Returns:
            Tuple of (is_valid, id_number, error_message)
        """
        id_number = (id_number or "").strip().replace(" ", "")

        if not id_number:
            return False, None, "El número de identificación no puede estar vacío."

        if not cls.ID_PATTERN.match(id_number) or not any(ch.isdigit() for ch in id_number):
            return False, None, (
                "Número de identificación inválido. Ingresa solo números "
                "(puede incluir letras, puntos o guiones), por ejemplo: 1020304050"
            )

        return True, id_number, None


class TextFieldValidator:
    """Validate a free-text address field."""

    MIN_LENGTH = 2
    MAX_LENGTH = 200
    FIELD_LABEL = "El campo"

    @classmethod
    def validate(cls, value: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate free text.

        Returns:
            Tuple of (is_valid, normalized_value, error_message)
        """
        value = " ".join((value or "").split())

        if not value:
            return False, None, f"{cls.FIELD_LABEL} no puede estar vacío."

        if len(value) < cls.MIN_LENGTH:
            return False, None, f"{cls.FIELD_LABEL} es demasiado corto."

        if len(value) > cls.MAX_LENGTH:
            return False, None, f"{cls.FIELD_LABEL} es demasiado largo."

        return True, value, None


class NeighborhoodValidator(TextFieldValidator):
    FIELD_LABEL = "El barrio"


class AddressValidator(TextFieldValidator):
    MIN_LENGTH = 4
    FIELD_LABEL = "La dirección"


class CityValidator(TextFieldValidator):
    FIELD_LABEL = "La ciudad"
