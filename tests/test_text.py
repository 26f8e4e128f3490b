import pytest

from pedidobot.utils.text import format_money, normalize_text, to_minor


def test_normalize_text_strips_accents_and_case():
    assert normalize_text("Bogotá") == "bogota"
    assert normalize_text("JABÓN de Avena") == "jabon de avena"
    assert normalize_text("Sí") == "si"
    assert normalize_text(None) == ""
    assert normalize_text(101) == "101"


@pytest.mark.parametrize(
    "amount, expected",
    [
        (4_500_000, "$ 45.000 COP"),
        (0, "$ 0 COP"),
        (123_456_789, "$ 1.234.568 COP"),
        (None, "N/A"),
    ],
)
def test_format_money(amount, expected):
    assert format_money(amount, "COP") == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (45000, 4_500_000),
        (12.5, 1250),
        ("45000", 4_500_000),
        ("45.000", 4_500_000),
        ("$ 1.250.000", 125_000_000),
        ("1.250,50", 125_050),
        ("1,250.50", 125_050),
        ("12,5", 1250),
        ("", None),
        ("gratis", None),
        (None, None),
    ],
)
def test_to_minor(value, expected):
    assert to_minor(value) == expected
