import pytest

from pedidobot.core.conversation.validators import (
    AddressValidator,
    CityValidator,
    IdNumberValidator,
    NameValidator,
    YesNoValidator,
)


@pytest.mark.parametrize("text", ["si", "Si", "SÍ", " sí! ", "si."])
def test_yes_answers(text):
    assert YesNoValidator.validate(text) == (True, True, None)


@pytest.mark.parametrize("text", ["no", "No", "NO.", "¡no!"])
def test_no_answers(text):
    assert YesNoValidator.validate(text) == (True, False, None)


@pytest.mark.parametrize("text", ["", None, "tal vez", "sí claro", "nop", "yes"])
def test_other_answers_are_rejected(text):
    is_valid, answer, error = YesNoValidator.validate(text)
    assert not is_valid
    assert answer is None
    assert "<b>si</b>" in error


def test_name_is_trimmed_and_collapsed():
    assert NameValidator.validate("  Ana   María  ") == (True, "Ana María", None)


@pytest.mark.parametrize("name", ["", "   ", None, "A", "x" * 121])
def test_invalid_names(name):
    is_valid, value, error = NameValidator.validate(name)
    assert not is_valid
    assert value is None
    assert error


@pytest.mark.parametrize("id_number, expected", [("123", "123"), ("1.020.304", "1.020.304"), ("CE-98 76", "CE-9876")])
def test_valid_id_numbers(id_number, expected):
    assert IdNumberValidator.validate(id_number) == (True, expected, None)


@pytest.mark.parametrize("id_number", ["", "12", "abc", "12#45", "1" * 21])
def test_invalid_id_numbers(id_number):
    is_valid, _, error = IdNumberValidator.validate(id_number)
    assert not is_valid
    assert error


def test_address_needs_a_few_characters():
    assert not AddressValidator.validate("Cl")[0]
    assert AddressValidator.validate("Calle 1") == (True, "Calle 1", None)


def test_city_error_names_the_field():
    is_valid, _, error = CityValidator.validate(" ")
    assert not is_valid
    assert error.startswith("La ciudad")
