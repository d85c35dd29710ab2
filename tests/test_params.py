import pytest

from orderbot.utils.common import (
    extract_item_key, extract_quantity, first_text, money, normalize_params,
    session_id_from_path,
)

ITEMS = ("item", "menu_item", "product")
QTYS = ("quantity", "qty", "number")


def test_first_present_item_field_wins():
    params = {"product": "Soda", "menu_item": "  Burger ", "item": None}
    assert extract_item_key(params, ITEMS) == "burger"


def test_empty_strings_fall_through_to_next_candidate():
    assert extract_item_key({"item": "", "menu_item": "   ", "product": "PIZZA"}, ITEMS) == "pizza"


def test_list_parameter_uses_first_value():
    assert extract_item_key({"item": ["Pizza", "Soda"]}, ITEMS) == "pizza"
    assert extract_quantity({"quantity": [3]}, QTYS, 1) == 3


def test_missing_item_is_none():
    assert extract_item_key({}, ITEMS) is None
    assert extract_item_key({"item": []}, ITEMS) is None


@pytest.mark.parametrize("params", [None, {}, [], "pizza", 42, {"item": object()}])
def test_normalizer_never_raises(params):
    key, qty = normalize_params(params, ITEMS, QTYS, 1)
    assert qty == 1
    assert key is None or isinstance(key, str)


@pytest.mark.parametrize("raw, expected", [
    ("2", 2),
    (3, 3),
    (2.9, 2),
    (" 4 ", 4),
    ({"amount": 5, "unit": "piece"}, 5),
])
def test_quantity_coercion(raw, expected):
    assert extract_quantity({"quantity": raw}, QTYS, 1) == expected


@pytest.mark.parametrize("raw", ["abc", "nan", "inf", "-inf", -1, 0, 0.4, True, {"unit": "kg"}])
def test_bad_quantity_falls_back_to_default(raw):
    assert extract_quantity({"quantity": raw}, QTYS, 1) == 1
    assert extract_quantity({"quantity": raw}, QTYS, 0) == 0


def test_quantity_priority_order():
    assert extract_quantity({"number": 9, "qty": "2"}, QTYS, 1) == 2


def test_add_and_remove_defaults_differ():
    params = {"item": "pizza"}
    assert normalize_params(params, ITEMS, QTYS, 1) == ("pizza", 1)
    assert normalize_params(params, ITEMS, QTYS, 0) == ("pizza", 0)


def test_first_text_default():
    assert first_text({"order_id": ""}, ("order_id",), "N/A") == "N/A"
    assert first_text({"order_id": 1234}, ("order_id",), "N/A") == "1234"


@pytest.mark.parametrize("session, expected", [
    ("projects/demo/agent/sessions/abc-123", "abc-123"),
    ("projects/demo/agent/environments/draft/users/-/sessions/xyz", "xyz"),
    ("plain-id", "plain-id"),
    ("projects/demo/agent/sessions/", "anon"),
    ("", "anon"),
    (None, "anon"),
    (123, "anon"),
])
def test_session_id_from_path(session, expected):
    assert session_id_from_path(session, "anon") == expected


def test_money_rounds_half_away_from_zero():
    assert str(money("1.005")) == "1.01"
    assert str(money("-1.005")) == "-1.01"
    assert str(money("2.004")) == "2.00"
