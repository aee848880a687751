from types import SimpleNamespace

import pytest

from survey_api.core.errors import ValidationError
from survey_api.services.answers import AnswerValue, ResponseKind, is_blank


@pytest.mark.parametrize("raw, kind, payload", [
    (5, ResponseKind.NUMBER, 5),
    (3.5, ResponseKind.NUMBER, 3.5),
    (0, ResponseKind.NUMBER, 0),
    ("Muy bien", ResponseKind.TEXT, "Muy bien"),
    (True, ResponseKind.TEXT, "true"),
    (False, ResponseKind.TEXT, "false"),
    (["Gimnasio", "Seguro"], ResponseKind.ARRAY, ["Gimnasio", "Seguro"]),
    ({"main": "Otro", "other": "Guardería"}, ResponseKind.OBJECT, {"main": "Otro", "other": "Guardería"}),
])
def test_classify(raw, kind, payload):
    value = AnswerValue.classify(raw)
    assert value.kind is kind
    assert value.payload == payload


@pytest.mark.parametrize("raw", [None, ""])
def test_blank_values_are_skipped(raw):
    assert is_blank(raw)
    assert AnswerValue.classify(raw) is None


def test_whitespace_and_empty_containers_are_kept():
    assert AnswerValue.classify(" ").kind is ResponseKind.TEXT
    assert AnswerValue.classify([]).kind is ResponseKind.ARRAY
    assert AnswerValue.classify({}).kind is ResponseKind.OBJECT


def test_to_columns_fills_exactly_one_value_column():
    cols = AnswerValue.classify(["a", "b"]).to_columns()
    assert cols == {
        "response_type": "array",
        "text_response": None,
        "number_response": None,
        "array_response": ["a", "b"],
        "object_response": None,
    }


def test_from_row_restores_integers():
    row = SimpleNamespace(
        response_type="number", text_response=None, number_response=4.0,
        array_response=None, object_response=None,
    )
    value = AnswerValue.from_row(row)
    assert value.payload == 4
    assert isinstance(value.payload, int)

    row.number_response = 4.5
    assert AnswerValue.from_row(row).payload == 4.5


def test_main_and_other():
    composite = AnswerValue.classify({"main": 4, "other": "extra"})
    assert composite.main == 4
    assert composite.other == "extra"

    assert AnswerValue.classify(3).main == 3
    assert AnswerValue.classify("yes").main == "yes"
    assert AnswerValue.classify(["a"]).main is None
    assert AnswerValue.classify("yes").other is None


@pytest.mark.parametrize("raw", [2**53 + 1, -(2**53 + 1), 10**400])
def test_integers_without_exact_float_are_rejected(raw):
    with pytest.raises(ValidationError):
        AnswerValue.classify(raw)


def test_large_exact_integers_are_kept():
    assert AnswerValue.classify(2**53).payload == 2**53
    assert AnswerValue.classify(2**60).kind is ResponseKind.NUMBER
