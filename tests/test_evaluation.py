import json

import pytest

from shoproute.api.evaluation import (
    build_evaluation_payload,
    extract_nlp_result,
    stops_from_evaluation,
)
from shoproute.api.models import Stop


def test_categorical_payload():
    payload = build_evaluation_payload(
        "categorical",
        items=[{"category": "Groceries", "name": " milk "}, {"category": "Meat", "name": "chicken"}],
        selection_type="price",
    )

    assert payload == {
        "option": "categorical",
        "data": [
            {"category": "Groceries", "name": "milk"},
            {"category": "Meat", "name": "chicken"},
        ],
        "selectionType": "price",
    }


def test_manual_payload():
    payload = build_evaluation_payload("manual", manual_input="milk, bread and a charger\n")

    assert payload == {"option": "manual", "data": "milk, bread and a charger", "selectionType": "time"}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"option": "voice"},
        {"option": "categorical", "items": []},
        {"option": "categorical", "items": [{"category": "Toys", "name": "ball"}]},
        {"option": "manual", "manual_input": "   "},
        {"option": "manual", "manual_input": "milk", "selection_type": "distance"},
    ],
)
def test_invalid_form_input_is_rejected(kwargs):
    with pytest.raises(ValueError):
        build_evaluation_payload(**kwargs)


def test_extract_nlp_result_takes_first_json_block():
    message = 'Sure! Here is the plan: {"possible_paths": []} let me know'

    assert extract_nlp_result(message) == '{"possible_paths": []}'


def test_extract_nlp_result_falls_back_to_message():
    assert extract_nlp_result("no json here") == "no json here"


def test_stops_from_evaluation_keeps_suggested_order():
    result = {
        "possible_paths": [
            [
                {"store": "B", "lat": 20.36, "long": 85.83},
                {"store": "A", "lat": 20.35, "long": 85.82},
            ],
            [{"store": "C", "lat": 20.1, "long": 85.1}],
        ]
    }

    assert stops_from_evaluation(result) == [
        Stop(store="B", lat=20.36, long=85.83),
        Stop(store="A", lat=20.35, long=85.82),
    ]


def test_stops_from_evaluation_accepts_json_text():
    text = json.dumps({"possible_paths": [[{"store": "A", "lat": "20.35", "long": "85.82"}]]})

    assert stops_from_evaluation(text) == [Stop(store="A", lat=20.35, long=85.82)]


@pytest.mark.parametrize(
    "result",
    ["{not json", [], {}, {"possible_paths": []}, {"possible_paths": [{"store": "A"}]}, {"possible_paths": [[{"store": "A"}]]}],
)
def test_stops_from_evaluation_rejects_malformed_results(result):
    with pytest.raises(ValueError):
        stops_from_evaluation(result)


def test_extract_nlp_result_keeps_nested_objects_whole():
    answer = {"possible_paths": [[{"store": "A", "lat": 20.35, "long": 85.82}]]}
    message = f"Evaluation done. {json.dumps(answer)} Have a nice trip {{:}}"

    assert json.loads(extract_nlp_result(message)) == answer


def test_stops_from_evaluation_reads_json_wrapped_in_message_text():
    answer = {
        "possible_paths": [
            [
                {"store": "A", "lat": 20.35, "long": 85.82},
                {"store": "B", "lat": 20.36, "long": 85.83},
            ]
        ]
    }
    message = f"Result: {json.dumps(answer)}\nBased on time."

    assert stops_from_evaluation(message) == [
        Stop(store="A", lat=20.35, long=85.82),
        Stop(store="B", lat=20.36, long=85.83),
    ]
