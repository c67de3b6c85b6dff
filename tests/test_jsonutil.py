from dataclasses import dataclass

import pytest

from httpreqkit.jsonutil import (
    contains,
    convert_json_strings_to_maps,
    convert_map_to_json,
    is_json_string,
    json_string_to_map,
    struct_to_map,
)


@pytest.mark.parametrize("container,containee,expected", [
    ({"email": "john.doe@example.com", "username": "john_doe", "details": {"a": "a", "b": "b"}},
     {"username": "john_doe"}, True),
    ({"email": "john.doe@example.com", "username": "john_doe",
      "details": {"a": "a", "b": {"c": "c", "a": "a"}}},
     {"email": "john.doe@example.com", "username": "john_doe",
      "details": {"a": "a", "b": {"c": "c", "a": "a"}}}, True),
    ({"email": "john.doe@example.com", "username": "john_doe",
      "details": {"a": "a", "b": "b", "c": {"c": "c", "a": "a"}}},
     {"email": "john.doe@example.com", "username": "john_doe",
      "details": {"b": "b", "c": {"c": "c"}}}, True),
    ({"email": "john.doe@example.com", "username": "john_doe"},
     {"false": "false.false@example.com"}, False),
    ({"email": "john.doe@example.com", "username": "john_doe", "details": {"a": "a", "b": "b"}},
     {"email": "john.doe@example.com", "username": "john_doe", "details": {"a": "a", "c": "c"}}, False),
    ({"email": "john.doe@example.com", "username": "john_doe", "extra": "extra_value"},
     {"email": "john.doe@example.com"}, True),
    ({"email": "john.doe@example.com", "username": "john_doe"}, {}, True),
    ({}, {"email": "john.doe@example.com"}, False),
])
def test_contains(container, containee, expected):
    assert contains(container, containee) is expected


def test_contains_lists_compared_whole():
    assert contains({"a": [1, 2]}, {"a": [1, 2]}) is True
    assert contains({"a": [1, 2]}, {"a": [1]}) is False


@pytest.mark.parametrize("text,expected", [
    ('{"username":"john_doe","email":"john.doe@example.com"}', True),
    ("hi", False),
    ("[1, 2]", False),
])
def test_is_json_string(text, expected):
    assert is_json_string(text) is expected


def test_json_string_to_map():
    assert json_string_to_map('{"username":"john_doe","email":"john.doe@example.com"}') == {
        "email": "john.doe@example.com",
        "username": "john_doe",
    }


def test_json_string_to_map_invalid():
    assert json_string_to_map("hi") is None


def test_convert_json_strings_to_maps():
    merged = {
        "payload": {
            "baseUrl": "https://api.example.com/users",
            "body": '{"username":"john_doe","email":"john.doe@example.com"}',
        }
    }
    convert_json_strings_to_maps(merged)
    assert merged == {
        "payload": {
            "baseUrl": "https://api.example.com/users",
            "body": {"email": "john.doe@example.com", "username": "john_doe"},
        }
    }


def test_convert_leaves_lists_alone():
    merged = {"headers": {"Content-Type": ["application/json"]}}
    convert_json_strings_to_maps(merged)
    assert merged == {"headers": {"Content-Type": ["application/json"]}}


@dataclass
class _Payload:
    baseUrl: str
    body: str


def test_struct_to_map_from_dataclass():
    payload = _Payload("https://api.example.com/users",
                       '{"username": "john_doe", "email": "john.doe@example.com"}')
    assert struct_to_map({"payload": payload, "mappings": [{"method": "GET"}]}) == {
        "payload": {
            "baseUrl": "https://api.example.com/users",
            "body": '{"username": "john_doe", "email": "john.doe@example.com"}',
        },
        "mappings": [{"method": "GET"}],
    }


def test_struct_to_map_rejects_string():
    with pytest.raises(ValueError, match="cannot convert string"):
        struct_to_map("")


def test_convert_map_to_json_sorted_and_compact():
    assert convert_map_to_json({"b": 1, "a": "x"}) == '{"a":"x","b":1}'


def test_convert_map_to_json_round_trip():
    data = {"a": {"b": [1, 2, "c"]}, "d": None}
    assert json_string_to_map(convert_map_to_json(data)) == data