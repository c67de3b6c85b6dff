from httpreqkit.jsonutil import struct_to_map
from httpreqkit.messages import HttpRequest, HttpResponse


def test_response_to_dict_defaults():
    assert HttpResponse().to_dict() == {"statusCode": 0, "headers": None, "body": ""}


def test_response_round_trips_through_json():
    response = HttpResponse(
        status_code=200,
        headers={"Content-Type": ["application/json"]},
        body='{"id":"123"}',
    )
    assert struct_to_map(response) == {
        "statusCode": 200,
        "headers": {"Content-Type": ["application/json"]},
        "body": '{"id":"123"}',
    }


def test_to_dict_copies_headers():
    response = HttpResponse(headers={"Authorization": ["Bearer token"]})
    result = response.to_dict()
    result["headers"]["Authorization"].append("extra")
    assert response.headers == {"Authorization": ["Bearer token"]}


def test_request_holds_given_fields():
    request = HttpRequest(method="GET", url="https://example.com", body="{}", headers={"A": ["b"]})
    assert (request.method, request.url, request.body, request.headers) == (
        "GET",
        "https://example.com",
        "{}",
        {"A": ["b"]},
    )
    assert request == HttpRequest("GET", "https://example.com", "{}", {"A": ["b"]})


def test_request_defaults_are_empty():
    request = HttpRequest()
    assert request.method == ""
    assert request.headers is None