"""Response mapping unit tests."""

import httpx
from bms_client.models import Counter, CounterType
from bms_client.response import decode, with_status
from bms_client.result import Failure, Success


def test_with_status_match_applies_mapper() -> None:
    response = httpx.Response(200, json={"code": "C1", "timeRef": 10, "value": 3})
    result = with_status(200, response, lambda r: Success(r.json()["value"]))
    assert result.value == 3


def test_with_status_match_returns_mapper_failure() -> None:
    response = httpx.Response(200, text="ignored")
    result = with_status(200, response, lambda r: Failure("mapper said no"))
    assert result.error_message == "mapper said no"


def test_with_status_without_mapper_confirms() -> None:
    result = with_status(200, httpx.Response(200))
    assert result.is_success is True
    assert result.value is True


def test_with_status_mismatch_describes_response() -> None:
    result = with_status(200, httpx.Response(404, text="counter type `T1` not found"))
    assert result.is_success is False
    assert "200" in result.error_message
    assert "404" in result.error_message
    assert "counter type `T1` not found" in result.error_message
    assert result.error_message == "expected HTTP 200 but 404, response was `counter type `T1` not found`"
    assert result.status_code == 404


def test_with_status_mismatch_skips_mapper() -> None:
    called = []
    result = with_status(201, httpx.Response(200), lambda r: called.append(r) or Success(True))
    assert result.is_success is False
    assert called == []


def test_decode_counter() -> None:
    response = httpx.Response(200, json={"code": "C1", "timeRef": 1700000000, "value": -2})
    result = decode(response, Counter.from_dict)
    assert result.value == Counter(code="C1", time_ref=1700000000, value=-2)


def test_decode_malformed_json_is_failure() -> None:
    result = decode(httpx.Response(200, text="{not json"), Counter.from_dict)
    assert result.is_success is False
    assert result.error_message
    assert result.status_code is None


def test_decode_missing_field_is_failure() -> None:
    result = decode(httpx.Response(200, json={"timeRef": 1}), Counter.from_dict)
    assert result.is_success is False
    assert "code" in result.error_message


def test_decode_wrong_shape_is_failure() -> None:
    result = decode(httpx.Response(200, json={"code": "T1"}), CounterType.list_from_json)
    assert result.is_success is False
    assert "array" in result.error_message


def test_decode_unknown_version_is_failure() -> None:
    body = [{"code": "T1", "name": "n", "value": 0, "k1": 0, "k2": 1, "version": "Nope"}]
    result = decode(httpx.Response(200, json=body), CounterType.list_from_json)
    assert result.is_success is False


def test_decode_out_of_range_number_is_failure() -> None:
    response = httpx.Response(200, text='{"code": "C1", "timeRef": Infinity, "value": 0}')
    result = decode(response, Counter.from_dict)
    assert result.is_success is False
    assert result.error_message


def test_decode_deeply_nested_body_is_failure() -> None:
    response = httpx.Response(200, text="[" * 100_000 + "]" * 100_000)
    result = decode(response, CounterType.list_from_json)
    assert result.is_success is False
    assert result.status_code is None
