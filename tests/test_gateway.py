from unittest.mock import MagicMock, patch

import pytest
import requests

from gateway import UpstreamFetchError, fetch_concurrently, fetch_json


def _mock_resp(payload: object, status: int = 200) -> MagicMock:
    mock = MagicMock()
    mock.ok = 200 <= status < 300
    mock.status_code = status
    mock.json.return_value = payload
    return mock


def test_fetch_json_returns_decoded_body_and_sends_headers() -> None:
    with patch("gateway.requests.get", return_value=_mock_resp({"ok": True})) as mock_get:
        body = fetch_json("Neynar", "https://api.example", "/user?x=1", headers={"api_key": "k"}, timeout=5)

    assert body == {"ok": True}
    args, kwargs = mock_get.call_args
    assert args[0] == "https://api.example/user?x=1"
    assert kwargs["headers"] == {"accept": "application/json", "api_key": "k"}
    assert kwargs["timeout"] == 5


def test_fetch_json_raises_with_endpoint_and_status_on_non_2xx() -> None:
    with patch("gateway.requests.get", return_value=_mock_resp({}, status=503)):
        with pytest.raises(UpstreamFetchError) as excinfo:
            fetch_json("CoinGecko", "https://api.example", "/global")

    assert str(excinfo.value) == "CoinGecko request failed (503) for /global"
    assert excinfo.value.status == 503
    assert excinfo.value.path == "/global"


def test_fetch_json_wraps_transport_errors() -> None:
    with patch("gateway.requests.get", side_effect=requests.ConnectionError("boom")):
        with pytest.raises(UpstreamFetchError, match=r"DeFiLlama request failed \(network error\) for /protocols"):
            fetch_json("DeFiLlama", "https://api.example", "/protocols")


def test_fetch_json_rejects_undecodable_body() -> None:
    response = _mock_resp(None)
    response.json.side_effect = ValueError("not json")
    with patch("gateway.requests.get", return_value=response):
        with pytest.raises(UpstreamFetchError, match="invalid JSON body"):
            fetch_json("DeFiLlama", "https://api.example", "/v2/chains")


def test_fetch_concurrently_returns_results_by_name() -> None:
    results = fetch_concurrently({"a": lambda: 1, "b": lambda: [2], "c": lambda: {"x": 3}})
    assert results == {"a": 1, "b": [2], "c": {"x": 3}}


def test_fetch_concurrently_is_all_or_nothing() -> None:
    """Every call runs, but one failure means no results come back."""
    finished: list[str] = []

    def ok() -> str:
        finished.append("ok")
        return "fine"

    def broken() -> str:
        raise UpstreamFetchError("CoinGecko", "/global", 500)

    with pytest.raises(UpstreamFetchError, match="/global"):
        fetch_concurrently({"broken": broken, "ok": ok})

    assert finished == ["ok"]


def test_fetch_concurrently_raises_first_failure_in_declaration_order() -> None:
    def first() -> None:
        raise ValueError("first")

    def second() -> None:
        raise KeyError("second")

    with pytest.raises(ValueError, match="first"):
        fetch_concurrently({"first": first, "second": second})


def test_fetch_concurrently_with_no_calls() -> None:
    assert fetch_concurrently({}) == {}
