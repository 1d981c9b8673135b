"""Unit tests for the EIA API client helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
import requests

from ingest import client

START = datetime(2024, 1, 1, 0, tzinfo=timezone.utc)
END = datetime(2024, 1, 1, 5, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("EIA_API_KEY", "mock-key")


class DummyResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self.payload


def test_get_api_key_missing(monkeypatch):
    monkeypatch.delenv("EIA_API_KEY")

    with pytest.raises(client.APIRequestError):
        client.get_api_key()


def test_format_timestamp_converts_to_utc():
    dt = datetime.fromisoformat("2024-01-01T05:30:00-05:00")

    assert client.format_timestamp(dt) == "2024-01-01T10"


def test_build_params_interchange_sorting():
    params = client.build_params(client.INTERCHANGE_DATA_ROUTE, START, END)

    assert ("start", "2024-01-01T00") in params
    assert ("end", "2024-01-01T05") in params
    assert ("frequency", "hourly") in params
    assert ("sort[1][column]", "fromba") in params
    assert ("sort[2][column]", "toba") in params
    assert not any(k.startswith("facets") for k, _ in params)


def test_build_params_region_facets():
    params = client.build_params(client.REGION_DATA_ROUTE, START, END)

    facets = [v for k, v in params if k.startswith("facets[type]")]
    assert facets == ["D", "NG", "TI"]


def test_build_params_unknown_route():
    with pytest.raises(ValueError):
        client.build_params("electricity/other", START, END)


def test_fetch_page_success(monkeypatch):
    """`fetch_page` should call the route with paging and credentials."""

    def fake_get(url, params, headers, timeout):
        assert url.endswith("/" + client.FUEL_TYPE_DATA_ROUTE)
        query = dict(params)
        assert query["offset"] == "10"
        assert query["length"] == str(client.MAX_ROWS)
        assert query["api_key"] == "mock-key"
        assert headers["User-Agent"] == client.USER_AGENT
        assert timeout == client.HTTP_TIMEOUT
        return DummyResponse({"response": {"data": [{"value": "1"}]}})

    monkeypatch.setattr(client.requests, "get", fake_get)

    rows = client.fetch_page(client.FUEL_TYPE_DATA_ROUTE, [("start", "x")], offset=10)

    assert rows == [{"value": "1"}]


def test_fetch_page_retries(monkeypatch):
    """Transient `RequestException`s should be retried before succeeding."""

    attempts = 0

    def fake_get(url, params, headers, timeout):
        nonlocal attempts
        attempts += 1
        if attempts < 2:
            raise requests.RequestException("boom")
        return DummyResponse({"response": {"data": []}})

    monkeypatch.setattr(client.requests, "get", fake_get)
    monkeypatch.setattr(client.time, "sleep", lambda _: None)

    assert client.fetch_page(client.FUEL_TYPE_DATA_ROUTE, []) == []
    assert attempts == 2


def test_fetch_page_raises_after_max_retries(monkeypatch):
    attempts = 0

    def fake_get(url, params, headers, timeout):
        nonlocal attempts
        attempts += 1
        raise requests.RequestException("nope")

    monkeypatch.setattr(client.requests, "get", fake_get)
    monkeypatch.setattr(client.time, "sleep", lambda _: None)

    with pytest.raises(client.APIRequestError):
        client.fetch_page(client.FUEL_TYPE_DATA_ROUTE, [])

    assert attempts == client.MAX_RETRIES


def test_fetch_page_response_errors(monkeypatch):
    """Errors reported in the body should raise without retrying."""

    monkeypatch.setattr(
        client.requests,
        "get",
        lambda *a, **kw: DummyResponse({"response": {"errors": ["bad key", "bad route"]}}),
    )

    with pytest.raises(client.APIRequestError, match="bad key; bad route"):
        client.fetch_page(client.FUEL_TYPE_DATA_ROUTE, [])


def test_fetch_all_pages(monkeypatch):
    """`fetch_all` should advance the offset and stop on a short page."""

    calls: list[SimpleNamespace] = []
    monkeypatch.setattr(client, "MAX_ROWS", 2)

    def fake_page(route, params, offset):
        calls.append(SimpleNamespace(route=route, offset=offset))
        pages = {0: [{"value": "a"}, {"value": "b"}], 2: [{"value": "c"}]}
        return pages.get(offset, [])

    monkeypatch.setattr(client, "fetch_page", fake_page)

    rows = client.fetch_interchange_data(START, END)

    assert rows == [{"value": "a"}, {"value": "b"}, {"value": "c"}]
    assert [c.offset for c in calls] == [0, 2]
    assert calls[0].route == client.INTERCHANGE_DATA_ROUTE
