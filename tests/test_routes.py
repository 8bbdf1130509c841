from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from price_api.app.dependencies import get_price_service
from price_api.app.errors import UpstreamError
from price_api.app.main import app
from price_api.app.schemas import ErrorResponse
from price_api.app.services.cache import SeriesCache
from price_api.app.services.loader import SeriesLoader
from price_api.app.services.price_service import PriceService
from price_api.app.services.price_source import AlchemyPriceSource


@pytest.fixture
def client(service):
    app.dependency_overrides[get_price_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_price_defaults_to_short_interval(client, source, make_points) -> None:
    source.data["ETH"] = make_points([(0, "2300.5"), (5, "2301")])

    response = client.get("/price/ETH")

    assert response.status_code == 200
    body = response.json()
    assert body["symbol"] == "ETH"
    assert body["interval"] == "24h"
    assert [point["value"] for point in body["data"]] == [2300.5, 2301.0]
    assert body["data"][0]["timestamp"].startswith("2024-01-01T00:00:00")
    assert source.calls[0][3] == "5m"


def test_price_rejects_unknown_interval(client, source) -> None:
    response = client.get("/price/ETH", params={"interval": "1y"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"
    assert response.json()["interval"] == "1y"
    assert source.calls == []


def test_aggregate(client, source, make_points) -> None:
    source.data["A"] = make_points([(0, 100), (10, 200)])
    source.data["B"] = make_points([(0, 300), (10, 400)])

    response = client.get("/aggregate", params={"symbols": "A,B", "ratios": "60,40"})

    assert response.status_code == 200
    body = response.json()
    assert body["interval"] == "24h"
    assert [point["value"] for point in body["data"]] == pytest.approx([180.0, 230.0, 280.0])


@pytest.mark.parametrize(
    "params",
    [
        {"ratios": "1"},
        {"symbols": "A"},
        {"symbols": "A,B", "ratios": "0.5"},
        {"symbols": "A", "ratios": "abc"},
        {"symbols": "A", "ratios": "1", "interval": "90d"},
    ],
)
def test_aggregate_bad_requests(client, source, params) -> None:
    response = client.get("/aggregate", params=params)
    assert response.status_code == 400
    assert source.calls == []


def test_aggregate_without_overlap_is_a_client_error(client, source, make_points) -> None:
    source.data["A"] = make_points([(0, 1), (10, 2)])
    source.data["B"] = make_points([(20, 1), (30, 2)])
    response = client.get("/aggregate", params={"symbols": "A,B", "ratios": "1,1"})
    assert response.status_code == 422
    assert response.json()["error"] == "insufficient_overlap"


def test_pnl_uses_camel_case_fields(client, source, make_points) -> None:
    day = 24 * 60
    source.data["ETH"] = make_points([(0, 100), (day, 120), (2 * day, 110)])

    response = client.get("/aggregate/pnl", params={"symbols": "ETH", "ratios": "1"})

    assert response.status_code == 200
    body = response.json()
    assert body["pnl"] == pytest.approx(10.0)
    assert body["firstValue"] == 100.0
    assert body["lastValue"] == 110.0
    assert {"firstTimestamp", "lastTimestamp", "timestamp"} <= set(body)
    assert source.calls[0][3] == "1d"


def test_pnl_zero_baseline(client, source, make_points) -> None:
    source.data["ETH"] = make_points([(0, 0), (24 * 60, 10)])
    response = client.get("/aggregate/pnl", params={"symbols": "ETH", "ratios": "1"})
    assert response.status_code == 422
    assert response.json()["error"] == "division_by_zero"


def test_batch(client, source, make_points) -> None:
    source.data["ETH"] = make_points([(0, 9), (100, 10)])
    source.data["BTC"] = make_points([(0, 4), (90, 5)])

    response = client.get("/batch", params={"symbols": "ETH,BTC"})

    assert response.status_code == 200
    body = response.json()
    assert body["values"] == {"eth": 10.0, "btc": 5.0}
    assert body["timestamp"].startswith("2024-01-01T01:40:00")


def test_missing_data_is_not_found(client) -> None:
    response = client.get("/price/NOPE")
    assert response.status_code == 404
    assert response.json()["symbol"] == "NOPE"


def test_upstream_failure_is_a_server_error(client, source) -> None:
    source.errors["ETH"] = UpstreamError("Failed to fetch price for ETH: 500", status_code=500)
    response = client.get("/batch", params={"symbols": "ETH"})
    assert response.status_code == 502
    assert response.json()["error"] == "upstream_error"


def test_error_bodies_match_the_documented_schema(client) -> None:
    response = client.get("/price/NOPE", params={"interval": "7d"})
    assert response.status_code == 404
    body = ErrorResponse.model_validate(response.json())
    assert body.error == "data_unavailable"
    assert body.interval == "7d"

    schema = client.get("/openapi.json").json()
    declared = schema["paths"]["/price/{symbol}"]["get"]["responses"]["404"]
    assert declared["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")


def test_non_finite_provider_value_is_not_served_or_cached(backend) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": [
                    {"value": "NaN", "timestamp": "2024-01-01T00:00:00Z"},
                    {"value": "1.0", "timestamp": "2024-01-01T00:05:00Z"},
                ]
            },
        )

    source = AlchemyPriceSource(
        api_key="demo-key",
        base_url="https://prices.test/v1",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    service = PriceService(SeriesLoader(cache=SeriesCache(backend), source=source))
    app.dependency_overrides[get_price_service] = lambda: service
    try:
        response = TestClient(app).get("/price/ETH")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    assert response.json()["error"] == "upstream_error"
    assert backend.sets == []
