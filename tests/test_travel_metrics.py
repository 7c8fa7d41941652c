"""
Tests for the Google travel metric provider (distance matrix and routes)
"""

import json
from unittest.mock import patch

import httpx
import pytest

from meeting_point.errors import ProviderError, ProviderTransientFailure, RouteNotFound
from meeting_point.google_client import GoogleMapsClient
from meeting_point.models import Coordinate
from meeting_point.travel_metrics import (
    ROUTES_API_URL,
    GoogleTravelMetricProvider,
    parse_matrix_element,
    parse_route_duration,
)

ORIGIN = Coordinate(lat=37.7749, lng=-122.4194)
DESTINATION = Coordinate(lat=37.3382, lng=-121.8863)


def ok_element(seconds: int, meters: int) -> dict:
    return {
        "status": "OK",
        "duration": {"value": seconds, "text": f"{seconds // 60} mins"},
        "distance": {"value": meters, "text": f"{meters / 1000:.1f} km"},
    }


def make_provider(settings, handler=None, travel_mode="driving"):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler)) if handler else None
    return GoogleTravelMetricProvider(GoogleMapsClient(settings, http_client=http_client), travel_mode)


def test_parse_ok_element():
    metric = parse_matrix_element(ok_element(600, 5000))

    assert metric.reachable is True
    assert metric.duration_seconds == 600
    assert metric.distance_meters == 5000
    assert metric.duration_text == "10 mins"


@pytest.mark.parametrize("status", ["NOT_FOUND", "ZERO_RESULTS", "MAX_ROUTE_LENGTH_EXCEEDED"])
def test_parse_non_ok_element_is_unreachable(status):
    metric = parse_matrix_element({"status": status})

    assert metric.reachable is False
    assert metric.status == status
    assert metric.duration_seconds == 0
    assert metric.distance_meters == 0


def test_parse_ok_element_missing_fields_is_provider_error():
    with pytest.raises(ProviderError):
        parse_matrix_element({"status": "OK", "duration": {"value": 1, "text": "1 min"}})


def test_parse_route_duration():
    assert parse_route_duration("1234s") == 1234
    assert parse_route_duration("0s") == 0
    assert parse_route_duration("59.6s") == 60


@pytest.mark.asyncio
async def test_batch_metrics_maps_grid(settings):
    provider = make_provider(settings)
    response = {
        "status": "OK",
        "rows": [
            {"elements": [ok_element(600, 5000)]},
            {"elements": [{"status": "NOT_FOUND"}]},
        ],
    }
    origins = [ORIGIN, Coordinate(lat=0, lng=0)]

    with patch.object(provider.google.client, "distance_matrix", return_value=response) as mock_matrix:
        grid = await provider.batch_metrics(origins, [DESTINATION])

    mock_matrix.assert_called_once_with(
        origins=[ORIGIN.as_tuple(), (0.0, 0.0)],
        destinations=[DESTINATION.as_tuple()],
        mode="driving",
    )
    assert grid[0][0].duration_seconds == 600
    assert grid[1][0].reachable is False
    assert grid[1][0].status == "NOT_FOUND"


@pytest.mark.asyncio
async def test_batch_metrics_chunks_large_origin_sets_in_order(settings):
    provider = make_provider(settings)
    origins = [Coordinate(lat=i, lng=0) for i in range(30)]

    def fake_matrix(origins, destinations, mode):
        return {"rows": [{"elements": [ok_element(int(lat) * 60, 100)]} for lat, _ in origins]}

    with patch.object(provider.google.client, "distance_matrix", side_effect=fake_matrix) as mock_matrix:
        grid = await provider.batch_metrics(origins, [DESTINATION])

    assert mock_matrix.call_count == 2
    assert len(mock_matrix.call_args_list[0].kwargs["origins"]) == 25
    assert len(mock_matrix.call_args_list[1].kwargs["origins"]) == 5
    assert [row[0].duration_seconds for row in grid] == [i * 60 for i in range(30)]


@pytest.mark.asyncio
async def test_batch_metrics_rejects_wrong_row_count(settings):
    provider = make_provider(settings)
    response = {"rows": [{"elements": [ok_element(600, 5000)]}]}

    with patch.object(provider.google.client, "distance_matrix", return_value=response):
        with pytest.raises(ProviderError):
            await provider.batch_metrics([ORIGIN, DESTINATION], [DESTINATION])


@pytest.mark.asyncio
async def test_single_route(settings):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "routes": [
                    {
                        "distanceMeters": 77000,
                        "duration": "3120s",
                        "localizedValues": {"distance": {"text": "77 km"}, "duration": {"text": "52 mins"}},
                    }
                ]
            },
        )

    provider = make_provider(settings, handler, travel_mode="bicycling")
    metric = await provider.single_route(ORIGIN, DESTINATION)
    await provider.google.aclose()

    assert metric.duration_seconds == 3120
    assert metric.distance_meters == 77000
    assert metric.duration_text == "52 mins"
    assert metric.distance_text == "77 km"
    assert metric.reachable is True

    assert len(requests) == 1
    request = requests[0]
    assert request.url.host == httpx.URL(ROUTES_API_URL).host
    assert request.url.path.endswith("computeRoutes")
    assert request.headers["X-Goog-Api-Key"] == settings.google_maps_api_key
    assert "routes.duration" in request.headers["X-Goog-FieldMask"]
    body = json.loads(request.content)
    assert body["travelMode"] == "BICYCLE"
    assert body["origin"]["location"]["latLng"] == {"latitude": ORIGIN.lat, "longitude": ORIGIN.lng}


@pytest.mark.asyncio
async def test_single_route_formats_text_when_not_localized(settings):
    def handler(request):
        return httpx.Response(200, json={"routes": [{"distanceMeters": 1500, "duration": "4000s"}]})

    provider = make_provider(settings, handler)
    metric = await provider.single_route(ORIGIN, DESTINATION)
    await provider.google.aclose()

    assert metric.duration_text == "1h 6m"
    assert metric.distance_text == "1.5 km"


@pytest.mark.asyncio
async def test_single_route_without_routes_raises(settings):
    provider = make_provider(settings, lambda request: httpx.Response(200, json={}))

    with pytest.raises(RouteNotFound):
        await provider.single_route(ORIGIN, DESTINATION)
    await provider.google.aclose()


@pytest.mark.asyncio
async def test_single_route_retries_server_errors(settings):
    responses = [
        httpx.Response(503, text="backend unavailable"),
        httpx.Response(200, json={"routes": [{"distanceMeters": 10, "duration": "5s"}]}),
    ]
    calls = []

    def handler(request):
        calls.append(request)
        return responses[len(calls) - 1]

    provider = make_provider(settings, handler)
    metric = await provider.single_route(ORIGIN, DESTINATION)
    await provider.google.aclose()

    assert metric.duration_seconds == 5
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_single_route_network_errors_exhaust_retries(settings):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    provider = make_provider(settings, handler)
    with pytest.raises(ProviderTransientFailure):
        await provider.single_route(ORIGIN, DESTINATION)
    await provider.google.aclose()

    assert len(calls) == settings.retry_attempts


@pytest.mark.asyncio
async def test_single_route_client_error_is_not_retried(settings):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, json={"error": {"message": "Invalid travel mode"}})

    provider = make_provider(settings, handler)
    with pytest.raises(ProviderError):
        await provider.single_route(ORIGIN, DESTINATION)
    await provider.google.aclose()

    assert len(calls) == 1


def test_unsupported_travel_mode(settings):
    with pytest.raises(ValueError):
        make_provider(settings, travel_mode="flying")
