"""
Travel metrics: batched distance matrix and single point-to-point routes.

Adapters must never reorder their inputs: row i of a batch result always
belongs to origins[i], column j to destinations[j]. Callers bind results to
request addresses by index.
"""

import logging
from abc import ABC, abstractmethod

from .errors import ProviderError, RouteNotFound
from .google_client import GoogleMapsClient
from .models import Coordinate, TravelMetric
from .utils import format_distance, format_duration

logger = logging.getLogger(__name__)

# Distance Matrix API request limits
MAX_MATRIX_ORIGINS = 25
MAX_MATRIX_DESTINATIONS = 25
MAX_MATRIX_ELEMENTS = 100

ROUTES_API_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
ROUTES_FIELD_MASK = "routes.duration,routes.distanceMeters,routes.localizedValues"

# Distance Matrix mode -> Routes API travelMode
ROUTES_TRAVEL_MODES = {
    "driving": "DRIVE",
    "walking": "WALK",
    "bicycling": "BICYCLE",
    "transit": "TRANSIT",
}


def _chunks(items: list, size: int) -> list[tuple[int, list]]:
    return [(start, items[start : start + size]) for start in range(0, len(items), size)]


class TravelMetricProvider(ABC):
    @abstractmethod
    async def batch_metrics(
        self, origins: list[Coordinate], destinations: list[Coordinate]
    ) -> list[list[TravelMetric]]:
        """Travel metrics indexed [origin][destination], in input order.

        Cells the provider could not route are TravelMetric.unreachable.
        """
        ...

    @abstractmethod
    async def single_route(self, origin: Coordinate, destination: Coordinate) -> TravelMetric:
        """Route-level duration/distance between two points.

        Raises RouteNotFound if the provider returns no route.
        """
        ...


def parse_matrix_element(element: dict) -> TravelMetric:
    """
    Convert one Distance Matrix element into a TravelMetric.

    Args:
        element: Raw element dict {status, duration, distance}

    Returns:
        Reachable metric for status OK, unreachable metric otherwise
    """
    status = element.get("status", "UNKNOWN")
    if status != "OK":
        return TravelMetric.unreachable(status)

    try:
        return TravelMetric(
            duration_seconds=element["duration"]["value"],
            distance_meters=element["distance"]["value"],
            duration_text=element["duration"]["text"],
            distance_text=element["distance"]["text"],
        )
    except KeyError as e:
        raise ProviderError("Distance Matrix API", f"element missing field {e}") from e


def parse_route_duration(value: str) -> int:
    """Routes API durations are strings such as "1234s" """
    return round(float(value.rstrip("s")))


class GoogleTravelMetricProvider(TravelMetricProvider):
    """Travel metrics from the Google Distance Matrix and Routes APIs"""

    matrix_provider = "Distance Matrix API"
    routes_provider = "Routes API"

    def __init__(self, google: GoogleMapsClient, travel_mode: str = "driving"):
        if travel_mode not in ROUTES_TRAVEL_MODES:
            raise ValueError(f"Unsupported travel mode: {travel_mode}")
        self.google = google
        self.travel_mode = travel_mode

    async def _matrix_block(
        self, origins: list[Coordinate], destinations: list[Coordinate]
    ) -> list[list[TravelMetric]]:
        result = await self.google.call(
            self.google.client.distance_matrix,
            origins=[origin.as_tuple() for origin in origins],
            destinations=[destination.as_tuple() for destination in destinations],
            mode=self.travel_mode,
            provider=self.matrix_provider,
        )

        rows = result.get("rows", [])
        if len(rows) != len(origins):
            raise ProviderError(
                self.matrix_provider, f"expected {len(origins)} rows, got {len(rows)}"
            )

        grid = []
        for row in rows:
            elements = row.get("elements", [])
            if len(elements) != len(destinations):
                raise ProviderError(
                    self.matrix_provider,
                    f"expected {len(destinations)} elements per row, got {len(elements)}",
                )
            grid.append([parse_matrix_element(element) for element in elements])
        return grid

    async def batch_metrics(
        self, origins: list[Coordinate], destinations: list[Coordinate]
    ) -> list[list[TravelMetric]]:
        """
        Calculate the travel metric grid between origins and destinations.

        Requests larger than the API limits are split into consecutive blocks
        and stitched back together in input order.

        Args:
            origins: Origin coordinates
            destinations: Destination coordinates

        Returns:
            Grid indexed [origin][destination]
        """
        if not origins or not destinations:
            return [[] for _ in origins]

        destination_chunk = min(MAX_MATRIX_DESTINATIONS, len(destinations))
        origin_chunk = max(1, min(MAX_MATRIX_ORIGINS, MAX_MATRIX_ELEMENTS // destination_chunk))

        grid: list[list[TravelMetric]] = [[] for _ in origins]
        for origin_start, origin_block in _chunks(origins, origin_chunk):
            for _, destination_block in _chunks(destinations, destination_chunk):
                block = await self._matrix_block(origin_block, destination_block)
                for offset, row in enumerate(block):
                    grid[origin_start + offset].extend(row)
        return grid

    async def single_route(self, origin: Coordinate, destination: Coordinate) -> TravelMetric:
        """
        Compute a point-to-point route with the Routes API.

        Args:
            origin: Start of the route
            destination: End of the route

        Returns:
            Route-level travel metric

        Raises:
            RouteNotFound: If the API returned no route
        """
        body = {
            "origin": {"location": {"latLng": {"latitude": origin.lat, "longitude": origin.lng}}},
            "destination": {
                "location": {"latLng": {"latitude": destination.lat, "longitude": destination.lng}}
            },
            "travelMode": ROUTES_TRAVEL_MODES[self.travel_mode],
        }
        result = await self.google.post_json(
            ROUTES_API_URL,
            body,
            headers={"X-Goog-FieldMask": ROUTES_FIELD_MASK},
            provider=self.routes_provider,
        )

        routes = result.get("routes", [])
        if not routes:
            raise RouteNotFound(origin, destination)

        route = routes[0]
        duration_seconds = parse_route_duration(route.get("duration", "0s"))
        distance_meters = route.get("distanceMeters", 0)
        localized = route.get("localizedValues", {})

        return TravelMetric(
            duration_seconds=duration_seconds,
            distance_meters=distance_meters,
            duration_text=localized.get("duration", {}).get("text") or format_duration(duration_seconds),
            distance_text=localized.get("distance", {}).get("text") or format_distance(distance_meters),
        )
