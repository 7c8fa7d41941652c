"""
Geocoding: address text to coordinates and back.
"""

import logging
from abc import ABC, abstractmethod

from .cache import GeocodingCache
from .errors import GeocodeNotFound
from .google_client import GoogleMapsClient
from .models import Coordinate

logger = logging.getLogger(__name__)


def placeholder_address(coordinate: Coordinate) -> str:
    """Address used for a point the provider has no name for"""
    return f"Unknown location ({coordinate.lat}, {coordinate.lng})"


class Geocoder(ABC):
    @abstractmethod
    async def resolve(self, address: str) -> Coordinate:
        """Convert address text to a coordinate.

        Raises GeocodeNotFound if the provider returns no results.
        """
        ...

    @abstractmethod
    async def reverse_resolve(self, coordinate: Coordinate) -> str:
        """Convert a coordinate to a human-readable address.

        Returns a placeholder embedding the coordinate if the provider has no result.
        """
        ...


class GoogleGeocoder(Geocoder):
    """Geocoder backed by the Google Geocoding API, with caching"""

    provider = "Geocoding API"

    def __init__(self, google: GoogleMapsClient, cache: GeocodingCache | None = None):
        self.google = google
        self.cache = cache or GeocodingCache()

    async def resolve(self, address: str) -> Coordinate:
        """
        Geocode an address, taking the provider's top-ranked result.

        Args:
            address: Address string to geocode

        Returns:
            Coordinate of the first result

        Raises:
            GeocodeNotFound: If the provider returned no results
        """
        cached = self.cache.get_coordinate(address)
        if cached is not None:
            return cached

        result = await self.google.call(self.google.client.geocode, address, provider=self.provider)
        if not result:
            logger.info("Geocoding returned no results for %r", address)
            raise GeocodeNotFound(address)

        location = result[0]["geometry"]["location"]
        coordinate = Coordinate(lat=location["lat"], lng=location["lng"])
        self.cache.set_coordinate(address, coordinate)
        return coordinate

    async def reverse_resolve(self, coordinate: Coordinate) -> str:
        """
        Reverse geocode a coordinate to the most specific formatted address.

        Args:
            coordinate: Point to name

        Returns:
            Formatted address, or a placeholder if the provider has none
        """
        cached = self.cache.get_address(coordinate)
        if cached is not None:
            return cached

        result = await self.google.call(
            self.google.client.reverse_geocode, coordinate.as_tuple(), provider=self.provider
        )
        if not result:
            logger.info("Reverse geocoding returned no results for (%s)", coordinate)
            return placeholder_address(coordinate)

        formatted_address = result[0]["formatted_address"]
        self.cache.set_address(coordinate, formatted_address)
        return formatted_address
