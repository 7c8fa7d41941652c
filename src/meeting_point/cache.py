"""
Caching for geocoding responses.

Two-tier caching strategy:
1. Forward geocoding cache (LRU, indefinite) - addresses don't change location
2. Reverse geocoding cache (TTL) - the best name for a point may change over time
"""

import hashlib
import logging
from typing import Any

from cachetools import LRUCache, TTLCache

from .models import Coordinate

logger = logging.getLogger(__name__)

# ~11 meters precision
COORDINATE_PRECISION = 4


def make_cache_key(*parts: Any) -> str:
    """
    Create a consistent cache key from arbitrary parts.

    Args:
        *parts: Variable parts to include in the key

    Returns:
        SHA256 hash of the serialized parts
    """
    key_string = "|".join(str(part) for part in parts)
    return hashlib.sha256(key_string.encode()).hexdigest()


class GeocodingCache:
    """Forward and reverse geocoding caches with hit/miss statistics"""

    def __init__(self, size: int = 1000, reverse_size: int = 500, reverse_ttl: int = 3600):
        self.geocoding_cache: LRUCache = LRUCache(maxsize=size)
        self.reverse_cache: TTLCache = TTLCache(maxsize=reverse_size, ttl=reverse_ttl)
        self.stats = {"geocoding_hits": 0, "geocoding_misses": 0, "reverse_hits": 0, "reverse_misses": 0}

    @staticmethod
    def _address_key(address: str) -> str:
        return make_cache_key("geocode", address.lower().strip())

    @staticmethod
    def _coordinate_key(coordinate: Coordinate) -> str:
        # Round coordinates to reduce cache misses from tiny differences
        return make_cache_key(
            "reverse_geocode",
            round(coordinate.lat, COORDINATE_PRECISION),
            round(coordinate.lng, COORDINATE_PRECISION),
        )

    def get_coordinate(self, address: str) -> Coordinate | None:
        result = self.geocoding_cache.get(self._address_key(address))
        if result is not None:
            self.stats["geocoding_hits"] += 1
            logger.debug("Geocoding cache hit for %r", address)
        else:
            self.stats["geocoding_misses"] += 1
        return result

    def set_coordinate(self, address: str, coordinate: Coordinate) -> None:
        self.geocoding_cache[self._address_key(address)] = coordinate

    def get_address(self, coordinate: Coordinate) -> str | None:
        result = self.reverse_cache.get(self._coordinate_key(coordinate))
        if result is not None:
            self.stats["reverse_hits"] += 1
            logger.debug("Reverse geocoding cache hit for (%s)", coordinate)
        else:
            self.stats["reverse_misses"] += 1
        return result

    def set_address(self, coordinate: Coordinate, address: str) -> None:
        self.reverse_cache[self._coordinate_key(coordinate)] = address

    def get_stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dict with hit/miss counts and hit rates
        """
        total_geocoding = self.stats["geocoding_hits"] + self.stats["geocoding_misses"]
        total_reverse = self.stats["reverse_hits"] + self.stats["reverse_misses"]

        return {
            "geocoding": {
                "hits": self.stats["geocoding_hits"],
                "misses": self.stats["geocoding_misses"],
                "hit_rate": self.stats["geocoding_hits"] / total_geocoding if total_geocoding > 0 else 0,
                "cache_size": len(self.geocoding_cache),
            },
            "reverse_geocoding": {
                "hits": self.stats["reverse_hits"],
                "misses": self.stats["reverse_misses"],
                "hit_rate": self.stats["reverse_hits"] / total_reverse if total_reverse > 0 else 0,
                "cache_size": len(self.reverse_cache),
            },
        }

    def clear(self) -> None:
        """Clear all caches (useful for testing)"""
        self.geocoding_cache.clear()
        self.reverse_cache.clear()
        for key in self.stats:
            self.stats[key] = 0
