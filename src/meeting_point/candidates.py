"""Candidate meeting point generation."""

from abc import ABC, abstractmethod

from .errors import EmptyOriginSet
from .models import Coordinate


class CandidateGenerator(ABC):
    @abstractmethod
    def generate(self, origins: list[Coordinate]) -> list[Coordinate]:
        """Candidate meeting coordinates, in evaluation order.

        Raises EmptyOriginSet when origins is empty.
        """
        ...


class CentroidCandidateGenerator(CandidateGenerator):
    """
    Single candidate at the unweighted centroid of the origins.

    Averages latitudes and longitudes arithmetically. Not geodesically exact
    over long distances (or across the antimeridian), adequate at city scale.
    """

    def generate(self, origins: list[Coordinate]) -> list[Coordinate]:
        if not origins:
            raise EmptyOriginSet()

        # Mean of offsets from the first origin: exact when all origins coincide
        first = origins[0]
        lat = first.lat + sum(origin.lat - first.lat for origin in origins) / len(origins)
        lng = first.lng + sum(origin.lng - first.lng for origin in origins) / len(origins)
        return [Coordinate(lat=lat, lng=lng)]
