"""
Meeting point search orchestration.

Flow: geocode every origin and the destination concurrently, generate
candidates from the origins, pick the cheapest candidate, then assemble the
result (reverse geocode, per-origin legs, onward route to the destination).
"""

import asyncio
import logging
from time import perf_counter

from .assembler import ResultAssembler
from .cache import GeocodingCache
from .candidates import CandidateGenerator, CentroidCandidateGenerator
from .config import Settings
from .errors import MeetingPointTimeout
from .geocoding import Geocoder, GoogleGeocoder
from .google_client import GoogleMapsClient
from .models import MeetingPointRequest, MeetingPointResult
from .optimizer import MeetingPointOptimizer
from .travel_metrics import GoogleTravelMetricProvider, TravelMetricProvider
from .utils import gather_or_cancel

logger = logging.getLogger(__name__)


class MeetingPointService:
    """
    Finds the point that minimizes the group's total travel time.

    The geocoder, travel metric provider and candidate generator are
    independent collaborators so any of them can be substituted on its own.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        metrics: TravelMetricProvider,
        generator: CandidateGenerator | None = None,
        request_timeout: float | None = None,
    ):
        self.geocoder = geocoder
        self.metrics = metrics
        self.generator = generator or CentroidCandidateGenerator()
        self.optimizer = MeetingPointOptimizer(metrics)
        self.assembler = ResultAssembler(geocoder, metrics)
        self.request_timeout = request_timeout
        self._google: GoogleMapsClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings, generator: CandidateGenerator | None = None) -> "MeetingPointService":
        """Wire the Google-backed providers from explicit settings"""
        google = GoogleMapsClient(settings)
        cache = GeocodingCache(
            size=settings.geocoding_cache_size,
            reverse_size=settings.reverse_geocoding_cache_size,
            reverse_ttl=settings.reverse_geocoding_cache_ttl,
        )
        service = cls(
            geocoder=GoogleGeocoder(google, cache),
            metrics=GoogleTravelMetricProvider(google, settings.travel_mode),
            generator=generator,
            request_timeout=settings.request_timeout_seconds,
        )
        service._google = google
        return service

    async def find_meeting_point(self, request: MeetingPointRequest) -> MeetingPointResult:
        """
        Run a full meeting point search.

        Args:
            request: Validated request with ordered origins and a destination

        Returns:
            MeetingPointResult with origin legs in request order

        Raises:
            MeetingPointError: Any failure of the search; no partial result is returned
            MeetingPointTimeout: If the configured request timeout expired
        """
        start = perf_counter()
        logger.info(
            "Meeting point search started: %d origin(s), destination=%r",
            len(request.origins),
            request.destination,
        )

        if self.request_timeout is None:
            result = await self._search(request)
        else:
            try:
                result = await asyncio.wait_for(self._search(request), timeout=self.request_timeout)
            except asyncio.TimeoutError as e:
                logger.error("Meeting point search timed out after %.1fs", self.request_timeout)
                raise MeetingPointTimeout(self.request_timeout) from e

        logger.info(
            "Meeting point search completed in %.1f ms: %r",
            (perf_counter() - start) * 1000.0,
            result.meeting_address,
        )
        return result

    async def _search(self, request: MeetingPointRequest) -> MeetingPointResult:
        *origin_coordinates, destination_coordinate = await gather_or_cancel(
            *(self.geocoder.resolve(address) for address in request.origins),
            self.geocoder.resolve(request.destination),
        )

        candidates = self.generator.generate(origin_coordinates)
        winner = await self.optimizer.optimize(origin_coordinates, candidates)

        return await self.assembler.assemble(request, origin_coordinates, destination_coordinate, winner)

    async def aclose(self) -> None:
        """Release the shared HTTP client, if this service owns one"""
        if self._google is not None:
            await self._google.aclose()
