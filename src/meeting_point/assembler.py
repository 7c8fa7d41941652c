"""Builds the final meeting point result for a chosen coordinate."""

import logging

from .geocoding import Geocoder
from .models import Coordinate, MeetingPointRequest, MeetingPointResult, TravelLeg
from .optimizer import single_column
from .travel_metrics import TravelMetricProvider
from .utils import gather_or_cancel

logger = logging.getLogger(__name__)


class ResultAssembler:
    def __init__(self, geocoder: Geocoder, metrics: TravelMetricProvider):
        self.geocoder = geocoder
        self.metrics = metrics

    async def assemble(
        self,
        request: MeetingPointRequest,
        origin_coordinates: list[Coordinate],
        destination_coordinate: Coordinate,
        winner: Coordinate,
    ) -> MeetingPointResult:
        """
        Name the winning point and report every leg of the trip.

        Per-origin metrics are recomputed rather than reused from the
        optimization pass. Row i of the metric grid is bound to
        request.origins[i]; origin_coordinates must be in request order.

        Args:
            request: Validated request (not modified)
            origin_coordinates: Resolved origins, in request order
            destination_coordinate: Resolved destination
            winner: Coordinate chosen by the optimizer

        Returns:
            MeetingPointResult
        """
        meeting_address, grid, destination_metric = await gather_or_cancel(
            self.geocoder.reverse_resolve(winner),
            self.metrics.batch_metrics(origin_coordinates, [winner]),
            self.metrics.single_route(winner, destination_coordinate),
        )

        column = single_column(grid, len(request.origins))
        origin_legs = [
            TravelLeg(address=address, metric=metric) for address, metric in zip(request.origins, column)
        ]
        for leg in origin_legs:
            if not leg.metric.reachable:
                logger.warning("Origin %r cannot reach the meeting point (%s)", leg.address, leg.metric.status)

        return MeetingPointResult(
            meeting_address=meeting_address,
            meeting_coordinate=winner,
            origin_legs=origin_legs,
            destination_leg=TravelLeg(address=request.destination, metric=destination_metric),
            origin_coordinates=list(origin_coordinates),
            destination_coordinate=destination_coordinate,
        )
