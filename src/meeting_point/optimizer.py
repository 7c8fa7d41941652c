"""
Meeting point selection.

Scores each candidate by the summed travel duration from every origin and
keeps the cheapest. A candidate that any origin cannot reach is disqualified
outright, never scored as zero.
"""

import logging

from .errors import NoViableMeetingPoint, ProviderError
from .models import Candidate, Coordinate, TravelMetric
from .travel_metrics import TravelMetricProvider

logger = logging.getLogger(__name__)


def single_column(grid: list[list[TravelMetric]], origin_count: int) -> list[TravelMetric]:
    """
    Extract the only destination column of an origins x 1 metric grid.

    Raises:
        ProviderError: If the grid shape does not match the request
    """
    if len(grid) != origin_count or any(len(row) != 1 for row in grid):
        raise ProviderError("travel metric provider", f"expected a {origin_count}x1 metric grid")
    return [row[0] for row in grid]


class MeetingPointOptimizer:
    def __init__(self, metrics: TravelMetricProvider):
        self.metrics = metrics

    async def score(self, origins: list[Coordinate], candidate: Coordinate) -> Candidate | None:
        """
        Aggregate travel cost of one candidate.

        Args:
            origins: Resolved origin coordinates
            candidate: Coordinate under consideration

        Returns:
            Scored Candidate, or None if any origin cannot reach it
        """
        grid = await self.metrics.batch_metrics(origins, [candidate])
        column = single_column(grid, len(origins))

        unreachable = [index for index, metric in enumerate(column) if not metric.reachable]
        if unreachable:
            logger.warning(
                "Candidate (%s) disqualified: unreachable from origin(s) %s", candidate, unreachable
            )
            return None

        return Candidate(
            coordinate=candidate,
            aggregate_cost=sum(metric.duration_seconds for metric in column),
        )

    async def optimize(self, origins: list[Coordinate], candidates: list[Coordinate]) -> Coordinate:
        """
        Pick the candidate with the lowest aggregate travel duration.

        Candidates are evaluated in generation order; on equal cost the first
        one encountered wins.

        Raises:
            NoViableMeetingPoint: If every candidate was disqualified
        """
        best: Candidate | None = None
        for candidate in candidates:
            scored = await self.score(origins, candidate)
            if scored is None:
                continue
            logger.debug("Candidate (%s) aggregate cost %ds", candidate, scored.aggregate_cost)
            if best is None or scored.aggregate_cost < best.aggregate_cost:
                best = scored

        if best is None:
            raise NoViableMeetingPoint(len(candidates))

        logger.info("Selected meeting point (%s) with aggregate cost %ds", best.coordinate, best.aggregate_cost)
        return best.coordinate
