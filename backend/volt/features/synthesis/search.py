"""
Route search

Enumerates walks through a TrailNetwork whose effort is close to a
reference track, then ranks them by similarity.

Walks are bounded depth-first searches from junctions and dead ends that
never reuse a way. A walk is recorded when its ITRA effort falls inside
[(1 - tol) * E_ref, (1 + tol) * E_ref]; any walk whose out-and-back
(there and back on the same ways) lands in that band is recorded too.
Band checks use raw elevations; ranking uses both tracks smoothed with the
job's rolling window.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from volt.config import settings
from volt.features.gpx import TrackPoint
from volt.features.races.analytics import TrackAnalytics, TrackMetrics
from volt.shared.effort import itra_effort_distance, similarity_score
from .network import Bounds, TrailNetwork

logger = logging.getLogger(__name__)

Step = Tuple[int, bool]  # (way id, forward)
WalkKey = Tuple[Step, ...]


@dataclass(frozen=True)
class SearchParams:
    """Search knobs, normally taken from settings."""
    effort_tolerance: float = 0.2
    min_similarity: float = 0.5
    max_start_nodes: int = 40
    max_expansions: int = 20_000
    max_candidates: int = 500

    @classmethod
    def from_settings(cls) -> "SearchParams":
        return cls(
            effort_tolerance=settings.synthesis_effort_tolerance,
            min_similarity=settings.synthesis_min_similarity,
            max_start_nodes=settings.synthesis_max_start_nodes,
            max_expansions=settings.synthesis_max_expansions,
            max_candidates=settings.synthesis_max_candidates,
        )


@dataclass
class Candidate:
    """Scored candidate route. `metrics` are raw, from its own points."""
    points: List[TrackPoint]
    metrics: TrackMetrics
    similarity_score: float
    key: WalkKey


@dataclass
class SearchOutcome:
    candidates: List[Candidate] = field(default_factory=list)
    walks_considered: int = 0


def out_and_back(steps: Sequence[Step]) -> WalkKey:
    return tuple(steps) + tuple((way_id, not fwd) for way_id, fwd in reversed(steps))


class RouteSearch:
    """
    Candidate search against one reference track.

    Usage:
        search = RouteSearch(network, reference_points, rolling_window=100)
        outcome = search.run(max_results=20)
    """

    def __init__(
        self,
        network: TrailNetwork,
        reference_points: Sequence[TrackPoint],
        rolling_window: int,
        params: SearchParams | None = None,
    ):
        self.network = network
        self.rolling_window = rolling_window
        self.params = params or SearchParams.from_settings()

        reference = TrackAnalytics(reference_points)
        raw_effort = reference.raw_metrics().itra_effort_distance
        self.low = raw_effort * (1 - self.params.effort_tolerance)
        self.high = raw_effort * (1 + self.params.effort_tolerance)

        self.reference_effort = reference.metrics(rolling_window, smoothed=True).itra_effort_distance
        self.reference_shares = reference.gradient_distribution(rolling_window, smoothed=True).shares()

    def run(self, max_results: int) -> SearchOutcome:
        """
        Enumerate, score, filter and rank candidates.

        Returns:
            At most `max_results` candidates by descending similarity
        """
        walks = self.enumerate_walks()
        candidates = [self.score(key) for key in walks]
        kept = [c for c in candidates if c.similarity_score >= self.params.min_similarity]
        kept.sort(key=lambda c: (-c.similarity_score, c.key))

        logger.info(
            f"Route search: {self.network.way_count} ways, {len(walks)} walks, "
            f"{len(kept)} above {self.params.min_similarity}, returning {min(len(kept), max_results)}"
        )
        return SearchOutcome(candidates=kept[:max_results], walks_considered=len(walks))

    # =========================================================================
    # Enumeration
    # =========================================================================

    def enumerate_walks(self) -> List[WalkKey]:
        """Distinct walks in the effort band, in discovery order."""
        found: Dict[WalkKey, None] = {}
        if self.high <= 0:
            return []

        for start in self.network.start_nodes(self.params.max_start_nodes):
            self._walk_from(start, found)
            if len(found) >= self.params.max_candidates:
                break
        return list(found)

    def _walk_from(self, start: int, found: Dict[WalkKey, None]) -> None:
        # (node, steps, used ways, distance m, gain m, loss m)
        stack = [(start, (), frozenset(), 0.0, 0.0, 0.0)]
        expansions = 0

        while stack and expansions < self.params.max_expansions:
            node, steps, used, distance_m, gain_m, loss_m = stack.pop()
            expansions += 1
            children = []

            for way_id in self.network.ways_at(node):
                if way_id in used:
                    continue
                way = self.network.ways[way_id]
                forward, arrival, gain, loss = way.leave(node)

                next_distance = distance_m + way.length_m
                next_gain = gain_m + gain
                next_loss = loss_m + loss
                effort = itra_effort_distance(next_distance / 1000, next_gain)
                if effort > self.high:
                    continue

                next_steps = steps + ((way_id, forward),)
                if effort >= self.low:
                    self._record(found, next_steps)

                # Returning climbs what the way out descended
                back_effort = itra_effort_distance(2 * next_distance / 1000, next_gain + next_loss)
                if self.low <= back_effort <= self.high:
                    self._record(found, out_and_back(next_steps))

                if len(found) >= self.params.max_candidates:
                    return
                children.append((arrival, next_steps, used | {way_id}, next_distance, next_gain, next_loss))

            # Lowest way id is explored first
            stack.extend(reversed(children))

    @staticmethod
    def _record(found: Dict[WalkKey, None], steps: Sequence[Step]) -> None:
        # Direction matters: the reverse walk climbs what this one descends
        key = tuple(steps)
        if key not in found:
            found[key] = None

    # =========================================================================
    # Scoring
    # =========================================================================

    def score(self, key: WalkKey) -> Candidate:
        points = self.network.points_for(key)
        analytics = TrackAnalytics(points)
        smoothed = analytics.metrics(self.rolling_window, smoothed=True)
        shares = analytics.gradient_distribution(self.rolling_window, smoothed=True).shares()
        return Candidate(
            points=points,
            metrics=analytics.raw_metrics(),
            similarity_score=similarity_score(
                self.reference_effort,
                smoothed.itra_effort_distance,
                self.reference_shares,
                shares,
            ),
            key=key,
        )


def synthesize(
    reference_points: Sequence[TrackPoint],
    corpus: Sequence[Sequence[TrackPoint]],
    bounds: Bounds,
    rolling_window: int,
    max_results: int,
    snap_m: float | None = None,
    params: SearchParams | None = None,
) -> SearchOutcome:
    """
    Build the trail network for `bounds` and search it.

    Pure and CPU-bound; the worker runs it in a thread.

    Args:
        reference_points: Reference track points
        corpus: Tracks forming the trail network, in a stable order
        bounds: Box every candidate point must lie in
        rolling_window: Smoothing window (m) used for ranking
        max_results: Maximum candidates returned
        snap_m: Junction merge distance (m), settings default when None
        params: Search knobs, settings defaults when None

    Returns:
        SearchOutcome with ranked candidates
    """
    network = TrailNetwork.build(corpus, bounds, snap_m or settings.synthesis_snap_m)
    if not network.ways:
        logger.info("Route search: no trails inside the bounding box")
        return SearchOutcome()
    return RouteSearch(network, reference_points, rolling_window, params).run(max_results)
