"""
Trail network

Builds an undirected trail graph from stored tracks inside a bounding box.
Route synthesis walks this graph to find candidate routes.

Tracks are clipped to the box, and every kept point is snapped to the
nearest existing node within `snap_m` metres (looked up through a grid of
`snap_m`-sized buckets) so that crossing or overlapping tracks share
junctions. Chains of degree-2 nodes are then collapsed into ways that run
between junctions and dead ends.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from volt.features.gpx import TrackPoint
from volt.shared.geo import METERS_PER_DEGREE, haversine


@dataclass(frozen=True)
class Bounds:
    """Lat/lon rectangle, edges inclusive."""
    north: float
    south: float
    east: float
    west: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    @property
    def mid_latitude(self) -> float:
        return (self.north + self.south) / 2


@dataclass(frozen=True)
class Way:
    """
    Chain of nodes between two key nodes (junctions or dead ends).

    `gain_m`/`loss_m` are for walking nodes[0] -> nodes[-1]; the reverse
    direction swaps them. A way whose ends coincide is a closed loop.
    """
    id: int
    nodes: Tuple[int, ...]
    length_m: float
    gain_m: float
    loss_m: float

    @property
    def start(self) -> int:
        return self.nodes[0]

    @property
    def end(self) -> int:
        return self.nodes[-1]

    def leave(self, node: int) -> Tuple[bool, int, float, float]:
        """
        Traverse the way starting at `node`.

        Returns:
            (forward, arrival node, gain, loss)
        """
        if node == self.start:
            return True, self.end, self.gain_m, self.loss_m
        return False, self.start, self.loss_m, self.gain_m


def clip_to_bounds(points: Sequence[TrackPoint], bounds: Bounds) -> List[List[TrackPoint]]:
    """
    Split a track into the runs of consecutive points inside `bounds`.

    Points outside the box are dropped; no interpolated edge points are
    added, so every returned point is an original inside point.
    """
    pieces: List[List[TrackPoint]] = []
    current: List[TrackPoint] = []
    for point in points:
        if bounds.contains(point.lat, point.lon):
            current.append(point)
        elif current:
            pieces.append(current)
            current = []
    if current:
        pieces.append(current)
    return [piece for piece in pieces if len(piece) >= 2]


class TrailNetwork:
    """
    Undirected trail graph.

    Usage:
        network = TrailNetwork.build(tracks, bounds, snap_m=25)
        for way_id in network.ways_at(node):
            ...
    """

    def __init__(self, bounds: Bounds, snap_m: float):
        self.bounds = bounds
        self.snap_m = snap_m
        self._lat_cells_per_degree = METERS_PER_DEGREE / snap_m
        self._lon_cells_per_degree = (
            METERS_PER_DEGREE * max(math.cos(math.radians(bounds.mid_latitude)), 1e-6) / snap_m
        )

        self.nodes: List[TrackPoint] = []
        self._buckets: Dict[Tuple[int, int], List[int]] = defaultdict(list)
        self._adjacency: Dict[int, set] = defaultdict(set)

        self.ways: List[Way] = []
        self._ways_at: Dict[int, List[int]] = defaultdict(list)

    @classmethod
    def build(
        cls,
        tracks: Iterable[Sequence[TrackPoint]],
        bounds: Bounds,
        snap_m: float,
    ) -> "TrailNetwork":
        """Build and compress the network from tracks given in a stable order."""
        network = cls(bounds, snap_m)
        for points in tracks:
            network.add_track(points)
        network.compress()
        return network

    # =========================================================================
    # Construction
    # =========================================================================

    def add_track(self, points: Sequence[TrackPoint]) -> None:
        for piece in clip_to_bounds(points, self.bounds):
            previous: Optional[int] = None
            for point in piece:
                node = self._snap(point)
                if previous is not None and node != previous:
                    self._adjacency[previous].add(node)
                    self._adjacency[node].add(previous)
                previous = node

    def _bucket(self, lat: float, lon: float) -> Tuple[int, int]:
        return (
            math.floor(lat * self._lat_cells_per_degree),
            math.floor(lon * self._lon_cells_per_degree),
        )

    def _snap(self, point: TrackPoint) -> int:
        """Nearest node within snap distance, or a new node at this point."""
        row, col = self._bucket(point.lat, point.lon)
        best: Optional[int] = None
        best_m = self.snap_m
        for d_row in (-1, 0, 1):
            for d_col in (-1, 0, 1):
                for node in self._buckets.get((row + d_row, col + d_col), ()):
                    other = self.nodes[node]
                    gap_m = haversine(point.lat, point.lon, other.lat, other.lon) * 1000
                    if gap_m < best_m or (gap_m == best_m and best is not None and node < best):
                        best, best_m = node, gap_m
        if best is not None:
            return best

        node = len(self.nodes)
        self.nodes.append(TrackPoint(lat=point.lat, lon=point.lon, ele=point.ele))
        self._buckets[(row, col)].append(node)
        return node

    def compress(self) -> None:
        """Collapse degree-2 chains into ways."""
        self.ways = []
        self._ways_at = defaultdict(list)
        key_nodes = {node for node, neighbours in self._adjacency.items() if len(neighbours) != 2}
        visited: set = set()

        for node in sorted(key_nodes):
            for neighbour in sorted(self._adjacency[node]):
                if _edge(node, neighbour) not in visited:
                    self._add_way(self._walk_chain(node, neighbour, key_nodes, visited))

        # Isolated rings have no key node; open them at their lowest node
        for node in sorted(self._adjacency):
            for neighbour in sorted(self._adjacency[node]):
                if _edge(node, neighbour) not in visited:
                    key_nodes.add(node)
                    self._add_way(self._walk_chain(node, neighbour, key_nodes, visited))

    def _walk_chain(self, start: int, first: int, key_nodes: set, visited: set) -> List[int]:
        chain = [start, first]
        visited.add(_edge(start, first))
        previous, current = start, first
        while current not in key_nodes:
            a, b = sorted(self._adjacency[current])
            following = b if a == previous else a
            if _edge(current, following) in visited:
                break
            visited.add(_edge(current, following))
            chain.append(following)
            previous, current = current, following
        return chain

    def _add_way(self, chain: List[int]) -> None:
        length_m = gain_m = loss_m = 0.0
        for a, b in zip(chain, chain[1:]):
            p, q = self.nodes[a], self.nodes[b]
            length_m += haversine(p.lat, p.lon, q.lat, q.lon) * 1000
            diff = q.ele - p.ele
            if diff > 0:
                gain_m += diff
            else:
                loss_m -= diff

        way = Way(
            id=len(self.ways),
            nodes=tuple(chain),
            length_m=length_m,
            gain_m=gain_m,
            loss_m=loss_m,
        )
        self.ways.append(way)
        self._ways_at[way.start].append(way.id)
        if way.end != way.start:
            self._ways_at[way.end].append(way.id)

    # =========================================================================
    # Queries
    # =========================================================================

    def ways_at(self, node: int) -> List[int]:
        """Ids of ways that start or end at `node`, ascending."""
        return self._ways_at.get(node, [])

    def start_nodes(self, limit: int) -> List[int]:
        """
        Walk starting points: junctions first (most ways), then dead ends.

        Ordered by (-way count, node id) and truncated to `limit`.
        """
        nodes = sorted(self._ways_at, key=lambda node: (-len(self._ways_at[node]), node))
        return nodes[:limit]

    def points_for(self, steps: Sequence[Tuple[int, bool]]) -> List[TrackPoint]:
        """Point sequence of a walk given as (way id, forward) steps."""
        points: List[TrackPoint] = []
        for way_id, forward in steps:
            nodes = self.ways[way_id].nodes if forward else self.ways[way_id].nodes[::-1]
            if points:
                nodes = nodes[1:]
            points.extend(self.nodes[node] for node in nodes)
        return points

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def way_count(self) -> int:
        return len(self.ways)


def _edge(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)
