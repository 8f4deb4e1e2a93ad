import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from poly_slicer.utils.geometry import (
    as_point, calculate_centroid, calculate_signed_area,
    find_intersection_t, interpolate, length_squared
)


@dataclass
class Edge:
    """
    An edge between two vertices, with the polygons on either side of it.

    ``adjacent_polys[0]`` is the polygon walking the edge from ``indices[0]`` to
    ``indices[1]``; ``adjacent_polys[1]`` walks it the other way. ``None`` on a
    side means the edge is on the mesh border there.
    """
    indices: List[int]
    adjacent_polys: List[Optional[int]] = field(default_factory=lambda: [None, None])

    def is_boundary(self) -> bool:
        return self.adjacent_polys[0] is None or self.adjacent_polys[1] is None


class OrientedEdge(NamedTuple):
    """An edge handle plus which of its ends leads when walking a polygon."""
    edge: int
    orientation: int

    def flipped(self) -> "OrientedEdge":
        return OrientedEdge(self.edge, 1 - self.orientation)


Polygon = List[OrientedEdge]


class PolygonMesh:
    """
    A set of connected polygons along with their connectivity.

    Polygons are lists of oriented edges; each edge holds two vertex indices
    and the polygons on either side of it. Vertices, edges and polygons are
    only ever appended, so an index stays valid for the life of the mesh.
    """

    def __init__(self, view_min: np.ndarray, view_max: np.ndarray):
        """
        Build a single rectangular polygon spanning the given corners.

        Args:
            view_min: Lower-left corner (x, y)
            view_max: Upper-right corner (x, y)
        """
        self.logger = logging.getLogger(__name__)
        self.view_min = np.array(view_min, dtype=float)
        self.view_max = np.array(view_max, dtype=float)
        min_x, min_y = self.view_min
        max_x, max_y = self.view_max

        self.vertices: List[np.ndarray] = [
            as_point(min_x, min_y),
            as_point(max_x, min_y),
            as_point(max_x, max_y),
            as_point(min_x, max_y),
        ]

        # Side 0 of every edge faces the rectangle, side 1 is the outside.
        self.edges: List[Edge] = [Edge([idx, (idx + 1) % 4], [0, None]) for idx in range(4)]
        self.polygons: List[Polygon] = [[OrientedEdge(idx, 0) for idx in range(4)]]

    def __len__(self) -> int:
        return len(self.polygons)

    # ------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------
    def leading_vertex(self, oriented_edge: OrientedEdge) -> int:
        return self.edges[oriented_edge.edge].indices[oriented_edge.orientation]

    def trailing_vertex(self, oriented_edge: OrientedEdge) -> int:
        return self.edges[oriented_edge.edge].indices[1 - oriented_edge.orientation]

    def edge_endpoints(self, edge: int) -> Tuple[np.ndarray, np.ndarray]:
        i0, i1 = self.edges[edge].indices
        return self.vertices[i0], self.vertices[i1]

    def edge_vector(self, oriented_edge: OrientedEdge) -> np.ndarray:
        """Vector from the leading to the trailing vertex."""
        return (self.vertices[self.trailing_vertex(oriented_edge)]
                - self.vertices[self.leading_vertex(oriented_edge)])

    def edge_length_squared(self, edge: int) -> float:
        v0, v1 = self.edge_endpoints(edge)
        return length_squared(v1 - v0)

    def edge_midpoint(self, edge: int) -> np.ndarray:
        v0, v1 = self.edge_endpoints(edge)
        return interpolate(v0, v1, 0.5)

    def polygon_vertex_indices(self, polygon: int) -> List[int]:
        return [self.leading_vertex(oriented_edge) for oriented_edge in self.polygons[polygon]]

    def polygon_vertices(self, polygon: int) -> np.ndarray:
        """
        Coordinates of a polygon's boundary walk.

        Returns:
            Array [N, 2], one row per oriented edge's leading vertex
        """
        return np.array([self.vertices[idx] for idx in self.polygon_vertex_indices(polygon)])

    def polygon_loops(self) -> List[np.ndarray]:
        """Closed vertex loops for every polygon, in polygon order."""
        return [self.polygon_vertices(idx) for idx in range(len(self.polygons))]

    def polygon_area(self, polygon: int) -> float:
        return calculate_signed_area(self.polygon_vertices(polygon))

    def polygon_centroid(self, polygon: int) -> np.ndarray:
        return calculate_centroid(self.polygon_vertices(polygon))

    def total_area(self) -> float:
        return sum(self.polygon_area(idx) for idx in range(len(self.polygons)))

    def boundary_edges(self) -> List[int]:
        return [idx for idx, edge in enumerate(self.edges) if edge.is_boundary()]

    # ------------------------------------------------------------
    # Consistency checks
    # ------------------------------------------------------------
    def validate(self) -> List[str]:
        """
        Check closure and adjacency across the whole mesh.

        Returns:
            List of issue strings (empty = consistent)
        """
        issues = []
        uses = {}

        for poly_idx, polygon in enumerate(self.polygons):
            if len(polygon) < 3:
                issues.append(f"Polygon {poly_idx} has only {len(polygon)} edges")
            for pos, oriented_edge in enumerate(polygon):
                following = polygon[(pos + 1) % len(polygon)]
                if self.trailing_vertex(oriented_edge) != self.leading_vertex(following):
                    issues.append(f"Polygon {poly_idx} is not closed between edges {pos} and "
                                  f"{(pos + 1) % len(polygon)}")
                owner = self.edges[oriented_edge.edge].adjacent_polys[oriented_edge.orientation]
                if owner != poly_idx:
                    issues.append(f"Edge {oriented_edge.edge} side {oriented_edge.orientation} "
                                  f"points at {owner}, expected polygon {poly_idx}")
                uses.setdefault(oriented_edge, []).append(poly_idx)

        for edge_idx, edge in enumerate(self.edges):
            if edge.adjacent_polys[0] is not None and edge.adjacent_polys[0] == edge.adjacent_polys[1]:
                issues.append(f"Edge {edge_idx} has polygon {edge.adjacent_polys[0]} on both sides")
            for side, poly_idx in enumerate(edge.adjacent_polys):
                users = uses.get(OrientedEdge(edge_idx, side), [])
                if poly_idx is None:
                    if users:
                        issues.append(f"Edge {edge_idx} side {side} is a border but is used by {users}")
                elif users != [poly_idx]:
                    issues.append(f"Edge {edge_idx} side {side} should be used only by polygon "
                                  f"{poly_idx}, found {users}")

        return issues

    # ------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------
    def _check_split_arguments(self, polygon: int, first_edge_idx: int, second_edge_idx: int,
                               first_edge_t: float, second_edge_t: float):
        if not 0 <= polygon < len(self.polygons):
            raise IndexError(f"Polygon {polygon} is not part of this mesh.")
        num_edges = len(self.polygons[polygon])
        for edge_idx in (first_edge_idx, second_edge_idx):
            if not 0 <= edge_idx < num_edges:
                raise IndexError(f"Edge position {edge_idx} out of range for polygon {polygon} "
                                 f"with {num_edges} edges.")
        if first_edge_idx == second_edge_idx:
            raise ValueError(f"Cannot split polygon {polygon} along edge {first_edge_idx} twice.")
        for t in (first_edge_t, second_edge_t):
            if not 0.0 < t < 1.0:
                raise ValueError(f"Split position {t} must lie strictly between 0 and 1.")

    def _displacement_limit(self, oriented_edge: OrientedEdge,
                            start: np.ndarray, end: np.ndarray) -> Optional[float]:
        """
        How far a split point may slide from ``start`` towards ``end``.

        Looks at the two edges next to ``oriented_edge`` in the polygon on its far
        side and keeps the cut short of where it would cross either of them.

        Returns:
            Fraction of start-end in [0, 1/4], or None for a border edge
        """
        other_poly_idx = self.edges[oriented_edge.edge].adjacent_polys[1 - oriented_edge.orientation]
        if other_poly_idx is None:
            return None

        other_poly = self.polygons[other_poly_idx]
        other_pos = next(pos for pos, other in enumerate(other_poly)
                         if other.edge == oriented_edge.edge)
        neighbours = [
            other_poly[(other_pos + 1) % len(other_poly)],
            other_poly[(other_pos - 1) % len(other_poly)],
        ]

        min_t = 0.25
        for neighbour in neighbours:
            v2, v3 = self.edge_endpoints(neighbour.edge)
            t = find_intersection_t(start, end, v2, v3) / 2
            # Negative or undefined crossings never constrain the cut.
            if np.isnan(t) or t < 0:
                t = 1.0
            min_t = min(min_t, t)
        return min_t

    def split_polygon(self, polygon: int, first_edge_idx: int, second_edge_idx: int,
                      first_edge_t: float = 0.5, second_edge_t: float = 0.5,
                      displace_vertices: bool = False) -> int:
        """
        Split a polygon in two along a cut between points on two of its edges.

        A point is placed on each chosen edge (interpolated by t from the edge's
        leading to trailing vertex), each chosen edge is broken in two at its
        point, and a new edge joins the two points. The split polygon keeps
        one side of the cut and a new polygon is created for the other.
        Neighbouring polygons across the broken edges pick up the extra edge.

        Args:
            polygon: Handle of the polygon to split
            first_edge_idx: Position of the first edge in the polygon
            second_edge_idx: Position of the second edge in the polygon
            first_edge_t: Where along the first edge to cut, in (0, 1)
            second_edge_t: Where along the second edge to cut, in (0, 1)
            displace_vertices: Slide the new points towards each other so the cut
                stays clear of neighbouring polygons' nearby edges

        Returns:
            Handle of the new polygon

        Raises:
            IndexError: If the polygon or an edge position is out of range
            ValueError: If the edge positions coincide or a t is outside (0, 1)
        """
        self._check_split_arguments(polygon, first_edge_idx, second_edge_idx,
                                    first_edge_t, second_edge_t)

        if first_edge_idx < second_edge_idx:
            edge_positions = [first_edge_idx, second_edge_idx]
            edge_t_values = [first_edge_t, second_edge_t]
        else:
            edge_positions = [second_edge_idx, first_edge_idx]
            edge_t_values = [second_edge_t, first_edge_t]

        poly = self.polygons[polygon]
        new_poly_idx = len(self.polygons)
        old_oriented_edges = [poly[pos] for pos in edge_positions]

        midpoints = [
            interpolate(self.vertices[self.leading_vertex(oriented_edge)],
                        self.vertices[self.trailing_vertex(oriented_edge)],
                        edge_t_values[idx])
            for idx, oriented_edge in enumerate(old_oriented_edges)
        ]
        midpoint_indices = [len(self.vertices), len(self.vertices) + 1]

        new_points = [midpoint.copy() for midpoint in midpoints]
        if displace_vertices:
            for idx, oriented_edge in enumerate(old_oriented_edges):
                limit = self._displacement_limit(oriented_edge, midpoints[idx], midpoints[1 - idx])
                if limit is not None:
                    new_points[idx] = interpolate(midpoints[idx], midpoints[1 - idx], limit)
        self.vertices.extend(new_points)

        # Each chosen edge becomes two: the existing edge keeps the half from its
        # leading vertex to the new point, a new edge takes the rest.
        new_edge_indices = [len(self.edges), len(self.edges) + 1]
        new_oriented_edges = []
        for idx, oriented_edge in enumerate(old_oriented_edges):
            old_edge = self.edges[oriented_edge.edge]
            new_edge = Edge(list(old_edge.indices), list(old_edge.adjacent_polys))
            old_edge.indices[1 - oriented_edge.orientation] = midpoint_indices[idx]
            new_edge.indices[oriented_edge.orientation] = midpoint_indices[idx]
            self.edges.append(new_edge)
            new_oriented_edges.append(OrientedEdge(new_edge_indices[idx], oriented_edge.orientation))

        # The polygon across a broken edge walks it the other way, so the new
        # half comes just before the old one there.
        for idx, oriented_edge in enumerate(old_oriented_edges):
            other_poly_idx = self.edges[oriented_edge.edge].adjacent_polys[1 - oriented_edge.orientation]
            if other_poly_idx is not None:
                other_poly = self.polygons[other_poly_idx]
                other_pos = next(pos for pos, other in enumerate(other_poly)
                                 if other.edge == oriented_edge.edge)
                other_poly.insert(other_pos, new_oriented_edges[idx].flipped())

        middle_edge_idx = len(self.edges)
        self.edges.append(Edge(list(midpoint_indices), [polygon, new_poly_idx]))

        first_pos, second_pos = edge_positions
        new_poly: Polygon = (
            [new_oriented_edges[0]]
            + poly[first_pos + 1:second_pos + 1]
            + [OrientedEdge(middle_edge_idx, 1)]
        )
        poly[first_pos + 1:second_pos + 1] = [OrientedEdge(middle_edge_idx, 0), new_oriented_edges[1]]

        for oriented_edge in new_poly:
            self.edges[oriented_edge.edge].adjacent_polys[oriented_edge.orientation] = new_poly_idx
        self.polygons.append(new_poly)

        self.logger.debug(f"Split polygon {polygon} at edges {edge_positions} into {polygon} "
                          f"({len(poly)} edges) and {new_poly_idx} ({len(new_poly)} edges)")
        return new_poly_idx


def new_mesh(width: float, height: float) -> PolygonMesh:
    """Create a one-polygon mesh covering [0, width] x [0, height]."""
    return PolygonMesh(as_point(0.0, 0.0), as_point(width, height))
