import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from poly_slicer.config import load_config
from poly_slicer.mesh import OrientedEdge, PolygonMesh, new_mesh
from poly_slicer.rank_selector import TopN
from poly_slicer.utils.geometry import dot, normalize
from poly_slicer.utils.logging_utils import setup_logging_from_config


class MeshSlicer:
    """
    Repeatedly splits the polygons of a PolygonMesh.

    Each slice picks a polygon (favouring large ones), two of its edges
    (favouring long ones that are far from parallel to the line joining their
    midpoints), and a point near the middle of each edge, then cuts between
    those points. Areas and lengths are fuzzed by a random multiplicative
    factor before ranking so the result varies from run to run.
    """

    def __init__(self, width: Optional[float] = None, height: Optional[float] = None,
                 config: Optional[Dict[str, Any]] = None, rng: Any = None):
        """
        Initialize the slicer with a fresh rectangular mesh.

        Args:
            width: Mesh width; defaults to ``mesh.width`` from the config
            height: Mesh height; defaults to ``mesh.height`` from the config
            config: Configuration dictionary; loaded from the packaged defaults if None
            rng: Random source exposing ``random()``; defaults to a numpy Generator
                seeded from ``slicer.seed``

        Raises:
            ValueError: If a fuzz factor is not positive or the midpoint range is
                outside [0, 1)
        """
        self.config = config if config is not None else load_config()
        self.logger = logging.getLogger(__name__)

        slicer_config = self.config.get('slicer', {})
        mesh_config = self.config.get('mesh', {})

        # Areas are multiplied by exp(u * log(fuzz)) for u uniform in [-1, 1],
        # i.e. a factor between 1/fuzz and fuzz.
        self.polygon_area_fuzz_factor = float(slicer_config.get('polygon_area_fuzz_factor', 1.5))
        self.edge_length_fuzz_factor = float(slicer_config.get('edge_length_fuzz_factor', 2.0))
        # Width of the band, centred on each edge's midpoint, that split points come from.
        self.midpoint_random_range = float(slicer_config.get('midpoint_random_range', 0.2))
        self.candidate_count = int(slicer_config.get('candidate_count', 3))
        self.displace_vertices = bool(slicer_config.get('displace_vertices', False))

        if self.polygon_area_fuzz_factor <= 0 or self.edge_length_fuzz_factor <= 0:
            raise ValueError("Fuzz factors must be positive.")
        if not 0.0 <= self.midpoint_random_range < 1.0:
            raise ValueError(f"midpoint_random_range must be in [0, 1), got {self.midpoint_random_range}.")

        self.rng = rng if rng is not None else np.random.default_rng(slicer_config.get('seed'))

        self.width = float(width if width is not None else mesh_config.get('width', 600))
        self.height = float(height if height is not None else mesh_config.get('height', 600))
        self.mesh: PolygonMesh = new_mesh(self.width, self.height)

        self.logger.info(f"Slicer initialized with a {self.width} x {self.height} mesh")

    @classmethod
    def from_config(cls, config_path: Optional[str] = None, rng: Any = None) -> "MeshSlicer":
        """
        Build a slicer from a YAML config, applying its ``logging`` section first.

        Args:
            config_path: User config merged over the packaged defaults; defaults only if None
            rng: Random source; defaults to a numpy Generator seeded from ``slicer.seed``

        Returns:
            Configured slicer
        """
        config = load_config(config_path)
        setup_logging_from_config(config)
        return cls(config=config, rng=rng)

    def reset(self, width: Optional[float] = None, height: Optional[float] = None) -> PolygonMesh:
        """Throw the current mesh away and start again from a single rectangle."""
        if width is not None:
            self.width = float(width)
        if height is not None:
            self.height = float(height)
        self.mesh = new_mesh(self.width, self.height)
        self.logger.info(f"Mesh reset to {self.width} x {self.height}")
        return self.mesh

    def fuzz(self, fuzz_factor: float) -> float:
        """Random factor in [1/fuzz_factor, fuzz_factor], log-uniformly distributed."""
        fuzz_log = math.log(fuzz_factor)
        return math.exp(fuzz_log * (2 * self.rng.random() - 1))

    def _new_selector(self, size: Optional[int] = None) -> TopN:
        return TopN(size if size is not None else self.candidate_count, rng=self.rng)

    # ------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------
    def select_polygon(self) -> int:
        """Pick the polygon to split, favouring large (fuzzed) area."""
        selector = self._new_selector()
        for poly_idx in range(len(self.mesh.polygons)):
            score = self.fuzz(self.polygon_area_fuzz_factor) * self.mesh.polygon_area(poly_idx)
            selector.insert(poly_idx, score)
        return selector.select()

    def _edge_geometry(self, edge: int) -> Tuple[np.ndarray, np.ndarray, float]:
        """Midpoint, unit direction and squared length of an edge."""
        delta = self.mesh.edge_vector(OrientedEdge(edge, 0))
        return self.mesh.edge_midpoint(edge), normalize(delta), dot(delta, delta)

    def select_edges(self, polygon: int) -> Tuple[int, int]:
        """
        Pick the two edges of a polygon to cut between.

        The first edge is chosen by fuzzed squared length. The second must be
        well separated from it: the line joining the two midpoints has to meet
        both edges at more than 60 degrees off parallel (|cos| < 0.5). If no
        edge qualifies, the one with the smallest worse-of-two cosine is used.

        Args:
            polygon: Polygon handle

        Returns:
            Positions of the two edges within the polygon

        Raises:
            ValueError: If the polygon has fewer than two edges
        """
        oriented_edges = self.mesh.polygons[polygon]
        if len(oriented_edges) < 2:
            raise ValueError(f"Polygon {polygon} has {len(oriented_edges)} edges; need at least 2.")

        selector = self._new_selector()
        for edge_pos, oriented_edge in enumerate(oriented_edges):
            score = self.fuzz(self.edge_length_fuzz_factor) * self.mesh.edge_length_squared(oriented_edge.edge)
            selector.insert(edge_pos, score)
        first_pos = selector.select()

        first_midpoint, first_direction, _ = self._edge_geometry(oriented_edges[first_pos].edge)

        second_selector = self._new_selector()
        fallback_selector = self._new_selector(1)
        for edge_pos, oriented_edge in enumerate(oriented_edges):
            if edge_pos == first_pos:
                continue
            midpoint, direction, length_sq = self._edge_geometry(oriented_edge.edge)
            mid_to_mid = normalize(midpoint - first_midpoint)
            first_cos = abs(dot(first_direction, mid_to_mid))
            second_cos = abs(dot(direction, mid_to_mid))
            if first_cos < 0.5 and second_cos < 0.5:
                second_selector.insert(edge_pos, self.fuzz(self.edge_length_fuzz_factor) * length_sq)
            fallback_selector.insert(edge_pos, -max(first_cos, second_cos))

        if len(second_selector) == 0:
            second_pos = fallback_selector.select()
            self.logger.debug(f"No well separated edge for polygon {polygon}; "
                              f"falling back to edge {second_pos}")
            return first_pos, second_pos

        return first_pos, second_selector.select()

    def _random_midpoint_t(self) -> float:
        return self.rng.random() * self.midpoint_random_range + (1 - self.midpoint_random_range) / 2

    # ------------------------------------------------------------
    # Slicing
    # ------------------------------------------------------------
    def slice(self, displace_vertices: Optional[bool] = None) -> int:
        """
        Split one polygon of the mesh.

        Args:
            displace_vertices: Slide new points away from neighbouring edges;
                defaults to the configured ``slicer.displace_vertices``

        Returns:
            Handle of the polygon created by the split
        """
        if displace_vertices is None:
            displace_vertices = self.displace_vertices

        poly_idx = self.select_polygon()
        first_pos, second_pos = self.select_edges(poly_idx)
        first_t = self._random_midpoint_t()
        second_t = self._random_midpoint_t()

        self.logger.debug(f"Slicing polygon {poly_idx} between edges {first_pos} (t={first_t:.3f}) "
                          f"and {second_pos} (t={second_t:.3f})")
        return self.mesh.split_polygon(poly_idx, first_pos, second_pos, first_t, second_t,
                                       displace_vertices=displace_vertices)

    def slice_many(self, num_times: int, displace_vertices: Optional[bool] = None) -> List[int]:
        """Slice ``num_times`` times, returning the new polygon handles in order."""
        new_polygons = [self.slice(displace_vertices) for _ in range(num_times)]
        self.logger.info(f"Sliced {num_times} times; mesh now has {len(self.mesh.polygons)} polygons")
        return new_polygons
