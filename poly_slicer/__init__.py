"""
poly_slicer: random subdivision of a planar polygon mesh.

The package keeps a mesh of polygons that share edges and repeatedly splits
one polygon into two along a cut between two of its edges, keeping every
shared-edge adjacency consistent.

Main Components:
- PolygonMesh: Append-only vertex/edge/polygon store and the split operation
- TopN: Bounded best-of-N ranking with pluggable selection rules
- MeshSlicer: Chooses what to split (polygon, edges, cut points) and splits it
- Utils: Geometry primitives and logging setup
"""

__version__ = "1.0.0"
__author__ = "poly-slicer Team"

from .mesh import Edge, OrientedEdge, PolygonMesh, new_mesh
from .rank_selector import (
    TopN, top_element, random_element, weighted_random_element,
    top_elements, random_elements, weighted_random_elements
)
from .slicer import MeshSlicer
from .config import load_config
from . import utils

__all__ = [
    "Edge", "OrientedEdge", "PolygonMesh", "new_mesh",
    "TopN", "top_element", "random_element", "weighted_random_element",
    "top_elements", "random_elements", "weighted_random_elements",
    "MeshSlicer", "load_config", "utils",
]

# Package information
__package_info__ = {
    "name": "poly-slicer",
    "description": "Random subdivision of a planar polygon mesh with consistent edge adjacency",
    "version": __version__,
    "author": __author__,
    "domain": "Computational Geometry / Mesh Generation",
}


def get_package_info():
    """Get package information dictionary."""
    return __package_info__.copy()
