"""
Shared test fixtures for poly_slicer tests.
"""
import copy

import numpy as np
import pytest

from poly_slicer.config import load_config
from poly_slicer.mesh import new_mesh


class ScriptedRandom:
    """Random source that replays a fixed list of draws."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


@pytest.fixture
def square_mesh():
    """A 10x10 single-polygon mesh."""
    return new_mesh(10, 10)


@pytest.fixture
def split_square_mesh():
    """The 10x10 square cut down the middle: polygon 0 is x<5, polygon 1 is x>5."""
    mesh = new_mesh(10, 10)
    mesh.split_polygon(0, 0, 2)
    return mesh


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def unfuzzed_config():
    """Default config with fuzzing switched off, so selection is deterministic."""
    config = copy.deepcopy(load_config())
    config['slicer']['polygon_area_fuzz_factor'] = 1.0
    config['slicer']['edge_length_fuzz_factor'] = 1.0
    return config


def mesh_snapshot(mesh):
    """Everything split_polygon could touch, copied."""
    return (
        [v.copy() for v in mesh.vertices],
        [(list(e.indices), list(e.adjacent_polys)) for e in mesh.edges],
        [list(p) for p in mesh.polygons],
    )


@pytest.fixture
def snapshot():
    return mesh_snapshot
