"""Tests for MeshSlicer selection and slicing."""
import copy
import logging
import math

import numpy as np
import pytest

from poly_slicer.config import load_config
from poly_slicer.slicer import MeshSlicer


class TestFuzz:

    def test_factor_one_is_exactly_one(self, rng):
        slicer = MeshSlicer(10, 10, rng=rng)
        assert all(slicer.fuzz(1.0) == 1.0 for _ in range(100))

    def test_samples_are_log_symmetric(self, rng):
        slicer = MeshSlicer(10, 10, rng=rng)
        samples = np.array([slicer.fuzz(2.0) for _ in range(20000)])
        assert samples.min() >= 0.5
        assert samples.max() <= 2.0
        assert np.mean(np.log(samples)) == pytest.approx(0.0, abs=0.02)

    def test_extremes_of_the_draw(self, scripted_random):
        slicer = MeshSlicer(10, 10, rng=scripted_random([0.0, 0.5]))
        assert slicer.fuzz(3.0) == pytest.approx(1 / 3)
        assert slicer.fuzz(3.0) == pytest.approx(1.0)


class TestSelection:

    def test_select_polygon_prefers_larger_area(self, unfuzzed_config, rng):
        slicer = MeshSlicer(10, 10, config=unfuzzed_config, rng=rng)
        slicer.mesh.split_polygon(0, 0, 2, 0.75, 0.25)
        assert slicer.mesh.polygon_area(0) == pytest.approx(75.0)
        assert slicer.select_polygon() == 0

    def test_select_edges_picks_opposite_long_edges(self, unfuzzed_config, rng):
        slicer = MeshSlicer(20, 10, config=unfuzzed_config, rng=rng)
        first, second = slicer.select_edges(0)
        assert {first, second} == {0, 2}

    def test_select_edges_falls_back_when_nothing_is_well_separated(self, unfuzzed_config, rng, caplog):
        slicer = MeshSlicer(10, 10, config=unfuzzed_config, rng=rng)
        # Right triangle (5,0), (10,0), (10,5): every pair of its edges meets
        # the midpoint line at 45 degrees.
        corner = slicer.mesh.split_polygon(0, 0, 1)
        with caplog.at_level(logging.DEBUG, logger="poly_slicer.slicer"):
            first, second = slicer.select_edges(corner)
        assert first == 2
        assert second in (0, 1)
        assert "falling back" in caplog.text

    def test_select_edges_needs_two_edges(self, rng):
        slicer = MeshSlicer(10, 10, rng=rng)
        slicer.mesh.polygons[0] = slicer.mesh.polygons[0][:1]
        with pytest.raises(ValueError):
            slicer.select_edges(0)

    def test_midpoint_jitter_stays_in_band(self, scripted_random):
        slicer = MeshSlicer(10, 10, rng=scripted_random([0.0, 0.999999]))
        assert slicer._random_midpoint_t() == pytest.approx(0.4)
        assert slicer._random_midpoint_t() == pytest.approx(0.6, abs=1e-6)


class TestSlice:

    def test_single_slice(self, rng):
        slicer = MeshSlicer(10, 10, rng=rng)
        new_poly = slicer.slice()
        assert new_poly == 1
        assert len(slicer.mesh.polygons) == 2
        assert len(slicer.mesh.vertices) == 6
        assert len(slicer.mesh.edges) == 7
        assert slicer.mesh.total_area() == pytest.approx(100.0)
        assert slicer.mesh.validate() == []

    def test_many_slices_stay_consistent(self, rng):
        slicer = MeshSlicer(600, 400, rng=rng)
        new_polys = slicer.slice_many(60)

        assert new_polys == list(range(1, 61))
        assert len(slicer.mesh.polygons) == 61
        assert slicer.mesh.validate() == []
        assert slicer.mesh.total_area() == pytest.approx(240000.0, rel=1e-9)
        assert all(slicer.mesh.polygon_area(idx) > 0 for idx in range(len(slicer.mesh.polygons)))

    def test_many_displaced_slices_stay_consistent(self, rng):
        slicer = MeshSlicer(600, 400, rng=rng)
        slicer.slice_many(60, displace_vertices=True)

        assert len(slicer.mesh.polygons) == 61
        assert slicer.mesh.validate() == []
        assert slicer.mesh.total_area() == pytest.approx(240000.0, rel=1e-9)

    def test_displacement_default_comes_from_config(self, rng):
        config = copy.deepcopy(load_config())
        config['slicer']['displace_vertices'] = True
        slicer = MeshSlicer(10, 10, config=config, rng=rng)
        assert slicer.displace_vertices is True

    def test_same_seed_same_mesh(self):
        first = MeshSlicer(100, 100, rng=np.random.default_rng(42))
        second = MeshSlicer(100, 100, rng=np.random.default_rng(42))
        first.slice_many(20)
        second.slice_many(20)
        assert np.allclose(np.array(first.mesh.vertices), np.array(second.mesh.vertices))

    def test_seed_from_config(self):
        config = copy.deepcopy(load_config())
        config['slicer']['seed'] = 5
        first = MeshSlicer(100, 100, config=config)
        second = MeshSlicer(100, 100, config=config)
        first.slice_many(10)
        second.slice_many(10)
        assert np.allclose(np.array(first.mesh.vertices), np.array(second.mesh.vertices))

    def test_reset(self, rng):
        slicer = MeshSlicer(10, 10, rng=rng)
        slicer.slice_many(5)
        mesh = slicer.reset(30, 40)
        assert mesh is slicer.mesh
        assert len(mesh.polygons) == 1
        assert mesh.polygon_area(0) == pytest.approx(1200.0)


class TestConfiguration:

    def test_size_defaults_from_config(self, rng):
        slicer = MeshSlicer(rng=rng)
        assert slicer.width == 600
        assert slicer.height == 600
        assert slicer.polygon_area_fuzz_factor == pytest.approx(1.5)
        assert slicer.edge_length_fuzz_factor == pytest.approx(2.0)
        assert slicer.midpoint_random_range == pytest.approx(0.2)

    @pytest.mark.parametrize("key,value", [
        ("polygon_area_fuzz_factor", 0.0),
        ("edge_length_fuzz_factor", -1.0),
        ("midpoint_random_range", 1.0),
    ])
    def test_invalid_tunables(self, key, value):
        config = copy.deepcopy(load_config())
        config['slicer'][key] = value
        with pytest.raises(ValueError):
            MeshSlicer(10, 10, config=config)

    def test_zero_jitter_cuts_at_midpoints(self, rng):
        config = copy.deepcopy(load_config())
        config['slicer']['midpoint_random_range'] = 0.0
        slicer = MeshSlicer(10, 10, config=config, rng=rng)
        slicer.slice()
        for vertex in slicer.mesh.vertices[4:]:
            on_vertical_mid = math.isclose(vertex[0], 5.0)
            on_horizontal_mid = math.isclose(vertex[1], 5.0)
            assert on_vertical_mid or on_horizontal_mid
