#!/usr/bin/env python3
"""
Tests for combined film topology building.
"""

import numpy as np
import pytest

from soap_film.core.film_topology import (
    build_film_topology,
    find_best_loop_alignment,
    map_loop_index,
)
from soap_film.core.film_types import FramePose, FrameRuntime, FrameType, LoopAlignment
from soap_film.core.frame_sampling import (
    create_default_frame,
    sample_frame_boundary_local,
    sample_frame_point_world,
)


def two_frames():
    return [
        create_default_frame(
            "ring", FrameType.CIRCLE, pose=FramePose(position=(-1.5, 1.0, 0.0))
        ),
        create_default_frame(
            "box",
            FrameType.RECTANGLE,
            pose=FramePose(position=(1.7, 1.2, 0.8), rotation=(0.2, 0.3, 0.1)),
        ),
    ]


def three_frames():
    return two_frames() + [
        create_default_frame(
            "wedge", FrameType.TRIANGLE, pose=FramePose(position=(0.0, 3.0, -0.5))
        )
    ]


class TestBuildFilmTopology:
    """Sampling, bridging and constraint bookkeeping."""

    def test_two_frames(self):
        topology = build_film_topology(two_frames(), span_subdivisions=12)
        n = topology.sample_count

        assert n == 64
        assert topology.mst_edge_count == 1
        assert topology.vertex_count == 2 * n + n * 11
        assert topology.triangle_count == 2 * n * 12
        assert topology.indices.min() >= 0
        assert topology.indices.max() < topology.vertex_count
        assert len(topology.boundary_constraints) == 2 * n

    def test_three_frames(self):
        topology = build_film_topology(three_frames(), span_subdivisions=8)
        n = topology.sample_count

        assert topology.mst_edge_count == 2
        assert len(topology.boundary_constraints) == 3 * n
        assert topology.indices.max() < topology.vertex_count
        assert topology.triangle_count == 2 * 2 * n * 8

    def test_constraints_match_sampled_loops(self):
        frames = two_frames()
        topology = build_film_topology(frames, span_subdivisions=6)
        n = topology.sample_count
        by_id = {frame.frame_id: frame for frame in frames}

        for i, constraint in enumerate(topology.boundary_constraints):
            assert constraint.frame_id == frames[i // n].frame_id
            assert constraint.curve_param_t == pytest.approx((i % n) / n)
            expected = sample_frame_point_world(by_id[constraint.frame_id], constraint.curve_param_t)
            np.testing.assert_allclose(topology.positions[constraint.vertex_index], expected, atol=1e-9)

    def test_triangles_are_consistently_oriented(self):
        topology = build_film_topology(two_frames(), span_subdivisions=5)
        faces = topology.indices
        directed = {
            (int(face[k]), int(face[(k + 1) % 3])) for face in faces for k in range(3)
        }
        assert len(directed) == 3 * len(faces)

    def test_interior_vertices_lie_between_loops(self):
        frames = [
            create_default_frame(
                name,
                FrameType.CIRCLE,
                control_point_count=None,
                pose=FramePose(position=(0.0, 0.0, z)),
            )
            for name, z in (("low", 0.0), ("high", 2.0))
        ]
        topology = build_film_topology(frames, span_subdivisions=4)
        n = topology.sample_count

        interior = topology.positions[2 * n :]
        assert np.all(interior[:, 2] > 0.0)
        assert np.all(interior[:, 2] < 2.0)
        np.testing.assert_allclose(np.linalg.norm(interior[:, :2], axis=1), 1.0, atol=1e-9)

    def test_sample_count_uses_smallest_frame(self):
        frames = two_frames()
        frames[0].boundary_samples = 40
        assert build_film_topology(frames).sample_count == 40

        frames[0].boundary_samples = 3
        assert build_film_topology(frames).sample_count == 8

    def test_runtime_matrix_overrides_pose(self):
        frames = two_frames()
        shifted = FramePose(position=(5.0, 0.0, 0.0)).matrix()
        runtimes = [FrameRuntime(frames[0], shifted), FrameRuntime(frames[1])]
        topology = build_film_topology(runtimes, span_subdivisions=4)

        n = topology.sample_count
        loop = topology.positions[:n]
        expected = sample_frame_boundary_local(frames[0], n) + np.array([5.0, 0.0, 0.0])
        np.testing.assert_allclose(loop, expected, atol=1e-9)

    def test_topology_is_read_only(self):
        topology = build_film_topology(two_frames(), span_subdivisions=4)
        with pytest.raises(ValueError):
            topology.positions[0, 0] = 1.0
        with pytest.raises(ValueError):
            topology.indices[0, 0] = 0

    @pytest.mark.parametrize("count", [0, 1])
    def test_fewer_than_two_frames_is_empty(self, count):
        topology = build_film_topology(two_frames()[:count])
        assert topology.is_empty
        assert topology.vertex_count == 0
        assert topology.boundary_constraints == ()
        assert topology.mst_edge_count == 0

    @pytest.mark.parametrize("span", [0, -3])
    def test_non_positive_span_is_empty(self, span):
        assert build_film_topology(two_frames(), span_subdivisions=span).is_empty

    def test_span_of_one_is_raised(self):
        topology = build_film_topology(two_frames(), span_subdivisions=1)
        assert topology.triangle_count == 2 * topology.sample_count * 2


class TestLoopAlignment:
    """Matching the orientation and start point of two loops."""

    @staticmethod
    def loop(n=24):
        frame = create_default_frame("c", FrameType.CIRCLE, control_point_count=None)
        return sample_frame_boundary_local(frame, n) + np.array([0.0, 0.0, 0.5])

    def test_identical_loops(self):
        loop = self.loop()
        assert find_best_loop_alignment(loop, loop.copy()) == LoopAlignment(False, 0)

    def test_shifted_loop(self):
        loop_a = self.loop()
        loop_b = np.roll(loop_a, 5, axis=0)
        alignment = find_best_loop_alignment(loop_a, loop_b)

        assert alignment == LoopAlignment(False, 5)
        mapped = map_loop_index(np.arange(len(loop_a)), len(loop_a), alignment)
        np.testing.assert_allclose(loop_b[mapped], loop_a)

    def test_reversed_loop(self):
        loop_a = self.loop()
        n = len(loop_a)
        loop_b = loop_a[::-1].copy()
        alignment = find_best_loop_alignment(loop_a, loop_b)

        assert alignment == LoopAlignment(True, n - 1)
        mapped = map_loop_index(np.arange(n), n, alignment)
        np.testing.assert_allclose(loop_b[mapped], loop_a)

    def test_reversed_and_shifted_loop(self):
        loop_a = self.loop()
        n = len(loop_a)
        loop_b = np.roll(loop_a[::-1], 7, axis=0)
        alignment = find_best_loop_alignment(loop_a, loop_b)

        assert alignment.reverse
        mapped = map_loop_index(np.arange(n), n, alignment)
        np.testing.assert_allclose(loop_b[mapped], loop_a)

    def test_dense_loop(self):
        """Densely sampled loops align without building every candidate at once."""
        loop_a = self.loop(2048)
        n = len(loop_a)
        loop_b = np.roll(loop_a[::-1], 1500, axis=0)
        alignment = find_best_loop_alignment(loop_a, loop_b)

        assert alignment.reverse
        mapped = map_loop_index(np.arange(n), n, alignment)
        np.testing.assert_allclose(loop_b[mapped], loop_a)

    def test_ties_keep_first_candidate(self):
        flat = np.zeros((16, 3))
        assert find_best_loop_alignment(flat, flat.copy()) == LoopAlignment(False, 0)

    def test_map_loop_index_scalar(self):
        assert map_loop_index(3, 10, LoopAlignment(False, 9)) == 2
        assert map_loop_index(3, 10, LoopAlignment(True, 1)) == 8
