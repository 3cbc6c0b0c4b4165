#!/usr/bin/env python3
"""
Tests for the editor-facing film session.
"""

import math

import numpy as np
import pytest

from soap_film import FilmConfig, FilmSession
from soap_film.constants import FRAME_DEFAULT_POSITIONS
from soap_film.core.film_types import Frame, FramePose, FrameType
from soap_film.errors import FrameValidationError, UnknownFrameError


@pytest.fixture
def session():
    config = FilmConfig(topology={"span_subdivisions": 6})
    film_session = FilmSession(config)
    yield film_session
    film_session.dispose()


class TestFrames:
    """Frame registry behaviour."""

    def test_ids_and_default_placement(self, session):
        first = session.add_frame(FrameType.CIRCLE)
        second = session.add_frame("rectangle")

        assert (first, second) == ("frame-1", "frame-2")
        assert session.frame_ids == ["frame-1", "frame-2"]
        np.testing.assert_allclose(session.get_frame(first).pose.position, FRAME_DEFAULT_POSITIONS[0])
        np.testing.assert_allclose(session.get_frame(second).pose.rotation, [0.0, math.pi / 8, 0.0])
        assert session.get_frame(second).control_points.shape == (12, 3)

    def test_ids_are_not_reused(self, session):
        session.add_frame("circle")
        session.remove_frame("frame-1")
        assert session.add_frame("circle") == "frame-2"

    def test_explicit_pose(self, session):
        frame_id = session.add_frame("triangle", pose=FramePose(position=(1.0, 2.0, 3.0)))
        np.testing.assert_allclose(session.get_frame(frame_id).pose.position, [1.0, 2.0, 3.0])

    def test_insert_frame(self, session):
        session.insert_frame(Frame("custom", FrameType.SQUARE))
        with pytest.raises(FrameValidationError):
            session.insert_frame(Frame("custom", FrameType.CIRCLE))

    def test_unknown_frame(self, session):
        with pytest.raises(UnknownFrameError):
            session.get_frame("missing")
        with pytest.raises(KeyError):
            session.set_frame_pose("missing", position=(0.0, 0.0, 0.0))
        session.remove_frame("missing")

    def test_set_control_point(self, session):
        frame_id = session.add_frame("circle")
        session.set_control_point(frame_id, 0, (1.0, 0.0, 0.5))
        np.testing.assert_allclose(session.get_frame(frame_id).control_points[0], [1.0, 0.0, 0.5])

        with pytest.raises(FrameValidationError):
            session.set_control_point(frame_id, 40, (0.0, 0.0, 0.0))

    def test_set_control_point_needs_deformable_frame(self, session):
        session.insert_frame(Frame("plain", FrameType.CIRCLE))
        with pytest.raises(FrameValidationError):
            session.set_control_point("plain", 0, (0.0, 0.0, 0.0))


class TestFilmLifecycle:
    """Rebuilding and ticking the film."""

    def test_single_frame_has_no_film(self, session):
        session.add_frame("circle")
        assert not session.has_film
        assert math.isnan(session.tick())
        assert session.surface_area() == 0.0

    def test_two_frames_build_a_film(self, session):
        session.add_frame("circle")
        session.add_frame("square")

        assert session.has_film
        assert session.topology.mst_edge_count == 1
        assert session.film_state.solver_config == session.config.active_solver_config()

        area = session.tick(compute_area=True)
        assert area > 0.0
        assert area == pytest.approx(session.surface_area())
        assert session.tick_count == 1

    def test_remove_frame_rebuilds(self, session):
        session.add_frame("circle")
        session.add_frame("circle")
        session.add_frame("triangle")
        assert session.topology.mst_edge_count == 2

        session.remove_frame("frame-3")
        assert session.topology.mst_edge_count == 1

        session.remove_frame("frame-2")
        assert not session.has_film

    def test_losing_the_film_resets_tick_count(self, session):
        """Normals cadence restarts when a rebuild leaves no film."""
        session.add_frame("circle")
        session.add_frame("circle")
        for _ in range(3):
            session.tick()
        assert session.tick_count == 3

        session.remove_frame("frame-2")
        assert not session.has_film
        assert session.tick_count == 0
        assert session.should_refresh_normals()

    def test_rebuild_disposes_previous_state(self, session):
        session.add_frame("circle")
        session.add_frame("circle")
        old_state = session.film_state

        session.rebuild_film()
        assert old_state.disposed
        assert not session.film_state.disposed

    def test_stale_frame_keeps_ticking(self, session):
        """Removing a frame without a rebuild leaves its vertices in place."""
        session.add_frame("circle")
        session.add_frame("circle")
        session.tick()
        stale = [c.vertex_index for c in session.topology.boundary_constraints if c.frame_id == "frame-2"]
        held = session.film_state.positions[stale].copy()

        session.remove_frame("frame-2", rebuild=False)
        assert session.sample_constraint_point("frame-2", 0.0) is None
        area = session.tick(compute_area=True)

        assert math.isfinite(area)
        np.testing.assert_array_equal(session.film_state.positions[stale], held)

    def test_moving_a_frame_moves_the_boundary(self, session):
        session.add_frame("circle")
        session.add_frame("circle")
        session.set_frame_pose("frame-1", position=(-2.2, 1.2, 0.7))
        session.tick()

        constraint = session.topology.boundary_constraints[0]
        np.testing.assert_allclose(
            session.film_state.positions[constraint.vertex_index],
            session.sample_constraint_point("frame-1", constraint.curve_param_t),
            atol=1e-9,
        )

    def test_reset_simulation(self, session):
        session.add_frame("circle")
        session.add_frame("rectangle")
        for _ in range(3):
            session.tick()
        session.reset_simulation()

        assert session.tick_count == 0
        np.testing.assert_array_equal(session.film_state.positions, session.film_state.rest_positions)

    def test_dispose(self, session):
        session.add_frame("circle")
        session.add_frame("circle")
        state = session.film_state

        session.dispose()
        assert state.disposed
        assert not session.has_film
        assert session.frame_ids == []


class TestSessionConfig:
    """Quality and strength controls."""

    def test_quality_changes_next_tick(self, session):
        session.add_frame("circle")
        session.add_frame("circle")
        session.set_quality("high")
        session.tick()
        assert session.film_state.solver_config.substeps == 6

    def test_strengths_are_clamped(self, session):
        session.set_relaxation_strength(10.0)
        session.set_shape_retention(-2.0)
        assert session.config.relaxation_strength == 2.0
        assert session.config.shape_retention == 0.0

    def test_should_refresh_normals(self, session):
        session.add_frame("circle")
        session.add_frame("circle")
        session.set_quality("balanced")

        refreshed = []
        for _ in range(4):
            session.tick()
            refreshed.append(session.should_refresh_normals())
        assert refreshed == [False, True, False, True]

        session.reset_simulation()
        assert session.should_refresh_normals(interacting=True)
        session.tick()
        assert not session.should_refresh_normals(interacting=True)
