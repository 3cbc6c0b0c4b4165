"""Closed boundary-curve sampling for frames.

Every sampler takes a curve parameter ``t`` that is wrapped into [0, 1), so
``t = 0`` and ``t = 1`` always land on the same point.
"""

import math
from typing import Optional, Sequence

import numpy as np

from soap_film.constants import (
    CORNER_RADIUS_RATIO,
    DEFAULT_CONTROL_POINT_COUNT,
    EPSILON,
    MIN_CONTROL_POINTS,
    TWO_PI,
)
from soap_film.core.film_types import Frame, FramePose, FrameType


def wrap_parameter(t: float) -> float:
    """Wrap a curve parameter into [0, 1)."""
    wrapped = t % 1.0
    # t slightly below an integer can round up to exactly 1.0
    return 0.0 if wrapped >= 1.0 else wrapped


def compose_frame_matrix(pose: FramePose) -> np.ndarray:
    """Materialise the (4, 4) world transform of a pose."""
    return pose.matrix()


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply an affine (4, 4) matrix to (3,) or (N, 3) points."""
    points = np.asarray(points, dtype=np.float64)
    return points @ matrix[:3, :3].T + matrix[:3, 3]


# ---------------------------------------------------------------------------
# Base shapes ----------------------------------------------------------------
# ---------------------------------------------------------------------------


def _sample_circle_point(radius: float, t: float) -> np.ndarray:
    angle = t * TWO_PI
    return np.array([math.cos(angle) * radius, math.sin(angle) * radius, 0.0])


def _sample_triangle_point(width: float, height: float, t: float) -> np.ndarray:
    half_width = width * 0.5
    half_height = height * 0.5

    corners = np.array(
        [
            [0.0, half_height],
            [-half_width, -half_height],
            [half_width, -half_height],
        ]
    )
    edge_lengths = [
        float(np.hypot(*(corners[(i + 1) % 3] - corners[i]))) for i in range(3)
    ]
    distance = t * sum(edge_lengths)

    edge = 0
    while edge < 2 and distance > edge_lengths[edge]:
        distance -= edge_lengths[edge]
        edge += 1

    alpha = min(1.0, distance / max(edge_lengths[edge], EPSILON))
    start = corners[edge]
    end = corners[(edge + 1) % 3]
    x, y = start + (end - start) * alpha
    return np.array([x, y, 0.0])


def _rounded_rect_segment_point(
    segment_index: int, distance: float, half_width: float, half_height: float, radius: float
) -> np.ndarray:
    hw, hh, r = half_width, half_height, radius
    safe_r = max(r, EPSILON)

    if segment_index == 0:
        return np.array([-hw + r + distance, hh, 0.0])
    if segment_index == 1:
        angle = math.pi * 0.5 - distance / safe_r
        return np.array([hw - r + math.cos(angle) * r, hh - r + math.sin(angle) * r, 0.0])
    if segment_index == 2:
        return np.array([hw, hh - r - distance, 0.0])
    if segment_index == 3:
        angle = -distance / safe_r
        return np.array([hw - r + math.cos(angle) * r, -hh + r + math.sin(angle) * r, 0.0])
    if segment_index == 4:
        return np.array([hw - r - distance, -hh, 0.0])
    if segment_index == 5:
        angle = -math.pi * 0.5 - distance / safe_r
        return np.array([-hw + r + math.cos(angle) * r, -hh + r + math.sin(angle) * r, 0.0])
    if segment_index == 6:
        return np.array([-hw, -hh + r + distance, 0.0])

    angle = math.pi - distance / safe_r
    return np.array([-hw + r + math.cos(angle) * r, hh - r + math.sin(angle) * r, 0.0])


def _sample_rounded_rectangle_point(width: float, height: float, t: float) -> np.ndarray:
    half_width = width * 0.5
    half_height = height * 0.5
    corner_radius = min(min(width, height) * CORNER_RADIUS_RATIO, half_width, half_height)

    straight_x = width - 2.0 * corner_radius
    straight_y = height - 2.0 * corner_radius
    arc = math.pi * 0.5 * corner_radius
    # top, top-right arc, right, bottom-right arc, bottom, bottom-left arc, left, top-left arc
    segments = [straight_x, arc, straight_y, arc, straight_x, arc, straight_y, arc]

    distance = t * sum(segments)
    for segment_index, segment_length in enumerate(segments):
        if distance <= segment_length + EPSILON:
            return _rounded_rect_segment_point(
                segment_index, distance, half_width, half_height, corner_radius
            )
        distance -= segment_length

    return np.array([-half_width + corner_radius, half_height, 0.0])


def _sample_base_point(frame: Frame, t: float) -> np.ndarray:
    if frame.frame_type == FrameType.CIRCLE:
        return _sample_circle_point(frame.radius, t)
    if frame.frame_type == FrameType.SQUARE:
        return _sample_rounded_rectangle_point(frame.width, frame.width, t)
    if frame.frame_type == FrameType.TRIANGLE:
        return _sample_triangle_point(frame.width, frame.height, t)
    return _sample_rounded_rectangle_point(frame.width, frame.height, t)


def sample_base_point_local(frame: Frame, curve_param_t: float) -> np.ndarray:
    """Sample the undeformed base shape, ignoring any control points."""
    return _sample_base_point(frame, wrap_parameter(curve_param_t))


# ---------------------------------------------------------------------------
# Spline deformation ---------------------------------------------------------
# ---------------------------------------------------------------------------


def sample_closed_catmull_rom(control_points: np.ndarray, curve_param_t: float) -> np.ndarray:
    """Evaluate a closed uniform Catmull-Rom spline through ``control_points``.

    Segment ``k`` runs from point ``k`` to point ``k + 1``; the four points
    bracketing each segment are fetched with wraparound indexing.
    """
    count = len(control_points)
    scaled = wrap_parameter(curve_param_t) * count
    segment = int(math.floor(scaled)) % count
    u = scaled - math.floor(scaled)

    p0 = control_points[(segment - 1) % count]
    p1 = control_points[segment]
    p2 = control_points[(segment + 1) % count]
    p3 = control_points[(segment + 2) % count]

    uu = u * u
    uuu = uu * u
    return 0.5 * (
        2.0 * p1
        + (-p0 + p2) * u
        + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * uu
        + (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * uuu
    )


def build_default_control_points(
    frame: Frame, count: int = DEFAULT_CONTROL_POINT_COUNT
) -> np.ndarray:
    """Sample the base shape evenly to seed a deformable frame.

    A spline through these points starts out matching the base shape, so
    offsetting a single point later does not make the curve jump.
    """
    count = max(MIN_CONTROL_POINTS, count)
    return np.array([sample_base_point_local(frame, i / count) for i in range(count)])


def create_default_frame(
    frame_id: str,
    frame_type: FrameType | str,
    control_point_count: Optional[int] = DEFAULT_CONTROL_POINT_COUNT,
    **kwargs,
) -> Frame:
    """Create a frame with default shape values and seeded control points.

    Parameters
    ----------
    frame_id : str
        Identifier of the new frame.
    frame_type : FrameType | str
        Base shape kind.
    control_point_count : int | None
        Number of control points to seed from the base shape. ``None`` creates
        an undeformable frame that always samples the base shape.
    **kwargs
        Any other :class:`Frame` field (``radius``, ``pose``, ...).
    """
    frame = Frame(frame_id=frame_id, frame_type=frame_type, **kwargs)
    if control_point_count is not None and frame.control_points is None:
        frame.control_points = build_default_control_points(frame, control_point_count)
    return frame


# ---------------------------------------------------------------------------
# Public sampling ------------------------------------------------------------
# ---------------------------------------------------------------------------


def sample_frame_point_local(frame: Frame, curve_param_t: float) -> np.ndarray:
    """Sample the frame's boundary in local space."""
    if frame.is_deformed:
        return sample_closed_catmull_rom(frame.control_points, curve_param_t)
    return sample_base_point_local(frame, curve_param_t)


def sample_frame_boundary_local(frame: Frame, samples: Optional[int] = None) -> np.ndarray:
    """Sample ``samples`` evenly parameter-spaced points around the loop.

    Returns
    -------
    np.ndarray
        (samples, 3) points for ``t = i / samples``.
    """
    samples = frame.boundary_samples if samples is None else int(samples)
    if samples <= 0:
        return np.zeros((0, 3))
    return np.array([sample_frame_point_local(frame, i / samples) for i in range(samples)])


def sample_frame_point_world(
    frame: Frame, curve_param_t: float, world_matrix: Optional[np.ndarray] = None
) -> np.ndarray:
    """Sample the frame's boundary in world space.

    Without ``world_matrix`` the frame's own pose is applied directly.
    """
    local = sample_frame_point_local(frame, curve_param_t)
    if world_matrix is None:
        return frame.pose.apply(local)
    return transform_points(world_matrix, local)


def sample_frame_boundary_world(
    frame: Frame, samples: Optional[int] = None, world_matrix: Optional[np.ndarray] = None
) -> np.ndarray:
    """World-space counterpart of :func:`sample_frame_boundary_local`."""
    local = sample_frame_boundary_local(frame, samples)
    if world_matrix is None:
        return frame.pose.apply(local) if len(local) else local
    return transform_points(world_matrix, local)


def loop_segment_lengths(points: Sequence[np.ndarray]) -> np.ndarray:
    """Lengths of the closed polyline through ``points`` (last point joins the first)."""
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 2:
        return np.zeros(len(points))
    return np.linalg.norm(np.roll(points, -1, axis=0) - points, axis=1)
