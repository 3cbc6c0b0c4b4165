"""Data structures shared by frame sampling, topology building and the solver.

Frames and poses are plain value data owned by the caller. Topology results
are immutable; FilmState is the only structure mutated by the solver.

Key structures:
- Frame / FramePose: a closed boundary curve and its placement
- FilmTopology: the combined indexed mesh produced by one build
- FilmState / SolverContext: simulation state and its derived acceleration data
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, NamedTuple, Optional

import numpy as np
import scipy.sparse as sp
from scipy.spatial.transform import Rotation

from soap_film.config.solver_config import SolverConfig
from soap_film.constants import (
    DEFAULT_BOUNDARY_SAMPLES,
    DEFAULT_HEIGHT,
    DEFAULT_RADIUS,
    DEFAULT_WIDTH,
)
from soap_film.errors import FrameValidationError


class FrameType(str, Enum):
    """Base shape of a frame's boundary curve."""

    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    TRIANGLE = "triangle"

    @classmethod
    def from_string(cls, value: str) -> "FrameType":
        """Convert a string to FrameType, case-insensitive.

        Raises
        ------
        FrameValidationError
            If the value doesn't match any frame type.
        """
        normalized = value.lower().strip()
        for frame_type in cls:
            if frame_type.value == normalized:
                return frame_type
        raise FrameValidationError(
            f"Unknown frame type: '{value}'. Supported: {[t.value for t in cls]}"
        )


def _as_vector3(value, name: str) -> np.ndarray:
    vec = np.asarray(value, dtype=np.float64).reshape(-1)
    if vec.shape != (3,):
        raise FrameValidationError(f"{name} must have 3 components, got shape {vec.shape}")
    return vec


@dataclass
class FramePose:
    """Translation, Euler rotation (radians, intrinsic XYZ) and non-uniform scale.

    Attributes
    ----------
    position : np.ndarray
        (3,) translation
    rotation : np.ndarray
        (3,) Euler angles applied in X, Y, Z order
    scale : np.ndarray
        (3,) per-axis scale
    """

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self) -> None:
        self.position = _as_vector3(self.position, "position")
        self.rotation = _as_vector3(self.rotation, "rotation")
        self.scale = _as_vector3(self.scale, "scale")

    @property
    def center(self) -> np.ndarray:
        return self.position.copy()

    def quaternion(self) -> np.ndarray:
        """Rotation as an (x, y, z, w) quaternion."""
        return Rotation.from_euler("XYZ", self.rotation).as_quat()

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Map local points to world space without materialising a matrix."""
        rotation = Rotation.from_quat(self.quaternion())
        return rotation.apply(np.asarray(points, dtype=np.float64) * self.scale) + self.position

    def matrix(self) -> np.ndarray:
        """Compose the (4, 4) affine transform T * R * S."""
        rot = Rotation.from_quat(self.quaternion()).as_matrix()
        matrix = np.eye(4)
        matrix[:3, :3] = rot * self.scale[None, :]
        matrix[:3, 3] = self.position
        return matrix

    def copy(self) -> "FramePose":
        return FramePose(self.position.copy(), self.rotation.copy(), self.scale.copy())


@dataclass
class Frame:
    """A closed boundary curve the film must pass through.

    Attributes
    ----------
    frame_id : str
        Unique identifier used by boundary constraints
    frame_type : FrameType
        Base shape kind
    radius : float
        Circle radius
    width, height : float
        Rectangle/triangle extents (square uses width for both)
    boundary_samples : int
        Number of points the boundary loop is sampled with
    pose : FramePose
        Placement in world space
    control_points : np.ndarray | None
        Optional (K, 3) local-space points. With K >= 4 the boundary is a
        closed Catmull-Rom spline through them instead of the base shape.
    """

    frame_id: str
    frame_type: FrameType = FrameType.CIRCLE
    radius: float = DEFAULT_RADIUS
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    boundary_samples: int = DEFAULT_BOUNDARY_SAMPLES
    pose: FramePose = field(default_factory=FramePose)
    control_points: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        if isinstance(self.frame_type, str) and not isinstance(self.frame_type, FrameType):
            self.frame_type = FrameType.from_string(self.frame_type)
        if not isinstance(self.frame_type, FrameType):
            raise FrameValidationError(f"Invalid frame type: {self.frame_type!r}")

        for name in ("radius", "width", "height"):
            value = float(getattr(self, name))
            if not np.isfinite(value) or value < 0.0:
                raise FrameValidationError(f"{name} must be a finite non-negative number, got {value}")
            setattr(self, name, value)

        if int(self.boundary_samples) < 1:
            raise FrameValidationError(
                f"boundary_samples must be positive, got {self.boundary_samples}"
            )
        self.boundary_samples = int(self.boundary_samples)

        if self.control_points is not None:
            points = np.asarray(self.control_points, dtype=np.float64)
            if points.ndim != 2 or points.shape[1] != 3:
                raise FrameValidationError(
                    f"control_points must have shape (K, 3), got {points.shape}"
                )
            self.control_points = points

    @property
    def is_deformed(self) -> bool:
        """True when sampling goes through the control-point spline."""
        return self.control_points is not None and len(self.control_points) >= 4


@dataclass
class FrameRuntime:
    """A frame paired with the live world transform it is currently posed at."""

    frame: Frame
    world_matrix: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        if self.world_matrix is None:
            self.world_matrix = self.frame.pose.matrix()
        else:
            self.world_matrix = np.asarray(self.world_matrix, dtype=np.float64)
            if self.world_matrix.shape != (4, 4):
                raise FrameValidationError(
                    f"world_matrix must have shape (4, 4), got {self.world_matrix.shape}"
                )

    @property
    def frame_id(self) -> str:
        return self.frame.frame_id

    @property
    def center(self) -> np.ndarray:
        return self.world_matrix[:3, 3].copy()


@dataclass(frozen=True)
class BoundaryConstraint:
    """Binds one mesh vertex to a (frame, curve parameter) pair."""

    vertex_index: int
    frame_id: str
    curve_param_t: float


class MstEdge(NamedTuple):
    """One accepted spanning-tree edge between two frames."""

    from_id: str
    to_id: str
    weight: float


class LoopAlignment(NamedTuple):
    """How loop B is re-indexed to match loop A."""

    reverse: bool
    shift: int


BoundarySampler = Callable[[str, float], Optional[np.ndarray]]


@dataclass(frozen=True)
class FilmTopology:
    """Immutable result of one topology build.

    Attributes
    ----------
    positions : np.ndarray
        (V, 3) initial vertex positions
    indices : np.ndarray
        (F, 3) triangle vertex indices
    boundary_constraints : tuple[BoundaryConstraint, ...]
        One constraint per sampled loop vertex of every input frame
    sample_count : int
        Uniform boundary sample count used for all frames
    mst_edge_count : int
        Number of bridged frame pairs
    """

    positions: np.ndarray
    indices: np.ndarray
    boundary_constraints: tuple[BoundaryConstraint, ...]
    sample_count: int
    mst_edge_count: int

    def __post_init__(self) -> None:
        positions = np.array(self.positions, dtype=np.float64).reshape(-1, 3)
        indices = np.array(self.indices, dtype=np.int64).reshape(-1, 3)
        positions.flags.writeable = False
        indices.flags.writeable = False
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "boundary_constraints", tuple(self.boundary_constraints))

    @classmethod
    def empty(cls) -> "FilmTopology":
        return cls(
            positions=np.zeros((0, 3)),
            indices=np.zeros((0, 3), dtype=np.int64),
            boundary_constraints=(),
            sample_count=0,
            mst_edge_count=0,
        )

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0


@dataclass
class FilmState:
    """Mutable simulation state derived from a topology.

    ``indices`` and ``boundary_constraints`` are shared with the topology and
    never modified. ``rest_positions`` is the snapshot taken at build time.
    """

    positions: np.ndarray
    velocities: np.ndarray
    rest_positions: np.ndarray
    indices: np.ndarray
    boundary_constraints: tuple[BoundaryConstraint, ...]
    solver_config: SolverConfig
    disposed: bool = False

    @property
    def vertex_count(self) -> int:
        return len(self.positions)


@dataclass
class SolverContext:
    """Per-state acceleration data: adjacency, boundary mask and scratch buffers.

    Attributes
    ----------
    boundary_mask : np.ndarray
        (V,) True for vertices bound to a frame curve
    neighbors : list[np.ndarray]
        Sorted topological neighbours of each vertex
    neighbor_mean : sp.csr_matrix
        (V, V) row-normalised adjacency; ``neighbor_mean @ positions`` is the
        mean neighbour position of every vertex
    has_neighbors : np.ndarray
        (V,) True where a vertex has at least one neighbour
    gradient, scratch_positions, scratch_velocities : np.ndarray
        (V, 3) work buffers reused every iteration
    """

    boundary_mask: np.ndarray
    neighbors: list[np.ndarray]
    neighbor_mean: sp.csr_matrix
    has_neighbors: np.ndarray
    gradient: np.ndarray
    scratch_positions: np.ndarray
    scratch_velocities: np.ndarray

    @property
    def free_mask(self) -> np.ndarray:
        return ~self.boundary_mask
