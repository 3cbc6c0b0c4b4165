"""Relaxation solver moving free film vertices toward lower surface area.

One step runs ``substeps`` explicit iterations. Each iteration pins boundary
vertices onto their live frame curves, integrates every free vertex from the
same pre-iteration snapshot, then pins the boundary again.
"""

from typing import Any, Iterable, Mapping, Optional, Union

import numpy as np
import scipy.sparse as sp
from loguru import logger

from soap_film.config.solver_config import SolverConfig
from soap_film.constants import EPSILON
from soap_film.core.film_types import (
    BoundarySampler,
    FilmState,
    FilmTopology,
    Frame,
    FrameRuntime,
    SolverContext,
)
from soap_film.core.frame_sampling import sample_frame_point_local, transform_points

DEFAULT_SOLVER_CONFIG = SolverConfig()


# ---------------------------------------------------------------------------
# State construction ---------------------------------------------------------
# ---------------------------------------------------------------------------


def create_film_state(
    topology: FilmTopology,
    solver_config: Optional[SolverConfig] = None,
    **overrides: Any,
) -> FilmState:
    """
    Create simulation state from a topology.

    Parameters
    ----------
    topology : FilmTopology
        Result of :func:`build_film_topology`.
    solver_config : SolverConfig, optional
        Base configuration, defaults to :data:`DEFAULT_SOLVER_CONFIG`.
    **overrides
        Individual solver fields replacing values of the base configuration.

    Returns
    -------
    FilmState
        Positions and rest positions are independent copies of the topology
        positions; velocities start at zero.
    """
    config = (solver_config or DEFAULT_SOLVER_CONFIG).with_overrides(**overrides)
    positions = np.array(topology.positions, dtype=np.float64)
    return FilmState(
        positions=positions,
        velocities=np.zeros_like(positions),
        rest_positions=positions.copy(),
        indices=topology.indices,
        boundary_constraints=topology.boundary_constraints,
        solver_config=config,
    )


def create_solver_context(film_state: FilmState) -> SolverContext:
    """Build adjacency, boundary mask and scratch buffers for ``film_state``."""
    vertex_count = film_state.vertex_count
    faces = np.asarray(film_state.indices, dtype=np.int64).reshape(-1, 3)

    # Every ordered pair of distinct corners of a triangle is an adjacency
    rows = np.concatenate([faces[:, 0], faces[:, 0], faces[:, 1], faces[:, 1], faces[:, 2], faces[:, 2]])
    cols = np.concatenate([faces[:, 1], faces[:, 2], faces[:, 0], faces[:, 2], faces[:, 0], faces[:, 1]])
    adjacency = sp.csr_matrix(
        (np.ones(len(rows)), (rows, cols)), shape=(vertex_count, vertex_count)
    )
    # Shared edges appear once per incident triangle; collapse them to 1
    adjacency.sum_duplicates()
    adjacency.data[:] = 1.0
    adjacency.eliminate_zeros()

    degree = np.asarray(adjacency.sum(axis=1)).reshape(-1)
    has_neighbors = degree > 0
    inv_degree = np.zeros(vertex_count)
    inv_degree[has_neighbors] = 1.0 / degree[has_neighbors]
    neighbor_mean = adjacency.copy()
    neighbor_mean.data *= np.repeat(inv_degree, np.diff(adjacency.indptr))

    neighbors = [
        adjacency.indices[adjacency.indptr[v] : adjacency.indptr[v + 1]].copy()
        for v in range(vertex_count)
    ]

    boundary_mask = np.zeros(vertex_count, dtype=bool)
    for constraint in film_state.boundary_constraints:
        if 0 <= constraint.vertex_index < vertex_count:
            boundary_mask[constraint.vertex_index] = True

    return SolverContext(
        boundary_mask=boundary_mask,
        neighbors=neighbors,
        neighbor_mean=neighbor_mean,
        has_neighbors=has_neighbors,
        gradient=np.zeros((vertex_count, 3)),
        scratch_positions=np.zeros((vertex_count, 3)),
        scratch_velocities=np.zeros((vertex_count, 3)),
    )


# ---------------------------------------------------------------------------
# Geometry -------------------------------------------------------------------
# ---------------------------------------------------------------------------


def _triangle_corners(positions: np.ndarray, indices: np.ndarray):
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    return faces, positions[faces[:, 0]], positions[faces[:, 1]], positions[faces[:, 2]]


def compute_surface_area(positions: np.ndarray, indices: np.ndarray) -> float:
    """Sum of triangle areas (half the cross-product magnitude).

    Accepts flat or (V, 3) positions and flat or (F, 3) indices.
    """
    faces, a, b, c = _triangle_corners(positions, indices)
    if len(faces) == 0:
        return 0.0
    cross = np.cross(b - a, c - a)
    return float(0.5 * np.linalg.norm(cross, axis=1).sum())


def accumulate_area_gradient(
    positions: np.ndarray, indices: np.ndarray, out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Gradient of total surface area with respect to every vertex.

    For a triangle (a, b, c) with unit normal n the area gradient at ``a`` is
    ``0.5 * (b - c) x n``, and cyclically for ``b`` and ``c``. Triangles whose
    normal is shorter than 1e-8 contribute nothing.

    Parameters
    ----------
    positions : np.ndarray
        (V, 3) vertex positions
    indices : np.ndarray
        (F, 3) triangle indices
    out : np.ndarray, optional
        (V, 3) buffer to write into; it is zeroed first.

    Returns
    -------
    np.ndarray
        (V, 3) accumulated gradient
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if out is None:
        out = np.zeros_like(positions)
    else:
        out.fill(0.0)

    faces, a, b, c = _triangle_corners(positions, indices)
    if len(faces) == 0:
        return out

    normal = np.cross(b - a, c - a)
    length = np.linalg.norm(normal, axis=1)
    valid = length >= EPSILON
    if not np.any(valid):
        return out

    faces, a, b, c = faces[valid], a[valid], b[valid], c[valid]
    unit = normal[valid] / length[valid, None]

    np.add.at(out, faces[:, 0], 0.5 * np.cross(b - c, unit))
    np.add.at(out, faces[:, 1], 0.5 * np.cross(c - a, unit))
    np.add.at(out, faces[:, 2], 0.5 * np.cross(a - b, unit))
    return out


# ---------------------------------------------------------------------------
# Boundary projection --------------------------------------------------------
# ---------------------------------------------------------------------------


def make_boundary_sampler(
    frames: Union[Mapping[str, Union[Frame, FrameRuntime]], Iterable[Union[Frame, FrameRuntime]]],
) -> BoundarySampler:
    """
    Build a ``(frame_id, t) -> point | None`` callback over the given frames.

    World transforms are captured when the sampler is created, so create a
    new sampler after moving frames. Unknown frame ids yield ``None``.
    """
    items = frames.values() if isinstance(frames, Mapping) else frames
    runtimes = {}
    for item in items:
        runtime = item if isinstance(item, FrameRuntime) else FrameRuntime(item)
        runtimes[runtime.frame_id] = runtime

    def sample(frame_id: str, curve_param_t: float) -> Optional[np.ndarray]:
        runtime = runtimes.get(frame_id)
        if runtime is None:
            return None
        local = sample_frame_point_local(runtime.frame, curve_param_t)
        return transform_points(runtime.world_matrix, local)

    return sample


def project_boundaries(film_state: FilmState, boundary_sampler: BoundarySampler) -> int:
    """
    Pin constrained vertices onto their live frame curves.

    Constrained vertices are kinematic: their velocity is zeroed. Constraints
    whose frame no longer exists keep their current position.

    Returns
    -------
    int
        Number of constraints skipped because the sampler returned ``None``.
    """
    skipped = 0
    for constraint in film_state.boundary_constraints:
        point = boundary_sampler(constraint.frame_id, constraint.curve_param_t)
        if point is None:
            skipped += 1
            continue
        film_state.positions[constraint.vertex_index] = point
        film_state.velocities[constraint.vertex_index] = 0.0
    return skipped


# ---------------------------------------------------------------------------
# Stepping -------------------------------------------------------------------
# ---------------------------------------------------------------------------


def _integrate_free_vertices(film_state: FilmState, context: SolverContext) -> None:
    config = film_state.solver_config
    force_scale = max(0.0, config.relaxation_strength)
    retention_scale = max(0.0, config.shape_retention)

    positions = film_state.positions
    velocities = film_state.velocities

    accumulate_area_gradient(positions, film_state.indices, out=context.gradient)

    laplacian = context.neighbor_mean @ positions - positions
    laplacian[~context.has_neighbors] = 0.0

    acceleration = (
        (-context.gradient + config.laplacian_weight * laplacian) * force_scale
        + (film_state.rest_positions - positions) * retention_scale
    )
    next_velocities = velocities * config.damping + acceleration * config.step_size
    next_positions = positions + next_velocities * config.step_size

    free = context.free_mask[:, None]
    np.copyto(context.scratch_positions, positions)
    np.copyto(context.scratch_velocities, velocities)
    np.copyto(context.scratch_positions, next_positions, where=free)
    np.copyto(context.scratch_velocities, next_velocities, where=free)

    np.copyto(positions, context.scratch_positions)
    np.copyto(velocities, context.scratch_velocities)


def run_relaxation_step(
    film_state: FilmState,
    solver_context: SolverContext,
    boundary_sampler: BoundarySampler,
    compute_area: bool = True,
) -> float:
    """
    Advance the film by one relaxation step.

    Parameters
    ----------
    film_state : FilmState
        State to advance in place.
    solver_context : SolverContext
        Context created from ``film_state``.
    boundary_sampler : BoundarySampler
        Live ``(frame_id, t) -> point | None`` callback.
    compute_area : bool
        Whether to compute the total surface area after the step.

    Returns
    -------
    float
        Total surface area, ``NaN`` when ``compute_area`` is False or the
        state was disposed, and ``0.0`` for a topology without triangles.
    """
    if film_state.disposed:
        logger.warning("Relaxation step requested on a disposed film state")
        return float("nan")
    if len(film_state.indices) == 0:
        return 0.0
    if solver_context.gradient.shape != film_state.positions.shape:
        logger.warning("Solver context does not match film state, skipping step")
        return float("nan")

    skipped = 0
    for _ in range(film_state.solver_config.substeps):
        skipped += project_boundaries(film_state, boundary_sampler)
        _integrate_free_vertices(film_state, solver_context)
        skipped += project_boundaries(film_state, boundary_sampler)

    if skipped:
        logger.debug(f"Skipped {skipped} boundary projections for missing frames")

    if not compute_area:
        return float("nan")
    return compute_surface_area(film_state.positions, film_state.indices)


def reset_film_state(film_state: FilmState) -> None:
    """Restore rest positions and zero all velocities."""
    np.copyto(film_state.positions, film_state.rest_positions)
    film_state.velocities.fill(0.0)


def dispose_film_state(film_state: FilmState) -> None:
    """Mark ``film_state`` as discarded; later steps become no-ops."""
    film_state.disposed = True


step = run_relaxation_step
reset = reset_film_state
