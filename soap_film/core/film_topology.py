"""Combined film mesh spanning several frames.

Every frame contributes one boundary loop. Frames are connected along the
edges of a minimum spanning tree over their centres; each tree edge becomes a
triangulated strip ("bridge") between the two loops.
"""

from typing import Sequence, Union

import numpy as np
from loguru import logger

from soap_film.constants import DEFAULT_SPAN_SUBDIVISIONS, MIN_SAMPLE_COUNT, MIN_SPAN_SUBDIVISIONS
from soap_film.core.film_types import (
    BoundaryConstraint,
    FilmTopology,
    Frame,
    FrameRuntime,
    LoopAlignment,
)
from soap_film.core.frame_sampling import sample_frame_boundary_local, transform_points
from soap_film.core.mst import build_mst


def map_loop_index(index: int | np.ndarray, count: int, alignment: LoopAlignment) -> int | np.ndarray:
    """Index into loop B that is matched with ``index`` of loop A."""
    if not alignment.reverse:
        return (index + alignment.shift) % count
    return (alignment.shift - index) % count


def find_best_loop_alignment(loop_a: np.ndarray, loop_b: np.ndarray) -> LoopAlignment:
    """
    Find the reversal/shift of loop B that lies closest to loop A.

    Every combination of {forward, reversed} x shift in [0, n) is scored by
    the summed squared distance between matched points, one candidate at a
    time so memory stays linear in n. Ties keep the first candidate in
    (forward first, increasing shift) order.

    Args:
        loop_a: (N, 3) world-space loop
        loop_b: (N, 3) world-space loop with the same sample count

    Returns:
        LoopAlignment minimising the matching error
    """
    count = len(loop_a)
    if count == 0:
        return LoopAlignment(reverse=False, shift=0)

    index = np.arange(count)
    # slots [0, n) hold forward shifts, [n, 2n) reversed shifts
    errors = np.empty(2 * count)
    for shift in range(count):
        errors[shift] = np.sum((loop_a - loop_b[(index + shift) % count]) ** 2)
        errors[count + shift] = np.sum((loop_a - loop_b[(shift - index) % count]) ** 2)

    best = int(np.argmin(errors))
    return LoopAlignment(reverse=best >= count, shift=best % count)


def _bridge_faces(grid: np.ndarray) -> np.ndarray:
    """Two triangles per grid cell, wrapping along the loop axis only."""
    next_row = np.roll(grid, -1, axis=0)
    a = grid[:, :-1]
    b = next_row[:, :-1]
    c = next_row[:, 1:]
    d = grid[:, 1:]
    faces = np.stack([np.stack([a, b, c], axis=-1), np.stack([a, c, d], axis=-1)], axis=2)
    return faces.reshape(-1, 3)


def build_film_topology(
    frames: Sequence[Union[FrameRuntime, Frame]],
    span_subdivisions: int = DEFAULT_SPAN_SUBDIVISIONS,
) -> FilmTopology:
    """
    Sample every frame, bridge MST neighbours and emit one indexed mesh.

    Args:
        frames: frames with their live world transforms. Plain ``Frame``
            objects are posed with their own ``pose``.
        span_subdivisions: grid cells along each bridge. Values <= 0 yield an
            empty topology; positive values are raised to at least 2.

    Returns:
        FilmTopology; empty when fewer than 2 frames are given.
    """
    runtimes = [f if isinstance(f, FrameRuntime) else FrameRuntime(f) for f in frames]
    if len(runtimes) < 2:
        logger.debug(f"Film topology needs at least 2 frames, got {len(runtimes)}")
        return FilmTopology.empty()
    if span_subdivisions <= 0:
        logger.warning(f"Invalid span subdivisions {span_subdivisions}, skipping film build")
        return FilmTopology.empty()

    span = max(MIN_SPAN_SUBDIVISIONS, int(span_subdivisions))
    sample_count = max(MIN_SAMPLE_COUNT, min(r.frame.boundary_samples for r in runtimes))

    position_blocks: list[np.ndarray] = []
    face_blocks: list[np.ndarray] = []
    boundary_constraints: list[BoundaryConstraint] = []
    loop_by_frame: dict[str, np.ndarray] = {}
    boundary_by_frame: dict[str, np.ndarray] = {}
    vertex_count = 0

    for runtime in runtimes:
        local_loop = sample_frame_boundary_local(runtime.frame, sample_count)
        world_loop = transform_points(runtime.world_matrix, local_loop)

        vertex_ids = np.arange(vertex_count, vertex_count + sample_count)
        position_blocks.append(world_loop)
        vertex_count += sample_count

        boundary_constraints.extend(
            BoundaryConstraint(int(v), runtime.frame_id, i / sample_count)
            for i, v in enumerate(vertex_ids)
        )
        loop_by_frame[runtime.frame_id] = world_loop
        boundary_by_frame[runtime.frame_id] = vertex_ids

    frame_ids = [r.frame_id for r in runtimes]
    mst_edges = build_mst(frame_ids, {r.frame_id: r.center for r in runtimes})

    for edge in mst_edges:
        loop_a = loop_by_frame[edge.from_id]
        loop_b = loop_by_frame[edge.to_id]
        alignment = find_best_loop_alignment(loop_a, loop_b)
        mapped = map_loop_index(np.arange(sample_count), sample_count, alignment)
        matched_b = loop_b[mapped]

        alphas = np.arange(1, span) / span
        interior = loop_a[:, None, :] + (matched_b - loop_a)[:, None, :] * alphas[None, :, None]
        interior_ids = vertex_count + np.arange(sample_count * (span - 1)).reshape(sample_count, span - 1)
        position_blocks.append(interior.reshape(-1, 3))
        vertex_count += interior_ids.size

        grid = np.empty((sample_count, span + 1), dtype=np.int64)
        grid[:, 0] = boundary_by_frame[edge.from_id]
        grid[:, 1:span] = interior_ids
        grid[:, span] = boundary_by_frame[edge.to_id][mapped]
        face_blocks.append(_bridge_faces(grid))

        logger.debug(
            f"Bridged {edge.from_id} -> {edge.to_id} "
            f"(distance={edge.weight:.3f}, reverse={alignment.reverse}, shift={alignment.shift})"
        )

    positions = np.concatenate(position_blocks) if position_blocks else np.zeros((0, 3))
    indices = np.concatenate(face_blocks) if face_blocks else np.zeros((0, 3), dtype=np.int64)

    logger.debug(
        f"Film topology: {len(positions)} vertices, {len(indices)} triangles, "
        f"{len(mst_edges)} bridges, sample_count={sample_count}"
    )
    return FilmTopology(
        positions=positions,
        indices=indices,
        boundary_constraints=tuple(boundary_constraints),
        sample_count=sample_count,
        mst_edge_count=len(mst_edges),
    )
