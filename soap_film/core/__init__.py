from .film_topology import build_film_topology, find_best_loop_alignment, map_loop_index
from .film_types import (
    BoundaryConstraint,
    BoundarySampler,
    FilmState,
    FilmTopology,
    Frame,
    FramePose,
    FrameRuntime,
    FrameType,
    LoopAlignment,
    MstEdge,
    SolverContext,
)
from .frame_sampling import (
    build_default_control_points,
    compose_frame_matrix,
    create_default_frame,
    sample_frame_boundary_local,
    sample_frame_boundary_world,
    sample_frame_point_local,
    sample_frame_point_world,
)
from .mst import build_mst
from .solver import (
    DEFAULT_SOLVER_CONFIG,
    accumulate_area_gradient,
    compute_surface_area,
    create_film_state,
    create_solver_context,
    dispose_film_state,
    make_boundary_sampler,
    project_boundaries,
    reset,
    reset_film_state,
    run_relaxation_step,
    step,
)

__all__ = [
    "BoundaryConstraint",
    "BoundarySampler",
    "DEFAULT_SOLVER_CONFIG",
    "FilmState",
    "FilmTopology",
    "Frame",
    "FramePose",
    "FrameRuntime",
    "FrameType",
    "LoopAlignment",
    "MstEdge",
    "SolverContext",
    "accumulate_area_gradient",
    "build_default_control_points",
    "build_film_topology",
    "build_mst",
    "compose_frame_matrix",
    "compute_surface_area",
    "create_default_frame",
    "create_film_state",
    "create_solver_context",
    "dispose_film_state",
    "find_best_loop_alignment",
    "make_boundary_sampler",
    "map_loop_index",
    "project_boundaries",
    "reset",
    "reset_film_state",
    "run_relaxation_step",
    "sample_frame_boundary_local",
    "sample_frame_boundary_world",
    "sample_frame_point_local",
    "sample_frame_point_world",
    "step",
]
