"""
Soap Film - relaxing triangulated films spanning posable boundary frames.

This package samples closed frame curves, bridges frames into one connected
mesh along a minimum spanning tree, and relaxes the mesh toward lower surface
area while keeping it pinned to the live frame curves.
"""

__version__ = "0.1.0"
__author__ = "Soap Film Contributors"

# Import main classes and functions
from .constants import EPSILON

from .config import (
    FilmConfig,
    SolverConfig,
    SolverQuality,
    TopologyOptions,
)

from .core import (
    BoundaryConstraint,
    FilmState,
    FilmTopology,
    Frame,
    FramePose,
    FrameRuntime,
    FrameType,
    SolverContext,
    build_film_topology,
    build_mst,
    compose_frame_matrix,
    compute_surface_area,
    create_default_frame,
    create_film_state,
    create_solver_context,
    make_boundary_sampler,
    reset,
    reset_film_state,
    run_relaxation_step,
    sample_frame_boundary_local,
    sample_frame_boundary_world,
    sample_frame_point_local,
    sample_frame_point_world,
    step,
)

from .errors import FrameValidationError, SoapFilmError, UnknownFrameError

from .session import FilmSession

# Main exports
__all__ = [
    # Version info
    "__version__",
    "__author__",

    # Constants
    "EPSILON",

    # Configuration
    "FilmConfig",
    "SolverConfig",
    "SolverQuality",
    "TopologyOptions",

    # Data model
    "BoundaryConstraint",
    "FilmState",
    "FilmTopology",
    "Frame",
    "FramePose",
    "FrameRuntime",
    "FrameType",
    "SolverContext",

    # Core functions
    "build_film_topology",
    "build_mst",
    "compose_frame_matrix",
    "compute_surface_area",
    "create_default_frame",
    "create_film_state",
    "create_solver_context",
    "make_boundary_sampler",
    "reset",
    "reset_film_state",
    "run_relaxation_step",
    "sample_frame_boundary_local",
    "sample_frame_boundary_world",
    "sample_frame_point_local",
    "sample_frame_point_world",
    "step",

    # Errors
    "FrameValidationError",
    "SoapFilmError",
    "UnknownFrameError",

    # Main classes
    "FilmSession",
]
