"""Editor-side film session: owns frames and drives the solver once per tick.

The session is the adapter between an editor (which moves frames around) and
the core pipeline. It never renders anything; callers read
``session.film_state.positions`` after each tick.
"""

import math
from typing import Optional

import numpy as np
from loguru import logger

from soap_film.config.film_config import FilmConfig
from soap_film.config.solver_config import SolverQuality
from soap_film.constants import FRAME_DEFAULT_POSITIONS
from soap_film.core.film_topology import build_film_topology
from soap_film.core.film_types import (
    FilmState,
    FilmTopology,
    Frame,
    FramePose,
    FrameRuntime,
    FrameType,
    SolverContext,
)
from soap_film.core.frame_sampling import create_default_frame, sample_frame_point_local, transform_points
from soap_film.core.solver import (
    compute_surface_area,
    create_film_state,
    create_solver_context,
    dispose_film_state,
    make_boundary_sampler,
    reset_film_state,
    run_relaxation_step,
)
from soap_film.errors import FrameValidationError, UnknownFrameError


class FilmSession:
    """
    Frame registry plus the single live (FilmState, SolverContext) pair.

    Adding or removing frames rebuilds the film by default. Rebuilding
    disposes the previous state and context together.

    Attributes
    ----------
    config : FilmConfig
        Quality preset, user strengths and topology options
    tick_count : int
        Ticks run since the last rebuild or reset
    """

    def __init__(self, config: Optional[FilmConfig] = None):
        self.config = config or FilmConfig()
        self.tick_count = 0

        self._frames: dict[str, Frame] = {}
        self._frame_id_counter = 0
        self._topology: Optional[FilmTopology] = None
        self._film_state: Optional[FilmState] = None
        self._solver_context: Optional[SolverContext] = None

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    @property
    def frames(self) -> list[Frame]:
        return list(self._frames.values())

    @property
    def frame_ids(self) -> list[str]:
        return list(self._frames)

    def get_frame(self, frame_id: str) -> Frame:
        try:
            return self._frames[frame_id]
        except KeyError:
            raise UnknownFrameError(frame_id) from None

    def add_frame(self, frame_type: FrameType | str, rebuild: bool = True, **kwargs) -> str:
        """
        Create a frame with default shape values at the next default placement.

        Parameters
        ----------
        frame_type : FrameType | str
            Base shape kind.
        rebuild : bool
            Rebuild the film afterwards.
        **kwargs
            Overrides for :class:`Frame` fields (``radius``, ``width``, ``pose``...).

        Returns
        -------
        str
            The new frame id (``frame-1``, ``frame-2``, ...).
        """
        self._frame_id_counter += 1
        frame_id = f"frame-{self._frame_id_counter}"

        if "pose" not in kwargs:
            slot = len(self._frames)
            placement = FRAME_DEFAULT_POSITIONS[slot % len(FRAME_DEFAULT_POSITIONS)]
            kwargs["pose"] = FramePose(position=placement, rotation=(0.0, slot * math.pi / 8, 0.0))

        frame = create_default_frame(
            frame_id,
            frame_type,
            control_point_count=self.config.topology.control_point_count,
            **kwargs,
        )
        self._frames[frame_id] = frame
        logger.info(f"Added {frame.frame_type.value} frame {frame_id}")

        if rebuild:
            self.rebuild_film()
        return frame_id

    def insert_frame(self, frame: Frame, rebuild: bool = True) -> str:
        """Register an externally built frame under its own id."""
        if frame.frame_id in self._frames:
            raise FrameValidationError(f"Frame id already in use: {frame.frame_id}")
        self._frames[frame.frame_id] = frame
        logger.info(f"Inserted {frame.frame_type.value} frame {frame.frame_id}")
        if rebuild:
            self.rebuild_film()
        return frame.frame_id

    def remove_frame(self, frame_id: str, rebuild: bool = True) -> None:
        """Remove a frame. Unknown ids are ignored."""
        if frame_id not in self._frames:
            logger.debug(f"Ignoring removal of unknown frame {frame_id}")
            return
        del self._frames[frame_id]
        logger.info(f"Removed frame {frame_id}")
        if rebuild:
            self.rebuild_film()

    def set_frame_pose(
        self,
        frame_id: str,
        position: Optional[np.ndarray] = None,
        rotation: Optional[np.ndarray] = None,
        scale: Optional[np.ndarray] = None,
    ) -> None:
        """Move a frame. The live film follows on the next tick without a rebuild."""
        frame = self.get_frame(frame_id)
        pose = frame.pose.copy()
        frame.pose = FramePose(
            position=pose.position if position is None else position,
            rotation=pose.rotation if rotation is None else rotation,
            scale=pose.scale if scale is None else scale,
        )

    def set_control_point(self, frame_id: str, index: int, point: np.ndarray) -> None:
        """Move one control point of a deformable frame (local space)."""
        frame = self.get_frame(frame_id)
        if not frame.is_deformed:
            raise FrameValidationError(f"Frame {frame_id} has no control points to edit")
        if not -len(frame.control_points) <= index < len(frame.control_points):
            raise FrameValidationError(
                f"Control point index {index} out of range for frame {frame_id}"
            )
        control_points = frame.control_points.copy()
        control_points[index] = np.asarray(point, dtype=np.float64).reshape(3)
        frame.control_points = control_points

    # ------------------------------------------------------------------
    # Film lifecycle
    # ------------------------------------------------------------------

    @property
    def topology(self) -> Optional[FilmTopology]:
        return self._topology

    @property
    def film_state(self) -> Optional[FilmState]:
        return self._film_state

    @property
    def solver_context(self) -> Optional[SolverContext]:
        return self._solver_context

    @property
    def has_film(self) -> bool:
        return self._film_state is not None

    def sample_constraint_point(self, frame_id: str, curve_param_t: float) -> Optional[np.ndarray]:
        """Live boundary point of a frame, or None once the frame is removed."""
        frame = self._frames.get(frame_id)
        if frame is None:
            return None
        local = sample_frame_point_local(frame, curve_param_t)
        return transform_points(frame.pose.matrix(), local)

    def rebuild_film(self) -> Optional[FilmTopology]:
        """
        Rebuild topology, state and context from the current frames.

        Returns
        -------
        FilmTopology | None
            The new topology, or None when the frames produce no triangles.
        """
        self._dispose_film()
        self.tick_count = 0

        runtimes = [FrameRuntime(frame) for frame in self._frames.values()]
        topology = build_film_topology(runtimes, self.config.topology.span_subdivisions)
        if topology.is_empty:
            logger.info(f"No film spans the current {len(runtimes)} frame(s)")
            return None

        self._topology = topology
        self._film_state = create_film_state(topology, self.config.active_solver_config())
        self._solver_context = create_solver_context(self._film_state)

        run_relaxation_step(
            self._film_state,
            self._solver_context,
            make_boundary_sampler(runtimes),
            compute_area=False,
        )
        logger.info(
            f"Rebuilt film: {topology.vertex_count} vertices, {topology.triangle_count} triangles, "
            f"{topology.mst_edge_count} bridges"
        )
        return topology

    def tick(self, compute_area: bool = False) -> float:
        """
        Run one relaxation step with the active solver configuration.

        Returns
        -------
        float
            Surface area when ``compute_area`` is set, NaN otherwise or when
            there is no film.
        """
        if self._film_state is None or self._solver_context is None:
            return float("nan")

        self._film_state.solver_config = self.config.active_solver_config()
        area = run_relaxation_step(
            self._film_state,
            self._solver_context,
            make_boundary_sampler(self._frames),
            compute_area=compute_area,
        )
        self.tick_count += 1
        return area

    def should_refresh_normals(self, interacting: bool = False) -> bool:
        """Whether a renderer should recompute vertex normals after this tick.

        While the user drags a frame the interval is stretched to at least 4.
        """
        interval = self.config.preset.normals_update_interval
        if interacting:
            interval = max(interval, 4)
        return self.tick_count % interval == 0

    def reset_simulation(self) -> None:
        if self._film_state is None:
            return
        reset_film_state(self._film_state)
        self.tick_count = 0

    def surface_area(self) -> float:
        if self._film_state is None:
            return 0.0
        return compute_surface_area(self._film_state.positions, self._film_state.indices)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_quality(self, quality: SolverQuality | str) -> None:
        self.config.quality = SolverQuality(quality)

    def set_relaxation_strength(self, value: float) -> None:
        self.config.relaxation_strength = value

    def set_shape_retention(self, value: float) -> None:
        self.config.shape_retention = value

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _dispose_film(self) -> None:
        if self._film_state is not None:
            dispose_film_state(self._film_state)
        self._topology = None
        self._film_state = None
        self._solver_context = None

    def dispose(self) -> None:
        """Drop the film and every frame."""
        self._dispose_film()
        self._frames.clear()
        logger.info("Film session disposed")
