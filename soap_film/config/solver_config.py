"""Relaxation solver parameters and quality presets."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SolverConfig(BaseModel):
    """
    Parameters of the explicit relaxation integrator.

    Attributes
    ----------
    substeps : int
        Inner integration iterations per relaxation step (0 skips integration)
    step_size : float
        Integration time step used for both velocity and position updates
        (0 leaves free vertices in place)
    damping : float
        Exponential velocity damping factor applied every iteration
    laplacian_weight : float
        Weight of the umbrella Laplacian smoothing term
    relaxation_strength : float
        Scale applied to area gradient and Laplacian forces (negative values act as 0)
    shape_retention : float
        Spring stiffness pulling free vertices back to their rest positions
        (negative values act as 0)
    """

    substeps: int = Field(default=4, ge=0, description="Inner integration iterations per relaxation step")
    step_size: float = Field(default=0.14, ge=0.0, description="Integration time step")
    damping: float = Field(default=0.92, ge=0.0, le=1.0, description="Exponential velocity damping factor")
    laplacian_weight: float = Field(default=0.2, ge=0.0, description="Weight of the Laplacian smoothing term")
    relaxation_strength: float = Field(default=1.0, description="Scale applied to area and Laplacian forces")
    shape_retention: float = Field(default=0.0, description="Stiffness of the pull toward rest positions")

    model_config = {
        "extra": "forbid",
    }

    def with_overrides(self, **overrides: Any) -> "SolverConfig":
        """
        Return a validated copy with selected fields replaced.

        Parameters
        ----------
        **overrides
            Field values to replace. ``None`` values are ignored so callers can
            forward optional keyword arguments unchanged.

        Returns
        -------
        SolverConfig
            New configuration; the receiver is left untouched.
        """
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return SolverConfig(**values)


class SolverQuality(str, Enum):
    """Named solver quality levels exposed to editors."""

    FAST = "fast"
    BALANCED = "balanced"
    HIGH = "high"


class SolverQualityConfig(SolverConfig):
    """Solver preset plus how often a presentation layer should refresh normals."""

    normals_update_interval: int = Field(default=2, ge=1, description="Ticks between vertex normal refreshes")

    def solver_config(self) -> SolverConfig:
        """Strip presentation-only fields."""
        return SolverConfig(**self.model_dump(exclude={"normals_update_interval"}))


SOLVER_QUALITY_PRESETS: dict[SolverQuality, SolverQualityConfig] = {
    SolverQuality.FAST: SolverQualityConfig(
        substeps=2,
        step_size=0.16,
        damping=0.91,
        laplacian_weight=0.2,
        normals_update_interval=4,
    ),
    SolverQuality.BALANCED: SolverQualityConfig(
        substeps=4,
        step_size=0.14,
        damping=0.92,
        laplacian_weight=0.2,
        normals_update_interval=2,
    ),
    SolverQuality.HIGH: SolverQualityConfig(
        substeps=6,
        step_size=0.13,
        damping=0.93,
        laplacian_weight=0.22,
        normals_update_interval=1,
    ),
}
