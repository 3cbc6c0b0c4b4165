"""Combined film configuration: quality preset, user strengths and topology options."""

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from soap_film.config.solver_config import (
    SOLVER_QUALITY_PRESETS,
    SolverConfig,
    SolverQuality,
    SolverQualityConfig,
)
from soap_film.config.topology_options import TopologyOptions
from soap_film.constants import (
    RELAXATION_STRENGTH_RANGE,
    SHAPE_RETENTION_RANGE,
    clamp,
)


class FilmConfig(BaseModel):
    """
    Editor-facing configuration that resolves to a concrete :class:`SolverConfig`.

    The active solver configuration is the selected quality preset, updated
    with any explicit ``solver_overrides`` and finally with the user-facing
    ``relaxation_strength`` and ``shape_retention`` values.

    Attributes
    ----------
    quality : SolverQuality
        Named solver preset
    relaxation_strength : float
        User relaxation strength, clamped to [0.05, 2]
    shape_retention : float
        User shape retention, clamped to [0, 0.5]
    solver_overrides : dict[str, Any]
        Explicit solver fields that replace preset values
    topology : TopologyOptions
        Topology build options

    The YAML layout accepted by :meth:`from_yaml` is::

        film:
          quality: balanced
          relaxation_strength: 1.0
          shape_retention: 0.0
          solver_overrides:
            substeps: 5
          topology:
            span_subdivisions: 24
    """

    quality: SolverQuality = Field(default=SolverQuality.BALANCED, description="Named solver preset")
    relaxation_strength: float = Field(default=1.0, description="User relaxation strength")
    shape_retention: float = Field(default=0.0, description="User shape retention")
    solver_overrides: dict[str, Any] = Field(default_factory=dict, description="Explicit solver field overrides")
    topology: TopologyOptions = Field(default_factory=TopologyOptions, description="Topology build options")

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    @field_validator("relaxation_strength", mode="after")
    @classmethod
    def clamp_relaxation_strength(cls, v: float) -> float:
        return clamp(v, RELAXATION_STRENGTH_RANGE)

    @field_validator("shape_retention", mode="after")
    @classmethod
    def clamp_shape_retention(cls, v: float) -> float:
        return clamp(v, SHAPE_RETENTION_RANGE)

    @model_validator(mode="after")
    def check_solver_overrides(self) -> "FilmConfig":
        # Fails early on unknown or out-of-range override values
        active = self.active_solver_config()
        if active.substeps < 1 or active.step_size <= 0.0:
            raise ValueError(
                f"Editor films need at least one substep and a positive step size, "
                f"got substeps={active.substeps}, step_size={active.step_size}"
            )
        return self

    @property
    def preset(self) -> SolverQualityConfig:
        """Quality preset currently selected."""
        return SOLVER_QUALITY_PRESETS[self.quality]

    def active_solver_config(self) -> SolverConfig:
        """Resolve the solver configuration a step should run with."""
        return (
            self.preset.solver_config()
            .with_overrides(**self.solver_overrides)
            .with_overrides(
                relaxation_strength=self.relaxation_strength,
                shape_retention=self.shape_retention,
            )
        )

    @classmethod
    def from_dict(cls, props: dict[str, Any] | None) -> "FilmConfig":
        """
        Build a configuration from a plain dictionary.

        Accepts either the bare field mapping or one nested under a ``film`` key.
        """
        props = props or {}
        if "film" in props:
            props = props["film"] or {}
        return cls(**props)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "FilmConfig":
        """Load a configuration from a YAML file."""
        path = Path(path)
        with open(path, "r") as f:
            file_data = yaml.safe_load(f)
        logger.debug(f"Loaded film config from {path}")
        return cls.from_dict(file_data)
