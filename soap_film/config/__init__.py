"""Configuration classes for film building and relaxation"""

from soap_film.config.film_config import FilmConfig
from soap_film.config.solver_config import (
    SOLVER_QUALITY_PRESETS,
    SolverConfig,
    SolverQuality,
    SolverQualityConfig,
)
from soap_film.config.topology_options import TopologyOptions

__all__ = [
    'FilmConfig',
    'SolverConfig',
    'SolverQuality',
    'SolverQualityConfig',
    'SOLVER_QUALITY_PRESETS',
    'TopologyOptions',
]
