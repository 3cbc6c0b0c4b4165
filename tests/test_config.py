#!/usr/bin/env python3
"""
Tests for solver and film configuration.
"""

import pytest
from pydantic import ValidationError

from soap_film.config import (
    SOLVER_QUALITY_PRESETS,
    FilmConfig,
    SolverConfig,
    SolverQuality,
    TopologyOptions,
)


class TestSolverConfig:
    """Test solver parameter validation."""

    def test_defaults(self):
        config = SolverConfig()
        assert config.substeps == 4
        assert config.step_size == 0.14
        assert config.damping == 0.92
        assert config.laplacian_weight == 0.2
        assert config.relaxation_strength == 1.0
        assert config.shape_retention == 0.0

    @pytest.mark.parametrize(
        "field,value",
        [("substeps", -1), ("step_size", -0.1), ("damping", 1.5), ("laplacian_weight", -0.1)],
    )
    def test_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            SolverConfig(**{field: value})

    def test_zero_substeps_and_step_size(self):
        """Zero values are valid and make a step a no-op."""
        config = SolverConfig(substeps=0, step_size=0.0)
        assert config.substeps == 0
        assert config.step_size == 0.0

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            SolverConfig(iterations=3)

    def test_with_overrides(self):
        """Overrides return a copy and skip None values."""
        base = SolverConfig()
        updated = base.with_overrides(substeps=9, damping=None)
        assert updated.substeps == 9
        assert updated.damping == base.damping
        assert base.substeps == 4


class TestQualityPresets:
    """Test the named quality levels."""

    def test_every_level_has_a_preset(self):
        assert set(SOLVER_QUALITY_PRESETS) == set(SolverQuality)

    @pytest.mark.parametrize(
        "quality,substeps,step_size,damping,laplacian_weight,interval",
        [
            (SolverQuality.FAST, 2, 0.16, 0.91, 0.2, 4),
            (SolverQuality.BALANCED, 4, 0.14, 0.92, 0.2, 2),
            (SolverQuality.HIGH, 6, 0.13, 0.93, 0.22, 1),
        ],
    )
    def test_preset_values(self, quality, substeps, step_size, damping, laplacian_weight, interval):
        preset = SOLVER_QUALITY_PRESETS[quality]
        assert preset.substeps == substeps
        assert preset.step_size == step_size
        assert preset.damping == damping
        assert preset.laplacian_weight == laplacian_weight
        assert preset.normals_update_interval == interval

    def test_solver_config_drops_presentation_fields(self):
        config = SOLVER_QUALITY_PRESETS[SolverQuality.HIGH].solver_config()
        assert type(config) is SolverConfig
        assert "normals_update_interval" not in config.model_dump()


class TestFilmConfig:
    """Test resolution of the active solver configuration."""

    def test_default_resolves_to_balanced(self):
        active = FilmConfig().active_solver_config()
        assert active.substeps == 4
        assert active.relaxation_strength == 1.0

    def test_user_strengths_are_clamped(self):
        config = FilmConfig(relaxation_strength=5.0, shape_retention=-1.0)
        assert config.relaxation_strength == 2.0
        assert config.shape_retention == 0.0

        config.relaxation_strength = 0.0
        config.shape_retention = 0.9
        assert config.relaxation_strength == 0.05
        assert config.shape_retention == 0.5

    def test_overrides_and_strengths_apply_over_preset(self):
        config = FilmConfig(
            quality="high",
            relaxation_strength=1.5,
            shape_retention=0.2,
            solver_overrides={"substeps": 3},
        )
        active = config.active_solver_config()
        assert active.substeps == 3
        assert active.step_size == 0.13
        assert active.relaxation_strength == 1.5
        assert active.shape_retention == 0.2

    def test_user_strength_wins_over_override(self):
        config = FilmConfig(solver_overrides={"relaxation_strength": 0.3}, relaxation_strength=1.2)
        assert config.active_solver_config().relaxation_strength == 1.2

    def test_bad_override_raises(self):
        with pytest.raises(ValidationError):
            FilmConfig(solver_overrides={"substeps": 0})
        with pytest.raises(ValidationError):
            FilmConfig(solver_overrides={"step_size": 0.0})
        with pytest.raises(ValidationError):
            FilmConfig(solver_overrides={"unknown": 1})

    def test_unknown_quality(self):
        with pytest.raises(ValidationError):
            FilmConfig(quality="ultra")

    def test_topology_options(self):
        config = FilmConfig(topology={"span_subdivisions": 10})
        assert config.topology == TopologyOptions(span_subdivisions=10)
        with pytest.raises(ValidationError):
            TopologyOptions(control_point_count=3)


class TestConfigLoading:
    """Test dictionary and YAML loading."""

    def test_from_dict_with_root_key(self):
        config = FilmConfig.from_dict({"film": {"quality": "fast"}})
        assert config.quality == SolverQuality.FAST
        assert FilmConfig.from_dict(None) == FilmConfig()

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "film.yaml"
        path.write_text(
            "film:\n"
            "  quality: high\n"
            "  shape_retention: 0.25\n"
            "  solver_overrides:\n"
            "    substeps: 8\n"
            "  topology:\n"
            "    span_subdivisions: 16\n"
            "    control_point_count: 8\n"
        )
        config = FilmConfig.from_yaml(path)

        assert config.quality == SolverQuality.HIGH
        assert config.shape_retention == 0.25
        assert config.topology.span_subdivisions == 16
        assert config.topology.control_point_count == 8
        assert config.active_solver_config().substeps == 8

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert FilmConfig.from_yaml(str(path)) == FilmConfig()
