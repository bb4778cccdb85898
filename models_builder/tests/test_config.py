"""
Tests for the models builder configuration.
"""

from __future__ import annotations

import json

import pytest

from models_builder.pipeline.config import ModelsBuilderConfig, ModelsMode, load_config
from models_builder.pipeline.errors import ModelsBuilderError


class TestModelsMode:
    """Tests for ModelsMode capabilities."""

    @pytest.mark.parametrize(
        "mode,explicit,dll",
        [
            (ModelsMode.NOTHING, False, False),
            (ModelsMode.PURE_LIVE, False, False),
            (ModelsMode.APP_DATA, True, False),
            (ModelsMode.LIVE_APP_DATA, True, False),
            (ModelsMode.DLL, True, True),
            (ModelsMode.LIVE_DLL, True, True),
        ],
    )
    def test_capabilities(self, mode, explicit, dll):
        assert mode.supports_explicit_generation is explicit
        assert mode.is_any_dll is dll


class TestModelsBuilderConfig:
    """Tests for ModelsBuilderConfig."""

    def test_defaults(self):
        config = ModelsBuilderConfig()
        assert config.enable is True
        assert config.models_mode == ModelsMode.APP_DATA
        assert config.model_base_class == "PublishedContentModel"
        assert config.can_generate

    def test_from_dict_overrides_and_ignores_unknown_keys(self):
        config = ModelsBuilderConfig.from_dict(
            {
                "models_mode": "LiveDll",
                "models_namespace": "Site.Models",
                "additional_usings": ["Site.Extensions"],
                "unknown": 1,
            }
        )
        assert config.models_mode == ModelsMode.LIVE_DLL
        assert config.models_namespace == "Site.Models"
        assert config.additional_usings == ["Site.Extensions"]
        assert not hasattr(config, "unknown")

    def test_from_dict_rejects_unknown_mode(self):
        with pytest.raises(ModelsBuilderError):
            ModelsBuilderConfig.from_dict({"models_mode": "sometimes"})

    def test_to_dict_round_trips(self):
        config = ModelsBuilderConfig(models_mode=ModelsMode.DLL, strict_mixin_conflicts=True)
        assert ModelsBuilderConfig.from_dict(config.to_dict()) == config

    def test_cannot_generate_when_disabled_or_live(self):
        assert not ModelsBuilderConfig(enable=False).can_generate
        assert not ModelsBuilderConfig(models_mode=ModelsMode.PURE_LIVE).can_generate
        assert not ModelsBuilderConfig(models_mode=ModelsMode.NOTHING).can_generate

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"models_mode": "dll", "bin_directory": "out"}), encoding="utf-8")
        config = load_config(path)
        assert config.models_mode == ModelsMode.DLL
        assert config.bin_directory == "out"
