from __future__ import annotations

import pytest

from ioflows.utils.config import AnalysisSettings, Config


@pytest.fixture
def cfg(tmp_path):
    cfg = Config()
    yield cfg
    # Reset the shared instance to defaults
    cfg.load(tmp_path / "missing.yaml")


def test_defaults_when_file_missing(cfg, tmp_path):
    cfg.load(tmp_path / "missing.yaml")
    settings = AnalysisSettings.from_config(cfg)

    assert settings.sequential_markers == ["FF", "DLATCH", "DLE", "SR", "mem"]
    assert settings.annotation_cells == ["$scopeinfo"]
    assert settings.recognized_gates is None
    assert settings.multi_driver_policy == "union"
    assert cfg.module_patterns == ["*"]


def test_yaml_overrides(cfg, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "analysis:\n"
        "  sequential_markers: [FF, LATCH]\n"
        "  recognized_gates: [NOT, AND, OR, XOR, MUX]\n"
        "  multi_driver_policy: error\n"
        "logging:\n"
        "  level: WARNING\n"
    )
    cfg.load(path)
    settings = AnalysisSettings.from_config(cfg)

    assert settings.sequential_markers == ["FF", "LATCH"]
    assert settings.recognized_gates == ["NOT", "AND", "OR", "XOR", "MUX"]
    assert settings.multi_driver_policy == "error"
    # Keys absent from the file fall back to defaults
    assert settings.annotation_cells == ["$scopeinfo"]
    assert cfg.log_level == "WARNING"
    assert cfg.get("selection.skip_blackboxes") is True


def test_config_is_a_singleton():
    assert Config() is Config()


def test_empty_sections_keep_defaults(cfg, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("analysis:\nselection:\n  modules: [top]\n")
    cfg.load(path)

    assert cfg.get("analysis.multi_driver_policy") == "union"
    assert cfg.module_patterns == ["top"]
    assert cfg.get("selection.skip_blackboxes") is True
    assert cfg.get("analysis.missing", "fallback") == "fallback"
    # Defaults are copied, never mutated by a load
    assert Config.DEFAULT_CONFIG["selection"]["modules"] == ["*"]


def test_malformed_sections_are_rejected(cfg, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("analysis: [FF]\n")
    with pytest.raises(ValueError):
        cfg.load(path)
