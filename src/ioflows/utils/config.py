"""Configuration management for ioflows."""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
import yaml


def _merge(base: dict, overrides: dict) -> dict:
    """Recursively overlay ``overrides`` on a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(merged.get(key), dict):
            if value is None:
                # Empty YAML section
                continue
            if not isinstance(value, dict):
                raise ValueError(f"Config section '{key}' must be a mapping")
            merged[key] = _merge(merged[key], value)
            continue
        merged[key] = value
    return merged


class Config:
    """Configuration manager with lazy loading and defaults."""

    _instance: Optional["Config"] = None
    _config: dict = {}
    _loaded: bool = False

    DEFAULT_CONFIG = {
        "analysis": {
            "sequential_markers": ["FF", "DLATCH", "DLE", "SR", "mem"],
            "annotation_cells": ["$scopeinfo"],
            "skip_annotations": True,
            "recognized_gates": None,
            "multi_driver_policy": "union"
        },
        "selection": {
            "modules": ["*"],
            "skip_blackboxes": True
        },
        "logging": {
            "level": "INFO",
            "file": None
        }
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path: Optional[Path] = None) -> None:
        """Load a YAML file layered over DEFAULT_CONFIG.

        A missing file leaves the defaults in place; keys the file omits keep
        their default values.
        """
        if config_path is None:
            config_path = Path.cwd() / "config" / "config.yaml"

        config_path = Path(config_path)
        overrides = {}
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                overrides = yaml.safe_load(f) or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"{config_path}: expected a mapping at the top level")

        self._config = _merge(self.DEFAULT_CONFIG, overrides)
        self._loaded = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value using dot notation (e.g., 'analysis.sequential_markers')."""
        if not self._loaded:
            self.load()

        value = self._config
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return default
            value = value[k]
        return value

    @property
    def module_patterns(self) -> list:
        """Get module selection patterns."""
        return self.get("selection.modules", ["*"])

    @property
    def log_level(self) -> str:
        return self.get("logging.level", "INFO")

    @property
    def log_file(self) -> Optional[Path]:
        log_file = self.get("logging.file")
        return Path(log_file) if log_file else None


MULTI_DRIVER_POLICIES = ("union", "error")


@dataclass
class AnalysisSettings:
    """Settings passed explicitly into the classifier and graph builder."""
    sequential_markers: list[str] = field(
        default_factory=lambda: list(Config.DEFAULT_CONFIG["analysis"]["sequential_markers"])
    )
    annotation_cells: list[str] = field(
        default_factory=lambda: list(Config.DEFAULT_CONFIG["analysis"]["annotation_cells"])
    )
    skip_annotations: bool = True
    recognized_gates: Optional[list[str]] = None  # None = every gate kind
    multi_driver_policy: str = "union"

    def __post_init__(self):
        if self.multi_driver_policy not in MULTI_DRIVER_POLICIES:
            raise ValueError(
                f"multi_driver_policy must be one of {MULTI_DRIVER_POLICIES}, "
                f"got {self.multi_driver_policy!r}"
            )

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "AnalysisSettings":
        """Build settings from the ``analysis`` section of a Config."""
        cfg = cfg or config
        section = cfg.get("analysis", {})
        return cls(
            sequential_markers=list(section["sequential_markers"]),
            annotation_cells=list(section["annotation_cells"]),
            skip_annotations=bool(section["skip_annotations"]),
            recognized_gates=section["recognized_gates"],
            multi_driver_policy=section["multi_driver_policy"]
        )


# Global config instance
config = Config()
