"""Configuration and logging helpers."""

from .config import AnalysisSettings, Config, config
from .logger import setup_logger

__all__ = ["AnalysisSettings", "Config", "config", "setup_logger"]
