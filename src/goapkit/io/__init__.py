"""Input/output helpers for goapkit."""

from .config import Scenario, load_config, load_scenario
from .logging import StructuredLogger

__all__ = ["Scenario", "StructuredLogger", "load_config", "load_scenario"]
