"""Helpers shared across CLI commands for loading scenarios and planning."""

from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from goapkit.core.planner import Planner
from goapkit.io import StructuredLogger, load_config, load_scenario

if TYPE_CHECKING:
    from pathlib import Path

    from goapkit.core.models import Config, Plan
    from goapkit.io import Scenario


@dataclass(slots=True)
class PlanningContext:
    """Container bundling CLI dependencies for planning."""

    scenario: Scenario
    config: Config
    logger: StructuredLogger
    planner: Planner

    def compute_plan(self) -> Plan:
        """Run the planner on the loaded scenario."""
        scenario = self.scenario
        return self.planner.plan(scenario.initial, scenario.goal, scenario.actions)


def load_cli_config(config_path: Path | None, scenario: Scenario) -> Config:
    """Load configuration from ``config_path`` or fall back to the scenario's own."""
    if config_path is None:
        return scenario.config
    return load_config(path=config_path)


def build_planning_context(
    scenario_path: Path,
    config_path: Path | None,
    *,
    json_logs: bool,
    silence_logs: bool,
    max_expansions: int | None = None,
) -> PlanningContext:
    """Assemble the context required by CLI commands.

    ``max_expansions`` overrides the budget from the configuration when given.
    """
    scenario = load_scenario(path=scenario_path)
    config = load_cli_config(config_path, scenario)
    if max_expansions is not None:
        config = load_config(
            data="",
            overrides={
                "planner": {**config.planner.model_dump(), "max_expansions": max_expansions},
                "logging": config.logging.model_dump(),
            },
        )

    silent = silence_logs or config.logging.silent
    stream = io.StringIO() if silent else sys.stderr
    logger = StructuredLogger(
        name="goapkit.cli",
        json_mode=json_logs or config.logging.json_mode,
        stream=stream,
        level=config.logging.level,
    ).bind(scenario=scenario_path.name)
    planner = Planner.from_settings(config.planner, logger=logger)
    return PlanningContext(scenario=scenario, config=config, logger=logger, planner=planner)


__all__ = ["PlanningContext", "build_planning_context", "load_cli_config"]
