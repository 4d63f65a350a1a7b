"""Configuration and scenario loading utilities for goapkit."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, model_validator

from goapkit.core.models import Action, Config, Goal
from goapkit.core.state import EffectOp, WorldState

ScalarValue = StrictBool | StrictInt | StrictFloat | StrictStr


def load_config(
    *,
    path: Path | str | None = None,
    data: str | bytes | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Load and validate configuration from TOML data.

    Exactly one of ``path`` or ``data`` must be provided. ``overrides`` allows
    callers to patch specific sections before validation, which is useful for
    CLI flags or tests. Only the ``[planner]`` and ``[logging]`` tables are read,
    so a scenario file can carry its own configuration.
    """
    raw_content = _read_toml(path=path, data=data)

    if overrides is not None:
        typed_overrides: dict[str, Any] = {str(key): value for key, value in overrides.items()}
        raw_content = _merge_dicts(dict(raw_content), typed_overrides)

    return Config.model_validate(_normalise(raw_content))


class Scenario(BaseModel):
    """A complete planning problem: start state, goal, actions and configuration."""

    initial: WorldState
    goal: Goal
    actions: list[Action]
    config: Config = Field(default_factory=Config)

    model_config = ConfigDict(frozen=True, extra="forbid")


def load_scenario(
    *,
    path: Path | str | None = None,
    data: str | bytes | None = None,
) -> Scenario:
    """Load a planning scenario from TOML.

    The document holds an ``[initial]`` table of values, a ``[goal]`` table with
    ``name``, optional ``priority`` and a ``[goal.requires]`` table, and any number
    of ``[[actions]]`` entries with ``name``, ``cost``, ``requires`` and
    ``effects``. Each effect is an inline table with exactly one of ``set``,
    ``add`` or ``subtract``. TOML booleans, integers, floats and strings map to
    boolean, integer, decimal and text state variables. Optional ``[planner]`` and
    ``[logging]`` tables become the scenario's :class:`Config`; any other top-level
    table is rejected.
    """
    raw_content = _read_toml(path=path, data=data)
    document = _ScenarioDocument.model_validate(raw_content)
    return Scenario(
        initial=WorldState.from_values(document.initial),
        goal=document.goal.to_goal(),
        actions=[entry.to_action() for entry in document.actions],
        config=Config.model_validate(_normalise(raw_content)),
    )


class _EffectEntry(BaseModel):
    set_value: ScalarValue | None = Field(default=None, alias="set")
    add: StrictInt | StrictFloat | None = None
    subtract: StrictInt | StrictFloat | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _exactly_one_operation(self) -> _EffectEntry:
        provided = [value for value in (self.set_value, self.add, self.subtract) if value is not None]
        if len(provided) != 1:
            msg = "each effect must define exactly one of 'set', 'add' or 'subtract'"
            raise ValueError(msg)
        return self

    def to_effect(self) -> EffectOp:
        if self.set_value is not None:
            return EffectOp.set_to(self.set_value)
        if self.add is not None:
            return EffectOp.add(self.add)
        return EffectOp.subtract(cast("int | float", self.subtract))


class _ActionEntry(BaseModel):
    name: str
    cost: float = Field(default=1.0, ge=0.0)
    requires: dict[str, ScalarValue] = Field(default_factory=dict)
    effects: dict[str, _EffectEntry] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def to_action(self) -> Action:
        return Action(
            name=self.name,
            cost=self.cost,
            preconditions=WorldState.from_values(self.requires),
            effects={name: entry.to_effect() for name, entry in self.effects.items()},
        )


class _GoalEntry(BaseModel):
    name: str
    priority: int = 1
    requires: dict[str, ScalarValue] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def to_goal(self) -> Goal:
        return Goal(name=self.name, desired=WorldState.from_values(self.requires), priority=self.priority)


class _ScenarioDocument(BaseModel):
    initial: dict[str, ScalarValue] = Field(default_factory=dict)
    goal: _GoalEntry
    actions: list[_ActionEntry] = Field(default_factory=list)
    planner: dict[str, Any] = Field(default_factory=dict)
    logging: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


def _read_toml(*, path: Path | str | None, data: str | bytes | None) -> dict[str, Any]:
    if (path is None) == (data is None):
        msg = "Provide exactly one of 'path' or 'data' when loading configuration."
        raise ValueError(msg)

    if data is not None:
        return tomllib.loads(data if isinstance(data, str) else data.decode())

    source = Path(cast("Path | str", path))
    if not source.exists():
        raise FileNotFoundError(source)
    if not source.is_file():
        msg = f"Configuration path {source} is not a file."
        raise ValueError(msg)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to read configuration file {source}: {exc}"
        raise ValueError(msg) from exc
    return tomllib.loads(text)


def _merge_dicts(base: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``updates`` into ``base``; nested tables merge key by key."""
    for key, value in updates.items():
        current = base.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            base[key] = _merge_dicts(dict(cast("Mapping[str, Any]", current)), cast("Mapping[str, Any]", value))
        else:
            base[key] = value
    return base


def _normalise(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "planner": raw.get("planner", {}),
        "logging": raw.get("logging", {}),
    }


__all__ = ["Scenario", "load_config", "load_scenario"]
