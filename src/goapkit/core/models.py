"""Core data models for goapkit."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .state import EffectOp, StateVar, WorldState

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from .state import StateValue

_T = TypeVar("_T")


class Action(BaseModel):
    """An operation that changes the world when its preconditions hold."""

    name: str
    cost: float = Field(default=1.0, ge=0.0)
    preconditions: WorldState = Field(default_factory=WorldState)
    effects: dict[str, EffectOp] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def builder(cls, name: str) -> ActionBuilder:
        """Return a fluent :class:`ActionBuilder` for an action called ``name``."""
        return ActionBuilder(name)

    def can_execute(self, state: WorldState) -> bool:
        """Return ``True`` when ``state`` satisfies every precondition."""
        return state.satisfies(self.preconditions)

    def apply_effect(self, state: WorldState) -> WorldState:
        """Return a new state with this action's effects applied to ``state``.

        Preconditions are not checked here; callers only apply effects to states
        already known to satisfy them.
        """
        successor = state.clone()
        successor.apply(self.effects)
        return successor

    def __str__(self) -> str:
        lines = [f"Action '{self.name}' (cost: {self.cost:.1f})"]
        if len(self.preconditions):
            lines.append("  Preconditions:")
            lines.extend(f"    - {name}: {value}" for name, value in self.preconditions.items())
        if self.effects:
            lines.append("  Effects:")
            lines.extend(
                f"    - {self.effects[name].describe(name)}" for name in sorted(self.effects)
            )
        return "\n".join(lines)


class ActionBuilder:
    """Fluent helper assembling an :class:`Action`."""

    def __init__(self, name: str) -> None:
        """Start an action called ``name`` with the default cost of 1.0."""
        self._name = name
        self._cost = 1.0
        self._preconditions = WorldState()
        self._effects: dict[str, EffectOp] = {}

    def cost(self, cost: float) -> ActionBuilder:
        """Set the action cost."""
        self._cost = cost
        return self

    def requires(self, name: str, value: StateValue) -> ActionBuilder:
        """Add a precondition on ``name``."""
        self._preconditions.set(name, value)
        return self

    def sets(self, name: str, value: StateValue) -> ActionBuilder:
        """Add an effect replacing ``name`` with ``value``."""
        self._effects[name] = EffectOp.set_to(value)
        return self

    def adds(self, name: str, delta: int | float) -> ActionBuilder:
        """Add an effect increasing ``name`` by ``delta``."""
        self._effects[name] = EffectOp.add(delta)
        return self

    def subtracts(self, name: str, delta: int | float) -> ActionBuilder:
        """Add an effect decreasing ``name`` by ``delta``."""
        self._effects[name] = EffectOp.subtract(delta)
        return self

    def build(self) -> Action:
        """Return the assembled action."""
        return Action(
            name=self._name,
            cost=self._cost,
            preconditions=self._preconditions.clone(),
            effects=dict(self._effects),
        )


class Goal(BaseModel):
    """A named, partial description of the world the planner should reach."""

    name: str
    desired: WorldState = Field(default_factory=WorldState)
    priority: int = 1

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def builder(cls, name: str) -> GoalBuilder:
        """Return a fluent :class:`GoalBuilder` for a goal called ``name``."""
        return GoalBuilder(name)

    def is_satisfied(self, state: WorldState) -> bool:
        """Return ``True`` when ``state`` meets every requirement of the goal."""
        return state.satisfies(self.desired)

    def requirement(self, name: str, as_type: type[_T]) -> _T | None:
        """Read the requirement on ``name`` as ``as_type``."""
        return self.desired.get(name, as_type)

    def is_requirement_met(self, name: str, state: WorldState) -> bool:
        """Return ``True`` when ``state`` meets the single requirement on ``name``.

        A goal without a requirement on ``name`` trivially reports ``True``.
        """
        required = self.desired.get_var(name)
        if required is None:
            return True
        current = state.get_var(name)
        return current is not None and current.meets(required)

    def with_requirement(self, name: str, value: StateValue) -> Goal:
        """Return a copy of the goal with ``name`` required to be ``value``."""
        desired = self.desired.clone()
        desired.set(name, value)
        return self.model_copy(update={"desired": desired})

    def without_requirement(self, name: str) -> Goal:
        """Return a copy of the goal without any requirement on ``name``."""
        remaining = {key: value for key, value in self.desired.variables.items() if key != name}
        return self.model_copy(update={"desired": WorldState(variables=remaining)})

    def with_priority(self, priority: int) -> Goal:
        """Return a copy of the goal with a different priority."""
        return self.model_copy(update={"priority": priority})

    def __str__(self) -> str:
        lines = [f"Goal '{self.name}' (priority: {self.priority})"]
        lines.extend(f"  - {name}: {value}" for name, value in self.desired.items())
        return "\n".join(lines)


class GoalBuilder:
    """Fluent helper assembling a :class:`Goal`."""

    def __init__(self, name: str) -> None:
        """Start a goal called ``name`` with the default priority of 1."""
        self._name = name
        self._priority = 1
        self._desired: dict[str, StateVar] = {}

    def requires(self, name: str, value: StateValue) -> GoalBuilder:
        """Require ``name`` to reach ``value``."""
        self._desired[name] = StateVar.of(value)
        return self

    def priority(self, priority: int) -> GoalBuilder:
        """Set the goal priority."""
        self._priority = priority
        return self

    def build(self) -> Goal:
        """Return the assembled goal."""
        return Goal(
            name=self._name,
            desired=WorldState(variables=dict(self._desired)),
            priority=self._priority,
        )


class Plan(BaseModel):
    """An ordered sequence of actions together with its total cost."""

    actions: list[Action] = Field(default_factory=list)
    cost: float = 0.0

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def action_names(self) -> list[str]:
        """Return the names of the planned actions in order."""
        return [action.name for action in self.actions]

    def __str__(self) -> str:
        lines = [f"Plan (total cost: {self.cost:.1f}):"]
        lines.extend(f"Step {index}: {action}" for index, action in enumerate(self.actions, start=1))
        return "\n".join(lines)


class PlannerSettings(BaseModel):
    """Tunables for :class:`goapkit.core.planner.Planner`."""

    max_expansions: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(frozen=True, extra="forbid")


class LogLevel(str, Enum):
    """Minimum severity emitted by the structured logger."""

    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


class LoggingSettings(BaseModel):
    """Output options for the structured logger."""

    json_mode: bool = False
    silent: bool = False
    level: LogLevel = LogLevel.info

    model_config = ConfigDict(frozen=True, extra="forbid")


class Config(BaseModel):
    """Top level configuration schema validated from TOML files."""

    planner: PlannerSettings = Field(default_factory=PlannerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "Action",
    "ActionBuilder",
    "Config",
    "Goal",
    "GoalBuilder",
    "LogLevel",
    "LoggingSettings",
    "Plan",
    "PlannerSettings",
]
