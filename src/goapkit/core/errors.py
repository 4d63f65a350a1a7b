"""Exception hierarchy raised by the goapkit planner."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from .state import VarKind


class PlannerError(RuntimeError):
    """Base class for recoverable planning failures."""


class NoPlanFound(PlannerError):
    """Raised when the search space is exhausted without reaching the goal."""

    def __init__(self, goal_name: str, *, expansions: int = 0) -> None:
        """Initialise the error with the goal that could not be reached."""
        self.goal_name = goal_name
        self.expansions = expansions
        super().__init__(f"No plan found for goal '{goal_name}' after {expansions} expansions")


class PlanningBudgetExceeded(NoPlanFound):
    """Raised when the planner hits its configured expansion budget."""

    def __init__(self, goal_name: str, *, limit: int) -> None:
        """Initialise the error with the exhausted expansion ``limit``."""
        super().__init__(goal_name, expansions=limit)
        self.limit = limit
        self.args = (f"Planning budget of {limit} expansions exceeded for goal '{goal_name}'",)


class IncompatibleStateTypes(PlannerError):
    """Raised when two state variables of different kinds are compared.

    This signals a data-modelling error on the caller side (for example a goal
    asking for text where every action produces an integer), not an unreachable
    goal.
    """

    def __init__(self, left: VarKind, right: VarKind, *, name: str | None = None) -> None:
        """Initialise the error with both variable kinds and the variable name."""
        self.left = left
        self.right = right
        self.name = name
        subject = f"state variable '{name}'" if name is not None else "state variables"
        super().__init__(
            f"Cannot compare {subject}: {left.value} is incompatible with {right.value}",
        )


__all__ = [
    "IncompatibleStateTypes",
    "NoPlanFound",
    "PlannerError",
    "PlanningBudgetExceeded",
]
