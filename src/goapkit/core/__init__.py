"""Core GOAP components for goapkit."""

from .errors import IncompatibleStateTypes, NoPlanFound, PlannerError, PlanningBudgetExceeded
from .explain import PlanStep, explain_plan, render_plan
from .models import (
    Action,
    ActionBuilder,
    Config,
    Goal,
    GoalBuilder,
    LogLevel,
    LoggingSettings,
    Plan,
    PlannerSettings,
)
from .planner import Planner, heuristic_distance
from .state import (
    DECIMAL_SCALE,
    EffectKind,
    EffectOp,
    StateBuilder,
    StateVar,
    VarKind,
    WorldState,
    enum_to_state_var,
    from_float,
    to_float,
)

__all__ = [
    "DECIMAL_SCALE",
    "Action",
    "ActionBuilder",
    "Config",
    "EffectKind",
    "EffectOp",
    "Goal",
    "GoalBuilder",
    "IncompatibleStateTypes",
    "LogLevel",
    "LoggingSettings",
    "NoPlanFound",
    "Plan",
    "PlanStep",
    "PlannerError",
    "PlannerSettings",
    "Planner",
    "PlanningBudgetExceeded",
    "StateBuilder",
    "StateVar",
    "VarKind",
    "WorldState",
    "enum_to_state_var",
    "explain_plan",
    "from_float",
    "heuristic_distance",
    "render_plan",
    "to_float",
]
