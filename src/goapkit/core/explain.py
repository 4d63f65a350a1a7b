"""Utilities for explaining action plans to users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from .models import Action, Plan
    from .state import WorldState


@dataclass(frozen=True, slots=True)
class PlanStep:
    """Human readable description of one step within a plan."""

    index: int
    action: Action
    cost: float
    cumulative_cost: float
    state_after: WorldState | None = None


def explain_plan(
    plan: Plan,
    *,
    initial: WorldState | None = None,
) -> list[PlanStep]:
    """Describe each action within ``plan``.

    Args:
        plan: The plan to explain.
        initial: Optional starting state. When given, each step also records the
            state reached after applying its action.

    Returns:
        A list of :class:`PlanStep` entries mirroring the order of actions
        within ``plan``.

    """
    steps: list[PlanStep] = []
    cumulative = 0.0
    state = initial

    for index, action in enumerate(plan.actions, start=1):
        cumulative += action.cost
        if state is not None:
            state = action.apply_effect(state)
        steps.append(
            PlanStep(
                index=index,
                action=action,
                cost=action.cost,
                cumulative_cost=cumulative,
                state_after=state,
            ),
        )

    return steps


def render_plan(plan: Plan, *, initial: WorldState | None = None) -> str:
    """Render ``plan`` as indented text, one block per step."""
    lines = [f"Plan (total cost: {plan.cost:.1f}):"]
    if not plan.actions:
        lines.append("  Goal already satisfied; no actions required.")
    for step in explain_plan(plan, initial=initial):
        lines.append(
            f"  {step.index}. {step.action.name} (cost={step.cost:.2f}, total={step.cumulative_cost:.2f})",
        )
        if step.state_after is not None:
            lines.extend(f"     {name} = {value}" for name, value in step.state_after.items())
    return "\n".join(lines)


__all__ = ["PlanStep", "explain_plan", "render_plan"]
