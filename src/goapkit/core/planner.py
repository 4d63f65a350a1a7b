"""A* planner and heuristic utilities for goapkit."""

from __future__ import annotations

import heapq
import itertools
import math
from typing import TYPE_CHECKING

from .errors import IncompatibleStateTypes, NoPlanFound, PlanningBudgetExceeded
from .models import Action, Plan

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Sequence

    from goapkit.io.logging import StructuredLogger

    from .models import Goal, PlannerSettings
    from .state import WorldState


def heuristic_distance(state: WorldState, desired: WorldState) -> int:
    """Estimate how far ``state`` is from ``desired``.

    The estimate sums :meth:`StateVar.distance` over every variable the goal
    mentions, counting a missing variable as ``1``. It is not admissible in
    general: an action that moves several variables at once, or an ``add`` that
    overshoots a threshold, can make it overestimate.

    Args:
        state: The state being evaluated.
        desired: The goal's desired (partial) state.

    Returns:
        The summed distance.

    Raises:
        IncompatibleStateTypes: If a variable has a different kind in ``state``
            than in ``desired``.

    """
    total = 0
    for name, target in desired.variables.items():
        current = state.variables.get(name)
        if current is None:
            total += 1
            continue
        try:
            total += current.distance(target)
        except IncompatibleStateTypes as exc:
            raise IncompatibleStateTypes(exc.left, exc.right, name=name) from exc
    return total


class Planner:
    """A* search over world states, using actions as edges.

    The planner keeps no search state between calls, so one instance can serve
    independent ``plan`` calls concurrently.
    """

    def __init__(
        self,
        *,
        max_expansions: int | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        """Create a planner.

        Args:
            max_expansions: Optional cap on the number of expanded nodes. Useful
                for unbounded numeric state spaces where a missing plan would
                otherwise never be reported.
            logger: Optional structured logger receiving planning events.

        """
        if max_expansions is not None and max_expansions < 1:
            msg = "max_expansions must be a positive integer"
            raise ValueError(msg)
        self._max_expansions = max_expansions
        self._logger = logger

    @classmethod
    def from_settings(
        cls,
        settings: PlannerSettings,
        *,
        logger: StructuredLogger | None = None,
    ) -> Planner:
        """Create a planner from validated :class:`PlannerSettings`."""
        return cls(max_expansions=settings.max_expansions, logger=logger)

    @property
    def max_expansions(self) -> int | None:
        """Return the expansion budget, ``None`` when unbounded."""
        return self._max_expansions

    def plan(
        self,
        initial: WorldState,
        goal: Goal,
        actions: Sequence[Action],
    ) -> Plan:
        """Find the cheapest sequence of ``actions`` turning ``initial`` into a goal state.

        Nodes are popped in ``f = g + h`` order; ties pop in the order they were
        pushed, so results are reproducible for a fixed action ordering.

        Raises:
            NoPlanFound: If every reachable state was explored without success.
            PlanningBudgetExceeded: If ``max_expansions`` nodes were expanded first.
            IncompatibleStateTypes: If a state holds a goal variable with a
                different kind than the goal requires.

        """
        desired = goal.desired
        self._log("debug", "planning started", goal=goal.name, actions=len(actions))

        counter = itertools.count()
        g_score: dict[WorldState, float] = {initial: 0.0}
        came_from: dict[WorldState, tuple[WorldState, Action]] = {}
        open_set: list[tuple[float, int, WorldState]] = []
        heapq.heappush(open_set, (float(heuristic_distance(initial, desired)), next(counter), initial))
        expansions = 0

        while open_set:
            _, _, current = heapq.heappop(open_set)
            if goal.is_satisfied(current):
                plan = _reconstruct_plan(came_from, initial, current)
                self._log(
                    "info",
                    "plan found",
                    goal=goal.name,
                    actions=plan.action_names,
                    cost=plan.cost,
                    expansions=expansions,
                )
                return plan

            if self._max_expansions is not None and expansions >= self._max_expansions:
                self._log("warning", "planning budget exceeded", goal=goal.name, limit=self._max_expansions)
                raise PlanningBudgetExceeded(goal.name, limit=self._max_expansions)
            expansions += 1

            current_g = g_score[current]
            for action in actions:
                if not action.can_execute(current):
                    continue
                successor = action.apply_effect(current)
                tentative_g = current_g + action.cost
                if tentative_g < g_score.get(successor, math.inf):
                    came_from[successor] = (current, action)
                    g_score[successor] = tentative_g
                    f_score = tentative_g + heuristic_distance(successor, desired)
                    heapq.heappush(open_set, (f_score, next(counter), successor))

        self._log("warning", "no plan found", goal=goal.name, expansions=expansions)
        raise NoPlanFound(goal.name, expansions=expansions)

    def _log(self, level: str, message: str, **fields: object) -> None:
        if self._logger is None:
            return
        getattr(self._logger, level)(message, **fields)


def _reconstruct_plan(
    came_from: dict[WorldState, tuple[WorldState, Action]],
    initial: WorldState,
    goal_state: WorldState,
) -> Plan:
    steps: list[Action] = []
    node = goal_state
    while node in came_from:
        node, action = came_from[node]
        steps.append(action)
        if len(steps) > len(came_from):
            msg = "predecessor chain is cyclic"
            raise RuntimeError(msg)
    if node != initial:
        msg = "predecessor chain does not lead back to the initial state"
        raise RuntimeError(msg)

    steps.reverse()
    return Plan(actions=steps, cost=sum(action.cost for action in steps))


__all__ = ["Planner", "heuristic_distance"]
