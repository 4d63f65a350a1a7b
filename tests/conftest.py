"""Shared fixtures for the goapkit test suite."""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from goapkit.core import Action, Goal, WorldState

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Sequence
    from pathlib import Path

    from goapkit.core import Plan

WOODCUTTER_TOML = """
[initial]
has_axe = true
has_wood = false

[goal]
name = "get_wood"
priority = 2

[goal.requires]
has_wood = true

[[actions]]
name = "move_to_tree"
cost = 1.0

[actions.effects]
at_tree = { set = true }

[[actions]]
name = "chop_tree"
cost = 2.0

[actions.requires]
has_axe = true
at_tree = true

[actions.effects]
has_wood = { set = true }
"""


def replay_plan(initial: WorldState, plan: Plan) -> WorldState:
    """Apply every action of ``plan`` to ``initial``, asserting each one is executable."""
    state = initial
    for action in plan.actions:
        assert action.can_execute(state), f"{action.name} is not executable at this step"
        state = action.apply_effect(state)
    return state


@pytest.fixture
def woodcutter_initial() -> WorldState:
    """Return the starting state of the woodcutter scenario."""
    return WorldState.from_values({"has_axe": True, "has_wood": False})


@pytest.fixture
def woodcutter_goal() -> Goal:
    """Return the goal of owning wood."""
    return Goal.builder("get_wood").requires("has_wood", True).build()


@pytest.fixture
def woodcutter_actions() -> Sequence[Action]:
    """Return the move/chop action catalogue of the woodcutter scenario."""
    move_to_tree = Action.builder("move_to_tree").cost(1.0).sets("at_tree", True).build()
    chop_tree = (
        Action.builder("chop_tree")
        .cost(2.0)
        .requires("has_axe", True)
        .requires("at_tree", True)
        .sets("has_wood", True)
        .build()
    )
    return [move_to_tree, chop_tree]


@pytest.fixture
def woodcutter_scenario_path(tmp_path: Path) -> Path:
    """Write the woodcutter scenario to a TOML file and return its path."""
    path = tmp_path / "woodcutter.toml"
    path.write_text(WOODCUTTER_TOML, encoding="utf-8")
    return path


__all__ = ["WOODCUTTER_TOML", "replay_plan"]
