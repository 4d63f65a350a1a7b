"""Tests covering the plan and explain CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from typer.testing import CliRunner

from goapkit.cli.main import app, main
from goapkit.cli.runtime import build_planning_context

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from pathlib import Path

    import pytest


runner = CliRunner()

UNREACHABLE_TOML = """
[initial]
has_wood = false

[goal]
name = "get_gold"

[goal.requires]
has_gold = true

[[actions]]
name = "get_wood"

[actions.effects]
has_wood = { set = true }
"""

MISMATCH_TOML = """
[goal]
name = "label"

[goal.requires]
value = "done"

[[actions]]
name = "count"

[actions.effects]
value = { set = 1 }
"""

WANDER_TOML = """
[initial]
steps = 0

[goal]
name = "find"

[goal.requires]
found = true

[[actions]]
name = "wander"

[actions.effects]
steps = { add = 1 }
"""


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_plan_command_text_output(woodcutter_scenario_path: Path) -> None:
    """Text output lists the goal, total cost and numbered actions."""
    result = runner.invoke(app, ["plan", str(woodcutter_scenario_path)])

    assert result.exit_code == 0, result.output
    assert "Goal: get_wood (priority=2)" in result.stdout
    assert "Total cost: 3.00" in result.stdout
    assert "  1. move_to_tree (cost=1.00)" in result.stdout
    assert "  2. chop_tree (cost=2.00)" in result.stdout


def test_plan_command_outputs_json(woodcutter_scenario_path: Path) -> None:
    """Ensure the plan command provides structured JSON output."""
    result = runner.invoke(app, ["plan", str(woodcutter_scenario_path), "--json"])
    assert result.exit_code == 0, result.output

    payload = json.loads(result.stdout)
    assert payload["goal"] == "get_wood"
    assert payload["priority"] == 2
    assert payload["cost"] == 3.0
    assert payload["actions"] == ["move_to_tree", "chop_tree"]
    assert [action["name"] for action in payload["plan"]["actions"]] == payload["actions"]


def test_plan_command_reports_satisfied_goal(tmp_path: Path) -> None:
    """An already satisfied goal yields an empty plan, not an error."""
    scenario = _write(
        tmp_path,
        "done.toml",
        '[initial]\nready = true\n\n[goal]\nname = "ready"\n\n[goal.requires]\nready = true\n',
    )

    result = runner.invoke(app, ["plan", str(scenario)])

    assert result.exit_code == 0, result.output
    assert "Total cost: 0.00" in result.stdout
    assert "(none, the goal is already satisfied)" in result.stdout


def test_explain_command_text_output(woodcutter_scenario_path: Path) -> None:
    """Explain renders every step with the resulting state."""
    result = runner.invoke(app, ["explain", str(woodcutter_scenario_path)])

    assert result.exit_code == 0, result.output
    assert "Plan (total cost: 3.0):" in result.stdout
    assert "  2. chop_tree (cost=2.00, total=3.00)" in result.stdout
    assert "     has_wood = true" in result.stdout


def test_explain_command_outputs_json(woodcutter_scenario_path: Path) -> None:
    """JSON explanations carry cumulative costs and per-step states."""
    result = runner.invoke(app, ["explain", str(woodcutter_scenario_path), "--json"])
    assert result.exit_code == 0, result.output

    payload = json.loads(result.stdout)
    assert payload["goal"] == "get_wood"
    assert [step["cumulative_cost"] for step in payload["steps"]] == [1.0, 3.0]
    assert payload["steps"][0]["state"]["at_tree"] == {"kind": "bool", "raw": True}
    assert payload["steps"][1]["state"]["has_wood"] == {"kind": "bool", "raw": True}


def test_unreachable_goal_exits_with_one(tmp_path: Path) -> None:
    """Planner failures are reported with exit code 1."""
    scenario = _write(tmp_path, "unreachable.toml", UNREACHABLE_TOML)

    result = runner.invoke(app, ["plan", str(scenario), "--json"])

    assert result.exit_code == 1
    assert "No plan found for goal 'get_gold'" in result.output


def test_type_mismatch_exits_with_one(tmp_path: Path) -> None:
    """Comparing text against an integer is reported with the variable name."""
    scenario = _write(tmp_path, "mismatch.toml", MISMATCH_TOML)

    result = runner.invoke(app, ["plan", str(scenario), "--json"])

    assert result.exit_code == 1
    assert "Cannot compare state variable 'value'" in result.output
    assert "integer is incompatible with text" in result.output


def test_max_expansions_option_bounds_search(tmp_path: Path) -> None:
    """The expansion budget turns an unbounded search into an error."""
    scenario = _write(tmp_path, "wander.toml", WANDER_TOML)

    result = runner.invoke(app, ["plan", str(scenario), "--max-expansions", "5", "--json"])

    assert result.exit_code == 1
    assert "Planning budget of 5 expansions exceeded" in result.output


def test_config_file_sets_budget(tmp_path: Path) -> None:
    """A separate configuration file replaces the scenario's settings."""
    scenario = _write(tmp_path, "wander.toml", WANDER_TOML + "\n[planner]\nmax_expansions = 1000\n")
    config = _write(tmp_path, "goapkit.toml", "[planner]\nmax_expansions = 3\n\n[logging]\nsilent = true\n")

    result = runner.invoke(app, ["plan", str(scenario), "--config", str(config)])

    assert result.exit_code == 1
    assert "Planning budget of 3 expansions exceeded" in result.output


def test_missing_scenario_exits_with_two(tmp_path: Path) -> None:
    """Unreadable inputs are usage errors."""
    result = runner.invoke(app, ["plan", str(tmp_path / "missing.toml")])

    assert result.exit_code == 2
    assert "File not found" in result.output


def test_invalid_scenario_exits_with_two(tmp_path: Path) -> None:
    """Validation failures are reported without a traceback."""
    scenario = _write(tmp_path, "broken.toml", '[goal]\nname = "x"\n\n[[actions]]\nname = "a"\ncost = -1\n')

    result = runner.invoke(app, ["plan", str(scenario)])

    assert result.exit_code == 2
    assert "cost" in result.output


def test_build_planning_context_applies_overrides(woodcutter_scenario_path: Path) -> None:
    """The CLI budget override wins over configuration defaults."""
    context = build_planning_context(
        woodcutter_scenario_path,
        None,
        json_logs=True,
        silence_logs=True,
        max_expansions=7,
    )

    assert context.config.planner.max_expansions == 7
    assert context.planner.max_expansions == 7
    assert context.logger.json_mode is True
    assert context.compute_plan().action_names == ["move_to_tree", "chop_tree"]


def test_main_returns_exit_status(woodcutter_scenario_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """``main`` runs a command and returns zero on success."""
    assert main(["plan", str(woodcutter_scenario_path), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["actions"] == ["move_to_tree", "chop_tree"]
