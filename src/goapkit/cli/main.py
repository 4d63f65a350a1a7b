"""CLI entry point for goapkit built with Typer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer

from goapkit.cli.runtime import PlanningContext, build_planning_context
from goapkit.core.errors import PlannerError
from goapkit.core.explain import explain_plan, render_plan

if TYPE_CHECKING:
    from collections.abc import Sequence
    from goapkit.core.models import Plan


app = typer.Typer(add_completion=False, no_args_is_help=True)


def _emit_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False))


def _prepare_context(
    scenario: Path,
    config_path: Path | None,
    *,
    json_logs: bool,
    max_expansions: int | None,
) -> PlanningContext:
    try:
        return build_planning_context(
            scenario,
            config_path,
            json_logs=json_logs,
            silence_logs=json_logs,
            max_expansions=max_expansions,
        )
    except FileNotFoundError as exc:
        typer.echo(f"File not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


def _compute_plan(context: PlanningContext) -> Plan:
    try:
        return context.compute_plan()
    except PlannerError as exc:
        context.logger.error("planning failed", error=str(exc), error_type=type(exc).__name__)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def cli_root() -> None:
    """Top-level CLI group for goapkit."""


ScenarioArgument = Annotated[Path, typer.Argument(help="Path to a scenario TOML.")]
ConfigOption = Annotated[Path | None, typer.Option(help="Path to a configuration TOML.")]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", "--json-output", help="Emit JSON instead of text."),
]
MaxExpansionsOption = Annotated[
    int | None,
    typer.Option(min=1, help="Abort planning after this many node expansions."),
]


@app.command("plan")
def plan_command(
    scenario: ScenarioArgument,
    config: ConfigOption = None,
    json_output: JsonFlag = False,
    max_expansions: MaxExpansionsOption = None,
) -> None:
    """Compute and display the cheapest plan for a scenario."""
    context = _prepare_context(scenario, config, json_logs=json_output, max_expansions=max_expansions)
    plan = _compute_plan(context)
    goal = context.scenario.goal

    if json_output:
        payload = {
            "goal": goal.name,
            "priority": goal.priority,
            "cost": plan.cost,
            "actions": plan.action_names,
            "plan": plan.model_dump(mode="json"),
        }
        _emit_json(payload)
        return

    lines: list[str] = [
        f"Goal: {goal.name} (priority={goal.priority})",
        f"Total cost: {plan.cost:.2f}",
        "Actions:",
    ]
    if not plan.actions:
        lines.append("  (none, the goal is already satisfied)")
    for index, action in enumerate(plan.actions, start=1):
        lines.append(f"  {index}. {action.name} (cost={action.cost:.2f})")
    typer.echo("\n".join(lines))


@app.command("explain")
def explain_command(
    scenario: ScenarioArgument,
    config: ConfigOption = None,
    json_output: JsonFlag = False,
    max_expansions: MaxExpansionsOption = None,
) -> None:
    """Explain each step of the plan and the state it leads to."""
    context = _prepare_context(scenario, config, json_logs=json_output, max_expansions=max_expansions)
    plan = _compute_plan(context)
    initial = context.scenario.initial

    if json_output:
        steps = explain_plan(plan, initial=initial)
        payload = {
            "goal": context.scenario.goal.name,
            "cost": plan.cost,
            "steps": [
                {
                    "index": step.index,
                    "action": step.action.name,
                    "cost": step.cost,
                    "cumulative_cost": step.cumulative_cost,
                    "state": {
                        name: value.model_dump(mode="json")
                        for name, value in (step.state_after.items() if step.state_after is not None else [])
                    },
                }
                for step in steps
            ],
        }
        _emit_json(payload)
        return

    typer.echo(render_plan(plan, initial=initial))


def main(argv: Sequence[str] | None = None) -> int:
    """Execute the goapkit CLI and return the exit status."""
    command = typer.main.get_command(app)
    try:
        result = command.main(args=list(argv or []), prog_name="goapkit", standalone_mode=False)
    except SystemExit as exc:  # pragma: no cover - Typer propagates exit codes via SystemExit
        return int(exc.code or 0)
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
