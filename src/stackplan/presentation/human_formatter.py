"""Human-friendly output formatter - converts plans and apply results to readable text."""

import json
import os
from typing import Any, List, Optional
from ..execution.models import ActionStatus, ApplyResult
from ..graph.dependency_graph import DeploymentGraph
from ..planning.models import ActionType, Plan, PlannedAction


def _use_ascii(ascii_mode: Optional[bool] = None) -> bool:
    """Resolve whether to use ASCII output (checked at format time)."""
    if ascii_mode is not None:
        return bool(ascii_mode)
    return os.environ.get("STACKPLAN_ASCII", "").lower() in ("1", "true", "yes")


def _box(title: str, width: int = 65, ascii_mode: bool = False) -> List[str]:
    """Return box-drawing header lines."""
    b = {"tl": "+", "tr": "+", "h": "-", "v": "|"} if ascii_mode else {"tl": "┌", "tr": "┐", "h": "─", "v": "│"}
    h = b["h"] * (width - 2)
    return [
        b["tl"] + h + b["tr"],
        f"{b['v']} {title:<{width - 4}} {b['v']}",
        ("+" if ascii_mode else "└") + h + ("+" if ascii_mode else "┘"),
        "",
    ]


ACTION_SYMBOLS = {
    ActionType.CREATE: "+",
    ActionType.UPDATE: "~",
    ActionType.DELETE: "-",
}

STATUS_LABELS = {
    ActionStatus.SUCCEEDED: ("[OK]", "✅"),
    ActionStatus.FAILED: ("[FAIL]", "❌"),
    ActionStatus.UNATTEMPTED: ("[SKIP]", "⏸️ "),
    ActionStatus.IN_FLIGHT: ("[..]", "⏳"),
    ActionStatus.PENDING: ("[..]", "⏳"),
}


def _render_value(value: Any) -> str:
    if value is None:
        return "(none)"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def _format_action(planned: PlannedAction) -> List[str]:
    action = ActionType(planned.action)
    lines = [f"  {ACTION_SYMBOLS[action]} {planned.node_id} ({planned.kind.value}) {action.value.lower()}"]
    for key, change in planned.changes.items():
        if action == ActionType.CREATE:
            lines.append(f"      {key} = {_render_value(change.after)}")
        elif action == ActionType.DELETE:
            lines.append(f"      {key} = {_render_value(change.before)}")
        else:
            lines.append(f"      {key}: {_render_value(change.before)} -> {_render_value(change.after)}")
    return lines


def format_plan(plan: Plan, ascii_mode: Optional[bool] = None) -> str:
    """Render a plan the way a reviewer reads it: one block per action."""
    ascii_mode = _use_ascii(ascii_mode)
    lines = _box(f"StackPlan: {plan.stack}", ascii_mode=ascii_mode)

    if plan.is_empty:
        lines.append("No changes. Infrastructure matches the declaration.")
        return "\n".join(lines)

    for planned in plan.actions:
        lines.extend(_format_action(planned))
    lines.append("")

    summary = plan.summary()
    lines.append(
        f"Plan: {summary['CREATE']} to create, {summary['UPDATE']} to update, "
        f"{summary['DELETE']} to delete."
    )
    return "\n".join(lines)


def format_apply_result(result: ApplyResult, ascii_mode: Optional[bool] = None) -> str:
    """Render per-action outcomes plus a one-line summary."""
    ascii_mode = _use_ascii(ascii_mode)
    lines = _box(f"Apply: {result.stack}", ascii_mode=ascii_mode)

    for outcome in result.outcomes:
        ascii_label, emoji = STATUS_LABELS[ActionStatus(outcome.status)]
        label = ascii_label if ascii_mode else emoji
        line = f"  {label} {outcome.action.value:<6} {outcome.node_id}"
        if outcome.provider_id:
            line += f" ({outcome.provider_id})"
        if outcome.attempts > 1:
            line += f" after {outcome.attempts} attempts"
        lines.append(line)
        if outcome.error:
            lines.append(f"      error: {outcome.error}")

    lines.append("")
    if result.ok:
        lines.append(f"Apply complete: {len(result.succeeded)} succeeded.")
    else:
        status = "cancelled" if result.cancelled else "failed"
        lines.append(
            f"Apply {status}: {len(result.succeeded)} succeeded, {len(result.failed)} failed, "
            f"{len(result.unattempted)} unattempted."
        )
    return "\n".join(lines)


def format_graph(graph: DeploymentGraph) -> str:
    """Nodes in apply order with what each one references."""
    lines = [f"Stack {graph.name}: {len(graph)} resources", ""]
    for position, node_id in enumerate(graph.topological_order(), start=1):
        node = graph.get_node(node_id)
        references = graph.references_of(node_id)
        suffix = f" -> {', '.join(references)}" if references else ""
        lines.append(f"{position:>3}. {node_id} ({node.kind.value}){suffix}")
    return "\n".join(lines)
