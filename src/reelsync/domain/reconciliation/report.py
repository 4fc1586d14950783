"""Plain-text reports for plans and apply runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .apply import ApplyOutcome
from .contracts import IntentKind, MatchTier, ReviewKind, describe_intent

if TYPE_CHECKING:
    from .apply import ApplyResult
    from .plan import Plan


def render_plan_report(plan: Plan) -> str:
    summary = plan.summary
    lines = ["Reconciliation plan", "", "Matches:"]
    lines.extend(f"  {tier:<12} {summary.tiers[tier]}" for tier in MatchTier)
    lines.append("")
    lines.append(f"Intents ({summary.total_intents}):")
    lines.extend(f"  {kind:<18} {summary.intents[kind]}" for kind in IntentKind)

    if plan.intents:
        lines.append("")
        lines.extend(
            f"  {index:>4}. {describe_intent(intent)}"
            for index, intent in enumerate(plan.intents, start=1)
        )

    lines.append("")
    lines.append(f"Manual review ({len(plan.reviews)}):")
    for kind in ReviewKind:
        items = [item for item in plan.reviews if item.kind is kind]
        if not items:
            continue
        lines.append(f"  {kind}:")
        for item in items:
            experiments = (
                f" [experiments {', '.join(item.experiment_numbers)}]"
                if item.experiment_numbers
                else ""
            )
            lines.append(f"    - {item.subject}{experiments}: {item.detail}")
    if not plan.reviews:
        lines.append("  nothing to review")
    return "\n".join(lines) + "\n"


def render_apply_report(result: ApplyResult) -> str:
    counts = result.counts
    title = "Apply run (aborted)" if result.aborted else "Apply run"
    lines = [title, "", "Outcomes:"]
    lines.extend(f"  {outcome:<18} {counts[outcome]}" for outcome in ApplyOutcome)

    if result.reports:
        lines.append("")
        for index, report in enumerate(result.reports, start=1):
            reason = f" ({report.reason})" if report.reason else ""
            lines.append(
                f"  {index:>4}. [{report.outcome}] {describe_intent(report.intent)}{reason}"
            )
    return "\n".join(lines) + "\n"
