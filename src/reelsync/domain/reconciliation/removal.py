"""Link removal: the only destructive operation, invoked separately.

The planner never emits removals. A removal plan is built on explicit human
request and is only executed with ``allow_destructive=True``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .contracts import RemoveLink
from .normalize import normalize_experiment_number
from .plan import PlanBuilder

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reelsync.domain.model import LinkKey

    from .plan import Plan

log = logging.getLogger(__name__)


class DestructiveActionError(RuntimeError):
    """Raised when a destructive operation is requested without confirmation."""


def build_removal_plan(links: Iterable[LinkKey], *, confirmed: bool = False) -> Plan:
    """Return a plan removing ``links``; refuses to build one unconfirmed."""

    if not confirmed:
        raise DestructiveActionError("Removing links requires explicit confirmation")

    builder = PlanBuilder()
    seen: set[LinkKey] = set()
    for movie_key, experiment_number in links:
        number = normalize_experiment_number(experiment_number)
        if not number:
            raise ValueError(f"Invalid experiment number: {experiment_number!r}")
        if (movie_key, number) in seen:
            continue
        seen.add((movie_key, number))
        builder.add_intent(RemoveLink(movie_key=movie_key, experiment_number=number))

    plan = builder.build()
    log.info("Planned removal of %d links", len(plan.intents))
    return plan
