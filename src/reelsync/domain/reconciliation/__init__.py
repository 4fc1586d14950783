"""Entity reconciliation engine for the movie and experiment catalog.

Layered flow:
1) normalize titles, years and experiment numbers
2) score title similarity and resolve identity keys
3) classify matches into exact / likely / ambiguous / unmatched tiers
4) build a reviewable plan of mutation intents (pure, no storage access)
5) apply the plan idempotently through a storage port
"""

from __future__ import annotations

from .apply import (
    AbortSignal,
    ApplyOutcome,
    ApplyReport,
    ApplyResult,
    PlanApplier,
    apply_plan,
)
from .contracts import (
    DESTRUCTIVE_INTENT_KINDS,
    CreateExperiment,
    CreateLink,
    CreateMovie,
    IntentKind,
    MatchResult,
    MatchTier,
    MutationIntent,
    RemoveLink,
    ReviewItem,
    ReviewKind,
    ScoredCandidate,
    UpdateField,
    describe_intent,
)
from .identity import matches_key, resolve_key, same_entity, year_difference, years_within
from .match import Matcher, match
from .normalize import (
    clean_experiment_notes,
    clean_movie_title,
    extract_year,
    normalize,
    normalize_experiment_number,
    normalize_for_fuzzy_match,
    parse_event_date,
)
from .plan import Plan, PlanBuilder, PlanSummary
from .planner import ReconciliationPlanner, build_plan
from .policy import DEFAULT_POLICY, MatchPolicy
from .removal import DestructiveActionError, build_removal_plan
from .report import render_apply_report, render_plan_report
from .similarity import edit_distance, similarity

__all__ = [
    "DEFAULT_POLICY",
    "DESTRUCTIVE_INTENT_KINDS",
    "AbortSignal",
    "ApplyOutcome",
    "ApplyReport",
    "ApplyResult",
    "CreateExperiment",
    "CreateLink",
    "CreateMovie",
    "DestructiveActionError",
    "IntentKind",
    "MatchPolicy",
    "MatchResult",
    "MatchTier",
    "Matcher",
    "MutationIntent",
    "Plan",
    "PlanApplier",
    "PlanBuilder",
    "PlanSummary",
    "ReconciliationPlanner",
    "RemoveLink",
    "ReviewItem",
    "ReviewKind",
    "ScoredCandidate",
    "UpdateField",
    "apply_plan",
    "build_plan",
    "build_removal_plan",
    "clean_experiment_notes",
    "clean_movie_title",
    "describe_intent",
    "edit_distance",
    "extract_year",
    "match",
    "matches_key",
    "normalize",
    "normalize_experiment_number",
    "normalize_for_fuzzy_match",
    "parse_event_date",
    "render_apply_report",
    "render_plan_report",
    "resolve_key",
    "same_entity",
    "similarity",
    "year_difference",
    "years_within",
]
