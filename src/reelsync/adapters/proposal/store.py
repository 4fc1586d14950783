"""Proposal files: the reviewable hand-off between planning and applying."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import PROPOSAL_VERSION, ProposalDocument
from .translator import document_to_plan, plan_to_document

if TYPE_CHECKING:
    from pathlib import Path

    from reelsync.domain.reconciliation.plan import Plan

log = logging.getLogger(__name__)


class ProposalFormatError(ValueError):
    """Raised when a proposal file cannot be turned back into a plan."""


def write_proposal(plan: Plan, path: Path, *, source: str | None = None) -> ProposalDocument:
    document = plan_to_document(plan, source=source, generated_at=datetime.now(UTC))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document.model_dump_json(indent=2) + "\n", encoding="utf-8")
    log.info("Wrote proposal with %d intents to %s", len(document.intents), path)
    return document


def read_proposal(path: Path) -> Plan:
    try:
        payload: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProposalFormatError(f"{path}: {exc}") from exc

    version = payload.get("version") if isinstance(payload, dict) else None
    if version != PROPOSAL_VERSION:
        raise ProposalFormatError(
            f"{path}: unsupported proposal version {version!r} (expected {PROPOSAL_VERSION})"
        )

    try:
        document = ProposalDocument.model_validate(payload)
        plan = document_to_plan(document)
    except (ValidationError, ValueError) as exc:
        raise ProposalFormatError(f"{path}: {exc}") from exc

    log.info("Read proposal with %d intents from %s", len(plan.intents), path)
    return plan
