"""Proposal document adapter (plan review hand-off)."""

from __future__ import annotations

from .schema import PROPOSAL_VERSION, ProposalDocument
from .store import ProposalFormatError, read_proposal, write_proposal
from .translator import document_to_plan, parse_entity_key, plan_to_document

__all__ = [
    "PROPOSAL_VERSION",
    "ProposalDocument",
    "ProposalFormatError",
    "document_to_plan",
    "parse_entity_key",
    "plan_to_document",
    "read_proposal",
    "write_proposal",
]
