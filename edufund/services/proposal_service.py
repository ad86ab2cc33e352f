from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from edufund.models.proposal import Proposal
from edufund.schemas.proposal import ProposalCreate


logger = logging.getLogger(__name__)

# Review lifecycle; anything not listed is terminal.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "submitted": frozenset({"under_review", "rejected", "withdrawn"}),
    "under_review": frozenset({"approved", "rejected", "withdrawn"}),
}

WITHDRAWABLE_STATUSES = frozenset({"submitted", "under_review"})


class InvalidStatusTransition(ValueError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move proposal from '{current}' to '{target}'")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def create_proposal(db: Session, external_id: str | None, payload: ProposalCreate) -> Proposal:
    now = _utc_now()
    financial = payload.financial_info
    proposal = Proposal(
        user_id=external_id,
        personal_info=payload.personal_info.model_dump(by_alias=True),
        funding_goals=payload.funding_goals.model_dump(by_alias=True),
        financial_info=financial.model_dump(by_alias=True) if financial is not None else None,
        essay_or_statement=payload.essay_or_statement,
        supporting_documents=[doc.model_dump(by_alias=True) for doc in payload.supporting_documents],
        status="submitted",
        submitted_at=now,
        updated_at=now,
    )
    db.add(proposal)
    db.commit()
    db.refresh(proposal)
    logger.info("proposal.submitted id=%s user_id=%s", proposal.id, external_id)
    return proposal


def get_proposal(db: Session, proposal_id: int) -> Proposal | None:
    return db.query(Proposal).filter(Proposal.id == proposal_id).one_or_none()


def list_proposals_for_user(db: Session, external_id: str) -> list[Proposal]:
    return (
        db.query(Proposal)
        .filter(Proposal.user_id == external_id)
        .order_by(Proposal.submitted_at.desc(), Proposal.id.desc())
        .all()
    )


def change_status(db: Session, proposal: Proposal, target: str) -> Proposal:
    current = proposal.status
    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)

    proposal.status = target
    proposal.updated_at = _utc_now()
    db.commit()
    db.refresh(proposal)
    logger.info("proposal.status id=%s from=%s to=%s", proposal.id, current, target)
    return proposal


def withdraw_proposal(db: Session, proposal: Proposal) -> Proposal:
    if proposal.status not in WITHDRAWABLE_STATUSES:
        raise InvalidStatusTransition(proposal.status, "withdrawn")
    return change_status(db, proposal, "withdrawn")
