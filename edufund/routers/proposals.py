from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from edufund.config import Settings, is_reviewer
from edufund.database import get_db
from edufund.errors import Conflict, NotFound
from edufund.models.proposal import Proposal
from edufund.routers.dependencies import get_current_identity, get_settings, require_reviewer
from edufund.schemas.proposal import (
    ProposalCreate,
    ProposalListResponse,
    ProposalRead,
    ProposalResponse,
    ProposalStatusUpdate,
)
from edufund.services.proposal_service import (
    InvalidStatusTransition,
    change_status,
    create_proposal,
    get_proposal,
    list_proposals_for_user,
    withdraw_proposal,
)


router = APIRouter(prefix="/proposals", tags=["proposals"])


def _load_visible_proposal(db: Session, proposal_id: int, external_id: str, settings: Settings) -> Proposal:
    proposal = get_proposal(db, proposal_id)
    # Other users' proposals look the same as missing ones.
    if proposal is None or (proposal.user_id != external_id and not is_reviewer(settings, external_id)):
        raise NotFound("Proposal not found")
    return proposal


@router.post("", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
def submit_proposal(
    payload: ProposalCreate,
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> ProposalResponse:
    proposal = create_proposal(db, external_id, payload)
    return ProposalResponse(message="Proposal submitted successfully.", data=ProposalRead.model_validate(proposal))


@router.get("", response_model=ProposalListResponse)
def list_my_proposals(
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> ProposalListResponse:
    proposals = list_proposals_for_user(db, external_id)
    return ProposalListResponse(data=[ProposalRead.model_validate(p) for p in proposals])


@router.get("/{proposal_id}", response_model=ProposalResponse)
def read_proposal(
    proposal_id: int,
    external_id: str = Depends(get_current_identity),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> ProposalResponse:
    proposal = _load_visible_proposal(db, proposal_id, external_id, settings)
    return ProposalResponse(data=ProposalRead.model_validate(proposal))


@router.post("/{proposal_id}/withdraw", response_model=ProposalResponse)
def withdraw_my_proposal(
    proposal_id: int,
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> ProposalResponse:
    proposal = get_proposal(db, proposal_id)
    if proposal is None or proposal.user_id != external_id:
        raise NotFound("Proposal not found")
    try:
        proposal = withdraw_proposal(db, proposal)
    except InvalidStatusTransition as exc:
        raise Conflict(str(exc)) from exc
    return ProposalResponse(message="Proposal withdrawn.", data=ProposalRead.model_validate(proposal))


@router.patch("/{proposal_id}/status", response_model=ProposalResponse)
def update_proposal_status(
    proposal_id: int,
    payload: ProposalStatusUpdate,
    reviewer_id: str = Depends(require_reviewer),
    db: Session = Depends(get_db),
) -> ProposalResponse:
    proposal = get_proposal(db, proposal_id)
    if proposal is None:
        raise NotFound("Proposal not found")
    try:
        proposal = change_status(db, proposal, payload.status)
    except InvalidStatusTransition as exc:
        raise Conflict(str(exc)) from exc
    return ProposalResponse(message=f"Proposal moved to {proposal.status}.", data=ProposalRead.model_validate(proposal))
