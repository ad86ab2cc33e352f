# onboarding.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from edufund.database import get_db
from edufund.errors import InternalError, InvalidInput, NotFound
from edufund.routers.dependencies import get_current_identity, read_json_body
from edufund.schemas.common import ErrorResponse
from edufund.schemas.profile import OnboardingResponse, OnboardingStatusResponse
from edufund.services.onboarding_service import (
    InvalidOnboardingPayload,
    get_onboarding_status,
    parse_onboarding_payload,
    save_onboarding,
)


router = APIRouter(prefix="/onboarding", tags=["onboarding"])

logger = logging.getLogger(__name__)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("", response_model=OnboardingResponse, responses=_ERROR_RESPONSES)
def submit_onboarding(
    external_id: str = Depends(get_current_identity),
    payload: Any = Depends(read_json_body),
    db: Session = Depends(get_db),
) -> OnboardingResponse:
    try:
        submission = parse_onboarding_payload(payload)
    except InvalidOnboardingPayload as exc:
        raise InvalidInput(str(exc)) from exc

    try:
        summary = save_onboarding(db, external_id, submission)
    except Exception as exc:
        logger.exception("onboarding.failed user_id=%s role=%s", external_id, submission.role)
        raise InternalError("Failed to save onboarding data", error=str(exc)) from exc

    return OnboardingResponse(
        message=f"Onboarding data saved successfully for {submission.role}.",
        data=summary,
    )


@router.get("", response_model=OnboardingStatusResponse, responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
def read_onboarding(
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> OnboardingStatusResponse:
    status_data = get_onboarding_status(db, external_id)
    if status_data is None:
        raise NotFound("Onboarding not found")
    return OnboardingStatusResponse(data=status_data)
