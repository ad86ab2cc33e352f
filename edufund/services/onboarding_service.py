# onboarding_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from edufund.errors import describe_validation_errors
from edufund.models.onboarding import InvestorOnboarding, StudentOnboarding
from edufund.models.profile import UserProfileModel
from edufund.schemas.profile import (
    PROFILE_SECTIONS,
    ROLES,
    InvestorFields,
    OnboardingStatus,
    OnboardingSummary,
    ProfileSection,
    ProfileSections,
    RoleStatus,
    StudentFields,
)


logger = logging.getLogger(__name__)

ROLE_REQUIRED_MESSAGE = "User role ('student' or 'investor') is required in data payload."

_ROLE_STORES: dict[str, tuple[type, type[ProfileSection]]] = {
    "investor": (InvestorOnboarding, InvestorFields),
    "student": (StudentOnboarding, StudentFields),
}


class InvalidOnboardingPayload(ValueError):
    pass


@dataclass(frozen=True)
class OnboardingSubmission:
    role: str
    sections: ProfileSections
    role_fields: ProfileSection
    raw: dict[str, Any]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_onboarding_payload(payload: Any) -> OnboardingSubmission:
    if not isinstance(payload, dict):
        raise InvalidOnboardingPayload(ROLE_REQUIRED_MESSAGE)

    role = payload.get("role")
    if role not in ROLES:
        raise InvalidOnboardingPayload(ROLE_REQUIRED_MESSAGE)

    _, fields_model = _ROLE_STORES[role]
    try:
        sections = ProfileSections.model_validate(payload)
        role_fields = fields_model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidOnboardingPayload(describe_validation_errors(exc.errors())) from exc

    return OnboardingSubmission(role=role, sections=sections, role_fields=role_fields, raw=dict(payload))


def _upsert_profile(db: Session, external_id: str, sections: ProfileSections, now: datetime) -> UserProfileModel:
    docs = sections.section_documents()
    record = db.query(UserProfileModel).filter(UserProfileModel.user_id == external_id).one_or_none()

    if record is None:
        record = UserProfileModel(
            user_id=external_id,
            created_at=now,
            updated_at=now,
            **{name: (doc if doc is not None else {}) for name, doc in docs.items()},
        )
        db.add(record)
        db.flush()
        logger.info("onboarding.profile created user_id=%s", external_id)
        return record

    # Replace each supplied section wholesale; keep the ones left out.
    for name, doc in docs.items():
        if doc is not None:
            setattr(record, name, doc)
    record.updated_at = now
    db.flush()
    logger.info("onboarding.profile updated user_id=%s", external_id)
    return record


def _derived_student_fields(sections: ProfileSections) -> dict[str, Any]:
    derived: dict[str, Any] = {}
    personal = sections.personal_details
    if personal is not None and "location" in personal.model_fields_set:
        derived["location"] = personal.location
    education = sections.education
    if education is not None:
        if "level" in education.model_fields_set:
            derived["current_education_level"] = education.level
        if "major" in education.model_fields_set:
            derived["field_of_study"] = education.major
    return derived


def _upsert_role_record(
    db: Session,
    submission: OnboardingSubmission,
    external_id: str,
    profile: UserProfileModel,
    now: datetime,
):
    model, _ = _ROLE_STORES[submission.role]

    # Only keys present in the payload overwrite; absent keys keep the stored value
    # (or the column default on insert).
    fields = submission.role_fields
    updates = fields.model_dump(include=set(fields.model_fields_set))
    if submission.role == "student":
        updates.update(_derived_student_fields(submission.sections))

    record = db.query(model).filter(model.clerk_id == external_id).one_or_none()
    if record is None:
        record = model(clerk_id=external_id, created_at=now)
        db.add(record)

    for name, value in updates.items():
        setattr(record, name, value)
    record.user_id = profile.id
    record.onboarding_data = submission.raw
    record.completed_at = now
    record.updated_at = now
    db.flush()
    logger.info("onboarding.%s upserted user_id=%s", submission.role, external_id)
    return record


def build_summary(record: UserProfileModel) -> OnboardingSummary:
    return OnboardingSummary(
        user_id=record.user_id,
        **{name: dict(getattr(record, name) or {}) for name in PROFILE_SECTIONS},
    )


def save_onboarding(db: Session, external_id: str, submission: OnboardingSubmission) -> OnboardingSummary:
    """Write the profile and the role record as one transaction.

    A unique-key conflict (a concurrent first submission for the same identity)
    is retried once from scratch; any other failure rolls everything back and
    propagates.
    """

    attempts = 2
    attempt = 0
    while True:
        attempt += 1
        now = _utc_now()
        try:
            profile = _upsert_profile(db, external_id, submission.sections, now)
            _upsert_role_record(db, submission, external_id, profile, now)
            summary = build_summary(profile)
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt < attempts:
                logger.info("onboarding.conflict retrying user_id=%s", external_id)
                continue
            raise
        except Exception:
            db.rollback()
            raise
        return summary


def get_onboarding_status(db: Session, external_id: str) -> OnboardingStatus | None:
    profile = db.query(UserProfileModel).filter(UserProfileModel.user_id == external_id).one_or_none()
    if profile is None:
        return None

    roles: list[RoleStatus] = []
    for role in ROLES:
        model, _ = _ROLE_STORES[role]
        record = db.query(model).filter(model.clerk_id == external_id).one_or_none()
        if record is not None:
            roles.append(RoleStatus(role=role, completed_at=record.completed_at))

    summary = build_summary(profile)
    return OnboardingStatus(**summary.model_dump(), roles=roles)
