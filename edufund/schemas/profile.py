# profile.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from edufund.schemas.common import CamelModel, coerce_str_list


Role = Literal["student", "investor"]
ROLES: tuple[str, ...] = ("student", "investor")

PROFILE_SECTIONS: tuple[str, ...] = ("personal_details", "education", "skills", "career")


class ProfileSection(CamelModel):
    # Unknown keys are dropped; numbers are accepted for free-text fields.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class PersonalDetails(ProfileSection):
    name: str | None = None
    location: str | None = None
    bio: str | None = None


class Education(ProfileSection):
    level: str | None = None
    institution: str | None = None
    major: str | None = None
    grad_year: str | None = None


class Skills(ProfileSection):
    selected_skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)

    @field_validator("selected_skills", "interests", mode="before")
    @classmethod
    def _coerce_lists(cls, v):
        return coerce_str_list(v)


class Career(ProfileSection):
    goals: str | None = None
    preferred_industries: list[str] = Field(default_factory=list)
    salary_expectation: str | None = None

    @field_validator("preferred_industries", mode="before")
    @classmethod
    def _coerce_lists(cls, v):
        return coerce_str_list(v)


class ProfileSections(ProfileSection):
    """The four shared top-level sections of an onboarding payload.

    A section left out of the payload (or sent as null) stays None so callers can
    tell "not supplied" apart from "supplied but empty".
    """

    personal_details: PersonalDetails | None = None
    education: Education | None = None
    skills: Skills | None = None
    career: Career | None = None

    def section_documents(self) -> dict[str, dict[str, Any] | None]:
        docs: dict[str, dict[str, Any] | None] = {}
        for name in PROFILE_SECTIONS:
            section = getattr(self, name)
            docs[name] = None if section is None else section.model_dump(by_alias=True, exclude_unset=True)
        return docs


class InvestorFields(ProfileSection):
    investment_focus: list[str] = Field(default_factory=list)
    preferred_stages: list[str] = Field(default_factory=list)
    portfolio_size: str | None = None
    company_name: str | None = None
    role_in_company: str | None = None
    risk_appetite: str | None = None
    linked_in_profile: str | None = None
    website: str | None = None
    accreditation_status: str | None = None

    @field_validator("investment_focus", "preferred_stages", mode="before")
    @classmethod
    def _coerce_lists(cls, v):
        return coerce_str_list(v)


class StudentFields(ProfileSection):
    educational_goals: str | None = None
    career_aspirations: str | None = None
    preferred_learning_style: str | None = None
    skills_to_develop: list[str] = Field(default_factory=list)
    funding_need_reason: str | None = None
    date_of_birth: str | None = None

    @field_validator("skills_to_develop", mode="before")
    @classmethod
    def _coerce_lists(cls, v):
        return coerce_str_list(v)


class OnboardingSummary(CamelModel):
    user_id: str
    personal_details: dict[str, Any] = Field(default_factory=dict)
    education: dict[str, Any] = Field(default_factory=dict)
    skills: dict[str, Any] = Field(default_factory=dict)
    career: dict[str, Any] = Field(default_factory=dict)


class OnboardingResponse(CamelModel):
    success: bool = True
    message: str
    data: OnboardingSummary


class RoleStatus(CamelModel):
    role: Role
    completed_at: datetime | None = None


class OnboardingStatus(OnboardingSummary):
    roles: list[RoleStatus] = Field(default_factory=list)


class OnboardingStatusResponse(CamelModel):
    success: bool = True
    data: OnboardingStatus
