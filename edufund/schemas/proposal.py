from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from edufund.schemas.common import CamelModel


ProposalStatus = Literal["submitted", "under_review", "approved", "rejected", "withdrawn"]


class PersonalInfo(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str
    phone: str | None = None
    address: str | None = None

    @field_validator("email")
    @classmethod
    def _validate_email_like(cls, v: str) -> str:
        value = (v or "").strip()
        if "@" not in value:
            raise ValueError("email must contain '@'")
        left, right = value.split("@", 1)
        if not left or not right:
            raise ValueError("email must have text before and after '@'")
        return value


class FundingGoals(CamelModel):
    amount_requested: float = Field(gt=0)
    # e.g. Tuition Fees, Living Expenses, Course Materials
    purpose: str = Field(min_length=1)
    course_name: str = Field(min_length=1)
    institution_name: str = Field(min_length=1)
    study_duration_months: int | None = Field(default=None, ge=1)


class FinancialInfo(CamelModel):
    annual_income: float | None = Field(default=None, ge=0)
    has_collateral: bool | None = None
    credit_score: int | None = None


class SupportingDocument(CamelModel):
    # e.g. ID Proof, Admission Letter, Income Statement
    document_type: str = Field(min_length=1)
    url: str = Field(min_length=1)


class ProposalCreate(CamelModel):
    personal_info: PersonalInfo
    funding_goals: FundingGoals
    financial_info: FinancialInfo | None = None
    essay_or_statement: str | None = None
    supporting_documents: list[SupportingDocument] = Field(default_factory=list)


class ProposalRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    user_id: str | None = None
    personal_info: PersonalInfo
    funding_goals: FundingGoals
    financial_info: FinancialInfo | None = None
    essay_or_statement: str | None = None
    supporting_documents: list[SupportingDocument] = Field(default_factory=list)
    status: ProposalStatus
    submitted_at: datetime
    updated_at: datetime


class ProposalStatusUpdate(CamelModel):
    status: ProposalStatus


class ProposalResponse(CamelModel):
    success: bool = True
    message: str | None = None
    data: ProposalRead


class ProposalListResponse(CamelModel):
    success: bool = True
    data: list[ProposalRead] = Field(default_factory=list)
