from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from edufund.database import Base


class InvestorOnboarding(Base):
    __tablename__ = "investor_onboarding"

    id = Column(Integer, primary_key=True, index=True)
    clerk_id = Column(String(191), nullable=False, index=True)
    # Internal id of the owning user_info row.
    user_id = Column(Integer, ForeignKey("user_info.id", ondelete="CASCADE"), nullable=False, index=True)

    investment_focus = Column(JSON, nullable=False, default=list)
    preferred_stages = Column(JSON, nullable=False, default=list)
    portfolio_size = Column(String(255), nullable=True)
    company_name = Column(String(255), nullable=True)
    role_in_company = Column(String(255), nullable=True)
    risk_appetite = Column(String(64), nullable=True)
    linked_in_profile = Column(String(512), nullable=True)
    website = Column(String(512), nullable=True)
    accreditation_status = Column(String(64), nullable=True)

    # Raw submitted payload, kept verbatim.
    onboarding_data = Column(JSON, nullable=False, default=dict)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship("UserProfileModel", backref="investor_onboarding")

    __table_args__ = (
        UniqueConstraint("clerk_id", name="uq_investor_onboarding_clerk_id"),
    )


class StudentOnboarding(Base):
    __tablename__ = "student_onboarding"

    id = Column(Integer, primary_key=True, index=True)
    clerk_id = Column(String(191), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("user_info.id", ondelete="CASCADE"), nullable=False, index=True)

    educational_goals = Column(Text, nullable=True)
    career_aspirations = Column(Text, nullable=True)
    preferred_learning_style = Column(String(64), nullable=True)
    skills_to_develop = Column(JSON, nullable=False, default=list)
    funding_need_reason = Column(Text, nullable=True)
    date_of_birth = Column(String(32), nullable=True)

    # Copied from the shared sections of the payload.
    location = Column(String(255), nullable=True)
    current_education_level = Column(String(255), nullable=True)
    field_of_study = Column(String(255), nullable=True)

    onboarding_data = Column(JSON, nullable=False, default=dict)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship("UserProfileModel", backref="student_onboarding")

    __table_args__ = (
        UniqueConstraint("clerk_id", name="uq_student_onboarding_clerk_id"),
    )
