from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.sql import func

from edufund.database import Base


PROPOSAL_STATUSES = ("submitted", "under_review", "approved", "rejected", "withdrawn")


class Proposal(Base):
    __tablename__ = "proposal_student"

    # MySQL: BIGINT AUTO_INCREMENT
    # SQLite tests: uses INTEGER for reliable autoincrement.
    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        index=True,
    )

    # Submitting external identity; not enforced against user_info.
    user_id = Column(String(191), nullable=True, index=True)

    # {firstName, lastName, email, phone?, address?}
    personal_info = Column(JSON, nullable=False)
    # {amountRequested, purpose, courseName, institutionName, studyDurationMonths?}
    funding_goals = Column(JSON, nullable=False)
    # {annualIncome?, hasCollateral?, creditScore?}
    financial_info = Column(JSON, nullable=True)
    essay_or_statement = Column(Text, nullable=True)
    # list[{documentType, url}]
    supporting_documents = Column(JSON, nullable=False, default=list)

    status = Column(String(32), nullable=False, default="submitted", index=True)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
