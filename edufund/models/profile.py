# profile.py
from sqlalchemy import Column, DateTime, Integer, JSON, String, func

from edufund.database import Base


class UserProfileModel(Base):
    """One canonical profile per external identity."""

    __tablename__ = "user_info"

    id = Column(Integer, primary_key=True, index=True)
    # External identity issued by the auth provider.
    user_id = Column(String(191), unique=True, index=True, nullable=False)

    personal_details = Column(JSON, nullable=False, default=dict)
    education = Column(JSON, nullable=False, default=dict)
    skills = Column(JSON, nullable=False, default=dict)
    career = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
