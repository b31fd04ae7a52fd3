"""
Team directory record.

Owned by the team directory collaborator; the assignment engine only reads it.
"""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, Integer, String

from judge_assignment.orm.base import Base


class TeamVerificationStatus(PyEnum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    verification_status = Column(
        Enum(TeamVerificationStatus, create_constraint=True),
        nullable=False,
        default=TeamVerificationStatus.PENDING
    )
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
