"""
Judge directory record.

Owned by the judge directory collaborator; the assignment engine only reads it.
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from judge_assignment.orm.base import Base


class Judge(Base):
    __tablename__ = "judges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
