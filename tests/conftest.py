"""
Shared fixtures: a fresh SQLite database per test, a private mutation gate,
and a seeding helper for judges, teams and assignments.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from judge_assignment.orm import (
    Base, EvaluationStatus, Judge, JudgeTeamAssignment, Team, TeamVerificationStatus
)
from judge_assignment.services.mutation_gate import MutationGate


@pytest.fixture
async def engine(tmp_path):
    """Async engine bound to a throwaway SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'assignments.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    """Create database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def gate():
    """Mutation gate private to one test."""
    return MutationGate()


@pytest.fixture
def seed(db):
    """
    Insert directory rows and assignments.

    assignments: (judge_id, team_id) or (judge_id, team_id, EvaluationStatus),
    created in the given order.
    """
    async def _seed(judge_ids=(), team_ids=(), inactive_judge_ids=(), assignments=()):
        for judge_id in judge_ids:
            db.add(Judge(
                id=judge_id,
                name=f"Judge {judge_id}",
                email=f"judge{judge_id}@example.org",
                is_active=judge_id not in inactive_judge_ids
            ))
        for team_id in team_ids:
            db.add(Team(
                id=team_id,
                name=f"Team {team_id}",
                verification_status=TeamVerificationStatus.VERIFIED
            ))
        await db.flush()

        base_time = datetime(2024, 1, 1, 9, 0, 0)
        for offset, entry in enumerate(assignments):
            judge_id, team_id = entry[0], entry[1]
            status = entry[2] if len(entry) > 2 else EvaluationStatus.NONE
            db.add(JudgeTeamAssignment(
                judge_id=judge_id,
                team_id=team_id,
                evaluation_status=status,
                assigned_at=base_time + timedelta(minutes=offset),
                assigned_by="seed-admin"
            ))
        await db.commit()

    return _seed
