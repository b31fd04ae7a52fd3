"""
Judge and team directory lookups.

The directories are owned by other subsystems; the engine only asks
whether an id exists, whether it is active, and what its display name is.
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.orm.judge import Judge
from judge_assignment.orm.team import Team, TeamVerificationStatus


class JudgeDirectory:
    """Read-only view of the judges table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, judge_id: int) -> Optional[Judge]:
        result = await self.db.execute(select(Judge).where(Judge.id == judge_id))
        return result.scalar_one_or_none()

    async def exists(self, judge_id: int) -> bool:
        return await self.get(judge_id) is not None

    async def is_active(self, judge_id: int) -> bool:
        judge = await self.get(judge_id)
        return bool(judge and judge.is_active)

    async def display_name(self, judge_id: int) -> Optional[str]:
        judge = await self.get(judge_id)
        return judge.name if judge else None

    async def get_many(self, judge_ids: Iterable[int]) -> Dict[int, Judge]:
        ids = set(judge_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Judge).where(Judge.id.in_(ids)))
        return {judge.id: judge for judge in result.scalars().all()}

    async def list_all(self) -> List[Judge]:
        """All judges sorted by id."""
        result = await self.db.execute(select(Judge).order_by(Judge.id.asc()))
        return list(result.scalars().all())

    async def list_active_ids(self) -> List[int]:
        """Active judge ids sorted ascending."""
        result = await self.db.execute(
            select(Judge.id)
            .where(Judge.is_active.is_(True))
            .order_by(Judge.id.asc())
        )
        return [row[0] for row in result.all()]


class TeamDirectory:
    """Read-only view of the teams table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, team_id: int) -> Optional[Team]:
        result = await self.db.execute(select(Team).where(Team.id == team_id))
        return result.scalar_one_or_none()

    async def exists(self, team_id: int) -> bool:
        return await self.get(team_id) is not None

    async def is_active(self, team_id: int) -> bool:
        """A team counts as active once its verification has passed."""
        team = await self.get(team_id)
        return bool(team and team.verification_status == TeamVerificationStatus.VERIFIED)

    async def display_name(self, team_id: int) -> Optional[str]:
        team = await self.get(team_id)
        return team.name if team else None

    async def get_many(self, team_ids: Iterable[int]) -> Dict[int, Team]:
        ids = set(team_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Team).where(Team.id.in_(ids)))
        return {team.id: team for team in result.scalars().all()}
