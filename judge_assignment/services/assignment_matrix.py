"""
Assignment Matrix: read-only projection of judges, their teams and load.

Reads never take the mutation gate. Mutations commit atomically, so a
read sees either none or all of any mutation's effects.
"""
import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import JudgeNotFoundError
from judge_assignment.orm.assignment import EvaluationStatus, JudgeTeamAssignment
from judge_assignment.services.assignment_store import AssignmentStore
from judge_assignment.services.directories import JudgeDirectory, TeamDirectory

logger = logging.getLogger(__name__)


def compute_load_stats(assignments: List[JudgeTeamAssignment]) -> Dict[str, int]:
    """total / completed (submitted) / pending counts for one judge."""
    total = len(assignments)
    completed = sum(1 for a in assignments if a.evaluation_status is EvaluationStatus.SUBMITTED)
    return {
        "total_assigned": total,
        "completed_count": completed,
        "pending_count": total - completed,
    }


def _team_entry(assignment: JudgeTeamAssignment, team_names: Dict[int, str]) -> Dict[str, Any]:
    return {
        "team_id": assignment.team_id,
        "team_name": team_names.get(assignment.team_id),
        "evaluation_status": assignment.evaluation_status.value,
        "assigned_at": assignment.assigned_at.isoformat() if assignment.assigned_at else None,
    }


async def build_assignment_matrix(db: AsyncSession) -> List[Dict[str, Any]]:
    """
    Every judge (including judges with no assignments) with load stats and
    assigned teams in creation order.

    Judges are sorted by id. Assignments held by ids unknown to the judge
    directory are reported under a null judge_name so totals still add up.
    """
    # Same session transaction: all reads see one snapshot
    judges = await JudgeDirectory(db).list_all()
    assignments = await AssignmentStore(db).list_all()
    teams = await TeamDirectory(db).get_many(a.team_id for a in assignments)

    team_names = {team_id: team.name for team_id, team in teams.items()}

    by_judge: Dict[int, List[JudgeTeamAssignment]] = {judge.id: [] for judge in judges}
    for assignment in assignments:
        by_judge.setdefault(assignment.judge_id, []).append(assignment)

    judge_info = {judge.id: judge for judge in judges}
    matrix = []
    for judge_id in sorted(by_judge):
        judge = judge_info.get(judge_id)
        judge_assignments = by_judge[judge_id]
        matrix.append({
            "judge_id": judge_id,
            "judge_name": judge.name if judge else None,
            "is_active": bool(judge and judge.is_active),
            "load_stats": compute_load_stats(judge_assignments),
            "teams_assigned": [_team_entry(a, team_names) for a in judge_assignments],
        })

    logger.debug(f"[MATRIX] judges={len(matrix)} assignments={len(assignments)}")
    return matrix


def summarize_matrix(matrix: List[Dict[str, Any]]) -> Dict[str, int]:
    """Totals across the whole matrix (admin summary cards)."""
    return {
        "total_judges": len(matrix),
        "total_assigned": sum(row["load_stats"]["total_assigned"] for row in matrix),
        "total_completed": sum(row["load_stats"]["completed_count"] for row in matrix),
        "total_pending": sum(row["load_stats"]["pending_count"] for row in matrix),
    }


async def get_judge_load_stats(judge_id: int, db: AsyncSession) -> Dict[str, Any]:
    """Dashboard summary for one judge."""
    judge_name = await JudgeDirectory(db).display_name(judge_id)
    if judge_name is None:
        raise JudgeNotFoundError(judge_id)

    assignments = await AssignmentStore(db).list_by_judge(judge_id)
    return {
        "judge_id": judge_id,
        "judge_name": judge_name,
        "load_stats": compute_load_stats(assignments),
    }


async def list_assigned_teams(
    judge_id: int,
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    status: Optional[EvaluationStatus] = None
) -> Dict[str, Any]:
    """
    One judge's assigned teams, paginated, in creation order.

    Returns:
        {"teams": [...], "pagination": {total_items, total_pages, current_page, items_per_page}}
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")

    if not await JudgeDirectory(db).exists(judge_id):
        raise JudgeNotFoundError(judge_id)

    assignments = await AssignmentStore(db).list_by_judge(judge_id)
    if status is not None:
        assignments = [a for a in assignments if a.evaluation_status is status]

    total = len(assignments)
    start = (page - 1) * limit
    page_items = assignments[start:start + limit]

    teams = await TeamDirectory(db).get_many(a.team_id for a in page_items)
    team_names = {team_id: team.name for team_id, team in teams.items()}

    return {
        "teams": [_team_entry(a, team_names) for a in page_items],
        "pagination": {
            "total_items": total,
            "total_pages": math.ceil(total / limit) if total else 0,
            "current_page": page,
            "items_per_page": limit,
        },
    }


async def verify_assignment_integrity(db: AsyncSession) -> Dict[str, Any]:
    """
    Check the store's invariants.

    Checks:
    - No duplicate (judge_id, team_id)
    - Sum of per-judge totals equals the record count
    - Every assignment references a known judge and team
    """
    store = AssignmentStore(db)
    assignments = await store.list_all()
    record_count = await store.count_all()
    judges = await JudgeDirectory(db).get_many(a.judge_id for a in assignments)
    teams = await TeamDirectory(db).get_many(a.team_id for a in assignments)

    errors = []

    keys = [a.key for a in assignments]
    if len(keys) != len(set(keys)):
        errors.append("Duplicate (judge_id, team_id) found")

    per_judge: Dict[int, int] = {}
    for assignment in assignments:
        per_judge[assignment.judge_id] = per_judge.get(assignment.judge_id, 0) + 1
    if sum(per_judge.values()) != record_count:
        errors.append(
            f"Per-judge totals ({sum(per_judge.values())}) do not match record count ({record_count})"
        )

    unknown_judges = sorted({a.judge_id for a in assignments if a.judge_id not in judges})
    unknown_teams = sorted({a.team_id for a in assignments if a.team_id not in teams})
    if unknown_judges:
        errors.append(f"Assignments reference unknown judges: {unknown_judges}")
    if unknown_teams:
        errors.append(f"Assignments reference unknown teams: {unknown_teams}")

    return {
        "is_valid": len(errors) == 0,
        "record_count": record_count,
        "judges_with_assignments": len(per_judge),
        "errors": errors,
    }
