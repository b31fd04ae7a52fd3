"""
Assignment Matrix Tests

- every judge appears, including judges with nothing assigned
- per-judge totals sum to the store's record count
- judge dashboard and paginated team list
- integrity report
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import JudgeNotFoundError
from judge_assignment.orm.assignment import EvaluationStatus
from judge_assignment.services.assignment_matrix import (
    build_assignment_matrix, get_judge_load_stats, list_assigned_teams,
    summarize_matrix, verify_assignment_integrity
)
from judge_assignment.services.assignment_store import AssignmentStore


@pytest.fixture
async def populated(seed):
    await seed(
        judge_ids=[1, 2, 3], inactive_judge_ids=[3], team_ids=[10, 11, 12, 13],
        assignments=[
            (1, 12, EvaluationStatus.SUBMITTED),
            (1, 10, EvaluationStatus.DRAFT),
            (1, 11),
            (2, 10, EvaluationStatus.SUBMITTED),
        ]
    )


@pytest.mark.asyncio
async def test_matrix_lists_every_judge(db: AsyncSession, populated):
    matrix = await build_assignment_matrix(db)

    assert [row["judge_id"] for row in matrix] == [1, 2, 3]
    assert matrix[2]["teams_assigned"] == []
    assert matrix[2]["is_active"] is False
    assert matrix[2]["load_stats"] == {"total_assigned": 0, "completed_count": 0, "pending_count": 0}


@pytest.mark.asyncio
async def test_matrix_teams_in_creation_order(db: AsyncSession, populated):
    matrix = await build_assignment_matrix(db)
    judge_1 = matrix[0]

    assert judge_1["judge_name"] == "Judge 1"
    assert [t["team_id"] for t in judge_1["teams_assigned"]] == [12, 10, 11]
    assert [t["evaluation_status"] for t in judge_1["teams_assigned"]] == ["submitted", "draft", "none"]
    assert judge_1["teams_assigned"][0]["team_name"] == "Team 12"
    assert judge_1["load_stats"] == {"total_assigned": 3, "completed_count": 1, "pending_count": 2}


@pytest.mark.asyncio
async def test_totals_match_record_count(db: AsyncSession, populated):
    matrix = await build_assignment_matrix(db)
    summary = summarize_matrix(matrix)

    assert summary == {
        "total_judges": 3,
        "total_assigned": 4,
        "total_completed": 2,
        "total_pending": 2,
    }
    assert summary["total_assigned"] == await AssignmentStore(db).count_all()
    for row in matrix:
        stats = row["load_stats"]
        assert stats["completed_count"] + stats["pending_count"] == stats["total_assigned"]
        assert stats["total_assigned"] == len(row["teams_assigned"])


@pytest.mark.asyncio
async def test_empty_store(db: AsyncSession):
    matrix = await build_assignment_matrix(db)

    assert matrix == []
    assert summarize_matrix(matrix)["total_assigned"] == 0


@pytest.mark.asyncio
async def test_judge_dashboard(db: AsyncSession, populated):
    summary = await get_judge_load_stats(1, db)

    assert summary["judge_name"] == "Judge 1"
    assert summary["load_stats"]["pending_count"] == 2

    with pytest.raises(JudgeNotFoundError):
        await get_judge_load_stats(404, db)


@pytest.mark.asyncio
async def test_assigned_teams_paginated(db: AsyncSession, populated):
    first = await list_assigned_teams(1, db, page=1, limit=2)
    second = await list_assigned_teams(1, db, page=2, limit=2)

    assert [t["team_id"] for t in first["teams"]] == [12, 10]
    assert [t["team_id"] for t in second["teams"]] == [11]
    assert first["pagination"] == {
        "total_items": 3,
        "total_pages": 2,
        "current_page": 1,
        "items_per_page": 2,
    }


@pytest.mark.asyncio
async def test_assigned_teams_status_filter(db: AsyncSession, populated):
    result = await list_assigned_teams(1, db, status=EvaluationStatus.NONE)

    assert [t["team_id"] for t in result["teams"]] == [11]
    assert result["pagination"]["total_items"] == 1


@pytest.mark.asyncio
async def test_assigned_teams_unknown_judge(db: AsyncSession, populated):
    with pytest.raises(JudgeNotFoundError):
        await list_assigned_teams(404, db)


@pytest.mark.asyncio
async def test_integrity_report(db: AsyncSession, populated):
    report = await verify_assignment_integrity(db)

    assert report["is_valid"] is True
    assert report["record_count"] == 4
    assert report["judges_with_assignments"] == 2
    assert report["errors"] == []
