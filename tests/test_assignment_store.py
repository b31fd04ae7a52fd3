"""
Assignment Store Tests

- create / delete / set_status contracts
- duplicate and missing-pair errors
- forward-only status transitions
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import (
    AssignmentNotFoundError, AssignmentValidationError, DuplicateAssignmentError,
    InvalidTransitionError
)
from judge_assignment.orm.assignment import EvaluationStatus
from judge_assignment.services.assignment_store import AssignmentStore


class TestStatusOrdering:
    """Pure checks on the status enum."""

    def test_forward_transitions_allowed(self):
        assert EvaluationStatus.NONE.can_transition_to(EvaluationStatus.DRAFT)
        assert EvaluationStatus.NONE.can_transition_to(EvaluationStatus.SUBMITTED)
        assert EvaluationStatus.DRAFT.can_transition_to(EvaluationStatus.SUBMITTED)

    def test_repeated_draft_allowed(self):
        assert EvaluationStatus.DRAFT.can_transition_to(EvaluationStatus.DRAFT)

    def test_backward_and_repeat_submit_rejected(self):
        assert not EvaluationStatus.SUBMITTED.can_transition_to(EvaluationStatus.DRAFT)
        assert not EvaluationStatus.SUBMITTED.can_transition_to(EvaluationStatus.NONE)
        assert not EvaluationStatus.DRAFT.can_transition_to(EvaluationStatus.NONE)
        assert not EvaluationStatus.SUBMITTED.can_transition_to(EvaluationStatus.SUBMITTED)
        assert not EvaluationStatus.NONE.can_transition_to(EvaluationStatus.NONE)

    def test_pending_flag(self):
        assert EvaluationStatus.NONE.is_pending
        assert EvaluationStatus.DRAFT.is_pending
        assert not EvaluationStatus.SUBMITTED.is_pending


class TestAssignmentStore:
    """Store operations against a real database."""

    @pytest.mark.asyncio
    async def test_create_starts_at_none(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10])
        store = AssignmentStore(db)

        assignment = await store.create(1, 10, assigned_by="admin-1")
        await db.commit()

        assert assignment.evaluation_status is EvaluationStatus.NONE
        assert assignment.assigned_by == "admin-1"
        assert assignment.assigned_at is not None
        assert await store.count_all() == 1

    @pytest.mark.asyncio
    async def test_create_duplicate_rejected(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10], assignments=[(1, 10)])
        store = AssignmentStore(db)

        with pytest.raises(DuplicateAssignmentError):
            await store.create(1, 10, assigned_by="admin-1")

        assert await store.count_all() == 1

    @pytest.mark.asyncio
    async def test_create_requires_acting_admin(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10])

        with pytest.raises(AssignmentValidationError):
            await AssignmentStore(db).create(1, 10, assigned_by="")

    @pytest.mark.asyncio
    async def test_delete_missing_pair(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10])

        with pytest.raises(AssignmentNotFoundError):
            await AssignmentStore(db).delete(1, 10)

    @pytest.mark.asyncio
    async def test_delete_removes_pair(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10, 11], assignments=[(1, 10), (1, 11)])
        store = AssignmentStore(db)

        removed = await store.delete(1, 10)
        await db.commit()

        assert removed.team_id == 10
        assert await store.get(1, 10) is None
        assert await store.count_all() == 1

    @pytest.mark.asyncio
    async def test_set_status_forward(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10], assignments=[(1, 10)])
        store = AssignmentStore(db)

        await store.set_status(1, 10, EvaluationStatus.DRAFT)
        updated = await store.set_status(1, 10, EvaluationStatus.SUBMITTED)
        await db.commit()

        assert updated.evaluation_status is EvaluationStatus.SUBMITTED

    @pytest.mark.asyncio
    async def test_set_status_backward_rejected(self, db: AsyncSession, seed):
        await seed(
            judge_ids=[1], team_ids=[10],
            assignments=[(1, 10, EvaluationStatus.SUBMITTED)]
        )
        store = AssignmentStore(db)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await store.set_status(1, 10, EvaluationStatus.DRAFT)

        assert exc_info.value.current == "submitted"
        assert exc_info.value.requested == "draft"
        assert (await store.get(1, 10)).evaluation_status is EvaluationStatus.SUBMITTED

    @pytest.mark.asyncio
    async def test_set_status_missing_pair(self, db: AsyncSession, seed):
        await seed(judge_ids=[1], team_ids=[10])

        with pytest.raises(AssignmentNotFoundError):
            await AssignmentStore(db).set_status(1, 10, EvaluationStatus.DRAFT)

    @pytest.mark.asyncio
    async def test_list_by_judge_in_creation_order(self, db: AsyncSession, seed):
        await seed(
            judge_ids=[1, 2], team_ids=[10, 11, 12],
            assignments=[(1, 12), (2, 10), (1, 10), (1, 11)]
        )
        store = AssignmentStore(db)

        teams = [a.team_id for a in await store.list_by_judge(1)]
        assert teams == [12, 10, 11]

        judges = [a.judge_id for a in await store.list_by_team(10)]
        assert judges == [1, 2]

        assert await store.count_by_judge() == {1: 3, 2: 1}
