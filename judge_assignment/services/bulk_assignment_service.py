"""
Bulk Assignment: validate and commit a batch of judge/team pairs.

Policy: all-or-nothing.
- Every pair is validated; every failure is collected (not just the first)
- Any failure rejects the whole batch and nothing is written
- A clean batch is committed in one transaction under the mutation gate
"""
import logging
from typing import Any, Dict, List, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import (
    AssignmentValidationError, DuplicateAssignmentError, PairFailure
)
from judge_assignment.orm.assignment import JudgeTeamAssignment
from judge_assignment.services.assignment_store import AssignmentStore
from judge_assignment.services.directories import JudgeDirectory, TeamDirectory
from judge_assignment.services.mutation_gate import MutationGate, mutation_gate as default_gate

logger = logging.getLogger(__name__)

Pair = Tuple[int, int]


async def _existing_pairs(pairs: Sequence[Pair], db: AsyncSession) -> Set[Pair]:
    """Subset of `pairs` already present in the store."""
    if not pairs:
        return set()
    wanted = set(pairs)
    result = await db.execute(
        select(JudgeTeamAssignment.judge_id, JudgeTeamAssignment.team_id)
        .where(JudgeTeamAssignment.judge_id.in_({judge_id for judge_id, _ in wanted}))
    )
    return {(row[0], row[1]) for row in result.all()} & wanted


async def validate_bulk_assignment(
    pairs: Sequence[Pair],
    db: AsyncSession
) -> List[PairFailure]:
    """
    Validate every pair of a batch.

    Checks, in order, for each pair:
    1. Judge exists
    2. Judge is active
    3. Team exists
    4. Pair not already assigned
    5. Pair not repeated earlier in this batch

    Returns:
        All failures, in batch order (empty list means the batch is valid)
    """
    judges = await JudgeDirectory(db).get_many(judge_id for judge_id, _ in pairs)
    teams = await TeamDirectory(db).get_many(team_id for _, team_id in pairs)
    existing = await _existing_pairs(pairs, db)

    failures: List[PairFailure] = []
    seen: Set[Pair] = set()

    for index, (judge_id, team_id) in enumerate(pairs):
        pair = (judge_id, team_id)
        judge = judges.get(judge_id)

        if judge is None:
            failures.append(PairFailure(
                index, judge_id, team_id, PairFailure.JUDGE_NOT_FOUND,
                f"Judge {judge_id} does not exist"
            ))
        elif not judge.is_active:
            failures.append(PairFailure(
                index, judge_id, team_id, PairFailure.JUDGE_INACTIVE,
                f"Judge {judge_id} is not active"
            ))

        if team_id not in teams:
            failures.append(PairFailure(
                index, judge_id, team_id, PairFailure.TEAM_NOT_FOUND,
                f"Team {team_id} does not exist"
            ))

        if pair in existing:
            failures.append(PairFailure(
                index, judge_id, team_id, PairFailure.ALREADY_ASSIGNED,
                f"Judge {judge_id} is already assigned to team {team_id}"
            ))
        elif pair in seen:
            failures.append(PairFailure(
                index, judge_id, team_id, PairFailure.DUPLICATE_IN_BATCH,
                f"Pair (judge {judge_id}, team {team_id}) appears more than once in this batch"
            ))

        seen.add(pair)

    return failures


def rejection_for(failures: List[PairFailure]) -> AssignmentValidationError:
    """
    Build the batch rejection.

    DuplicateAssignmentError when every failure is a duplicate,
    AssignmentValidationError otherwise. Both carry the full failure list.
    """
    offending = len({f.index for f in failures})
    if all(f.is_duplicate for f in failures):
        return DuplicateAssignmentError(
            f"{offending} pair(s) are already assigned; no assignments were created",
            failures=failures
        )
    return AssignmentValidationError(
        f"{offending} pair(s) failed validation; no assignments were created",
        failures=failures
    )


async def bulk_assign(
    pairs: Sequence[Pair],
    acting_admin_id: str,
    db: AsyncSession,
    gate: MutationGate = default_gate
) -> Dict[str, Any]:
    """
    Atomically create a batch of assignments with status 'none'.

    Args:
        pairs: ordered, non-empty sequence of (judge_id, team_id)
        acting_admin_id: identity recorded as assigned_by
        db: Database session
        gate: mutation gate

    Returns:
        {"created_count", "assignments"}

    Raises:
        AssignmentValidationError: empty batch or any invalid pair
        DuplicateAssignmentError: every failure is a duplicate
        MutationInProgressError: another mutation is running
    """
    pairs = [(int(judge_id), int(team_id)) for judge_id, team_id in pairs]
    logger.info(f"[BULK ASSIGN START] pairs={len(pairs)} admin={acting_admin_id}")

    if not pairs:
        raise AssignmentValidationError(
            "Assignment payload must be a non-empty list of (judge_id, team_id) pairs",
            code="MISSING_FIELD"
        )

    async with gate.transaction(db, "bulk-assign"):
        # Validated under the gate
        failures = await validate_bulk_assignment(pairs, db)
        if failures:
            logger.warning(f"[BULK ASSIGN REJECTED] failures={len(failures)}")
            raise rejection_for(failures)

        store = AssignmentStore(db)
        created: List[JudgeTeamAssignment] = []
        for judge_id, team_id in pairs:
            created.append(await store.create(judge_id, team_id, assigned_by=acting_admin_id))

    logger.info(f"[BULK ASSIGN SUCCESS] created={len(created)}")

    return {
        "created_count": len(created),
        "assignments": [a.to_dict() for a in created],
    }
