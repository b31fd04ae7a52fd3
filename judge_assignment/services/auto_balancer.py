"""
Auto Balancer: redistribute pending assignments across active judges.

Pending = evaluation status 'none' or 'draft'. Submitted work is never
touched, and assignments held by inactive judges stay where they are.

Algorithm (deterministic, no randomness):
1. Count pending assignments per active judge
2. Target spread is floor(total / judges) .. ceil(total / judges)
3. Repeat passes; within a pass, while max - min > 1:
   a. source = most pending (tie: lowest judge id), skipping excluded judges
   b. destination = least pending (tie: lowest judge id)
   c. item = source's lowest team id not already assigned to the destination;
      when every candidate team is already there, try the next-least-loaded
      judge that is still at least two below the source
   d. no valid (team, destination) for the source -> exclude it for this pass
4. Stop once a pass performs zero moves

Every move lowers the sum of squared pending counts by at least 2, so the
loop always terminates. Running the balancer again on its own output
performs zero moves.
"""
import bisect
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import AssignmentStoreError
from judge_assignment.orm.assignment import EvaluationStatus
from judge_assignment.services.assignment_store import AssignmentStore
from judge_assignment.services.directories import JudgeDirectory
from judge_assignment.services.mutation_gate import MutationGate, mutation_gate as default_gate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceMove:
    team_id: int
    from_judge_id: int
    to_judge_id: int
    status: EvaluationStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "from_judge_id": self.from_judge_id,
            "to_judge_id": self.to_judge_id,
            "evaluation_status": self.status.value,
        }


@dataclass
class BalancePlan:
    moves: List[BalanceMove] = field(default_factory=list)
    pending_before: Dict[int, int] = field(default_factory=dict)
    pending_after: Dict[int, int] = field(default_factory=dict)
    target_min: int = 0
    target_max: int = 0
    passes: int = 0

    @property
    def is_balanced(self) -> bool:
        if not self.pending_after:
            return True
        counts = self.pending_after.values()
        return max(counts) - min(counts) <= 1


def target_spread(total_pending: int, judge_count: int) -> Tuple[int, int]:
    """floor/ceil of the per-judge pending share."""
    if judge_count <= 0:
        return (0, 0)
    low, remainder = divmod(total_pending, judge_count)
    return (low, low + 1 if remainder else low)


def _find_move(
    source: int,
    judges: List[int],
    pending: Dict[int, List[int]],
    assigned: Dict[int, Set[int]]
) -> Optional[Tuple[int, int]]:
    """First (team_id, destination) for `source`, or None."""
    source_load = len(pending[source])
    destinations = sorted(judges, key=lambda j: (len(pending[j]), j))

    for destination in destinations:
        if destination == source:
            continue
        if source_load - len(pending[destination]) <= 1:
            # Sorted ascending: no later judge is under-loaded either
            break
        for team_id in pending[source]:
            if team_id not in assigned[destination]:
                return (team_id, destination)

    return None


def plan_rebalance(
    active_judge_ids: Iterable[int],
    assignments: Iterable[Tuple[int, int, EvaluationStatus]]
) -> BalancePlan:
    """
    Compute the moves that equalize pending load.

    Pure function: no database access.

    Args:
        active_judge_ids: judges eligible as source or destination
        assignments: every assignment as (judge_id, team_id, status),
            including submitted ones and ones held by inactive judges

    Returns:
        BalancePlan with moves in execution order
    """
    judges = sorted(set(active_judge_ids))
    pending: Dict[int, List[int]] = {judge_id: [] for judge_id in judges}
    assigned: Dict[int, Set[int]] = defaultdict(set)
    statuses: Dict[Tuple[int, int], EvaluationStatus] = {}

    for judge_id, team_id, status in assignments:
        assigned[judge_id].add(team_id)
        if judge_id in pending and status.is_pending:
            pending[judge_id].append(team_id)
            statuses[(judge_id, team_id)] = status

    for judge_id in judges:
        pending[judge_id].sort()

    total = sum(len(teams) for teams in pending.values())
    low, high = target_spread(total, len(judges))
    plan = BalancePlan(
        pending_before={judge_id: len(pending[judge_id]) for judge_id in judges},
        target_min=low,
        target_max=high,
    )

    if len(judges) < 2:
        plan.pending_after = dict(plan.pending_before)
        return plan

    while True:
        plan.passes += 1
        moved = False
        excluded: Set[int] = set()

        while True:
            candidates = [judge_id for judge_id in judges if judge_id not in excluded]
            if not candidates:
                break

            source = min(candidates, key=lambda j: (-len(pending[j]), j))
            least = min(judges, key=lambda j: (len(pending[j]), j))
            if len(pending[source]) - len(pending[least]) <= 1:
                break

            found = _find_move(source, judges, pending, assigned)
            if found is None:
                excluded.add(source)
                continue

            team_id, destination = found
            status = statuses.pop((source, team_id))

            pending[source].remove(team_id)
            assigned[source].discard(team_id)
            bisect.insort(pending[destination], team_id)
            assigned[destination].add(team_id)
            statuses[(destination, team_id)] = status

            plan.moves.append(BalanceMove(team_id, source, destination, status))
            moved = True

        if not moved:
            break

    plan.pending_after = {judge_id: len(pending[judge_id]) for judge_id in judges}
    return plan


async def auto_balance(
    acting_admin_id: str,
    db: AsyncSession,
    gate: MutationGate = default_gate
) -> Dict[str, Any]:
    """
    Rebalance pending assignments in one transaction.

    Each move deletes (from_judge, team) and creates (to_judge, team)
    with the same evaluation status. A state that is already balanced,
    or has no valid move, is a successful no-op.

    Returns:
        {"moves_performed", "moves", "pending_before", "pending_after",
         "target_min", "target_max", "balanced"}
    """
    logger.info(f"[AUTO BALANCE START] admin={acting_admin_id}")

    async with gate.transaction(db, "auto-balance"):
        store = AssignmentStore(db)
        active_judges = await JudgeDirectory(db).list_active_ids()
        current = await store.list_all()

        plan = plan_rebalance(
            active_judges,
            [(a.judge_id, a.team_id, a.evaluation_status) for a in current]
        )

        for move in plan.moves:
            removed = await store.delete(move.from_judge_id, move.team_id)
            if removed.evaluation_status is EvaluationStatus.SUBMITTED:
                # Planner selects pending rows only
                raise AssignmentStoreError(
                    f"Refusing to move submitted assignment (judge {move.from_judge_id}, team {move.team_id})"
                )
            await store.create(
                move.to_judge_id,
                move.team_id,
                assigned_by=acting_admin_id,
                status=move.status
            )

    logger.info(
        f"[AUTO BALANCE SUCCESS] moves={len(plan.moves)} passes={plan.passes} "
        f"target={plan.target_min}..{plan.target_max} balanced={plan.is_balanced}"
    )

    return {
        "moves_performed": len(plan.moves),
        "moves": [m.to_dict() for m in plan.moves],
        "pending_before": {str(k): v for k, v in plan.pending_before.items()},
        "pending_after": {str(k): v for k, v in plan.pending_after.items()},
        "target_min": plan.target_min,
        "target_max": plan.target_max,
        "balanced": plan.is_balanced,
    }
