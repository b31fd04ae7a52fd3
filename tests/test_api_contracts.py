"""
API Contract Tests

Verifies the HTTP surface:
- success bodies carry kind="success"
- failures follow the standard error structure with the right status codes
- rejected bulk batches list every offending pair
- acting admin identity is required for mutations
- auto-balance respects its feature flag
"""
import pytest
from httpx import ASGITransport, AsyncClient

from judge_assignment.config.settings import Settings
from judge_assignment.database import get_db
from judge_assignment.main import create_app
from judge_assignment.orm.assignment import EvaluationStatus
from judge_assignment.services.mutation_gate import get_mutation_gate

ADMIN = {"X-Admin-Id": "admin-42"}


@pytest.fixture
async def client(session_factory, gate):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mutation_gate] = lambda: gate

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# =============================================================================
# Matrix
# =============================================================================

class TestMatrixEndpoint:

    @pytest.mark.asyncio
    async def test_matrix_shape(self, client, seed):
        await seed(
            judge_ids=[1, 2], team_ids=[10, 11],
            assignments=[(1, 10, EvaluationStatus.SUBMITTED), (1, 11)]
        )

        response = await client.get("/api/admin/judge-assignments")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_judges"] == 2
        assert data["totals"] == {"total_assigned": 2, "total_completed": 1, "total_pending": 1}

        row = data["assignment_matrix"][0]
        assert row["judge_id"] == 1
        assert row["load_stats"] == {"total_assigned": 2, "completed_count": 1, "pending_count": 1}
        assert [t["team_name"] for t in row["teams_assigned"]] == ["Team 10", "Team 11"]
        assert data["assignment_matrix"][1]["teams_assigned"] == []

    @pytest.mark.asyncio
    async def test_integrity_endpoint(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10], assignments=[(1, 10)])

        response = await client.get("/api/admin/assignments/integrity")

        assert response.status_code == 200
        assert response.json()["is_valid"] is True


# =============================================================================
# Bulk Assign
# =============================================================================

class TestBulkAssignEndpoint:

    @pytest.mark.asyncio
    async def test_assign_created(self, client, seed):
        await seed(judge_ids=[1, 2], team_ids=[10, 11])

        response = await client.post(
            "/api/admin/assignments/assign",
            json={"assignments": [{"judge_id": 1, "team_id": 10}, {"judge_id": 2, "team_id": 11}]},
            headers=ADMIN
        )

        assert response.status_code == 201
        data = response.json()
        assert data["kind"] == "success"
        assert data["created_count"] == 2
        assert data["assignments"][0]["assigned_by"] == "admin-42"
        assert data["assignments"][0]["evaluation_status"] == "none"

    @pytest.mark.asyncio
    async def test_duplicate_batch_conflict(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10, 11], assignments=[(1, 10)])

        response = await client.post(
            "/api/admin/assignments/assign",
            json={"assignments": [{"judge_id": 1, "team_id": 11}, {"judge_id": 1, "team_id": 10}]},
            headers=ADMIN
        )

        assert response.status_code == 409
        data = response.json()
        assert data["success"] is False
        assert data["kind"] == "duplicate_assignment"
        assert data["code"] == "DUPLICATE_ASSIGNMENT"
        assert data["failures"] == [{
            "index": 1,
            "judge_id": 1,
            "team_id": 10,
            "reason": "ALREADY_ASSIGNED",
            "message": "Judge 1 is already assigned to team 10",
        }]

        matrix = (await client.get("/api/admin/judge-assignments")).json()
        assert matrix["totals"]["total_assigned"] == 1

    @pytest.mark.asyncio
    async def test_invalid_pairs_listed(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10])

        response = await client.post(
            "/api/admin/assignments/assign",
            json={"assignments": [{"judge_id": 7, "team_id": 10}, {"judge_id": 1, "team_id": 77}]},
            headers=ADMIN
        )

        assert response.status_code == 400
        data = response.json()
        assert data["kind"] == "validation_error"
        assert [f["reason"] for f in data["failures"]] == ["JUDGE_NOT_FOUND", "TEAM_NOT_FOUND"]

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, client):
        response = await client.post(
            "/api/admin/assignments/assign", json={"assignments": []}, headers=ADMIN
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "validation_error"

    @pytest.mark.asyncio
    async def test_admin_identity_required(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10])

        response = await client.post(
            "/api/admin/assignments/assign",
            json={"assignments": [{"judge_id": 1, "team_id": 10}]}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELD"

    @pytest.mark.asyncio
    async def test_busy_gate_conflict(self, client, seed, gate):
        await seed(judge_ids=[1], team_ids=[10])

        async with gate.hold("auto-balance"):
            response = await client.post(
                "/api/admin/assignments/assign",
                json={"assignments": [{"judge_id": 1, "team_id": 10}]},
                headers=ADMIN
            )

        assert response.status_code == 409
        assert response.json()["code"] == "MUTATION_IN_PROGRESS"


# =============================================================================
# Reassign
# =============================================================================

class TestReassignEndpoint:

    @pytest.mark.asyncio
    async def test_reassign_success(self, client, seed):
        await seed(judge_ids=[1, 2], team_ids=[10], assignments=[(1, 10, EvaluationStatus.DRAFT)])

        response = await client.post(
            "/api/admin/assignments/reassign",
            json={"team_id": 10, "old_judge_id": 1, "new_judge_id": 2},
            headers=ADMIN
        )

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "success"
        assert data["previous_status"] == "draft"
        assert data["assignment"]["judge_id"] == 2
        assert data["assignment"]["evaluation_status"] == "none"

    @pytest.mark.asyncio
    async def test_reassign_missing_pair(self, client, seed):
        await seed(judge_ids=[1, 2], team_ids=[10])

        response = await client.post(
            "/api/admin/assignments/reassign",
            json={"team_id": 10, "old_judge_id": 1, "new_judge_id": 2},
            headers=ADMIN
        )

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    @pytest.mark.asyncio
    async def test_reassign_submitted_conflict(self, client, seed):
        await seed(
            judge_ids=[1, 2], team_ids=[10],
            assignments=[(1, 10, EvaluationStatus.SUBMITTED)]
        )

        response = await client.post(
            "/api/admin/assignments/reassign",
            json={"team_id": 10, "old_judge_id": 1, "new_judge_id": 2},
            headers=ADMIN
        )

        assert response.status_code == 409
        data = response.json()
        assert data["kind"] == "conflict"
        assert data["code"] == "EVALUATION_ALREADY_SUBMITTED"


# =============================================================================
# Auto-Balance
# =============================================================================

class TestAutoBalanceEndpoint:

    @pytest.mark.asyncio
    async def test_auto_balance_moves(self, client, seed):
        await seed(
            judge_ids=[1, 2, 3], team_ids=list(range(1, 10)),
            assignments=[(1, team_id) for team_id in range(1, 10)]
        )

        response = await client.post("/api/admin/assignments/auto-balance", headers=ADMIN)

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "success"
        assert data["moves_performed"] == 6
        assert data["pending_after"] == {"1": 3, "2": 3, "3": 3}

        again = await client.post("/api/admin/assignments/auto-balance", headers=ADMIN)
        assert again.json()["moves_performed"] == 0
        assert again.json()["message"] == "Assignments already balanced; no moves performed."

    @pytest.mark.asyncio
    async def test_feature_disabled(self, client, monkeypatch):
        monkeypatch.setattr(Settings, "FEATURE_AUTO_BALANCE", False)

        response = await client.post("/api/admin/assignments/auto-balance", headers=ADMIN)

        assert response.status_code == 403
        assert response.json()["code"] == "FEATURE_DISABLED"


# =============================================================================
# Judge-facing and status events
# =============================================================================

class TestJudgeEndpoints:

    @pytest.mark.asyncio
    async def test_status_transition_flow(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10], assignments=[(1, 10)])

        draft = await client.post(
            "/api/evaluations/status", json={"judge_id": 1, "team_id": 10, "status": "draft"}
        )
        submitted = await client.post(
            "/api/evaluations/status", json={"judge_id": 1, "team_id": 10, "status": "submitted"}
        )
        backward = await client.post(
            "/api/evaluations/status", json={"judge_id": 1, "team_id": 10, "status": "draft"}
        )

        assert draft.status_code == 200
        assert submitted.json()["evaluation_status"] == "submitted"
        assert backward.status_code == 409
        assert backward.json()["kind"] == "invalid_transition"

        lookup = await client.get("/api/judge/1/evaluations/10/status")
        assert lookup.json()["evaluation_status"] == "submitted"
        assert lookup.json()["is_pending"] is False

    @pytest.mark.asyncio
    async def test_unknown_status_value(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10], assignments=[(1, 10)])

        response = await client.post(
            "/api/evaluations/status", json={"judge_id": 1, "team_id": 10, "status": "approved"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_status_lookup_unassigned(self, client, seed):
        await seed(judge_ids=[1], team_ids=[10])

        response = await client.get("/api/judge/1/evaluations/10/status")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_dashboard_and_assigned_teams(self, client, seed):
        await seed(
            judge_ids=[1], team_ids=[10, 11, 12],
            assignments=[(1, 10), (1, 11, EvaluationStatus.SUBMITTED), (1, 12)]
        )

        dashboard = await client.get("/api/judge/1/dashboard")
        teams = await client.get("/api/judge/1/assignments", params={"page": 1, "limit": 2})
        pending = await client.get("/api/judge/1/assignments", params={"status": "none"})

        assert dashboard.json()["load_stats"] == {
            "total_assigned": 3, "completed_count": 1, "pending_count": 2
        }
        assert [t["team_id"] for t in teams.json()["teams"]] == [10, 11]
        assert teams.json()["pagination"]["total_pages"] == 2
        assert [t["team_id"] for t in pending.json()["teams"]] == [10, 12]

    @pytest.mark.asyncio
    async def test_unknown_judge_dashboard(self, client):
        response = await client.get("/api/judge/404/dashboard")

        assert response.status_code == 404
        assert response.json()["code"] == "JUDGE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
