"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

from datetime import date

from fastapi.testclient import TestClient

from lifetasks.auth.jwt import create_access_token
from lifetasks.models.recurrence import RecurringTaskDefinition


def _create_task(test_client: TestClient, **overrides):
    body = {"date": "2025-06-16", "context": "work", "title": "Write report", **overrides}
    response = test_client.post("/tasks", json=body)
    assert response.status_code == 201
    return response.json()["task"]


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTaskEndpoints:
    """Test calendar task CRUD API endpoints."""

    def test_create_task(self, test_client):
        task = _create_task(test_client, notes="draft")

        assert task["title"] == "Write report"
        assert task["notes"] == "draft"
        assert task["context"] == "work"
        assert task["status"] == "To Do"
        assert task["completed"] is False

    def test_create_task_rejects_bad_date(self, test_client):
        response = test_client.post("/tasks", json={"date": "16/06/2025", "context": "work", "title": "x"})
        assert response.status_code == 422

    def test_create_task_rejects_unknown_context(self, test_client):
        response = test_client.post("/tasks", json={"date": "2025-06-16", "context": "hobby", "title": "x"})
        assert response.status_code == 422

    def test_list_tasks_grouped_by_date_and_context(self, test_client):
        _create_task(test_client)
        _create_task(test_client, context="school", title="Essay")
        _create_task(test_client, date="2025-06-17", title="Follow up")

        response = test_client.get("/tasks")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert set(data["tasks"].keys()) == {"2025-06-16", "2025-06-17"}
        day = data["tasks"]["2025-06-16"]
        assert set(day.keys()) == {"work", "rescue", "personal", "school"}
        assert [t["title"] for t in day["work"]] == ["Write report"]
        assert [t["title"] for t in day["school"]] == ["Essay"]

    def test_get_update_delete_task(self, test_client):
        task_id = _create_task(test_client)["id"]

        assert test_client.get(f"/tasks/{task_id}").json()["task"]["id"] == task_id

        response = test_client.put(f"/tasks/{task_id}", json={"completed": True, "date": "2025-06-20"})
        assert response.status_code == 200
        updated = response.json()["task"]
        assert updated["completed"] is True
        assert updated["date"] == "2025-06-20"
        assert updated["title"] == "Write report"

        assert test_client.delete(f"/tasks/{task_id}").status_code == 200
        assert test_client.get(f"/tasks/{task_id}").status_code == 404
        assert test_client.delete(f"/tasks/{task_id}").status_code == 404

    def test_update_missing_task(self, test_client):
        assert test_client.put("/tasks/missing", json={"title": "x"}).status_code == 404

    def test_clear_all_deactivates_recurring(self, test_client):
        _create_task(test_client)
        test_client.post("/recurring-tasks", json={"title": "Gym", "context": "personal", "frequency": "weekly-mon"})

        response = test_client.delete("/tasks/all/clear")

        assert response.status_code == 200
        assert response.json()["recurring_deactivated"] == 1
        assert test_client.get("/tasks").json()["count"] == 0
        recurring = test_client.get("/recurring-tasks").json()["recurring_tasks"]
        assert len(recurring) == 1
        assert recurring[0]["active"] is False


class TestBacklogEndpoints:
    def test_backlog_crud_and_schedule(self, test_client):
        response = test_client.post("/backlog", json={"context": "rescue", "title": "Call vet"})
        assert response.status_code == 201
        item = response.json()["task"]

        backlog = test_client.get("/backlog").json()
        assert backlog["count"] == 1
        assert [t["title"] for t in backlog["backlog"]["rescue"]] == ["Call vet"]

        response = test_client.put(f"/backlog/{item['id']}", json={"notes": "ask about shots"})
        assert response.json()["task"]["notes"] == "ask about shots"

        response = test_client.post(f"/backlog/{item['id']}/schedule", json={"date": "2025-06-18"})
        assert response.status_code == 201
        scheduled = response.json()["task"]
        assert scheduled["date"] == "2025-06-18"
        assert scheduled["context"] == "rescue"
        assert scheduled["notes"] == "ask about shots"

        assert test_client.get("/backlog").json()["count"] == 0
        assert test_client.get("/tasks").json()["count"] == 1

    def test_delete_missing_backlog_task(self, test_client):
        assert test_client.delete("/backlog/missing").status_code == 404

    def test_schedule_missing_backlog_task(self, test_client):
        response = test_client.post("/backlog/missing/schedule", json={"date": "2025-06-18"})
        assert response.status_code == 404

    def test_failed_schedule_keeps_item_in_backlog(self, test_client, db_session, monkeypatch):
        item = test_client.post("/backlog", json={"context": "rescue", "title": "Call vet"}).json()["task"]

        def failing_commit():
            raise RuntimeError("disk full")

        monkeypatch.setattr(db_session, "commit", failing_commit)
        response = test_client.post(f"/backlog/{item['id']}/schedule", json={"date": "2025-06-18"})
        monkeypatch.undo()

        assert response.status_code == 500
        assert test_client.get("/backlog").json()["count"] == 1
        assert test_client.get("/tasks").json()["count"] == 0

    def test_move_task_to_backlog(self, test_client):
        task = _create_task(test_client, context="personal", title="Renew passport", notes="photos first")

        response = test_client.post(f"/tasks/{task['id']}/backlog")

        assert response.status_code == 201
        item = response.json()["task"]
        assert item["title"] == "Renew passport"
        assert item["notes"] == "photos first"
        assert item["context"] == "personal"
        assert test_client.get("/tasks").json()["count"] == 0
        assert [t["id"] for t in test_client.get("/backlog").json()["backlog"]["personal"]] == [item["id"]]

    def test_move_missing_task_to_backlog(self, test_client):
        assert test_client.post("/tasks/missing/backlog").status_code == 404


class TestRecurringEndpoints:
    def test_create_generates_from_today(self, test_client):
        response = test_client.post(
            "/recurring-tasks", json={"title": "Gym", "context": "personal", "frequency": "everyday"}
        )

        assert response.status_code == 201
        data = response.json()
        today = date.today().isoformat()
        assert data["recurring_task"]["active"] is True
        assert data["recurring_task"]["frequency_label"] == "Every Day"
        assert data["generation"]["created_count"] > 0
        assert data["generation"]["failures"] == []
        ledger = data["recurring_task"]["generated_dates"]
        assert len(ledger) == data["generation"]["created_count"]
        assert ledger[0] == today
        assert all(d >= today for d in ledger)

    def test_create_rejects_unknown_frequency(self, test_client):
        response = test_client.post(
            "/recurring-tasks", json={"title": "Gym", "context": "personal", "frequency": "fortnightly"}
        )
        assert response.status_code == 422

    def test_generate_with_fixed_today_is_idempotent(self, test_client, recurring_repository, definition_base):
        recurring_repository.create(RecurringTaskDefinition(**{**definition_base, "frequency": "monthly-15"}))

        response = test_client.post("/recurring-tasks/generate", params={"today": "2030-01-10"})

        assert response.status_code == 200
        body = response.json()
        assert body["failures"] == []
        assert sorted(t["date"] for t in body["created"]) == ["2030-01-15", "2030-02-15", "2030-03-15"]

        again = test_client.post("/recurring-tasks/generate", params={"today": "2030-01-10"}).json()
        assert again["created_count"] == 0
        assert test_client.get("/tasks").json()["count"] == 3

    def test_generate_reports_unreadable_definitions_as_load_failure(self, test_client, monkeypatch):
        from lifetasks.database.recurring_task_repository import RecurringTaskRepository

        def failing_list_all(self, user_id):
            raise RuntimeError("database locked")

        monkeypatch.setattr(RecurringTaskRepository, "list_all", failing_list_all)

        response = test_client.post("/recurring-tasks/generate", params={"today": "2030-01-10"})

        assert response.status_code == 200
        body = response.json()
        assert body["created_count"] == 0
        assert [f["stage"] for f in body["failures"]] == ["load"]
        assert "database locked" in body["failures"][0]["reason"]

    def test_generate_rejects_bad_date(self, test_client):
        response = test_client.post("/recurring-tasks/generate", params={"today": "soon"})
        assert response.status_code == 422

    def test_toggle_inactive_stops_generation(self, test_client):
        created = test_client.post(
            "/recurring-tasks", json={"title": "Standup", "context": "work", "frequency": "daily"}
        ).json()
        definition_id = created["recurring_task"]["id"]
        ledger_before = created["recurring_task"]["generated_dates"]

        toggled = test_client.post(f"/recurring-tasks/{definition_id}/toggle").json()
        assert toggled["recurring_task"]["active"] is False
        assert toggled["generation"] is None
        assert toggled["recurring_task"]["generated_dates"] == ledger_before

        response = test_client.post("/recurring-tasks/generate", params={"today": "2030-01-10"})
        assert response.json()["created_count"] == 0

    def test_toggle_missing(self, test_client):
        assert test_client.post("/recurring-tasks/missing/toggle").status_code == 404

    def test_update_recurring_task(self, test_client):
        definition_id = test_client.post(
            "/recurring-tasks", json={"title": "Gym", "context": "personal", "frequency": "weekly-mon"}
        ).json()["recurring_task"]["id"]

        response = test_client.put(f"/recurring-tasks/{definition_id}", json={"frequency": "weekly-fri", "status": "High"})

        assert response.status_code == 200
        updated = response.json()["recurring_task"]
        assert updated["frequency"] == "weekly-fri"
        assert updated["frequency_label"] == "Weekly on Friday"
        assert updated["status"] == "High"

    def test_delete_definition_only_keeps_tasks(self, test_client):
        created = test_client.post(
            "/recurring-tasks", json={"title": "Standup", "context": "work", "frequency": "everyday"}
        ).json()
        definition_id = created["recurring_task"]["id"]
        count = created["generation"]["created_count"]

        response = test_client.delete(f"/recurring-tasks/{definition_id}")

        assert response.status_code == 200
        assert response.json()["instances_deleted"] == 0
        assert test_client.get("/recurring-tasks").json()["count"] == 0
        assert test_client.get("/tasks").json()["count"] == count

    def test_delete_with_instances_cascades_by_title(self, test_client):
        created = test_client.post(
            "/recurring-tasks", json={"title": "Standup", "context": "work", "frequency": "everyday"}
        ).json()
        definition_id = created["recurring_task"]["id"]
        count = created["generation"]["created_count"]
        _create_task(test_client, date="2020-01-01", context="personal", title="Standup")
        _create_task(test_client, date="2020-01-01", title="Unrelated")

        response = test_client.delete(f"/recurring-tasks/{definition_id}", params={"delete_instances": "true"})

        assert response.status_code == 200
        assert response.json()["instances_deleted"] == count + 1
        assert test_client.get("/tasks").json()["count"] == 1

    def test_delete_missing_recurring_task(self, test_client):
        assert test_client.delete("/recurring-tasks/missing").status_code == 404


class TestSchoolEndpoints:
    """Classes and their modules."""

    def _create_class(self, test_client, name="Biology"):
        response = test_client.post("/classes", json={"name": name, "color": "#2e7d32"})
        assert response.status_code == 201
        return response.json()["school_class"]

    def test_create_class_uses_default_color(self, test_client):
        school_class = test_client.post("/classes", json={"name": "Chemistry"}).json()["school_class"]

        assert school_class["color"] == "#4a90d9"
        assert school_class["modules"] == []

    def test_modules_are_numbered_and_nested_under_class(self, test_client):
        biology = self._create_class(test_client)
        history = self._create_class(test_client, name="History")

        first = test_client.post("/modules", json={"class_id": biology["id"], "name": "Cells"})
        assert first.status_code == 201
        assert first.json()["module"]["module_number"] == 1
        second = test_client.post("/modules", json={"class_id": biology["id"], "name": "Genetics"}).json()["module"]
        assert second["module_number"] == 2
        test_client.post("/modules", json={"class_id": history["id"], "name": "Rome"})

        classes = test_client.get("/classes").json()
        assert classes["count"] == 2
        nested = {c["name"]: [m["name"] for m in c["modules"]] for c in classes["classes"]}
        assert nested == {"Biology": ["Cells", "Genetics"], "History": ["Rome"]}

        only_biology = test_client.get("/modules", params={"class_id": biology["id"]}).json()
        assert only_biology["count"] == 2

    def test_module_for_missing_class(self, test_client):
        response = test_client.post("/modules", json={"class_id": "missing", "name": "Orphan"})
        assert response.status_code == 404

    def test_assign_week_and_toggle(self, test_client):
        biology = self._create_class(test_client)
        module = test_client.post("/modules", json={"class_id": biology["id"], "name": "Cells"}).json()["module"]

        assigned = test_client.put(f"/modules/{module['id']}/week", json={"week_number": 4}).json()["module"]
        assert assigned["week_number"] == 4
        cleared = test_client.put(f"/modules/{module['id']}/week", json={"week_number": None}).json()["module"]
        assert cleared["week_number"] is None
        assert test_client.put(f"/modules/{module['id']}/week", json={"week_number": 0}).status_code == 422

        toggled = test_client.post(f"/modules/{module['id']}/toggle").json()["module"]
        assert toggled["completed"] is True
        assert toggled["status"] == "completed"

    def test_update_module_completion_sets_status(self, test_client):
        biology = self._create_class(test_client)
        module = test_client.post("/modules", json={"class_id": biology["id"], "name": "Cells"}).json()["module"]

        updated = test_client.put(f"/modules/{module['id']}", json={"completed": True, "name": "Cell biology"}).json()

        assert updated["module"]["name"] == "Cell biology"
        assert updated["module"]["status"] == "completed"

    def test_update_and_delete_class_with_modules(self, test_client):
        biology = self._create_class(test_client)
        test_client.post("/modules", json={"class_id": biology["id"], "name": "Cells"})

        renamed = test_client.put(f"/classes/{biology['id']}", json={"name": "Biology II"}).json()["school_class"]
        assert renamed["name"] == "Biology II"
        assert [m["name"] for m in renamed["modules"]] == ["Cells"]

        assert test_client.delete(f"/classes/{biology['id']}").status_code == 200
        assert test_client.get("/classes").json()["count"] == 0
        assert test_client.get("/modules").json()["count"] == 0
        assert test_client.delete(f"/classes/{biology['id']}").status_code == 404

    def test_missing_module_routes(self, test_client):
        assert test_client.put("/modules/missing", json={"name": "x"}).status_code == 404
        assert test_client.put("/modules/missing/week", json={"week_number": 2}).status_code == 404
        assert test_client.post("/modules/missing/toggle").status_code == 404
        assert test_client.delete("/modules/missing").status_code == 404


class TestAuthentication:
    def test_requires_token(self, db_session):
        from lifetasks.api.app import app
        from lifetasks.database.database import get_db

        app.dependency_overrides[get_db] = lambda: db_session
        try:
            with TestClient(app) as client:
                assert client.get("/tasks").status_code == 401
        finally:
            app.dependency_overrides.clear()

    def test_valid_token_resolves_user(self, db_session, test_user_id):
        from lifetasks.api.app import app
        from lifetasks.database.database import get_db

        app.dependency_overrides[get_db] = lambda: db_session
        try:
            with TestClient(app) as client:
                headers = {"Authorization": f"Bearer {create_access_token(test_user_id)}"}
                assert client.get("/tasks", headers=headers).status_code == 200
                bad = {"Authorization": f"Bearer {create_access_token('unknown-user')}"}
                assert client.get("/tasks", headers=bad).status_code == 401
        finally:
            app.dependency_overrides.clear()
