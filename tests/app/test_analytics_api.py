"""Tests for analytics routes."""


def _record(client, project_id, name, human, ai):
    client.post("/api/tasks", json={
        "project_id": project_id, "name": name, "human_time": human, "ai_time": ai,
    })


class TestAnalyticsApi:
    def test_empty_overview(self, client):
        response = client.get("/api/analytics")
        assert response.json() == {
            "total_tasks": 0,
            "total_projects": 0,
            "total_time_saved": 0,
            "avg_productivity_gain": 0.0,
        }

    def test_overview(self, client, created_project):
        _record(client, created_project["id"], "Design Homepage", 120, 30)
        _record(client, created_project["id"], "Design Homepage", 60, 45)
        data = client.get("/api/analytics").json()
        assert data["total_tasks"] == 2
        assert data["total_projects"] == 1
        assert data["total_time_saved"] == 105
        assert data["avg_productivity_gain"] == 50.0

    def test_by_project(self, client, created_project):
        _record(client, created_project["id"], "Design Homepage", 100, 40)
        [row] = client.get("/api/analytics/projects").json()
        assert row["project_name"] == "Website Redesign"
        assert row["task_count"] == 1
        assert row["total_time_saved"] == 60
        assert row["avg_productivity_gain"] == 60.0

    def test_chart(self, client, created_project):
        _record(client, created_project["id"], "Design Homepage", 0, 10)
        [row] = client.get("/api/analytics/chart").json()
        assert row["productivity_gain"] == 0.0
        assert row["project_name"] == "Website Redesign"
