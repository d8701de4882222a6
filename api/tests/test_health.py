from __future__ import annotations


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["uptimeS"] >= 0


def test_db_status_reports_migrated_database(client):
    response = client.get("/db-status")
    assert response.status_code == 200
    data = response.json()
    assert data["connected"] is True
    assert data["status"] == "Healthy"
    assert data["pendingMigrations"] is False
    assert data["currentRevision"] == data["headRevision"] == "20251104000000"


def test_unknown_route_is_problem_document(client):
    response = client.get("/no-such-route")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["status"] == 404
