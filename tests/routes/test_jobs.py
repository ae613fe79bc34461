"""
Tests for job endpoints.

Tests cover:
- Job creation, listing, retrieval, update and deletion
- Completing/reopening a job adds/removes its income transaction
- Job expenses and profit sub-resources
- Authentication and error cases
"""

from unittest.mock import AsyncMock, patch

from jobledger.utils.errors import StoreError


def _create_job(api, **overrides):
    body = {
        "client_id": "client-1",
        "amount": 240.0,
        "date": "2024-01-15",
        "description": "Deep clean",
    }
    body.update(overrides)
    response = api.post("/jobs", json=body)
    assert response.status_code == 201
    return response.json()["job"]


class TestCreateJob:
    """Tests for POST /jobs"""

    def test_create_job_success(self, api, routed_store, rows):
        response = api.post("/jobs", json={
            "client_id": "client-1",
            "amount": 240.0,
            "date": "2024-01-15",
            "description": "Deep clean",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "CREATED"
        assert data["job"]["status"] == "in_progress"
        assert data["job"]["user_id"] == "test-user-id"
        assert data["job_id"] == data["job"]["id"]
        assert rows(routed_store, "transactions") == []

    def test_create_completed_job_books_income(self, api, routed_store, rows):
        job = _create_job(api, status="completed")

        transactions = rows(routed_store, "transactions")
        assert len(transactions) == 1
        assert transactions[0]["job_id"] == job["id"]

    def test_create_job_invalid_status(self, api):
        response = api.post("/jobs", json={
            "client_id": "client-1", "amount": 1, "date": "2024-01-15", "status": "done"
        })

        assert response.status_code == 422

    def test_create_job_negative_amount(self, api):
        response = api.post("/jobs", json={"client_id": "c", "amount": -5, "date": "2024-01-15"})

        assert response.status_code == 422

    def test_create_job_store_failure(self, api):
        with patch("jobledger.routes.jobs.create_job", new=AsyncMock(side_effect=StoreError("down"))):
            response = api.post("/jobs", json={"client_id": "c", "amount": 5, "date": "2024-01-15"})

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "store_error"

    def test_create_job_requires_auth(self, client):
        response = client.post("/jobs", json={"client_id": "c", "amount": 5, "date": "2024-01-15"})

        assert response.status_code == 401


class TestUpdateJob:
    """Tests for PATCH /jobs/{job_id}"""

    def test_complete_then_reopen(self, api, routed_store, rows):
        job = _create_job(api)

        response = api.patch(f"/jobs/{job['id']}", json={"status": "completed"})

        assert response.status_code == 200
        assert response.json()["job"]["status"] == "completed"
        transactions = rows(routed_store, "transactions")
        assert len(transactions) == 1
        assert transactions[0]["type"] == "income"
        assert transactions[0]["amount"] == 240.0
        assert transactions[0]["description"] == "Service rendered — Deep clean"

        response = api.patch(f"/jobs/{job['id']}", json={"status": "in_progress"})

        assert response.status_code == 200
        assert rows(routed_store, "transactions") == []

    def test_edit_completed_job_mirrors_amount(self, api, routed_store, rows):
        job = _create_job(api, status="completed")

        response = api.patch(f"/jobs/{job['id']}", json={"amount": 275.0})

        assert response.status_code == 200
        assert rows(routed_store, "transactions")[0]["amount"] == 275.0

    def test_update_requires_fields(self, api):
        job = _create_job(api)

        response = api.patch(f"/jobs/{job['id']}", json={})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_request"

    def test_update_unknown_job(self, api):
        response = api.patch("/jobs/missing", json={"status": "completed"})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"


class TestReadJobs:

    def test_list_and_filter(self, api):
        _create_job(api, date="2024-01-01")
        _create_job(api, date="2024-02-01", status="completed")

        all_jobs = api.get("/jobs").json()
        completed = api.get("/jobs", params={"status": "completed"}).json()

        assert all_jobs["count"] == 2
        assert [job["date"] for job in all_jobs["jobs"]] == ["2024-02-01", "2024-01-01"]
        assert completed["count"] == 1

    def test_list_invalid_status_filter(self, api):
        response = api.get("/jobs", params={"status": "whatever"})

        assert response.status_code == 400

    def test_get_job(self, api):
        job = _create_job(api)

        response = api.get(f"/jobs/{job['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == job["id"]

    def test_get_unknown_job(self, api):
        assert api.get("/jobs/missing").status_code == 404

    def test_delete_job(self, api):
        job = _create_job(api)

        response = api.delete(f"/jobs/{job['id']}")

        assert response.status_code == 200
        assert response.json()["status"] == "DELETED"
        assert api.get(f"/jobs/{job['id']}").status_code == 404


class TestJobSubResources:

    def test_expenses_and_profit(self, api):
        job = _create_job(api, status="completed")
        api.post("/expenses", json={
            "job_id": job["id"], "amount": 50.0, "date": "2024-01-15", "description": "Supplies"
        })

        expenses = api.get(f"/jobs/{job['id']}/expenses").json()
        profit = api.get(f"/jobs/{job['id']}/profit").json()

        assert expenses["count"] == 1
        assert expenses["expenses"][0]["description"] == "Supplies"
        assert profit["revenue"] == 240.0
        assert profit["expenses"] == 50.0
        assert profit["profit"] == 190.0

    def test_sub_resources_of_unknown_job(self, api):
        assert api.get("/jobs/missing/expenses").status_code == 404
        assert api.get("/jobs/missing/profit").status_code == 404
