"""
Tests for expense endpoints.
"""


def _job(api):
    response = api.post("/jobs", json={
        "client_id": "client-1", "amount": 240.0, "date": "2024-01-15", "description": "Deep clean"
    })
    return response.json()["job"]


def _expense_body(job_id, **overrides):
    body = {"job_id": job_id, "amount": 50.0, "date": "2024-01-16", "description": "Cleaning supplies"}
    body.update(overrides)
    return body


class TestExpenses:

    def test_expense_lifecycle_keeps_ledger_in_sync(self, api, routed_store, rows):
        job = _job(api)

        created = api.post("/expenses", json=_expense_body(job["id"]))

        assert created.status_code == 201
        expense = created.json()["expense"]
        transactions = rows(routed_store, "transactions")
        assert len(transactions) == 1
        assert transactions[0]["expense_id"] == expense["id"]
        assert transactions[0]["description"] == "Additional expense: Cleaning supplies"

        updated = api.patch(f"/expenses/{expense['id']}", json={"amount": 75.0})

        assert updated.status_code == 200
        assert updated.json()["expense"]["amount"] == 75.0
        assert rows(routed_store, "transactions")[0]["amount"] == 75.0

        deleted = api.delete(f"/expenses/{expense['id']}")

        assert deleted.status_code == 200
        assert rows(routed_store, "transactions") == []

    def test_expense_for_unknown_job(self, api):
        response = api.post("/expenses", json=_expense_body("missing"))

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"

    def test_expense_requires_description(self, api):
        job = _job(api)

        response = api.post("/expenses", json=_expense_body(job["id"], description=""))

        assert response.status_code == 422

    def test_get_expense(self, api):
        job = _job(api)
        expense = api.post("/expenses", json=_expense_body(job["id"])).json()["expense"]

        response = api.get(f"/expenses/{expense['id']}")

        assert response.status_code == 200
        assert response.json()["job_id"] == job["id"]

    def test_unknown_expense(self, api):
        assert api.get("/expenses/missing").status_code == 404
        assert api.patch("/expenses/missing", json={"amount": 1}).status_code == 404
        assert api.delete("/expenses/missing").status_code == 404

    def test_expense_transaction_can_be_deleted_directly(self, api, routed_store, rows):
        """Expense-derived transactions are not protected by the completed-job guard."""
        job = _job(api)
        api.patch(f"/jobs/{job['id']}", json={"status": "completed"})
        expense = api.post("/expenses", json=_expense_body(job["id"])).json()["expense"]
        expense_txn = next(
            t for t in rows(routed_store, "transactions") if t["expense_id"] == expense["id"]
        )

        response = api.delete(f"/transactions/{expense_txn['id']}")

        assert response.status_code == 200
