"""
Test suite for expense routes.
Tests cover validation, date normalisation, filtering and pagination.
"""

import pytest

from conftest import add_expense, category_id


class TestCreateExpense:
    """Test creating expenses."""

    def test_create_normalises_date_to_midday_utc(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, "19.99", "2024-01-15")
        assert expense["amount"] == 19.99
        assert expense["date"] == "2024-01-15T12:00:00.000Z"
        assert expense["category"]["name"] == "Food"

    def test_offset_is_converted_to_utc_day(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15T23:30:00-05:00")
        assert expense["date"] == "2024-01-16T12:00:00.000Z"

    @pytest.mark.parametrize("amount", [0, -5, "0"])
    def test_non_positive_amount_rejected(self, client, auth_headers, amount):
        food = category_id(client, auth_headers)
        response = client.post("/api/expenses", headers=auth_headers, json={
            "amount": amount, "description": "Bad", "date": "2024-01-15", "categoryId": food,
        })
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid amount"

    def test_non_numeric_amount_rejected(self, client, auth_headers):
        food = category_id(client, auth_headers)
        response = client.post("/api/expenses", headers=auth_headers, json={
            "amount": "lots", "description": "Bad", "date": "2024-01-15", "categoryId": food,
        })
        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "amount"

    @pytest.mark.parametrize("amount", [True, False])
    def test_boolean_amount_rejected(self, client, auth_headers, amount):
        food = category_id(client, auth_headers)
        response = client.post("/api/expenses", headers=auth_headers, json={
            "amount": amount, "description": "Bad", "date": "2024-01-15", "categoryId": food,
        })
        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "amount"
        assert client.get("/api/expenses", headers=auth_headers).get_json()["expenses"] == []

    def test_unparseable_date_rejected(self, client, auth_headers):
        food = category_id(client, auth_headers)
        response = client.post("/api/expenses", headers=auth_headers, json={
            "amount": 5, "description": "Bad", "date": "15/01/2024", "categoryId": food,
        })
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid date"

    def test_missing_fields_reported(self, client, auth_headers):
        response = client.post("/api/expenses", headers=auth_headers, json={"amount": 5})
        assert response.status_code == 400
        fields = {e["field"] for e in response.get_json()["errors"]}
        assert {"description", "date", "categoryId"} <= fields

    def test_other_users_category_rejected(self, client, auth_headers, other_headers):
        theirs = category_id(client, other_headers)
        response = client.post("/api/expenses", headers=auth_headers, json={
            "amount": 5, "description": "Sneaky", "date": "2024-01-15", "categoryId": theirs,
        })
        assert response.status_code == 404
        assert response.get_json()["error"] == "Category not found"


class TestUpdateExpense:
    """Test partial updates."""

    def test_partial_update_keeps_other_fields(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15", description="Lunch")
        response = client.put(f"/api/expenses/{expense['id']}", headers=auth_headers, json={"amount": 12})
        assert response.status_code == 200
        updated = response.get_json()["expense"]
        assert updated["amount"] == 12
        assert updated["description"] == "Lunch"
        assert updated["date"] == expense["date"]

    def test_boolean_amount_update_rejected(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15")
        response = client.put(f"/api/expenses/{expense['id']}", headers=auth_headers, json={"amount": True})
        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "amount"

    def test_move_to_another_category(self, client, auth_headers):
        food = category_id(client, auth_headers, "Food")
        bills = category_id(client, auth_headers, "Bills")
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15")
        response = client.put(f"/api/expenses/{expense['id']}", headers=auth_headers, json={"categoryId": bills})
        assert response.get_json()["expense"]["category"]["name"] == "Bills"

    def test_update_date_is_normalised(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15")
        response = client.put(f"/api/expenses/{expense['id']}", headers=auth_headers,
                              json={"date": "2024-02-01T03:00:00Z"})
        assert response.get_json()["expense"]["date"] == "2024-02-01T12:00:00.000Z"

    def test_invalid_amount_leaves_expense_unchanged(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15")
        response = client.put(f"/api/expenses/{expense['id']}", headers=auth_headers,
                              json={"amount": -1, "description": "Changed"})
        assert response.status_code == 400
        current = client.get(f"/api/expenses/{expense['id']}", headers=auth_headers).get_json()["expense"]
        assert current["description"] == expense["description"]

    def test_update_missing_expense(self, client, auth_headers):
        response = client.put("/api/expenses/4242", headers=auth_headers, json={"amount": 3})
        assert response.status_code == 404

    def test_update_with_foreign_category(self, client, auth_headers, other_headers):
        food = category_id(client, auth_headers)
        theirs = category_id(client, other_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15")
        response = client.put(f"/api/expenses/{expense['id']}", headers=auth_headers, json={"categoryId": theirs})
        assert response.status_code == 404


class TestDeleteExpense:
    """Test deleting expenses."""

    def test_delete(self, client, auth_headers):
        food = category_id(client, auth_headers)
        expense = add_expense(client, auth_headers, food, 10, "2024-01-15")
        assert client.delete(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 404

    def test_delete_other_users_expense_is_404(self, client, auth_headers, other_headers):
        theirs = category_id(client, other_headers)
        expense = add_expense(client, other_headers, theirs, 10, "2024-01-15")
        assert client.delete(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 404


class TestListExpenses:
    """Test filtering, ordering and pagination."""

    def test_ordered_by_date_descending(self, client, auth_headers):
        food = category_id(client, auth_headers)
        for day in ("2024-01-03", "2024-01-01", "2024-01-02"):
            add_expense(client, auth_headers, food, 1, day)
        expenses = client.get("/api/expenses", headers=auth_headers).get_json()["expenses"]
        assert [e["date"][:10] for e in expenses] == ["2024-01-03", "2024-01-02", "2024-01-01"]

    def test_date_filters_are_inclusive_whole_days(self, client, auth_headers):
        food = category_id(client, auth_headers)
        for day in ("2024-01-31", "2024-02-01", "2024-02-29", "2024-03-01"):
            add_expense(client, auth_headers, food, 1, day)
        body = client.get("/api/expenses?startDate=2024-02-01&endDate=2024-02-29", headers=auth_headers).get_json()
        assert [e["date"][:10] for e in body["expenses"]] == ["2024-02-29", "2024-02-01"]
        assert body["pagination"]["total"] == 2

    def test_category_filter(self, client, auth_headers):
        food = category_id(client, auth_headers, "Food")
        bills = category_id(client, auth_headers, "Bills")
        add_expense(client, auth_headers, food, 1, "2024-01-01")
        add_expense(client, auth_headers, bills, 2, "2024-01-01")
        body = client.get(f"/api/expenses?categoryId={bills}", headers=auth_headers).get_json()
        assert [e["amount"] for e in body["expenses"]] == [2]

    def test_invalid_filter_date(self, client, auth_headers):
        response = client.get("/api/expenses?startDate=yesterday", headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("value", ["abc", "1.5"])
    def test_invalid_category_filter(self, client, auth_headers, value):
        food = category_id(client, auth_headers)
        add_expense(client, auth_headers, food, 1, "2024-01-01")
        response = client.get(f"/api/expenses?categoryId={value}", headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid categoryId"}

    def test_page_size_follows_config(self, app, client, auth_headers):
        app.config["DEFAULT_PAGE_SIZE"] = 2
        app.config["MAX_PAGE_SIZE"] = 3
        food = category_id(client, auth_headers)
        for day in range(1, 6):
            add_expense(client, auth_headers, food, day, f"2024-01-0{day}")

        body = client.get("/api/expenses", headers=auth_headers).get_json()
        assert body["pagination"] == {"total": 5, "page": 1, "limit": 2, "totalPages": 3}
        capped = client.get("/api/expenses?limit=50", headers=auth_headers).get_json()
        assert capped["pagination"]["limit"] == 3

    def test_pagination_metadata(self, client, auth_headers):
        food = category_id(client, auth_headers)
        for i in range(45):
            add_expense(client, auth_headers, food, i + 1, f"2024-01-{(i % 28) + 1:02d}")

        body = client.get("/api/expenses?page=1&limit=20", headers=auth_headers).get_json()
        assert body["pagination"] == {"total": 45, "page": 1, "limit": 20, "totalPages": 3}
        assert len(body["expenses"]) == 20

        last = client.get("/api/expenses?page=3&limit=20", headers=auth_headers).get_json()
        assert len(last["expenses"]) == 5

        beyond = client.get("/api/expenses?page=9&limit=20", headers=auth_headers)
        assert beyond.status_code == 200
        assert beyond.get_json()["expenses"] == []

    @pytest.mark.parametrize("query, expected", [
        ("page=0&limit=500", (1, 100)),
        ("page=-3&limit=-2", (1, 1)),
        ("page=abc&limit=xyz", (1, 20)),
        ("", (1, 20)),
    ])
    def test_pagination_is_clamped(self, client, auth_headers, query, expected):
        pagination = client.get(f"/api/expenses?{query}", headers=auth_headers).get_json()["pagination"]
        assert (pagination["page"], pagination["limit"]) == expected

    def test_list_is_scoped_to_user(self, client, auth_headers, other_headers):
        theirs = category_id(client, other_headers)
        add_expense(client, other_headers, theirs, 10, "2024-01-15")
        body = client.get("/api/expenses", headers=auth_headers).get_json()
        assert body["expenses"] == []
        assert body["pagination"]["totalPages"] == 0
