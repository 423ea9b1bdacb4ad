"""
Shared pytest fixtures for the expense tracker API tests.
"""

import pytest

from expensetracker import create_app
from expensetracker.config import TestConfig
from expensetracker.extensions import db


@pytest.fixture
def app():
    """Create application for testing with a fresh in-memory database."""
    application = create_app(config_class=TestConfig)
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def register(client, email="user@example.com", name="Test User", password="secret123"):
    """Register a user and return the Authorization header for them."""
    response = client.post("/api/auth/register", json={
        "email": email,
        "name": name,
        "password": password,
    })
    assert response.status_code == 201, response.get_json()
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


def category_id(client, headers, name="Food"):
    """Look up one of the user's categories by name."""
    categories = client.get("/api/categories", headers=headers).get_json()["categories"]
    return next(c["id"] for c in categories if c["name"] == name)


def add_expense(client, headers, cat_id, amount, date, description="Lunch"):
    response = client.post("/api/expenses", headers=headers, json={
        "amount": amount,
        "description": description,
        "date": date,
        "categoryId": cat_id,
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()["expense"]


def add_budget(client, headers, cat_id, start, end, amount=100, period="monthly"):
    return client.post("/api/budgets", headers=headers, json={
        "amount": amount,
        "period": period,
        "startDate": start,
        "endDate": end,
        "categoryId": cat_id,
    })


@pytest.fixture
def auth_headers(client):
    """Authorization header for a freshly registered user."""
    return register(client)


@pytest.fixture
def other_headers(client):
    """Authorization header for a second, unrelated user."""
    return register(client, email="other@example.com", name="Other User")
