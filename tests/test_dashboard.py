"""Tests for dashboard metrics, recent activity and upcoming tasks."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from dashboard import repository as dashboard_repository
from dashboard import service as dashboard_service


@pytest.mark.parametrize(
    ("current", "previous", "expected"),
    [
        (1100, 1000, 10.0),
        (500, 0, 0.0),
        (0, 0, 0.0),
        (0, 250, -100.0),
        (Decimal("1001.00"), Decimal("3000.00"), -66.63),
        (Decimal("100.005"), Decimal("100"), 0.01),
    ],
)
def test_revenue_growth(current, previous, expected):
    assert dashboard_service.revenue_growth(current, previous) == expected


def test_priority_order_sql():
    assert dashboard_repository.priority_order_sql() == (
        "CASE t.priority WHEN 'urgent' THEN 1 WHEN 'high' THEN 2 WHEN 'medium' THEN 3 ELSE 4 END"
    )


def test_upcoming_task_sort_key_orders_priority_then_due_date():
    rows = [
        {"task_id": 1, "priority": "low", "due_date": date(2026, 10, 18)},
        {"task_id": 2, "priority": "medium", "due_date": None},
        {"task_id": 3, "priority": "urgent", "due_date": date(2026, 12, 1)},
        {"task_id": 4, "priority": "medium", "due_date": date(2026, 10, 20)},
        {"task_id": 5, "priority": None, "due_date": date(2026, 10, 1)},
        {"task_id": 6, "priority": "high", "due_date": date(2026, 11, 1)},
    ]
    ordered = sorted(rows, key=dashboard_service.upcoming_task_sort_key)
    assert [r["task_id"] for r in ordered] == [3, 6, 4, 2, 5, 1]


def test_metrics_endpoint(client, api, auth_headers, monkeypatch):
    async def fetch_metrics(db):
        return {
            "total_companies": 12,
            "active_policies": 30,
            "upcoming_renewals": 4,
            "tasks_due": 7,
            "revenue_this_month": Decimal("1100.00"),
            "revenue_previous_month": Decimal("1000.00"),
        }

    monkeypatch.setattr(dashboard_repository, "fetch_metrics", fetch_metrics)
    response = client.get(f"{api}/dashboard/metrics", headers=auth_headers("agent"))
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "totalCompanies": 12,
            "activePolicies": 30,
            "upcomingRenewals": 4,
            "tasksDue": 7,
            "revenueThisMonth": 1100.0,
            "revenuePreviousMonth": 1000.0,
            "revenueGrowth": 10.0,
        },
    }


def test_metrics_on_empty_database(client, api, auth_headers, fake_db):
    fake_db.rows = [
        {
            "total_companies": 0,
            "active_policies": 0,
            "upcoming_renewals": 0,
            "tasks_due": 0,
            "revenue_this_month": Decimal("0"),
            "revenue_previous_month": Decimal("0"),
        }
    ]
    response = client.get(f"{api}/dashboard/metrics", headers=auth_headers("manager"))
    data = response.json()["data"]
    assert data["revenueGrowth"] == 0
    assert data["totalCompanies"] == 0
    (_, sql, args), = fake_db.calls
    assert "due_date <= CURRENT_DATE + INTERVAL '7 days'" in sql
    assert args == (["pending", "in_progress"],)


def test_upcoming_tasks_put_urgent_first(client, api, auth_headers, fake_db):
    fake_db.rows = [
        {"task_id": 1, "title": "File report", "priority": "medium", "due_date": date(2026, 10, 19)},
        {"task_id": 2, "title": "Renewal call", "priority": "urgent", "due_date": date(2026, 10, 25)},
        {"task_id": 3, "title": "Send quote", "priority": "high", "due_date": date(2026, 10, 18)},
    ]
    response = client.get(f"{api}/dashboard/upcoming-tasks?limit=3", headers=auth_headers("agent"))
    assert response.status_code == 200
    assert [t["task_id"] for t in response.json()["data"]] == [2, 3, 1]
    (_, sql, args), = fake_db.calls
    assert dashboard_repository.priority_order_sql() in sql
    assert args == (["pending", "in_progress"], 3)


def test_upcoming_tasks_default_limit(client, api, auth_headers, fake_db):
    client.get(f"{api}/dashboard/upcoming-tasks", headers=auth_headers("agent"))
    assert fake_db.calls[0][2][-1] == 5


def test_recent_activities(client, api, auth_headers, fake_db):
    fake_db.rows = [
        {
            "type": "policy",
            "description": "Policy created: POL-7",
            "activity_date": datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc),
            "reference_id": "7",
        }
    ]
    response = client.get(f"{api}/dashboard/recent-activities", headers=auth_headers("agent"))
    assert response.status_code == 200
    assert response.json()["data"][0]["type"] == "policy"
    (_, sql, args), = fake_db.calls
    assert sql.count("UNION ALL") == 2
    assert args == (dashboard_repository.RECENT_PER_SOURCE, 10)


@pytest.mark.parametrize("limit", ["0", "101", "ten"])
def test_recent_activities_limit_is_validated(client, api, auth_headers, fake_db, limit):
    response = client.get(f"{api}/dashboard/recent-activities?limit={limit}", headers=auth_headers("agent"))
    assert response.status_code == 400
    assert fake_db.calls == []


def test_dashboard_requires_authentication(client, api, fake_db):
    assert client.get(f"{api}/dashboard/metrics").status_code == 401
    assert fake_db.calls == []
