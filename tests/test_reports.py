"""Tests for the company report."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from core.errors import BadRequest
from reports import repository as report_repository
from reports import service as report_service

from .conftest import CREATED_AT


def test_filters_always_restrict_to_active_companies():
    where, params = report_service.company_report_filters().compile()
    assert where == "WHERE c.status = $1"
    assert params == ["active"]


def test_filters_compile_with_date_range():
    where, params = report_service.company_report_filters(
        industry="tech",
        size="medium",
        date_from=date(2026, 1, 1),
        date_to=date(2026, 3, 31),
    ).compile()
    assert where == (
        "WHERE c.status = $1"
        " AND (c.primary_industry ILIKE $2)"
        " AND c.company_size = $3"
        " AND c.created_at >= $4"
        " AND c.created_at <= $5"
    )
    assert params[:3] == ["active", "%tech%", "medium"]
    assert params[3] == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert params[4] == datetime.combine(date(2026, 3, 31), time.max, tzinfo=timezone.utc)


def test_single_day_range_is_allowed():
    day = date(2026, 5, 5)
    _, params = report_service.company_report_filters(date_from=day, date_to=day).compile()
    assert params[1] < params[2]


def test_reversed_range_is_rejected():
    with pytest.raises(BadRequest):
        report_service.company_report_filters(date_from=date(2026, 2, 1), date_to=date(2026, 1, 1))


def test_report_endpoint(client, api, auth_headers, monkeypatch):
    seen = {}

    async def company_report(db, filters, pagination):
        seen["where"], seen["params"] = filters.compile()
        seen["pagination"] = pagination
        return [
            {
                "company_id": 1,
                "company_name": "Acme",
                "total_accounts": 2,
                "total_policies": 3,
                "total_premium_value": 5400,
                "open_tasks": 1,
                "created_at": CREATED_AT,
            }
        ], 1

    monkeypatch.setattr(report_repository, "company_report", company_report)
    response = client.get(
        f"{api}/reports/companies?industry=Manu&dateFrom=2026-01-01&page=1&limit=10",
        headers=auth_headers("underwriter"),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["data"][0]["total_policies"] == 3
    assert body["pagination"]["total"] == 1
    assert seen["params"][:2] == ["active", "%Manu%"]
    assert "c.created_at >= $3" in seen["where"]
    assert seen["pagination"].limit == 10


def test_report_rejects_reversed_range(client, api, auth_headers, fake_db):
    response = client.get(
        f"{api}/reports/companies?dateFrom=2026-03-01&dateTo=2026-02-01",
        headers=auth_headers("manager"),
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "dateTo must not be before dateFrom"}
    assert fake_db.calls == []


def test_report_rejects_malformed_date(client, api, auth_headers, fake_db):
    response = client.get(f"{api}/reports/companies?dateFrom=yesterday", headers=auth_headers("manager"))
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "dateFrom"


def test_report_query_uses_lateral_aggregates(client, api, auth_headers, fake_db):
    client.get(f"{api}/reports/companies", headers=auth_headers("agent"))
    page_sql = fake_db.calls[0][1]
    assert page_sql.count("LEFT JOIN LATERAL") == 3
    assert "WHERE c.status = $1" in page_sql
    assert fake_db.calls[0][2] == ("active", 20, 0)
