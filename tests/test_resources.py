"""Tests for contacts, policies, claims and tasks: role gates, filters and not-found handling.

These run the real repositories against `FakeDatabase`, so the SQL each
endpoint issues can be checked.
"""

from __future__ import annotations

from datetime import datetime

import asyncpg
import pytest

from policies import repository as policy_repository
from tasks import repository as task_repository

from .conftest import CREATED_AT

CONTACT = {
    "contact_id": 11,
    "company_id": 1,
    "first_name": "Dana",
    "last_name": "Reyes",
    "email": "dana@example.com",
    "created_at": CREATED_AT,
}
POLICY = {
    "policy_id": 21,
    "account_id": 5,
    "policy_number": "POL-2026-0001",
    "status": "active",
    "created_at": CREATED_AT,
}
ACCOUNT = {"account_id": 5, "company_id": 1, "account_name": "Acme Main", "created_at": CREATED_AT}
CLAIM = {"claim_id": 31, "policy_id": 21, "claim_number": "CLM-0001", "status": "open", "created_at": CREATED_AT}
TASK = {"task_id": 41, "title": "Call broker", "priority": "high", "status": "pending", "created_at": CREATED_AT}

# (collection url, id url, create payload, stored row, roles that may write)
RESOURCES = {
    "contacts": (
        "/contacts",
        "/contacts/11",
        {"company_id": 1, "first_name": "Dana", "last_name": "Reyes"},
        CONTACT,
        {"admin", "manager", "agent"},
    ),
    "policies": (
        "/policies",
        "/policies/21",
        {"account_id": 5, "policy_number": "POL-2026-0001"},
        POLICY,
        {"admin", "manager", "agent", "underwriter"},
    ),
    "claims": (
        "/claims",
        "/claims/31",
        {"policy_id": 21, "claim_number": "CLM-0001", "incident_date": "2026-03-02"},
        CLAIM,
        {"admin", "manager", "agent", "claims_adjuster"},
    ),
    "tasks": (
        "/tasks",
        "/tasks/41",
        {"title": "Call broker"},
        TASK,
        {"admin", "manager", "agent", "underwriter", "claims_adjuster"},
    ),
}
ROLES = ("admin", "manager", "agent", "underwriter", "claims_adjuster")


def _writes(fake_db) -> list[str]:
    return [sql for _, sql, _ in fake_db.calls if sql.lstrip().split()[0] in {"INSERT", "UPDATE", "DELETE"}]


@pytest.mark.parametrize("resource", sorted(RESOURCES))
@pytest.mark.parametrize("role", ROLES)
def test_create_role_gate(client, api, auth_headers, fake_db, resource, role):
    collection, _, payload, row, writers = RESOURCES[resource]
    fake_db.rows = [row]
    response = client.post(f"{api}{collection}", json=payload, headers=auth_headers(role))
    if role in writers:
        assert response.status_code == 201
        data = response.json()["data"]
        # Serializers differ on "Z" versus "+00:00"; compare the instant.
        assert datetime.fromisoformat(data.pop("created_at").replace("Z", "+00:00")) == CREATED_AT
        assert data == {key: value for key, value in row.items() if key != "created_at"}
    else:
        assert response.status_code == 403
        assert _writes(fake_db) == []


@pytest.mark.parametrize("resource", sorted(RESOURCES))
@pytest.mark.parametrize("role", ROLES)
def test_delete_is_limited_to_admin_and_manager(client, api, auth_headers, fake_db, resource, role):
    _, item, _, row, _ = RESOURCES[resource]
    fake_db.rows = [row]
    response = client.delete(f"{api}{item}", headers=auth_headers(role))
    if role in ("admin", "manager"):
        assert response.status_code == 200
        assert response.json()["data"] is None
    else:
        assert response.status_code == 403
        assert _writes(fake_db) == []


@pytest.mark.parametrize("resource", sorted(RESOURCES))
def test_insert_returning_nothing_is_a_generic_server_error(client, api, auth_headers, fake_db, resource):
    collection, _, payload, _, _ = RESOURCES[resource]
    response = client.post(f"{api}{collection}", json=payload, headers=auth_headers("admin"))
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


@pytest.mark.parametrize("resource", sorted(RESOURCES))
def test_missing_item_is_not_found(client, api, auth_headers, fake_db, resource):
    _, item, _, _, _ = RESOURCES[resource]
    headers = auth_headers("admin")
    assert client.get(f"{api}{item}", headers=headers).status_code == 404
    assert client.put(f"{api}{item}", json={}, headers=headers).status_code == 404
    response = client.delete(f"{api}{item}", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"].endswith("not found")


@pytest.mark.parametrize("resource", sorted(RESOURCES))
def test_reads_require_authentication(client, api, fake_db, resource):
    collection, item, _, _, _ = RESOURCES[resource]
    assert client.get(f"{api}{collection}").status_code == 401
    assert client.get(f"{api}{item}").status_code == 401
    assert fake_db.calls == []


@pytest.mark.parametrize("resource", sorted(RESOURCES))
def test_missing_required_fields(client, api, auth_headers, fake_db, resource):
    collection, _, payload, _, _ = RESOURCES[resource]
    response = client.post(f"{api}{collection}", json={}, headers=auth_headers("admin"))
    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert fields == set(payload)
    assert fake_db.calls == []


class TestContacts:
    def test_list_filters(self, client, api, auth_headers, fake_db):
        fake_db.rows = [CONTACT]
        fake_db.value = 1
        response = client.get(f"{api}/contacts?search=dana&company_id=1", headers=auth_headers("agent"))
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1

        (_, page_sql, page_args), (_, count_sql, count_args) = fake_db.calls
        assert "(ct.first_name ILIKE $1 OR ct.last_name ILIKE $1 OR ct.email ILIKE $1)" in page_sql
        assert "ct.company_id = $2" in page_sql
        assert page_sql.rstrip().endswith("LIMIT $3 OFFSET $4")
        assert page_args == ("%dana%", 1, 20, 0)
        assert count_args == ("%dana%", 1)

    def test_invalid_email(self, client, api, auth_headers, fake_db):
        response = client.post(
            f"{api}/contacts",
            json={"company_id": 1, "first_name": "A", "last_name": "B", "email": "not-an-email"},
            headers=auth_headers("agent"),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"

    def test_unknown_company_is_bad_request(self, client, api, auth_headers, monkeypatch):
        from contacts import repository as contact_repository

        async def create_contact(db, values):
            raise asyncpg.ForeignKeyViolationError("violates foreign key constraint")

        monkeypatch.setattr(contact_repository, "create_contact", create_contact)
        response = client.post(
            f"{api}/contacts",
            json={"company_id": 999, "first_name": "A", "last_name": "B"},
            headers=auth_headers("agent"),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Contact references a record that does not exist"


class TestPolicies:
    def test_accounts_route_is_not_an_id(self, client, api, auth_headers, fake_db):
        fake_db.rows = [ACCOUNT]
        fake_db.value = 1
        response = client.get(f"{api}/policies/accounts?company_id=1", headers=auth_headers("agent"))
        assert response.status_code == 200
        assert response.json()["data"][0]["account_name"] == "Acme Main"
        assert "FROM policy_account pa" in fake_db.calls[0][1]

    def test_create_account(self, client, api, auth_headers, fake_db):
        fake_db.rows = [ACCOUNT]
        response = client.post(
            f"{api}/policies/accounts",
            json={"company_id": 1, "account_name": "Acme Main", "total_premium": "1200.00"},
            headers=auth_headers("underwriter"),
        )
        assert response.status_code == 201
        (_, sql, _), = fake_db.calls
        assert sql.startswith("INSERT INTO policy_account")

    def test_claims_adjuster_cannot_create_account(self, client, api, auth_headers, fake_db):
        response = client.post(
            f"{api}/policies/accounts",
            json={"company_id": 1, "account_name": "Acme Main"},
            headers=auth_headers("claims_adjuster"),
        )
        assert response.status_code == 403

    def test_list_filters_by_company_through_account(self, client, api, auth_headers, fake_db):
        response = client.get(f"{api}/policies?status=active&company_id=3", headers=auth_headers("agent"))
        assert response.status_code == 200
        page_sql = fake_db.calls[0][1]
        assert "WHERE p.status = $1 AND pa.company_id = $2" in page_sql
        assert fake_db.calls[0][2] == ("active", 3, 20, 0)

    def test_expiration_before_effective_is_rejected(self, client, api, auth_headers, fake_db):
        response = client.post(
            f"{api}/policies",
            json={
                "account_id": 5,
                "policy_number": "POL-1",
                "effective_date": "2026-06-01",
                "expiration_date": "2026-05-31",
            },
            headers=auth_headers("agent"),
        )
        assert response.status_code == 400
        assert "expiration_date" in response.json()["errors"][0]["message"]
        assert fake_db.calls == []

    def test_duplicate_policy_number(self, client, api, auth_headers, monkeypatch):
        async def create_policy(db, values):
            raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")

        monkeypatch.setattr(policy_repository, "create_policy", create_policy)
        response = client.post(
            f"{api}/policies",
            json={"account_id": 5, "policy_number": "POL-2026-0001"},
            headers=auth_headers("agent"),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Policy number already exists"

    def test_update_sends_only_given_fields(self, client, api, auth_headers, fake_db):
        fake_db.rows = [POLICY]
        response = client.put(f"{api}/policies/21", json={"status": "cancelled"}, headers=auth_headers("underwriter"))
        assert response.status_code == 200
        (_, sql, args), = fake_db.calls
        assert sql.startswith("UPDATE policy SET status = $2, updated_at = now() WHERE policy_id = $1")
        assert args == (21, "cancelled")


class TestClaims:
    def test_negative_amount(self, client, api, auth_headers, fake_db):
        response = client.post(
            f"{api}/claims",
            json={"policy_id": 21, "claim_number": "CLM-1", "incident_date": "2026-03-02", "claim_amount": "-5"},
            headers=auth_headers("claims_adjuster"),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "claim_amount"

    def test_invalid_status_filter(self, client, api, auth_headers, fake_db):
        response = client.get(f"{api}/claims?status=paid", headers=auth_headers("agent"))
        assert response.status_code == 400
        assert fake_db.calls == []


class TestTasks:
    def test_creator_is_recorded(self, client, api, auth_headers, monkeypatch):
        seen = {}

        async def create_task(db, values, *, created_by):
            seen.update(values, created_by=created_by)
            return {**TASK, **values, "created_by": created_by}

        monkeypatch.setattr(task_repository, "create_task", create_task)
        response = client.post(
            f"{api}/tasks",
            json={"title": "Review renewal", "priority": "urgent", "due_date": "2026-11-01"},
            headers=auth_headers("claims_adjuster"),
        )
        assert response.status_code == 201
        assert seen["created_by"] == 5
        assert response.json()["data"]["created_by"] == 5

    def test_invalid_priority(self, client, api, auth_headers, fake_db):
        response = client.post(f"{api}/tasks", json={"title": "x", "priority": "asap"}, headers=auth_headers("agent"))
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "priority"

    def test_list_orders_by_due_date(self, client, api, auth_headers, fake_db):
        response = client.get(f"{api}/tasks?priority=high&assigned_to=3", headers=auth_headers("agent"))
        assert response.status_code == 200
        page_sql, page_args = fake_db.calls[0][1], fake_db.calls[0][2]
        assert "ORDER BY t.due_date ASC NULLS LAST" in page_sql
        assert page_args == ("high", 3, 20, 0)
