"""Tests for login, registration and company deletion."""

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Delete

from app.models.comment import Comment
from app.models.company import Company
from app.models.task import Task
from app.models.user import User
from app.services import task_service
from tests.conftest import PASSWORD, auth_headers


class TestLogin:
    async def test_success_returns_token_and_company(self, client, tenant):
        response = await client.post(
            "/api/auth/login", json={"email": "alice@acme.test", "password": PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["id"] == tenant.admin_id
        assert body["user"]["role"] == "ADMIN"
        assert body["user"]["company_name"] == "Acme"

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "alice@acme.test"

    async def test_wrong_password(self, client, tenant):
        response = await client.post(
            "/api/auth/login", json={"email": "alice@acme.test", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    async def test_company_email_scopes_lookup(self, client, tenant):
        response = await client.post(
            "/api/auth/login",
            json={"email": "alice@acme.test", "password": PASSWORD, "company_email": "office@globex.test"},
        )

        assert response.status_code == 401

    async def test_missing_fields(self, client, tenant):
        response = await client.post("/api/auth/login", json={"email": "alice@acme.test"})

        assert response.status_code == 400


class TestToken:
    async def test_garbage_token(self, client, tenant):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token."

    async def test_unknown_user(self, client, tenant):
        response = await client.get("/api/auth/me", headers=auth_headers(9999, tenant.company_id, "ADMIN"))

        assert response.status_code == 401


class TestRegistration:
    async def test_register_company_creates_admin(self, client, db):
        response = await client.post(
            "/api/auth/register-company",
            json={
                "name": "Initech",
                "email": "office@initech.test",
                "admin_name": "Peter",
                "admin_email": "peter@initech.test",
                "password": PASSWORD,
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["company"]["subscription_plan"] == "free"
        assert body["admin_user"]["role"] == "ADMIN"
        assert body["admin_user"]["company_id"] == body["company"]["id"]

    async def test_register_company_rejects_duplicates(self, client, tenant):
        payload = {
            "name": "Acme Again",
            "email": "office@acme.test",
            "admin_name": "Someone",
            "admin_email": "someone@new.test",
            "password": PASSWORD,
        }
        duplicate_company = await client.post("/api/auth/register-company", json=payload)
        payload.update(email="office@new.test", admin_email="bob@acme.test")
        duplicate_admin = await client.post("/api/auth/register-company", json=payload)

        assert duplicate_company.status_code == 400
        assert duplicate_admin.status_code == 400

    async def test_register_user_is_admin_only(self, client, admin_headers, employee_headers):
        payload = {"name": "Dave", "email": "dave@acme.test", "password": PASSWORD}

        forbidden = await client.post("/api/auth/register", json=payload, headers=employee_headers)
        created = await client.post("/api/auth/register", json=payload, headers=admin_headers)
        duplicate = await client.post("/api/auth/register", json=payload, headers=admin_headers)

        assert forbidden.status_code == 403
        assert created.status_code == 201
        assert created.json()["user"]["role"] == "EMPLOYEE"
        assert duplicate.status_code == 400


class TestDeleteCompany:
    async def test_cascade_only_touches_own_company(self, client, db, tenant, admin_headers):
        parent = await task_service.create_task(
            db,
            title="Parent",
            assigner_id=tenant.admin_id,
            assignee_id=tenant.employee_id,
            company_id=tenant.company_id,
        )
        await task_service.create_task(
            db,
            title="Child",
            assigner_id=tenant.admin_id,
            assignee_id=tenant.employee_id,
            company_id=tenant.company_id,
            parent_task_id=parent.id,
        )
        await client.post(
            f"/api/tasks/{parent.id}/comments", json={"content": "note"}, headers=admin_headers
        )

        response = await client.delete("/api/auth/company", headers=admin_headers)

        assert response.status_code == 200
        assert (await db.execute(select(func.count(Task.id)))).scalar_one() == 0
        companies = (await db.execute(select(Company.name))).scalars().all()
        assert companies == ["Globex"]
        users = (await db.execute(select(User.company_id))).scalars().all()
        assert users == [tenant.other_company_id]

    async def test_employee_cannot_delete_company(self, client, employee_headers):
        response = await client.delete("/api/auth/company", headers=employee_headers)

        assert response.status_code == 403

    async def test_failure_midway_rolls_back_everything(self, client, db, tenant, admin_headers, monkeypatch):
        task = await task_service.create_task(
            db,
            title="Keep me",
            assigner_id=tenant.admin_id,
            assignee_id=tenant.employee_id,
            company_id=tenant.company_id,
        )
        comment = await client.post(
            f"/api/tasks/{task.id}/comments", json={"content": "note"}, headers=admin_headers
        )
        assert comment.status_code == 201

        original_execute = AsyncSession.execute

        async def failing_execute(self, statement, *args, **kwargs):
            # Comments are already deleted when the task delete fails
            if isinstance(statement, Delete) and statement.table.name == "tasks":
                raise SQLAlchemyError("disk I/O error")
            return await original_execute(self, statement, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "execute", failing_execute)

        response = await client.delete("/api/auth/company", headers=admin_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        monkeypatch.undo()

        assert (await db.execute(select(func.count(Comment.id)))).scalar_one() == 1
        assert (await db.execute(select(func.count(Task.id)))).scalar_one() == 1
        acme_users = await db.execute(
            select(func.count(User.id)).filter(User.company_id == tenant.company_id)
        )
        assert acme_users.scalar_one() == 3
        companies = (await db.execute(select(Company.name).order_by(Company.id))).scalars().all()
        assert companies == ["Acme", "Globex"]
