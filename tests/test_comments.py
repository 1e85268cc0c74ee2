"""Tests for task comments."""

import pytest

from app.services import task_service


@pytest.fixture
async def task_id(db, tenant):
    task = await task_service.create_task(
        db,
        title="Discuss",
        assigner_id=tenant.admin_id,
        assignee_id=tenant.employee_id,
        company_id=tenant.company_id,
    )
    return task.id


class TestTaskComments:
    async def test_participant_comments_newest_first(self, client, employee_headers, task_id):
        first = await client.post(
            f"/api/tasks/{task_id}/comments", json={"content": "first"}, headers=employee_headers
        )
        await client.post(f"/api/tasks/{task_id}/comments", json={"content": "second"}, headers=employee_headers)

        response = await client.get(f"/api/tasks/{task_id}/comments", headers=employee_headers)

        assert first.status_code == 201
        assert first.json()["author"]["name"] == "Bob Employee"
        assert [c["content"] for c in response.json()] == ["second", "first"]

    async def test_content_required(self, client, employee_headers, task_id):
        response = await client.post(f"/api/tasks/{task_id}/comments", json={}, headers=employee_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Comment content is required"

    async def test_non_participant_cannot_see_task(self, client, other_employee_headers, task_id):
        response = await client.get(f"/api/tasks/{task_id}/comments", headers=other_employee_headers)

        assert response.status_code == 404

    async def test_other_company_cannot_comment(self, client, other_admin_headers, task_id):
        response = await client.post(
            f"/api/tasks/{task_id}/comments", json={"content": "hello"}, headers=other_admin_headers
        )

        assert response.status_code == 404


class TestModeration:
    async def test_admin_edits_and_deletes(self, client, admin_headers, employee_headers, task_id):
        created = await client.post(
            f"/api/tasks/{task_id}/comments", json={"content": "typo"}, headers=employee_headers
        )
        comment_id = created.json()["id"]

        edited = await client.put(
            f"/api/comments/{comment_id}", json={"content": "fixed"}, headers=admin_headers
        )
        deleted = await client.delete(f"/api/comments/{comment_id}", headers=admin_headers)
        remaining = await client.get(f"/api/tasks/{task_id}/comments", headers=admin_headers)

        assert edited.json()["content"] == "fixed"
        assert deleted.status_code == 200
        assert remaining.json() == []

    async def test_employee_cannot_moderate(self, client, employee_headers, task_id):
        created = await client.post(
            f"/api/tasks/{task_id}/comments", json={"content": "mine"}, headers=employee_headers
        )

        response = await client.delete(f"/api/comments/{created.json()['id']}", headers=employee_headers)

        assert response.status_code == 403

    async def test_other_company_admin_gets_404(self, client, admin_headers, other_admin_headers, task_id):
        created = await client.post(
            f"/api/tasks/{task_id}/comments", json={"content": "internal"}, headers=admin_headers
        )

        response = await client.put(
            f"/api/comments/{created.json()['id']}", json={"content": "x"}, headers=other_admin_headers
        )

        assert response.status_code == 404
