#tests/api/test_task_api.py
from fastapi.testclient import TestClient

from teamtasks.models.user import User as UserModel


def test_create_task(client: TestClient, test_project, other_user: UserModel, auth_headers):
    payload = {"title": "Fix login", "project_id": test_project.id, "priority": "HIGH"}
    response = client.post("/tasks/", json=payload, headers=auth_headers(other_user))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "TO_DO"
    assert data["priority"] == "HIGH"
    assert data["completed_at"] is None


def test_create_task_in_planned_project(client: TestClient, test_team, user_token_headers: dict):
    project = client.post("/projects/", json={"name": "Later", "team_id": test_team.id}, headers=user_token_headers).json()
    response = client.post("/tasks/", json={"title": "Too soon", "project_id": project["id"]}, headers=user_token_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_PROJECT_STATUS"


def test_create_task_unknown_priority(client: TestClient, test_project, user_token_headers: dict):
    payload = {"title": "Odd", "project_id": test_project.id, "priority": "CRITICAL"}
    assert client.post("/tasks/", json=payload, headers=user_token_headers).status_code == 422


def test_done_sets_and_clears_completed_at(client: TestClient, test_task, other_user: UserModel, auth_headers):
    headers = auth_headers(other_user)
    done = client.patch(f"/tasks/{test_task.id}", json={"status": "DONE"}, headers=headers).json()
    assert done["completed_at"] is not None
    reopened = client.patch(f"/tasks/{test_task.id}", json={"status": "IN_PROGRESS"}, headers=headers).json()
    assert reopened["completed_at"] is None


def test_patch_to_deleted_is_rejected(client: TestClient, test_task, user_token_headers: dict):
    response = client.patch(f"/tasks/{test_task.id}", json={"status": "DELETED"}, headers=user_token_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


def test_assign_and_unassign(client: TestClient, test_task, test_user: UserModel, other_user: UserModel,
                             outsider: UserModel, user_token_headers: dict):
    url = f"/tasks/{test_task.id}"
    outside = client.post(f"{url}/assign", json={"user_id": outsider.id}, headers=user_token_headers)
    assert outside.status_code == 403
    assigned = client.post(f"{url}/assign", json={"user_id": test_user.id}, headers=user_token_headers)
    assert assigned.json()["assigned_to"] == test_user.id
    assert client.post(f"{url}/unassign", headers=user_token_headers).json()["assigned_to"] is None
    again = client.post(f"{url}/unassign", headers=user_token_headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "TASK_NOT_ASSIGNED"


def test_my_tasks_and_all_tasks(client: TestClient, test_task, other_user: UserModel, auth_headers,
                                user_token_headers: dict, admin_token_headers: dict):
    mine = client.get("/tasks/my", headers=auth_headers(other_user)).json()
    assert [t["id"] for t in mine] == [test_task.id]
    assert client.get("/tasks/", headers=user_token_headers).status_code == 403
    assert len(client.get("/tasks/", headers=admin_token_headers).json()) == 1


def test_delete_task(client: TestClient, test_task, other_user: UserModel, auth_headers, user_token_headers: dict):
    assert client.delete(f"/tasks/{test_task.id}", headers=auth_headers(other_user)).status_code == 403
    assert client.delete(f"/tasks/{test_task.id}", headers=user_token_headers).json()["status"] == "DELETED"
    again = client.delete(f"/tasks/{test_task.id}", headers=user_token_headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ALREADY_DELETED"
    assert client.get(f"/tasks/{test_task.id}", headers=user_token_headers).status_code == 404


def test_comment_thread(client: TestClient, test_task, test_user: UserModel, other_user: UserModel, auth_headers,
                        user_token_headers: dict):
    member_headers = auth_headers(other_user)
    created = client.post("/comments/", json={"task_id": test_task.id, "content": "On it"}, headers=member_headers)
    assert created.status_code == 201
    comment_id = created.json()["id"]

    assert client.patch(f"/comments/{comment_id}", json={"content": "Hijack"}, headers=user_token_headers).status_code == 403
    edited = client.patch(f"/comments/{comment_id}", json={"content": "Done soon"}, headers=member_headers)
    assert edited.json()["content"] == "Done soon"

    thread = client.get(f"/tasks/{test_task.id}/comments", headers=user_token_headers).json()
    assert [c["id"] for c in thread] == [comment_id]
    assert [c["id"] for c in client.get("/comments/my", headers=member_headers).json()] == [comment_id]

    # The team owner moderates
    assert client.delete(f"/comments/{comment_id}", headers=user_token_headers).json()["status"] == "DELETED"
    assert client.get(f"/comments/{comment_id}", headers=member_headers).status_code == 404
    assert client.get(f"/comments/user/{other_user.id}", headers=member_headers).status_code == 403
