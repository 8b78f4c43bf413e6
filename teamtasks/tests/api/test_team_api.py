#tests/api/test_team_api.py
from fastapi.testclient import TestClient

from teamtasks.models.user import User as UserModel


def test_create_team(client: TestClient, test_user: UserModel, user_token_headers: dict):
    response = client.post("/teams/", json={"name": "Mobile", "description": "Apps"}, headers=user_token_headers)
    assert response.status_code == 201
    team = response.json()
    assert team["owner_id"] == test_user.id
    assert team["status"] == "ACTIVE"

    members = client.get(f"/teams/{team['id']}/members", headers=user_token_headers).json()
    assert [(m["user_id"], m["role"]) for m in members] == [(test_user.id, "OWNER")]


def test_create_team_duplicate_name(client: TestClient, test_team, user_token_headers: dict):
    response = client.post("/teams/", json={"name": "core"}, headers=user_token_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "TEAM_NAME_TAKEN"


def test_create_team_blank_name(client: TestClient, user_token_headers: dict):
    assert client.post("/teams/", json={"name": ""}, headers=user_token_headers).status_code == 422


def test_team_visibility(client: TestClient, test_team, outsider: UserModel, auth_headers, user_token_headers: dict):
    assert client.get(f"/teams/{test_team.id}", headers=user_token_headers).status_code == 200
    denied = client.get(f"/teams/{test_team.id}", headers=auth_headers(outsider))
    assert denied.status_code == 403
    assert denied.json() == {
        "error": {"code": "ACCESS_DENIED", "message": "You are not a member of this team"}
    }
    assert client.get("/teams/424242", headers=user_token_headers).status_code == 404


def test_list_teams(client: TestClient, test_team, other_user: UserModel, auth_headers,
                    user_token_headers: dict, admin_token_headers: dict):
    mine = client.get("/teams/", headers=auth_headers(other_user)).json()
    assert [t["id"] for t in mine] == [test_team.id]
    assert client.get("/teams/all", headers=user_token_headers).status_code == 403
    assert len(client.get("/teams/all", headers=admin_token_headers).json()) == 1
    assert client.get("/teams/by-name/CORE", headers=user_token_headers).json()["id"] == test_team.id


def test_update_and_delete_team(client: TestClient, test_team, other_user: UserModel, auth_headers,
                                user_token_headers: dict, admin_token_headers: dict):
    response = client.patch(f"/teams/{test_team.id}", json={"description": "x"}, headers=auth_headers(other_user))
    assert response.status_code == 403
    response = client.patch(f"/teams/{test_team.id}", json={"name": "Core Two"}, headers=user_token_headers)
    assert response.json()["name"] == "Core Two"

    assert client.delete(f"/teams/{test_team.id}", headers=user_token_headers).json()["status"] == "DELETED"
    assert client.get(f"/teams/{test_team.id}", headers=user_token_headers).status_code == 404
    restored = client.post(f"/teams/{test_team.id}/restore", headers=admin_token_headers)
    assert restored.json()["status"] == "ACTIVE"


def test_member_management(client: TestClient, test_team, other_user: UserModel, outsider: UserModel,
                           auth_headers, user_token_headers: dict):
    url = f"/teams/{test_team.id}/members"
    response = client.post(url, json={"user_id": outsider.id, "role": "ADMIN"}, headers=user_token_headers)
    assert response.status_code == 201
    assert response.json()["role"] == "ADMIN"

    duplicate = client.post(url, json={"user_id": outsider.id}, headers=user_token_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "USER_ALREADY_IN_TEAM"

    unknown = client.post(url, json={"user_id": 999999}, headers=user_token_headers)
    assert unknown.json()["error"]["code"] == "USER_NOT_FOUND"

    response = client.patch(f"{url}/{other_user.id}", json={"role": "ADMIN"}, headers=user_token_headers)
    assert response.json()["role"] == "ADMIN"

    removed = client.delete(f"{url}/{outsider.id}", headers=user_token_headers)
    assert removed.json()["status"] == "REMOVED"

    count = client.get(f"{url}/count", headers=user_token_headers).json()
    assert count == {"team_id": test_team.id, "total": 3, "active": 2}

    left = client.post(f"/teams/{test_team.id}/leave", headers=auth_headers(other_user))
    assert left.json()["status"] == "INACTIVE"


def test_member_cannot_manage_members(client: TestClient, test_team, other_user: UserModel, outsider: UserModel,
                                      auth_headers):
    response = client.post(
        f"/teams/{test_team.id}/members", json={"user_id": outsider.id}, headers=auth_headers(other_user)
    )
    assert response.status_code == 403


def test_get_member(client: TestClient, test_team, other_user: UserModel, outsider: UserModel, user_token_headers: dict):
    url = f"/teams/{test_team.id}/members"
    assert client.get(f"{url}/{other_user.id}", headers=user_token_headers).json()["role"] == "MEMBER"
    missing = client.get(f"{url}/{outsider.id}", headers=user_token_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "USER_NOT_IN_TEAM"
