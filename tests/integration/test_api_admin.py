import pytest

from realtyhub import rbac
from realtyhub.db import models


@pytest.fixture
def admin(acl, make_user):
    return make_user(name="Site Admin", roles=["admin"])


def test_role_endpoints_require_assign_roles(client, acl, make_user, headers):
    user = make_user(roles=["agent"])
    response = client.get("/roles/", headers=headers(user))
    assert response.status_code == 403
    assert response.json() == {"detail": "This action is unauthorized."}
    assert client.get("/permissions/", headers=headers(user)).status_code == 403


def test_list_roles(client, admin, headers):
    roles = client.get("/roles/", headers=headers(admin)).json()
    assert [r["name"] for r in roles] == ["admin", "agent", "moderator", "user"]
    assert all(r["is_default"] for r in roles)


def test_role_crud(client, db, admin, headers):
    permission = rbac.find_permission(db, "view users")
    response = client.post(
        "/roles/", json={"name": "auditor", "display_name": "Auditor", "permissions": [str(permission.id)]},
        headers=headers(admin),
    )
    assert response.status_code == 201
    role = response.json()
    assert role["is_default"] is False
    assert [p["name"] for p in role["permissions"]] == ["view users"]

    duplicate = client.post("/roles/", json={"name": "auditor"}, headers=headers(admin))
    assert duplicate.status_code == 422
    assert duplicate.json()["errors"] == {"name": ["The name has already been taken."]}

    response = client.put(f"/roles/{role['id']}", json={"description": "Read-only access"}, headers=headers(admin))
    assert response.status_code == 200
    assert response.json()["description"] == "Read-only access"
    assert [p["name"] for p in response.json()["permissions"]] == ["view users"]

    response = client.put(f"/roles/{role['id']}", json={"permissions": []}, headers=headers(admin))
    assert response.json()["permissions"] == []

    assert client.delete(f"/roles/{role['id']}", headers=headers(admin)).status_code == 204
    assert client.get(f"/roles/{role['id']}", headers=headers(admin)).status_code == 404


def test_default_roles_are_protected(client, db, admin, headers):
    role = rbac.find_role(db, "moderator")
    response = client.delete(f"/roles/{role.id}", headers=headers(admin))
    assert response.status_code == 409
    assert response.json() == {"detail": "Cannot delete default role"}


def test_grouped_permissions(client, admin, headers):
    groups = client.get("/permissions/", headers=headers(admin)).json()["groups"]
    assert sorted(p["name"] for p in groups["posts"]) == [
        "create posts", "delete posts", "edit posts", "publish posts", "view posts",
    ]
    assert "properties" in groups


def test_me_reports_roles_and_permissions(client, acl, make_user, headers):
    user = make_user(roles=["moderator"])
    body = client.get("/users/me", headers=headers(user)).json()
    assert body["roles"] == ["moderator"]
    assert "publish posts" in body["permissions"]
    assert "delete users" not in body["permissions"]


def test_user_crud(client, db, admin, headers):
    agent = rbac.find_role(db, "agent")
    response = client.post(
        "/users/", json={"name": "New Agent", "email": "agent@example.com", "password": "password123", "roles": [str(agent.id)]},
        headers=headers(admin),
    )
    assert response.status_code == 201
    created = response.json()
    assert created["roles"] == ["agent"]
    assert "create properties" in created["permissions"]

    duplicate = client.post(
        "/users/", json={"name": "Again", "email": "agent@example.com", "password": "password123"}, headers=headers(admin),
    )
    assert duplicate.status_code == 422
    assert duplicate.json()["errors"]["email"] == ["The email has already been taken."]

    response = client.put(f"/users/{created['id']}", json={"name": "Renamed Agent"}, headers=headers(admin))
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed Agent"
    # An update without roles clears them
    assert response.json()["roles"] == []

    listed = client.get("/users/", headers=headers(admin)).json()
    assert "Renamed Agent" in [u["name"] for u in listed]

    assert client.delete(f"/users/{created['id']}", headers=headers(admin)).status_code == 204
    assert db.query(models.User).filter(models.User.email == "agent@example.com").count() == 0


def test_cannot_delete_yourself(client, admin, headers):
    response = client.delete(f"/users/{admin.id}", headers=headers(admin))
    assert response.status_code == 409
    assert response.json() == {"detail": "Cannot delete your own account"}


def test_user_endpoints_require_permissions(client, acl, make_user, headers):
    user = make_user(roles=["user"])
    assert client.get("/users/", headers=headers(user)).status_code == 403
    assert client.delete(f"/users/{user.id}", headers=headers(user)).status_code == 403


def test_superadmin_bypasses_permissions(client, make_user, headers):
    root = make_user(superadmin=True)
    assert client.get("/users/", headers=headers(root)).status_code == 200


def test_social_endpoints(client, db, make_user, headers, monkeypatch):
    assert client.get("/auth/social/providers").json() == {"providers": []}
    monkeypatch.setenv("SOCIAL_GITHUB_CLIENT_ID", "id")
    monkeypatch.setenv("SOCIAL_GITHUB_CLIENT_SECRET", "secret")
    assert [p["name"] for p in client.get("/auth/social/providers").json()["providers"]] == ["github"]

    user = make_user()
    db.add(models.SocialAccount(user_id=user.id, provider="github", provider_id="1"))
    db.commit()

    linked = client.get("/auth/social/linked", headers=headers(user)).json()
    assert linked["has_password"] is True
    assert [p["provider"] for p in linked["providers"]] == ["github"]

    assert client.delete("/auth/social/google", headers=headers(user)).status_code == 404
    assert client.delete("/auth/social/myspace", headers=headers(user)).status_code == 404
    response = client.delete("/auth/social/github", headers=headers(user))
    assert response.json() == {"provider": "github", "unlinked": True}


def test_social_only_user_cannot_unlink_last_provider(client, db, headers):
    user = models.User(name="Social Only", email="social@example.com")
    db.add(user)
    db.flush()
    db.add(models.SocialAccount(user_id=user.id, provider="github", provider_id="1"))
    db.commit()

    response = client.delete("/auth/social/github", headers=headers(user))
    assert response.status_code == 409
    assert response.json()["detail"] == "You cannot unlink your only login method. Set a password first."
