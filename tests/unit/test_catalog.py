from realtyhub.rbac import catalog


def test_default_roles():
    roles = catalog.get_roles()
    assert [r["name"] for r in roles] == ["admin", "agent", "moderator", "user"]
    assert all(r["is_default"] is True and r["guard_name"] == "web" for r in roles)
    assert {r["display_name"] for r in roles} == {"Administrator", "Agent", "Moderator", "User"}


def test_admin_is_granted_every_permission():
    grouped = catalog.get_group_permissions()
    for permissions in grouped.values():
        for role_names in permissions.values():
            assert role_names[0] == "admin"
    assert set(catalog.permissions_for_role("admin")) == set(catalog.all_permission_names())


def test_groups_cover_the_application():
    grouped = catalog.get_group_permissions()
    for group in ("admin panel", "users", "teams", "posts", "comments", "properties", "inquiries", "favorites"):
        assert group in grouped
    assert "assign roles" in grouped["users"]
    assert "publish posts" in grouped["posts"]


def test_permission_names_unique():
    names = catalog.all_permission_names()
    assert len(names) == len(set(names))


def test_role_grants_reference_catalogued_permissions():
    known = set(catalog.all_permission_names())
    for role, grants in catalog.ROLE_GRANTS.items():
        assert set(grants) <= known, role


def test_role_specific_grants():
    grouped = catalog.get_group_permissions()
    assert grouped["properties"]["create properties"] == ["admin", "agent"]
    assert "moderator" in grouped["comments"]["edit comments"]
    assert "user" not in grouped["users"]["delete users"]
    assert catalog.permissions_for_role("unknown") == []
