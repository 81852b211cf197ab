from realtyhub.utils.team_roles import (
    INVITABLE_ROLES,
    MEMBER_ROLES,
    PERM_ADD_MEMBER,
    PERM_DELETE,
    PERM_READ,
    PERM_UPDATE,
    ROLE_ADMIN,
    ROLE_EDITOR,
    ROLE_MEMBER,
    ROLE_OWNER,
    WILDCARD,
    role_has_permission,
    team_permissions_for_role,
)


def test_owner_holds_wildcard():
    assert team_permissions_for_role(ROLE_OWNER) == [WILDCARD]
    assert role_has_permission(ROLE_OWNER, "anything-at-all")


def test_admin_manages_members_editor_does_not():
    assert role_has_permission(ROLE_ADMIN, PERM_ADD_MEMBER)
    assert role_has_permission(ROLE_EDITOR, PERM_UPDATE)
    assert not role_has_permission(ROLE_EDITOR, PERM_ADD_MEMBER)
    assert not role_has_permission(ROLE_EDITOR, PERM_DELETE)


def test_member_and_unknown_roles_read_only():
    assert team_permissions_for_role(ROLE_MEMBER) == [PERM_READ]
    assert team_permissions_for_role(None) == [PERM_READ]
    assert team_permissions_for_role("ghost") == [PERM_READ]


def test_owner_is_never_assignable():
    assert ROLE_OWNER not in MEMBER_ROLES
    assert INVITABLE_ROLES == {ROLE_ADMIN, ROLE_MEMBER}
    assert MEMBER_ROLES == {ROLE_ADMIN, ROLE_EDITOR, ROLE_MEMBER}

