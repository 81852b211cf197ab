import pytest
from sqlalchemy import insert

from realtyhub import rbac
from realtyhub.db import models
from realtyhub.db.database import transaction
from realtyhub.errors import NotFound
from realtyhub.rbac.registrar import registrar


def test_assign_and_check_roles(db, acl, make_user):
    user = make_user()
    rbac.assign_role(db, user, ["agent", "user"])
    rbac.assign_role(db, user, "agent")
    db.commit()

    assert rbac.get_role_names(user) == ["agent", "user"]
    assert rbac.has_role(user, "agent")
    assert rbac.has_role(user, ["admin", "user"])
    assert not rbac.has_role(user, "admin")
    assert rbac.user_can(db, user, "create properties")
    assert not rbac.user_can(db, user, "publish posts")


def test_unknown_role_raises(db, acl, make_user):
    with pytest.raises(NotFound) as exc:
        rbac.assign_role(db, make_user(), "ghost")
    assert str(exc.value) == "There is no role named `ghost` for guard `web`."


def test_sync_and_remove_roles(db, acl, make_user):
    user = make_user(roles=["agent", "moderator"])
    rbac.sync_roles(db, user, ["user"])
    assert rbac.get_role_names(user) == ["user"]
    rbac.remove_role(db, user, "user")
    assert rbac.get_role_names(user) == []
    rbac.sync_roles(db, user, None)
    assert user.roles == []


def test_direct_permissions(db, acl, make_user):
    user = make_user()
    rbac.give_permission_to(db, user, "manage seo")
    db.commit()
    assert rbac.user_can(db, user, "manage seo")
    assert rbac.get_all_permissions(db, user) == {"manage seo"}

    rbac.revoke_permission_to(db, user, "manage seo")
    assert not rbac.user_can(db, user, "manage seo")


def test_superadmin_can_do_anything(db, make_user):
    root = make_user(superadmin=True)
    assert rbac.user_can(db, root, "launch rockets")


def test_role_permission_changes_clear_cache(db, acl, make_user):
    user = make_user(roles=["user"])
    assert not rbac.user_can(db, user, "manage seo")

    rbac.give_role_permission_to(db, rbac.find_role(db, "user"), "manage seo")
    db.commit()
    assert rbac.user_can(db, user, "manage seo")

    rbac.sync_permissions(db, rbac.find_role(db, "user"), [])
    db.commit()
    assert not rbac.user_can(db, user, "view posts")


def test_cache_serves_until_forgotten(db, acl, make_user):
    user = make_user(roles=["user"])
    assert not rbac.user_can(db, user, "manage seo")

    role = rbac.find_role(db, "user")
    permission = rbac.find_permission(db, "manage seo")
    db.execute(insert(models.role_has_permissions).values(role_id=role.id, permission_id=permission.id))
    db.commit()
    assert not rbac.user_can(db, user, "manage seo")

    registrar.forget_cached_permissions()
    assert rbac.user_can(db, user, "manage seo")


def test_sync_permission_roles(db, acl):
    permission = rbac.find_permission(db, "manage seo")
    rbac.sync_permission_roles(db, permission, ["moderator", "agent"])
    assert sorted(r.name for r in permission.roles) == ["agent", "moderator"]


def test_rollback_clears_permission_cache(db, acl, make_user):
    user = make_user(roles=["user"])
    with pytest.raises(RuntimeError):
        with transaction(db):
            rbac.give_role_permission_to(db, rbac.find_role(db, "user"), "manage seo")
            assert rbac.user_can(db, user, "manage seo")
            raise RuntimeError("abort")

    assert registrar._role_permissions is None
    assert not rbac.user_can(db, user, "manage seo")
