from realtyhub import rbac
from realtyhub.db import models
from realtyhub.rbac import catalog
from realtyhub.rbac.sync import sync_acl


def test_first_sync_creates_catalogue(db):
    lines = []
    report = sync_acl(db, out=lines.append)
    db.commit()

    assert sorted(report.roles_created) == ["admin", "agent", "moderator", "user"]
    assert len(report.permissions_created) == len(catalog.all_permission_names())
    assert report.roles_deleted == [] and report.permissions_deleted == []
    assert "✓ Created role: admin" in lines
    assert "  ✓ Created permission: assign roles" in lines
    assert lines[-1] == "Clearing permission cache..."

    admin = rbac.find_role(db, "admin")
    assert len(admin.permissions) == len(catalog.all_permission_names())
    moderator = rbac.find_role(db, "moderator")
    assert {p.name for p in moderator.permissions} == set(catalog.permissions_for_role("moderator"))
    permission = rbac.find_permission(db, "publish posts")
    assert permission.group == "posts" and permission.guard_name == "web"


def test_second_sync_updates(db, acl):
    report = sync_acl(db)
    assert report.roles_created == [] and report.permissions_created == []
    assert sorted(report.roles_updated) == ["admin", "agent", "moderator", "user"]
    assert report.summary()["permissions_updated"] == len(catalog.all_permission_names())


def test_sync_resets_permission_roles(db, acl):
    rbac.give_role_permission_to(db, rbac.find_role(db, "user"), "delete users")
    db.commit()
    assert "delete users" in {p.name for p in rbac.find_role(db, "user").permissions}

    sync_acl(db)
    db.commit()
    assert "delete users" not in {p.name for p in rbac.find_role(db, "user").permissions}


def test_custom_roles_survive_stale_defaults_do_not(db, acl):
    db.add(models.Role(name="auditor", display_name="Auditor", is_default=False))
    db.add(models.Role(name="legacy", display_name="Legacy", is_default=True))
    db.add(models.Permission(name="launch rockets", group="misc"))
    db.commit()

    report = sync_acl(db)
    db.commit()
    assert report.roles_deleted == ["legacy"]
    assert report.permissions_deleted == ["launch rockets"]
    names = {r.name for r in db.query(models.Role).all()}
    assert "auditor" in names and "legacy" not in names


def test_sync_clears_cache_and_audits(db, make_user):
    user = make_user()
    # Warm the cache before any permission exists
    assert not rbac.user_can(db, user, "view posts")

    sync_acl(db)
    rbac.assign_role(db, user, "user")
    db.commit()
    assert rbac.user_can(db, user, "view posts")

    log = db.query(models.AuditLog).filter(models.AuditLog.action_type == "acl_sync").one()
    assert log.actor_user_id is None
    assert log.metadata_json["roles_created"] == 4


def test_sync_with_custom_catalogue(db):
    roles = [{"name": "writer", "display_name": "Writer", "description": "", "guard_name": "web", "is_default": True}]
    groups = {"posts": {"write posts": ["writer"]}}
    report = sync_acl(db, roles=roles, group_permissions=groups)
    db.commit()
    assert report.roles_created == ["writer"]
    assert [p.name for p in rbac.find_role(db, "writer").permissions] == ["write posts"]
