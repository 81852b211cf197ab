from realtyhub import rbac
from realtyhub.cli import acl as acl_cmd
from realtyhub.cli import admin as admin_cmd
from realtyhub.cli import roles as roles_cmd
from realtyhub.cli import teams as teams_cmd
from realtyhub.db import models
from realtyhub.services import teams as team_service
from realtyhub.utils.passwords import verify_password


def test_acl_setup_creates_admin_user(db, scripted):
    console = scripted("y", "Root Admin", "root@example.com", "supersecret", "admin", "done", "n")
    assert acl_cmd.setup(db, console) == 0

    assert "Starting permissions and roles sync..." in console.lines
    assert "✅ Permissions and roles sync completed successfully!" in console.lines
    assert "✓ Assigned roles: admin" in console.lines
    assert "✅ User 'Root Admin' created successfully!" in console.lines
    assert console.lines[-1] == "👋 All done! Have a great day!"
    assert console.prompts[0] == "Do you want to create a new admin user?"
    assert console.hidden == ["Enter user password"]

    user = db.query(models.User).filter(models.User.email == "root@example.com").one()
    assert rbac.get_role_names(user) == ["admin"]
    assert user.email_verified_at is not None
    assert verify_password("supersecret", user.password_hash)


def test_acl_setup_without_users(db, scripted):
    console = scripted()
    acl_cmd.setup(db, console, no_user=True)
    assert db.query(models.Role).count() == 4
    assert console.prompts == []


def test_acl_setup_declining_user_creation(db, scripted):
    console = scripted("n")
    acl_cmd.setup(db, console)
    assert console.lines[-1] == "👋 Setup completed! Have a great day!"


def test_acl_setup_production_confirmation(db, monkeypatch, scripted):
    monkeypatch.setenv("APP_ENV", "production")
    console = scripted("n")
    assert acl_cmd.setup(db, console) == 0
    assert console.lines == ["Sync cancelled."]
    assert db.query(models.Role).count() == 0

    forced = scripted()
    acl_cmd.setup(db, forced, force=True, no_user=True)
    assert db.query(models.Role).count() == 4


def test_create_admin_user_validation(db, acl, scripted):
    console = scripted("", "not-an-email", "short")
    assert acl_cmd.create_admin_user(db, console) is False
    assert console.lines == [
        "The name field is required.",
        "The email must be a valid email address.",
        "The password must be at least 8 characters.",
    ]


def test_create_admin_user_role_selection(db, acl, scripted):
    console = scripted("Two Roles", "two@example.com", "password123", "agent", "moderator", "agent", "bogus", "done")
    assert acl_cmd.create_admin_user(db, console) is True
    assert "Full access to every part of the application" in console.term.export_text()
    user = db.query(models.User).filter(models.User.email == "two@example.com").one()
    assert rbac.get_role_names(user) == ["agent", "moderator"]

    empty = scripted("Nobody", "nobody@example.com", "password123", "bogus", "")
    assert acl_cmd.create_admin_user(db, empty) is False
    assert empty.lines[-1] == "At least one role must be selected."


def test_select_roles_before_sync(db, scripted):
    console = scripted()
    assert acl_cmd.select_user_roles(db, console) == []
    assert console.lines == ["No roles available. Please run the sync first."]


def test_existing_user_is_updated(db, acl, make_user, scripted):
    user = make_user(name="Old Name", email="exists@example.com", roles=["user"])
    console = scripted("New Name", "exists@example.com", "newpassword", "", "admin", "done")
    assert acl_cmd.create_admin_user(db, console) is True
    db.refresh(user)
    assert user.name == "New Name"
    assert rbac.get_role_names(user) == ["admin"]
    assert verify_password("newpassword", user.password_hash)
    assert "✓ Synced roles: admin" in console.lines

    skip = scripted("X", "exists@example.com", "whatever1", "n")
    assert acl_cmd.create_admin_user(db, skip) is False
    assert skip.lines == ["Skipping user update."]


def test_admin_create(db, acl, scripted):
    console = scripted()
    assert admin_cmd.create_admin(db, console, email="Boss@Example.com", name="Boss", password="password123") == 0
    assert console.lines == ["Admin user created successfully!", "Email: boss@example.com", "Name: Boss"]
    user = db.query(models.User).filter(models.User.email == "boss@example.com").one()
    assert rbac.get_role_names(user) == ["admin"]
    assert team_service.personal_team(db, user) is not None


def test_admin_create_prompts_and_validates(db, acl, make_user, scripted):
    make_user(email="taken@example.com")
    console = scripted("taken@example.com", "B", "short")
    assert admin_cmd.create_admin(db, console) == 1
    assert console.lines == [
        "The email has already been taken.",
        "The name must be at least 2 characters.",
        "The password must be at least 8 characters.",
    ]
    assert console.prompts == ["Email address", "Full name", "Password"]
    assert console.hidden == ["Password"]


def test_admin_create_without_roles(db, scripted):
    console = scripted()
    assert admin_cmd.create_admin(db, console, email="a@example.com", name="Admin", password="password123") == 1
    assert console.lines == ["There is no role named `admin` for guard `web`. Run `realtyhub acl:setup` first."]
    assert db.query(models.User).count() == 0


def test_roles_show(db, acl, make_user, scripted):
    make_user(name="Agent Smith", roles=["agent"])
    make_user(name="No Roles")
    console = scripted()
    roles_cmd.show(db, console, users=True, permissions=True)

    assert "🔐 ROLES & PERMISSIONS SYSTEM" in console.lines
    assert "   Roles: 4" in console.lines
    assert "   Total Users: 2" in console.lines
    assert "   Users with Roles: 1" in console.lines
    output = console.term.export_text()
    assert "Agent Smith" in output
    assert "Manages property listings, images and inquiries" in output
    assert any(line.startswith("   agent (") for line in console.lines)


def test_backfill_personal_teams(db, scripted):
    db.add_all([models.User(name="Legacy One", email="one@example.com"), models.User(name="Legacy Two", email="two@example.com")])
    db.commit()

    dry = scripted()
    teams_cmd.backfill(db, dry, dry_run=True)
    assert dry.lines == ["2 users require a personal team; no changes made."]
    assert db.query(models.Team).count() == 0

    console = scripted()
    assert teams_cmd.backfill(db, console) == 2
    assert console.lines == ["Created personal teams for 2 users."]
    user = db.query(models.User).filter(models.User.email == "one@example.com").one()
    assert user.current_team_id == team_service.personal_team(db, user).id

    again = scripted()
    teams_cmd.backfill(db, again)
    assert again.lines == ["All users already have a personal team."]
