"""``acl:setup``: sync the role/permission catalogue, then optionally create admin users."""

from __future__ import annotations

import logging
import os
from contextlib import suppress
from typing import List, Optional

from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.actions.users import create_user
from realtyhub.cli._io import Console, SessionLocal
from realtyhub.db import models
from realtyhub.errors import Validator
from realtyhub.rbac.sync import SyncReport, sync_acl
from realtyhub.utils.passwords import hash_password

logger = logging.getLogger("realtyhub.cli.acl")

DONE = "done"


def register(subparsers) -> None:
    parser = subparsers.add_parser("acl:setup", help="Sync permissions and roles, then optionally create admin users")
    parser.add_argument("--force", action="store_true", help="Force sync without confirmation in production")
    parser.add_argument("--no-user", action="store_true", help="Skip user creation after sync")
    parser.set_defaults(handler=lambda args: run(force=args.force, no_user=args.no_user))


def run(force: bool = False, no_user: bool = False, console: Optional[Console] = None) -> int:
    console = console or Console()
    session = SessionLocal()
    try:
        return setup(session, console, force=force, no_user=no_user)
    finally:
        with suppress(Exception):
            session.close()


def setup(db: Session, console: Console, force: bool = False, no_user: bool = False) -> int:
    if os.getenv("APP_ENV") == "production" and not force:
        if not console.confirm("This will sync permissions and roles in PRODUCTION. Are you sure?"):
            console.line("Sync cancelled.")
            return 0

    console.line("Starting permissions and roles sync...")
    sync(db, console)
    console.line("✅ Permissions and roles sync completed successfully!")

    if not no_user:
        handle_user_creation(db, console)
    return 0


def sync(db: Session, console: Console) -> SyncReport:
    try:
        report = sync_acl(db, out=console.line)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("acl_sync_failed")
        raise
    return report


def handle_user_creation(db: Session, console: Console) -> None:
    console.line()
    console.line("🎉 ACL setup completed successfully!")
    while True:
        if not console.confirm("Do you want to create a new admin user?", default=True):
            console.line("👋 Setup completed! Have a great day!")
            return
        if create_admin_user(db, console):
            console.line("✅ User created successfully!")
        else:
            console.line("❌ Failed to create user. Please check the errors above.")
        if not console.confirm("Do you want to create another user?"):
            break
    console.line("👋 All done! Have a great day!")


def _print_errors(console: Console, errors) -> None:
    for messages in errors.values():
        for message in messages:
            console.line(message)


def create_admin_user(db: Session, console: Console) -> bool:
    name = console.ask("Enter user name").strip()
    email = console.ask("Enter user email").strip().lower()
    password = console.secret("Enter user password")

    existing = db.query(models.User).filter(models.User.email == email).first() if email else None
    if existing is not None:
        question = f"User with email '{email}' already exists. Do you want to update their password and roles?"
        if console.confirm(question, default=True):
            return update_existing_user(db, console, existing, name, password)
        console.line("Skipping user update.")
        return False

    v = Validator()
    if v.required("name", name):
        v.max_length("name", name, 255)
    if v.required("email", email):
        v.email("email", email)
        v.max_length("email", email, 255)
    if v.required("password", password):
        v.min_length("password", password, 8)
    if v.has():
        _print_errors(console, v.errors)
        return False

    role_names = select_user_roles(db, console)
    if not role_names:
        return False

    try:
        user = create_user(db, name=name, email=email, password=password, verified=True)
        rbac.assign_role(db, user, role_names)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("admin_user_create_failed: email=%s", email)
        console.line(f"Error creating user: {exc}")
        return False
    console.line("✓ Assigned roles: " + ", ".join(role_names))
    console.line(f"✅ User '{name}' created successfully!")
    return True


def update_existing_user(db: Session, console: Console, user: models.User, name: str, password: str) -> bool:
    v = Validator()
    if v.required("name", name):
        v.max_length("name", name, 255)
    if v.required("password", password):
        v.min_length("password", password, 8)
    if v.has():
        _print_errors(console, v.errors)
        return False

    role_names = select_user_roles(db, console)
    if not role_names:
        return False

    try:
        user.name = name
        user.password_hash = hash_password(password)
        rbac.sync_roles(db, user, role_names)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("admin_user_update_failed: user=%s", user.id)
        console.line(f"Error updating user: {exc}")
        return False
    console.line("✓ Updated password")
    console.line("✓ Synced roles: " + ", ".join(role_names))
    console.line(f"✅ User '{name}' updated successfully!")
    return True


def select_user_roles(db: Session, console: Console) -> List[str]:
    """Ask for roles one at a time until ``done``; empty list on failure."""
    roles = db.query(models.Role).order_by(models.Role.name).all()
    if not roles:
        console.line("No roles available. Please run the sync first.")
        return []

    console.table(
        ["Role", "Display name", "Description"],
        [[r.name, r.display_name or r.name, r.description or "No description"] for r in roles],
        title="Available roles",
    )
    names = [r.name for r in roles]
    selected: List[str] = []
    while True:
        answer = console.ask("Add a role", choices=names + [DONE], default=DONE).strip()
        if answer == DONE:
            break
        if answer in names and answer not in selected:
            selected.append(answer)

    if not selected:
        console.line("At least one role must be selected.")
    return selected
