"""``roles:show``: summary of roles, permissions and the users holding them."""

from __future__ import annotations

from collections import OrderedDict
from contextlib import suppress
from typing import Optional

from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.cli._io import Console, SessionLocal
from realtyhub.db import models
from realtyhub.rbac.catalog import ROLES


def register(subparsers) -> None:
    parser = subparsers.add_parser("roles:show", help="Display a summary of roles, permissions, and users")
    parser.add_argument("--users", action="store_true", help="Show users for each role")
    parser.add_argument("--permissions", action="store_true", help="Show permissions for each role")
    parser.set_defaults(handler=lambda args: run(users=args.users, permissions=args.permissions))


def run(users: bool = False, permissions: bool = False, console: Optional[Console] = None) -> int:
    console = console or Console()
    session = SessionLocal()
    try:
        show(session, console, users=users, permissions=permissions)
        return 0
    finally:
        with suppress(Exception):
            session.close()


def role_description(role: models.Role) -> str:
    catalogued = {r.name: r.description for r in ROLES}
    return catalogued.get(role.name) or role.description or "Custom role"


def show(db: Session, console: Console, users: bool = False, permissions: bool = False) -> None:
    roles = db.query(models.Role).order_by(models.Role.name).all()

    console.line()
    console.line("🔐 ROLES & PERMISSIONS SYSTEM")
    console.line("====================================")

    total_users = db.query(models.User).count()
    with_roles = db.query(models.User).filter(models.User.roles.any()).count()
    console.line("📊 System Overview:")
    console.line(f"   Roles: {len(roles)}")
    console.line(f"   Permissions: {db.query(models.Permission).count()}")
    console.line(f"   Total Users: {total_users}")
    console.line(f"   Users with Roles: {with_roles}")
    console.line()

    console.line("👥 Roles Summary:")
    console.table(
        ["Role", "Permissions", "Users", "Description"],
        [[r.name, len(r.permissions), len(r.users), role_description(r)] for r in roles],
    )
    console.line()

    if permissions:
        show_role_permissions(console, roles)
    if users:
        show_users_with_roles(db, console)

    console.line("💡 Usage Tips:")
    console.line("   • Use --permissions to see detailed permission breakdown")
    console.line("   • Use --users to see user assignments")
    console.line()


def group_by_verb(names) -> "OrderedDict[str, list]":
    """Group permission names by their first word ('view posts' -> 'view': ['posts'])."""
    grouped: "OrderedDict[str, list]" = OrderedDict()
    for name in names:
        verb, _, rest = name.partition(" ")
        grouped.setdefault(verb, []).append(rest or verb)
    return grouped


def show_role_permissions(console: Console, roles) -> None:
    console.line("🔑 Role Permissions Breakdown:")
    for role in roles:
        names = sorted(p.name for p in role.permissions)
        console.line(f"   {role.name} ({len(names)} permissions):")
        for verb, nouns in group_by_verb(names).items():
            console.line(f"     {verb}: {', '.join(nouns)}")
        console.line()


def show_users_with_roles(db: Session, console: Console) -> None:
    console.line("👤 Users & Their Roles:")
    rows = []
    for user in db.query(models.User).order_by(models.User.name).all():
        role_names = ", ".join(sorted(rbac.get_role_names(user))) or "No roles"
        rows.append([user.name, user.email, role_names, len(rbac.get_all_permissions(db, user))])
    console.table(["Name", "Email", "Roles", "Permissions"], rows)
    console.line()
