"""``admin:create``: create a verified user holding the ``admin`` role."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Optional

from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.actions.users import create_user
from realtyhub.cli._io import Console, SessionLocal
from realtyhub.db import models
from realtyhub.errors import NotFound, Validator
from realtyhub.rbac.catalog import ROLE_ADMIN

logger = logging.getLogger("realtyhub.cli.admin")


def register(subparsers) -> None:
    parser = subparsers.add_parser("admin:create", help="Create a new admin user")
    parser.add_argument("--email")
    parser.add_argument("--name")
    parser.add_argument("--password")
    parser.set_defaults(handler=lambda args: run(email=args.email, name=args.name, password=args.password))


def run(
    email: Optional[str] = None,
    name: Optional[str] = None,
    password: Optional[str] = None,
    console: Optional[Console] = None,
) -> int:
    console = console or Console()
    session = SessionLocal()
    try:
        return create_admin(session, console, email=email, name=name, password=password)
    finally:
        with suppress(Exception):
            session.close()


def create_admin(
    db: Session,
    console: Console,
    email: Optional[str] = None,
    name: Optional[str] = None,
    password: Optional[str] = None,
) -> int:
    email = (email or console.ask("Email address")).strip().lower()
    name = (name or console.ask("Full name")).strip()
    password = password or console.secret("Password")

    v = Validator()
    if v.required("email", email):
        v.email("email", email)
        taken = db.query(models.User.id).filter(models.User.email == email).first() is not None
        v.add_if(taken, "email", "The email has already been taken.")
    if v.required("name", name):
        v.min_length("name", name, 2)
    if v.required("password", password):
        v.min_length("password", password, 8)
    if v.has():
        for messages in v.errors.values():
            for message in messages:
                console.line(message)
        return 1

    try:
        user = create_user(db, name=name, email=email, password=password, verified=True)
        rbac.assign_role(db, user, ROLE_ADMIN)
        db.commit()
    except NotFound as exc:
        db.rollback()
        console.line(f"{exc} Run `realtyhub acl:setup` first.")
        return 1
    except Exception:
        db.rollback()
        logger.exception("admin_create_failed: email=%s", email)
        raise

    logger.info("admin_created: user=%s", user.id)
    console.line("Admin user created successfully!")
    console.line(f"Email: {email}")
    console.line(f"Name: {name}")
    return 0
