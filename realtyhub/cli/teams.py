"""``teams:backfill-personal``: give every user without one a personal team."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Optional

from sqlalchemy.orm import Session

from realtyhub.cli._io import Console, SessionLocal
from realtyhub.db import models
from realtyhub.services import teams as team_service

logger = logging.getLogger("realtyhub.cli.teams")


def register(subparsers) -> None:
    parser = subparsers.add_parser("teams:backfill-personal", help="Create personal teams for users that have none")
    parser.add_argument("--dry-run", action="store_true", help="Report how many users need a team without creating any")
    parser.set_defaults(handler=lambda args: run(dry_run=args.dry_run))


def run(dry_run: bool = False, console: Optional[Console] = None) -> int:
    console = console or Console()
    session = SessionLocal()
    try:
        backfill(session, console, dry_run=dry_run)
        return 0
    finally:
        with suppress(Exception):
            session.close()


def users_without_personal_team(db: Session):
    has_personal = (
        db.query(models.Team.id)
        .filter(models.Team.user_id == models.User.id, models.Team.personal_team.is_(True))
        .exists()
    )
    return db.query(models.User).filter(~has_personal).order_by(models.User.created_at).all()


def backfill(db: Session, console: Console, dry_run: bool = False) -> int:
    pending = users_without_personal_team(db)
    if dry_run:
        console.line(f"{len(pending)} users require a personal team; no changes made.")
        return 0
    if not pending:
        console.line("All users already have a personal team.")
        return 0

    try:
        for user in pending:
            team = team_service.create_personal_team(db, user)
            user.current_team_id = team.id
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("personal_team_backfill_failed")
        raise
    console.line(f"Created personal teams for {len(pending)} users.")
    logger.info("personal_team_backfill: created=%d", len(pending))
    return len(pending)
