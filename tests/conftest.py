import io
import os
import uuid
from decimal import Decimal

os.environ.setdefault("PYTEST_RUNNING", "1")

import pytest
from fastapi.testclient import TestClient
from rich.console import Console as RichConsole

from realtyhub import rbac
from realtyhub.actions.users import create_user
from realtyhub.cli._io import Console
from realtyhub.db import database as db_module
from realtyhub.db import models
from realtyhub.db.team_scope import set_current_team
from realtyhub.rbac.registrar import forget_cached_permissions
from realtyhub.rbac.sync import sync_acl

SOCIAL_PROVIDERS = ("GOOGLE", "GITHUB", "FACEBOOK", "TWITTER", "LINKEDIN")

# Fallback for threadpool contexts where ContextVar may not propagate
_GLOBAL_SESSION = None


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("DEV_MODE", "ADMIN_EMAILS", "APP_ENV", "INVITATION_TTL_DAYS"):
        monkeypatch.delenv(var, raising=False)
    for provider in SOCIAL_PROVIDERS:
        monkeypatch.delenv(f"SOCIAL_{provider}_CLIENT_ID", raising=False)
        monkeypatch.delenv(f"SOCIAL_{provider}_CLIENT_SECRET", raising=False)
    yield


@pytest.fixture(autouse=True)
def _permission_cache():
    forget_cached_permissions()
    yield
    forget_cached_permissions()


# Fresh schema per test on the shared in-memory SQLite connection
@pytest.fixture
def db_session():
    global _GLOBAL_SESSION
    models.Base.metadata.create_all(bind=db_module.engine)
    session = db_module.SessionLocal()
    _GLOBAL_SESSION = session
    try:
        yield session
    finally:
        _GLOBAL_SESSION = None
        session.rollback()
        session.close()
        models.Base.metadata.drop_all(bind=db_module.engine)


# Backwards compatibility: some tests read better with a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


def _override_get_db():
    session = _GLOBAL_SESSION
    try:
        yield session
    finally:
        # The request's team scope must not leak into test assertions
        set_current_team(session, None)


@pytest.fixture
def client(db_session):
    from realtyhub.api.main import app

    app.dependency_overrides[db_module.get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(db_module.get_db, None)


@pytest.fixture
def acl(db_session):
    """Default roles and permissions synced from the catalogue."""
    report = sync_acl(db_session)
    db_session.commit()
    return report


@pytest.fixture
def make_user(db_session):
    def _make(name="Test User", email=None, password="password123", roles=(), superadmin=False):
        email = email or f"user_{uuid.uuid4().hex[:10]}@example.com"
        user = create_user(db_session, name=name, email=email, password=password)
        if roles:
            rbac.assign_role(db_session, user, list(roles))
        user.is_superadmin = superadmin
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_team(db_session):
    def _make(owner, name="Acme Realty", members=()):
        team = models.Team(name=name, personal_team=False, user_id=owner.id)
        db_session.add(team)
        db_session.flush()
        for member, role in members:
            db_session.add(models.TeamMembership(team_id=team.id, user_id=member.id, role=role))
        db_session.commit()
        return team

    return _make


@pytest.fixture
def listing_refs(db_session):
    """Property type, location and agent owned by ``team``."""
    def _make(team, suffix=None):
        suffix = suffix or uuid.uuid4().hex[:6]
        ptype = models.PropertyType(team_id=team.id, name="Apartment", slug=f"apartment-{suffix}")
        location = models.Location(team_id=team.id, name="Gulshan", slug=f"gulshan-{suffix}", city="Dhaka")
        agent = models.Agent(team_id=team.id, name="Rahim Agent", email=f"agent-{suffix}@example.com")
        db_session.add_all([ptype, location, agent])
        db_session.commit()
        return {"property_type_id": ptype.id, "location_id": location.id, "agent_id": agent.id}

    return _make


@pytest.fixture
def property_data():
    def _make(refs, **overrides):
        data = {
            "title": "Lake View Apartment",
            "description": "Three bedrooms facing the lake.",
            "listing_type": "sale",
            "status": "available",
            "price": Decimal("12500000"),
            "address": "Road 90, Gulshan 2",
            "bedrooms": 3,
            "bathrooms": 2,
            **refs,
        }
        data.update(overrides)
        return data

    return _make


def auth_headers(user_or_email, team=None):
    email = user_or_email if isinstance(user_or_email, str) else user_or_email.email
    headers = {"x-auth-request-email": email, "x-auth-request-user": email.split("@")[0]}
    if team is not None:
        headers["X-Team-Id"] = str(team.id)
    return headers


@pytest.fixture
def headers():
    return auth_headers


class ScriptedPrompt:
    """Stands in for rich's ``Prompt``: replays answers and records each question."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.questions = []
        self.hidden = []

    def ask(self, question, *, console=None, password=False, choices=None, default=..., **_):
        self.questions.append(question)
        if password:
            self.hidden.append(question)
        answer = self.answers.pop(0)
        if answer == "" and default is not ...:
            return default
        return answer


class ScriptedConfirm:
    """Stands in for rich's ``Confirm``, reading from the same answer queue."""

    def __init__(self, prompt):
        self.prompt = prompt

    def ask(self, question, **kwargs):
        answer = self.prompt.ask(question, **kwargs)
        if isinstance(answer, bool):
            return answer
        return answer.strip().lower() in ("y", "yes")


@pytest.fixture
def scripted():
    """Console answering prompts in order; output is recorded, not printed."""
    def _make(*answers):
        prompt = ScriptedPrompt(answers)
        term = RichConsole(record=True, file=io.StringIO(), width=200)
        console = Console(term=term, prompt=prompt, confirm_prompt=ScriptedConfirm(prompt))
        console.prompts = prompt.questions
        console.hidden = prompt.hidden
        return console

    return _make
