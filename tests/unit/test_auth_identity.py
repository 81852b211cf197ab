from realtyhub.actions.users import admin_emails
from realtyhub.api.auth import normalize_email, resolve_identity_from_headers
from realtyhub.api.deps import dev_mode_active


def test_resolve_identity_prefers_auth_request_headers():
    name, email = resolve_identity_from_headers("jane", " Jane@Example.COM ", "fwd", "fwd@example.com")
    assert (name, email) == ("jane", "jane@example.com")


def test_resolve_identity_falls_back_to_forwarded_headers():
    assert resolve_identity_from_headers(None, None, "fwd", "Fwd@Example.com") == ("fwd", "fwd@example.com")
    assert resolve_identity_from_headers(None, None, None, None) == (None, None)


def test_normalize_email():
    assert normalize_email("") is None
    assert normalize_email("  A@B.CO ") == "a@b.co"


def test_admin_emails_env(monkeypatch):
    monkeypatch.setenv("ADMIN_EMAILS", ' "Boss@Example.com", ops@example.com ,,')
    assert admin_emails() == {"boss@example.com", "ops@example.com"}


def test_dev_mode(monkeypatch):
    assert not dev_mode_active()
    monkeypatch.setenv("DEV_MODE", "TRUE")
    assert dev_mode_active()
