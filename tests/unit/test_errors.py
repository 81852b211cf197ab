import pytest

from realtyhub.errors import (
    AuthorizationError,
    Conflict,
    ProtectedResourceError,
    ValidationError,
    Validator,
    is_valid_email,
)


def test_validator_collects_errors_per_field():
    v = Validator(bag="createTeam")
    assert v.required("name", "") is False
    v.max_length("title", "x" * 11, 10)
    v.min_length("password", "short", 8)
    v.email("email", "not-an-email")
    v.one_of("role", "owner", ["admin", "member"])

    with pytest.raises(ValidationError) as exc:
        v.validate()
    err = exc.value
    assert err.bag == "createTeam"
    assert err.errors == {
        "name": ["The name field is required."],
        "title": ["The title may not be greater than 10 characters."],
        "password": ["The password must be at least 8 characters."],
        "email": ["The email must be a valid email address."],
        "role": ["The selected role is invalid."],
    }
    assert str(err) == "The name field is required."


def test_validator_passes_clean_input():
    v = Validator()
    assert v.required("name", "Jane")
    v.max_length("name", "Jane", 255)
    v.email("email", "jane@example.com")
    v.one_of("role", None, ["admin"])
    assert not v.has()
    v.validate()


def test_required_label_and_add_if():
    v = Validator()
    v.required("author_name", "   ", label="name")
    v.add_if(True, "author_name", "second")
    v.add_if(False, "other", "never")
    assert v.has("author_name") and not v.has("other")
    assert v.errors["author_name"] == ["The name field is required.", "second"]


def test_with_messages():
    err = ValidationError.with_messages({"team": "You may not delete your personal team."}, bag="deleteTeam")
    assert err.errors == {"team": ["You may not delete your personal team."]}
    assert err.bag == "deleteTeam"


def test_error_hierarchy():
    assert issubclass(ProtectedResourceError, Conflict)
    assert str(AuthorizationError()) == "This action is unauthorized."


@pytest.mark.parametrize("value,ok", [
    ("a@b.co", True),
    ("first.last@example.com", True),
    ("no-at-sign", False),
    ("two@@example.com", False),
    ("spaces in@example.com", False),
    ("", False),
])
def test_is_valid_email(value, ok):
    assert is_valid_email(value) is ok
