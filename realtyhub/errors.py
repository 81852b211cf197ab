"""Domain exceptions raised by actions and services.

The API layer maps these to HTTP responses in ``realtyhub.api.main``.
"""
import re
from typing import Any, Dict, Iterable, List, Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class RealtyHubError(Exception):
    """Base exception for the service."""


class AuthorizationError(RealtyHubError):
    """Actor is not allowed to perform the action."""

    def __init__(self, message: str = "This action is unauthorized."):
        super().__init__(message)


class NotFound(RealtyHubError):
    """Requested resource was not found."""


class Conflict(RealtyHubError):
    """Request conflicts with the current state of a resource."""


class ProtectedResourceError(Conflict):
    """Resource is protected from the requested change (default role, own account)."""


class ValidationError(RealtyHubError):
    """Input failed validation.

    ``errors`` maps a field name to its messages; ``bag`` names the form the
    errors belong to, so callers with several forms on a page can tell them apart.
    """

    def __init__(self, errors: Dict[str, List[str]], bag: str = "default"):
        self.errors = errors
        self.bag = bag
        first = next(iter(errors.values()), ["The given data was invalid."])
        super().__init__(first[0] if first else "The given data was invalid.")

    @classmethod
    def with_messages(cls, messages: Dict[str, str], bag: str = "default") -> "ValidationError":
        return cls({field: [msg] for field, msg in messages.items()}, bag=bag)


class Validator:
    """Collects field errors and raises them together."""

    def __init__(self, bag: str = "default"):
        self.bag = bag
        self.errors: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def add_if(self, condition: bool, field: str, message: str) -> None:
        if condition:
            self.add(field, message)

    def required(self, field: str, value: Any, label: Optional[str] = None) -> bool:
        if value is None or (isinstance(value, str) and not value.strip()):
            self.add(field, f"The {label or field} field is required.")
            return False
        return True

    def max_length(self, field: str, value: Optional[str], limit: int, label: Optional[str] = None) -> None:
        if value is not None and len(value) > limit:
            self.add(field, f"The {label or field} may not be greater than {limit} characters.")

    def min_length(self, field: str, value: Optional[str], limit: int, label: Optional[str] = None) -> None:
        if value is not None and len(value) < limit:
            self.add(field, f"The {label or field} must be at least {limit} characters.")

    def email(self, field: str, value: Optional[str]) -> None:
        if value and not is_valid_email(value):
            self.add(field, f"The {field} must be a valid email address.")

    def one_of(self, field: str, value: Any, allowed: Iterable[Any]) -> None:
        if value is not None and value not in set(allowed):
            self.add(field, f"The selected {field} is invalid.")

    def has(self, field: Optional[str] = None) -> bool:
        if field is None:
            return bool(self.errors)
        return field in self.errors

    def validate(self) -> None:
        if self.errors:
            raise ValidationError(self.errors, bag=self.bag)


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))
