"""Registration and sign-in on top of the user record store."""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Sequence

from .models import UserRecord
from .store import RecordStore
from .validation import validate_registration

logger = logging.getLogger("dcnexus.auth")

DUPLICATE_EMAIL_MESSAGE = "Este correo ya está registrado."
MISSING_CREDENTIALS_MESSAGE = "Correo y contraseña son obligatorios."
INVALID_CREDENTIALS_MESSAGE = "Credenciales inválidas."


class AuthError(Exception):
    """Base class for failures reported back to the caller."""

    message = "Error de autenticación."

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(AuthError):
    """The registration submission broke a format rule."""


class DuplicateEmail(AuthError):
    message = DUPLICATE_EMAIL_MESSAGE


class MissingCredentials(AuthError):
    message = MISSING_CREDENTIALS_MESSAGE


class InvalidCredentials(AuthError):
    """Unknown email or wrong password; the two are deliberately indistinguishable."""

    message = INVALID_CREDENTIALS_MESSAGE


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _find_by_email(records: Sequence[UserRecord], email: str) -> Optional[UserRecord]:
    wanted = email.lower()
    for record in records:
        if record.email.lower() == wanted:
            return record
    return None


def _passwords_match(provided: str, stored: str) -> bool:
    return secrets.compare_digest(
        provided.encode("utf-8", "surrogatepass"),
        stored.encode("utf-8", "surrogatepass"),
    )


class AuthService:
    """Single-shot register / login operations.

    Every call performs one full load (and, for registration, save) of the
    record store. No session state is kept between calls.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        clock: Callable[[], datetime] = _current_timestamp,
    ) -> None:
        self._store = store
        self._clock = clock

    def register(
        self,
        full_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Dict[str, object]:
        """Create a new user and return its public view."""

        error = validate_registration(full_name, email, password)
        if error is not None:
            raise ValidationFailed(error)

        records = self._store.load()
        if _find_by_email(records, email) is not None:
            raise DuplicateEmail()

        created_at = self._clock()
        record = UserRecord(
            id=self._next_id(records, created_at),
            full_name=full_name.strip(),
            email=email.lower(),
            password=password,
            created_at=created_at.isoformat(),
        )

        records.append(record)
        self._store.save(records)
        logger.info("Registered user %s", record.id)
        return record.public_view()

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, object]:
        """Check credentials and return the matching user's public view."""

        if not email or not password:
            raise MissingCredentials()

        record = _find_by_email(self._store.load(), email)
        if record is None or not _passwords_match(password, record.password):
            logger.warning("Failed login attempt for %s", email)
            raise InvalidCredentials()

        logger.info("User %s signed in", record.id)
        return record.public_view()

    @staticmethod
    def _next_id(records: Sequence[UserRecord], created_at: datetime) -> int:
        candidate = int(created_at.timestamp() * 1000)
        highest = max((record.id for record in records), default=0)
        if candidate <= highest:
            candidate = highest + 1
        return candidate


__all__ = [
    "AuthError",
    "AuthService",
    "DuplicateEmail",
    "InvalidCredentials",
    "MissingCredentials",
    "ValidationFailed",
]
