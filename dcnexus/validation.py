"""Format rules applied to registration submissions."""
from __future__ import annotations

import re
from typing import Optional

NAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

INVALID_NAME_MESSAGE = "El nombre debe tener al menos 3 caracteres."
INVALID_EMAIL_MESSAGE = "Ingresa un correo electrónico válido."
WEAK_PASSWORD_MESSAGE = "La contraseña debe tener al menos 6 caracteres."


def _utf16_length(text: str) -> int:
    """Length in UTF-16 code units, the unit the browser front end counts in."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def validate_registration(
    full_name: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> Optional[str]:
    """Return the message of the first rule the submission breaks, if any.

    Rules are checked in a fixed order (name, email, password) and the
    first failure wins, so a submission never gets more than one message.
    """

    if not full_name or _utf16_length(full_name.strip()) < NAME_MIN_LENGTH:
        return INVALID_NAME_MESSAGE

    if not email or EMAIL_PATTERN.fullmatch(email) is None:
        return INVALID_EMAIL_MESSAGE

    if not password or _utf16_length(password) < PASSWORD_MIN_LENGTH:
        return WEAK_PASSWORD_MESSAGE

    return None


__all__ = [
    "EMAIL_PATTERN",
    "INVALID_EMAIL_MESSAGE",
    "INVALID_NAME_MESSAGE",
    "NAME_MIN_LENGTH",
    "PASSWORD_MIN_LENGTH",
    "WEAK_PASSWORD_MESSAGE",
    "validate_registration",
]
