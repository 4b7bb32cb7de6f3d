"""
Rules for choosing a new master password.

Strength is advisory (shown while the user types); ``check_new_password``
is the hard gate applied before a master key record is generated.
"""

from __future__ import annotations

from enum import Enum

from keystore_core.errors import PasswordMismatchError, PasswordTooShortError

MIN_PASSWORD_LENGTH = 8
STRONG_PASSWORD_LENGTH = 12


class PasswordStrength(Enum):
    NONE = "none"
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


def _has_variety(password: str) -> bool:
    """At least three of: upper, lower, digit, other."""
    classes = [
        any(ch.isupper() for ch in password),
        any(ch.islower() for ch in password),
        any(ch.isdigit() for ch in password),
        any(not ch.isalnum() for ch in password),
    ]
    return sum(classes) >= 3


def password_strength(password: str) -> PasswordStrength:
    if not password:
        return PasswordStrength.NONE
    if len(password) < MIN_PASSWORD_LENGTH:
        return PasswordStrength.WEAK
    if len(password) >= STRONG_PASSWORD_LENGTH and _has_variety(password):
        return PasswordStrength.STRONG
    return PasswordStrength.MEDIUM


def check_new_password(password: str, confirmation: str | None = None) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordTooShortError(MIN_PASSWORD_LENGTH)
    if confirmation is not None and confirmation != password:
        raise PasswordMismatchError()
