"""Security utilities for auth."""

from __future__ import annotations

import re
import secrets

import bcrypt

from auth.config import AuthConfig

_PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).+$")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    try:
        password_bytes = password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        return False


def is_strong_password(password: str) -> bool:
    """At least MIN_PASSWORD_LENGTH characters with a letter and a digit."""
    return (
        len(password) >= AuthConfig.MIN_PASSWORD_LENGTH
        and _PASSWORD_PATTERN.match(password) is not None
    )


def generate_otp() -> str:
    """Uniformly random zero-padded numeric code."""
    if AuthConfig.FIXED_OTP:
        return AuthConfig.FIXED_OTP
    return str(secrets.randbelow(10 ** AuthConfig.OTP_LENGTH)).zfill(AuthConfig.OTP_LENGTH)
