"""Authenticated user value objects."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AuthUser:
    """User as reported by the authentication backend."""

    id: str
    email: str


@dataclass(frozen=True, slots=True)
class AuthSession:
    """Signed-in user and the bearer token identifying the session."""

    user: AuthUser
    access_token: str
