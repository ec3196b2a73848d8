"""Backend port - interface to the hosted auth, table and storage backend."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from ..values import AuthSession, AuthUser


class BackendPort(Protocol):
    """Protocol for the hosted backend-as-a-service.

    Every method raises BackendError when the backend rejects the call.
    """

    # Authentication

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Authenticate credentials and open a session."""
        ...

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthUser:
        """Register a new user with profile metadata."""
        ...

    def sign_out(self, access_token: str) -> None:
        """Close the session identified by the token."""
        ...

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve a session token to its user, None if unknown."""
        ...

    # Tables

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Persist rows and return them as stored (with generated ids)."""
        ...

    def update(
        self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> int:
        """Update rows matching every filter, returning how many changed."""
        ...

    def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        """Delete rows matching every filter, returning how many were removed."""
        ...

    def select(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Fetch rows matching every filter."""
        ...

    # Object storage

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        """Store a blob; fails if the path already exists."""
        ...

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        """Delete blobs."""
        ...
