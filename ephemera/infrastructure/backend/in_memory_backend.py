"""In-memory backend - local stand-in for the hosted auth, table and storage service."""

import copy
import logging
import secrets
import threading
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from passlib.context import CryptContext

from ephemera.domain import AuthSession, AuthUser, BackendError

logger = logging.getLogger(__name__)


def default_password_context() -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True, slots=True)
class _Account:
    user: AuthUser
    password_hash: str
    metadata: dict[str, Any]


@dataclass(frozen=True, slots=True)
class StoredObject:
    data: bytes
    content_type: str


def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    return all(row.get(key) == value for key, value in filters.items())


class InMemoryBackend:
    """Thread-safe BackendPort keeping users, rows and blobs in process memory.

    Rows get a generated `id` and `created_at` unless provided. Passwords are
    stored as bcrypt hashes from `password_context`.
    """

    def __init__(self, password_context: CryptContext | None = None) -> None:
        self._pwd_context = password_context or default_password_context()
        self._accounts: dict[str, _Account] = {}
        self._sessions: dict[str, AuthUser] = {}
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._buckets: dict[str, dict[str, StoredObject]] = {}
        self._lock = threading.Lock()

    # Authentication

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthUser:
        password_hash = self._pwd_context.hash(password)
        with self._lock:
            if email in self._accounts:
                raise BackendError("User already registered")

            username = metadata.get("username")
            if username and any(
                a.metadata.get("username") == username for a in self._accounts.values()
            ):
                raise BackendError("Username already taken")

            user = AuthUser(id=str(uuid.uuid4()), email=email)
            self._accounts[email] = _Account(
                user=user,
                password_hash=password_hash,
                metadata=dict(metadata),
            )

        logger.debug("Account created user_id=%s", user.id)
        return user

    def sign_in(self, email: str, password: str) -> AuthSession:
        with self._lock:
            account = self._accounts.get(email)

        if account is None:
            # Unknown emails cost as much as a wrong password
            self._pwd_context.dummy_verify()
            raise BackendError("Invalid login credentials")
        if not self._pwd_context.verify(password, account.password_hash):
            raise BackendError("Invalid login credentials")

        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[token] = account.user
        return AuthSession(user=account.user, access_token=token)

    def sign_out(self, access_token: str) -> None:
        with self._lock:
            self._sessions.pop(access_token, None)

    def get_user(self, access_token: str) -> AuthUser | None:
        with self._lock:
            return self._sessions.get(access_token)

    def get_metadata(self, user_id: str) -> dict[str, Any] | None:
        with self._lock:
            for account in self._accounts.values():
                if account.user.id == user_id:
                    return dict(account.metadata)
        return None

    # Tables

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        now = datetime.now(UTC).isoformat()
        stored = []
        with self._lock:
            existing = self._tables.setdefault(table, [])
            ids = {row.get("id") for row in existing}
            for row in rows:
                record = {"id": str(uuid.uuid4()), "created_at": now, **row}
                if record["id"] in ids:
                    raise BackendError(f"Duplicate key in {table}: {record['id']}")
                ids.add(record["id"])
                stored.append(record)
            existing.extend(stored)
        return copy.deepcopy(stored)

    def update(self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]) -> int:
        with self._lock:
            matched = [row for row in self._tables.get(table, []) if _matches(row, filters)]
            for row in matched:
                row.update(values)
        return len(matched)

    def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        with self._lock:
            rows = self._tables.get(table, [])
            kept = [row for row in rows if not _matches(row, filters)]
            self._tables[table] = kept
        return len(rows) - len(kept)

    def select(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        with self._lock:
            rows = [row for row in self._tables.get(table, []) if _matches(row, filters)]
            return copy.deepcopy(rows)

    # Object storage

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        with self._lock:
            objects = self._buckets.setdefault(bucket, {})
            if path in objects:
                raise BackendError("The resource already exists")
            objects[path] = StoredObject(data=bytes(data), content_type=content_type)

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        with self._lock:
            objects = self._buckets.get(bucket, {})
            for path in paths:
                objects.pop(path, None)

    def get_object(self, bucket: str, path: str) -> StoredObject | None:
        with self._lock:
            return self._buckets.get(bucket, {}).get(path)
