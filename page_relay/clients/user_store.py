"""SQLite-backed store for user identity records."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from page_relay.models.user import UserRecord

if TYPE_CHECKING:
    from page_relay.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, facebook_id, name, ll_user_token, ll_user_token_expires_at, "
    "created_at, updated_at"
)


class UserStore:
    """One row per Facebook identity, with the long-lived token encrypted at rest.

    ``facebook_id`` carries a UNIQUE index and writes go through
    ``INSERT ... ON CONFLICT DO UPDATE``, so two concurrent first logins for the
    same identity converge on a single row.
    """

    def __init__(self, db_path: str, *, cipher: TokenCipherService) -> None:
        self._db_path = Path(db_path)
        self._cipher = cipher
        self._schema_ready = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if not self._schema_ready:
            self._ensure_schema()
        conn = self._open()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        # Deferred to the first query so building the store never touches disk.
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._open()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    facebook_id TEXT NOT NULL,
                    name TEXT,
                    ll_user_token TEXT,
                    ll_user_token_expires_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE UNIQUE INDEX IF NOT EXISTS users_facebook_id_idx "
                "ON users (facebook_id)"
            )
            conn.commit()
        finally:
            conn.close()
        self._schema_ready = True

    def upsert_user(
        self,
        *,
        facebook_id: str,
        name: Optional[str],
        ll_user_token: str,
        ll_user_token_expires_at: datetime,
    ) -> UserRecord:
        """Create or overwrite the record for ``facebook_id`` and return it."""
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO users ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(facebook_id) DO UPDATE SET
                    name = excluded.name,
                    ll_user_token = excluded.ll_user_token,
                    ll_user_token_expires_at = excluded.ll_user_token_expires_at,
                    updated_at = excluded.updated_at
                """,
                (
                    uuid.uuid4().hex,
                    facebook_id,
                    name,
                    self._cipher.encrypt(ll_user_token),
                    ll_user_token_expires_at.isoformat(),
                    now_iso,
                    now_iso,
                ),
            )
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE facebook_id = ?",
                (facebook_id,),
            ).fetchone()
        logger.info("Stored Facebook identity %s as user %s", facebook_id, row["id"])
        return self._to_record(row)

    def get_user(self, user_id: Optional[str]) -> Optional[UserRecord]:
        if not user_id:
            return None
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        return self._to_record(row) if row else None

    def get_user_by_facebook_id(self, facebook_id: str) -> Optional[UserRecord]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE facebook_id = ?",
                (facebook_id,),
            ).fetchone()
        return self._to_record(row) if row else None

    def count_users(self, *, facebook_id: Optional[str] = None) -> int:
        with self._connect() as conn:
            if facebook_id is None:
                row = conn.execute("SELECT COUNT(*) FROM users").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM users WHERE facebook_id = ?",
                    (facebook_id,),
                ).fetchone()
        return int(row[0])

    def _to_record(self, row: sqlite3.Row) -> UserRecord:
        token: Optional[str] = None
        if row["ll_user_token"]:
            try:
                token = self._cipher.decrypt(row["ll_user_token"])
            except ValueError:
                # Unreadable after a secret change; the user has to log in again.
                logger.warning("Stored token for user %s could not be decrypted", row["id"])
        return UserRecord(
            id=row["id"],
            facebook_id=row["facebook_id"],
            name=row["name"],
            ll_user_token=token,
            ll_user_token_expires_at=row["ll_user_token_expires_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


__all__ = ["UserStore"]
