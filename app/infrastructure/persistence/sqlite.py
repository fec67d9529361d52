import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ...domain.models import Account, Message
from ...domain.ports.persistence import PersistenceGateway


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    is_verified INTEGER NOT NULL DEFAULT 0,
                    verify_code TEXT,
                    verify_code_expiry TEXT,
                    is_accepting_messages INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS messages (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    account_id INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(account_id) REFERENCES accounts(id) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_messages_account_seq
                    ON messages(account_id, seq);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # AccountRepository API --------------------------------------------------
    def create_account(self, username: str, email: str, password_hash: str) -> Account:
        now = self._now()
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO accounts (
                        username, email, password_hash, is_verified,
                        is_accepting_messages, created_at, updated_at
                    )
                    VALUES (?, ?, ?, 0, 1, ?, ?)
                    """,
                    (username, email.strip().lower(), password_hash, now, now),
                )
                account_id = cur.lastrowid
                cur = self._conn.execute("SELECT * FROM accounts WHERE id = ?", (account_id,))
                row = cur.fetchone()
        except sqlite3.IntegrityError as exc:
            raise ValueError("Username or email is already registered.") from exc
        if not row:
            raise RuntimeError("Failed to persist account.")
        return self._row_to_account(row)

    def get_account_by_id(self, account_id: int) -> Optional[Account]:
        return self._fetch_account("SELECT * FROM accounts WHERE id = ?", (account_id,))

    def get_account_by_username(self, username: str) -> Optional[Account]:
        return self._fetch_account("SELECT * FROM accounts WHERE username = ?", (username,))

    def get_account_by_email(self, email: str) -> Optional[Account]:
        return self._fetch_account(
            "SELECT * FROM accounts WHERE email = ?", (email.strip().lower(),)
        )

    def update_pending_registration(
        self, account_id: int, username: str, password_hash: str
    ) -> Account:
        try:
            return self._update_account(
                account_id, "username = ?, password_hash = ?", (username, password_hash)
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError("Username or email is already registered.") from exc

    def delete_account(self, account_id: int) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,))

    def set_verification_code(self, account_id: int, code: str, expires_at: datetime) -> Account:
        return self._update_account(
            account_id,
            "verify_code = ?, verify_code_expiry = ?",
            (code, self._format_datetime(expires_at)),
        )

    def mark_account_verified(self, account_id: int) -> Account:
        return self._update_account(
            account_id,
            "is_verified = 1, verify_code = NULL, verify_code_expiry = NULL",
            (),
        )

    def set_accepting_messages(self, account_id: int, accepting: bool) -> Account:
        return self._update_account(account_id, "is_accepting_messages = ?", (int(accepting),))

    # MessageRepository API --------------------------------------------------
    def append_message(self, account_id: int, content: str) -> Message:
        message_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO messages (id, account_id, content, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (message_id, account_id, content, self._format_datetime(now)),
            )
        return Message(id=message_id, account_id=account_id, content=content, created_at=now)

    def get_messages_for_account(self, account_id: int) -> List[Message]:
        with self._lock:
            cur = self._conn.execute(
                "SELECT * FROM messages WHERE account_id = ? ORDER BY seq ASC",
                (account_id,),
            )
            rows = cur.fetchall()
        return [self._row_to_message(row) for row in rows]

    def delete_message(self, account_id: int, message_id: str) -> bool:
        with self._lock, self._conn:
            cur = self._conn.execute(
                "DELETE FROM messages WHERE id = ? AND account_id = ?",
                (message_id, account_id),
            )
        return cur.rowcount > 0

    # Helpers ----------------------------------------------------------------
    def _fetch_account(self, query: str, params: tuple) -> Optional[Account]:
        with self._lock:
            cur = self._conn.execute(query, params)
            row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def _update_account(self, account_id: int, assignments: str, params: tuple) -> Account:
        now = self._now()
        with self._lock, self._conn:
            self._conn.execute(
                f"UPDATE accounts SET {assignments}, updated_at = ? WHERE id = ?",
                (*params, now, account_id),
            )
            cur = self._conn.execute("SELECT * FROM accounts WHERE id = ?", (account_id,))
            row = cur.fetchone()
        if not row:
            raise ValueError(f"Account {account_id} not found.")
        return self._row_to_account(row)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    def _row_to_account(self, row: sqlite3.Row) -> Account:
        return Account(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            is_verified=bool(row["is_verified"]),
            verify_code=row["verify_code"],
            verify_code_expiry=self._parse_datetime(row["verify_code_expiry"])
            if row["verify_code_expiry"]
            else None,
            is_accepting_messages=bool(row["is_accepting_messages"]),
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )

    def _row_to_message(self, row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            account_id=row["account_id"],
            content=row["content"],
            created_at=self._parse_datetime(row["created_at"]),
        )
