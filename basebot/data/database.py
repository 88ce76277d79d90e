#!/usr/bin/env python3
"""
BASEBOT - Credential Database

Persistent storage for encrypted wallet exports using SQLite.
One row per chat user; rows are only ever replaced whole.

Database Schema:
- wallets: owner_id -> (nonce_hex, ciphertext_hex)
"""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True)
class CredentialRecord:
    """Encrypted wallet export for one user, in its persisted hex layout."""
    owner_id: str
    nonce_hex: str
    ciphertext_hex: str

    @classmethod
    def seal(cls, owner_id: str, nonce: bytes, ciphertext: bytes) -> "CredentialRecord":
        return cls(owner_id=owner_id, nonce_hex=nonce.hex(), ciphertext_hex=ciphertext.hex())

    @property
    def nonce(self) -> bytes:
        return bytes.fromhex(self.nonce_hex)

    @property
    def ciphertext(self) -> bytes:
        return bytes.fromhex(self.ciphertext_hex)


@dataclass(frozen=True)
class Found:
    record: CredentialRecord


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Failed:
    error: Exception


LookupResult = Union[Found, NotFound, Failed]


class CredentialDatabase:
    """
    SQLite storage for credential records.

    Lookups never raise: "no row" and "store broken" come back as distinct
    results so a caller cannot mistake an outage for a new user.
    """

    def __init__(self, db_path: str = "basebot_wallets.db", timeout: float = 10.0):
        self.db_path = db_path
        self.timeout = timeout
        self.conn: Optional[sqlite3.Connection] = None
        self._initialize_db()

    def _initialize_db(self):
        """Create database and table if they don't exist."""
        self.conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS wallets (
                owner_id TEXT PRIMARY KEY,
                nonce_hex TEXT NOT NULL,
                ciphertext_hex TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def lookup(self, owner_id: str) -> LookupResult:
        """Fetch the record for a user as Found, NotFound or Failed."""
        try:
            row = self.conn.execute(
                "SELECT owner_id, nonce_hex, ciphertext_hex FROM wallets WHERE owner_id = ?",
                (owner_id,),
            ).fetchone()
        except sqlite3.Error as e:
            return Failed(e)

        if row is None:
            return NotFound()
        return Found(self._row_to_record(row))

    def save(self, record: CredentialRecord):
        """Insert or fully replace a user's record. Last writer wins."""
        self.conn.execute("""
            INSERT OR REPLACE INTO wallets (owner_id, nonce_hex, ciphertext_hex, created_at)
            VALUES (?, ?, ?, ?)
        """, (
            record.owner_id,
            record.nonce_hex,
            record.ciphertext_hex,
            datetime.now().isoformat(),
        ))
        self.conn.commit()

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM wallets").fetchone()[0]

    def _row_to_record(self, row) -> CredentialRecord:
        """Convert database row to CredentialRecord."""
        return CredentialRecord(
            owner_id=row["owner_id"],
            nonce_hex=row["nonce_hex"],
            ciphertext_hex=row["ciphertext_hex"],
        )

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
