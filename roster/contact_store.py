"""
Contact store using SQLite.

Persists the contact book between command invocations:
- Contacts, in insertion order, with their tags as a JSON list
- The tag registry, in insertion order

The in-memory ContactBook is the source of truth while a command runs;
this store only loads it at startup and records each change.
"""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from .types import Contact, Tag


class ContactStore:
    """
    SQLite-backed store for contacts and registered tags.
    """

    def __init__(self, store_path: Path):
        """
        Args:
            store_path: Path to SQLite database file
        """
        self._db_path = store_path
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the SQLite database."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS contacts (
                name TEXT PRIMARY KEY COLLATE NOCASE,
                phone TEXT NOT NULL,
                email TEXT NOT NULL,
                address TEXT NOT NULL,
                tags_json TEXT NOT NULL DEFAULT '[]',
                position INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS tags (
                name TEXT PRIMARY KEY,
                position INTEGER NOT NULL
            )
        """)

        self._conn.commit()

    def _now(self) -> str:
        """Current timestamp in ISO format."""
        return datetime.now(timezone.utc).isoformat()

    def _next_position(self, table: str) -> int:
        row = self._conn.execute(f"SELECT COALESCE(MAX(position), -1) + 1 FROM {table}").fetchone()
        return row[0]

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def upsert_contact(self, contact: Contact) -> None:
        """
        Insert or update a contact, keyed by name.

        Preserves position and created_at when the contact already exists.
        """
        now = self._now()
        row = self._conn.execute(
            "SELECT position, created_at FROM contacts WHERE name = ?", (contact.name,)
        ).fetchone()
        tags_json = json.dumps([str(t) for t in contact.sorted_tags()], ensure_ascii=False)

        if row is None:
            self._conn.execute("""
                INSERT INTO contacts
                (name, phone, email, address, tags_json, position, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (contact.name, contact.phone, contact.email, contact.address,
                  tags_json, self._next_position("contacts"), now, now))
        else:
            self._conn.execute("""
                UPDATE contacts
                SET phone = ?, email = ?, address = ?, tags_json = ?, updated_at = ?
                WHERE name = ?
            """, (contact.phone, contact.email, contact.address,
                  tags_json, now, contact.name))
        self._conn.commit()

    def delete_contact(self, name: str) -> bool:
        cursor = self._conn.execute("DELETE FROM contacts WHERE name = ?", (name,))
        self._conn.commit()
        return cursor.rowcount > 0

    def upsert_tag(self, tag: Tag) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO tags (name, position) VALUES (?, ?)",
            (tag.name, self._next_position("tags")),
        )
        self._conn.commit()

    def delete_tag(self, tag: Tag) -> bool:
        cursor = self._conn.execute("DELETE FROM tags WHERE name = ?", (tag.name,))
        self._conn.commit()
        return cursor.rowcount > 0

    def replace_all(self, contacts: Iterable[Contact], tags: Iterable[Tag]) -> None:
        """Overwrite the whole store in one transaction."""
        now = self._now()
        with self._conn:
            self._conn.execute("DELETE FROM contacts")
            self._conn.execute("DELETE FROM tags")
            self._conn.executemany(
                "INSERT INTO tags (name, position) VALUES (?, ?)",
                [(t.name, i) for i, t in enumerate(tags)],
            )
            self._conn.executemany("""
                INSERT INTO contacts
                (name, phone, email, address, tags_json, position, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                (c.name, c.phone, c.email, c.address,
                 json.dumps([str(t) for t in c.sorted_tags()], ensure_ascii=False),
                 i, now, now)
                for i, c in enumerate(contacts)
            ])

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def list_tags(self) -> list[Tag]:
        cursor = self._conn.execute("SELECT name FROM tags ORDER BY position")
        return [Tag(row["name"]) for row in cursor]

    def list_contacts(self) -> list[Contact]:
        cursor = self._conn.execute("""
            SELECT name, phone, email, address, tags_json
            FROM contacts
            ORDER BY position
        """)
        return [
            Contact(
                name=row["name"],
                phone=row["phone"],
                email=row["email"],
                address=row["address"],
                tags=frozenset(Tag(t) for t in json.loads(row["tags_json"])),
            )
            for row in cursor
        ]

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM contacts").fetchone()[0]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __del__(self):
        self.close()
