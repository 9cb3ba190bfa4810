"""
Migration: clear-text passwords -> password hashes
- Adds 'password_hash' column to users if missing
- Hashes every clear-text 'password' value that has no hash yet
- Blanks the clear-text column once hashed

Usage:
  python -m migration.migration_hash_passwords --db path/to/quotedesk.db
"""
import argparse
import os
import sqlite3
from contextlib import closing

from quotedesk.auth import hash_password


def has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    cur = conn.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cur.fetchall())


def migrate(db_path: str) -> int:
    """Returns the number of users whose password was hashed."""
    if db_path == ":memory:":
        raise ValueError("Use a file-backed DB for migration script")

    if not os.path.exists(db_path):
        raise FileNotFoundError(db_path)

    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row

        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        if "users" not in tables:
            raise RuntimeError("users table missing; cannot migrate")
        if not has_column(conn, "users", "password"):
            # nothing stored in clear text
            return 0

        if not has_column(conn, "users", "password_hash"):
            conn.execute("ALTER TABLE users ADD COLUMN password_hash TEXT")

        rows = conn.execute(
            "SELECT id, password FROM users WHERE password_hash IS NULL AND password IS NOT NULL"
        ).fetchall()
        for row in rows:
            conn.execute(
                "UPDATE users SET password_hash = ?, password = '' WHERE id = ?",
                (hash_password(row["password"]), row["id"]),
            )
        conn.commit()
        return len(rows)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", required=True, help="Path to SQLite database file")
    args = parser.parse_args()
    count = migrate(args.db)
    print(f"hashed {count} password(s)")

if __name__ == "__main__":
    main()
