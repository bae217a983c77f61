"""Review repository for database operations."""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from paperreview.models.review import ReviewRecord

_COLUMNS = (
    "id, created_at, contents, paper_title, venue, year, journal_name, journal_pages, "
    "journal_vol, authors, doi, link, reviewer_name, created_by, image_url"
)


class ReviewRepository:
    """Repository for review persistence using SQLite."""

    def __init__(self, db_path: Path):
        """Initialize repository with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._init_db()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS reviews (
                    id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    contents TEXT NOT NULL,
                    paper_title TEXT NOT NULL,
                    venue TEXT,
                    year INTEGER,
                    journal_name TEXT,
                    journal_pages TEXT,
                    journal_vol TEXT,
                    authors TEXT,
                    doi TEXT,
                    link TEXT,
                    reviewer_name TEXT NOT NULL,
                    created_by TEXT NOT NULL,
                    image_url TEXT
                );
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS review_tags (
                    review_id TEXT NOT NULL REFERENCES reviews(id) ON DELETE CASCADE,
                    position INTEGER NOT NULL,
                    tag TEXT NOT NULL,
                    PRIMARY KEY (review_id, position)
                );
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_created_by ON reviews(created_by);")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_doi ON reviews(doi);")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_tag ON review_tags(tag);")
            conn.commit()

    def set_review(self, user_id: str, record: ReviewRecord) -> ReviewRecord:
        """Persist a review written by *user_id*.

        Args:
            user_id: Id of the signed-in reviewer
            record: Review to insert

        Returns:
            The stored record with ``created_at`` filled in

        Raises:
            ValueError: If the record was not created by *user_id*
            sqlite3.IntegrityError: If a review with the same id exists
        """
        if record.created_by != user_id:
            raise ValueError(f"Review {record.id} is not owned by user {user_id}")

        now = datetime.now(timezone.utc).isoformat()

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO reviews ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    now,
                    record.contents,
                    record.paper_title,
                    record.venue,
                    record.year,
                    record.journal_name,
                    record.journal_pages,
                    record.journal_vol,
                    record.authors,
                    record.doi,
                    record.link,
                    record.reviewer_name,
                    record.created_by,
                    record.image_url,
                ),
            )
            cursor.executemany(
                "INSERT INTO review_tags (review_id, position, tag) VALUES (?, ?, ?)",
                [(record.id, i, tag) for i, tag in enumerate(record.tags)],
            )
            conn.commit()

        record.created_at = now
        return record

    def get(self, review_id: str) -> Optional[ReviewRecord]:
        """Get a single review by id."""
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM reviews WHERE id = ?", (review_id,)
            ).fetchone()
            if row is None:
                return None
            return self._hydrate(conn, [row])[0]

    def find_by_user(self, user_id: str, limit: int = 50) -> list[ReviewRecord]:
        """Reviews created by *user_id*, newest first."""
        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS} FROM reviews
                WHERE created_by = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
            return self._hydrate(conn, rows)

    def find_recent(self, limit: int = 50) -> list[ReviewRecord]:
        """Most recent reviews across all users."""
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM reviews ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
            return self._hydrate(conn, rows)

    def find_by_tag(self, tag: str, limit: int = 50) -> list[ReviewRecord]:
        """Reviews carrying *tag* (exact match), newest first."""
        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS} FROM reviews
                WHERE id IN (SELECT review_id FROM review_tags WHERE tag = ?)
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (tag, limit),
            ).fetchall()
            return self._hydrate(conn, rows)

    def count(self) -> int:
        """Total number of stored reviews."""
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM reviews").fetchone()[0]

    @staticmethod
    def _hydrate(conn: sqlite3.Connection, rows: list[sqlite3.Row]) -> list[ReviewRecord]:
        """Convert rows into records, attaching tags in their stored order."""
        if not rows:
            return []
        ids = [row["id"] for row in rows]
        placeholders = ",".join("?" * len(ids))
        tags: dict[str, list[str]] = {rid: [] for rid in ids}
        for tag_row in conn.execute(
            f"""
            SELECT review_id, tag FROM review_tags
            WHERE review_id IN ({placeholders})
            ORDER BY review_id, position
            """,
            ids,
        ):
            tags[tag_row["review_id"]].append(tag_row["tag"])

        return [
            ReviewRecord(
                id=row["id"],
                contents=row["contents"],
                paper_title=row["paper_title"],
                venue=row["venue"] or "",
                year=row["year"],
                journal_name=row["journal_name"] or "",
                journal_pages=row["journal_pages"] or "",
                journal_vol=row["journal_vol"] or "",
                authors=row["authors"] or "",
                doi=row["doi"] or "",
                link=row["link"] or "",
                reviewer_name=row["reviewer_name"],
                created_by=row["created_by"],
                tags=tags[row["id"]],
                image_url=row["image_url"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
