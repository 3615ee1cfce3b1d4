"""Persistent storage for learned preferences, topics and traits in SQLite."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path

import structlog

from db import immediate_transaction, wal_connection

from .errors import StoreReadError, StoreWriteError, require
from .merge import merge_preference, merge_topic, merge_trait
from .models import Preference, Topic, Trait, TraitChange

logger = structlog.get_logger()


class LearningStore:
    """SQLite persistence for the per-user learning state.

    Each update_* call reads the current record, merges the observation and
    writes the result inside one write-locked transaction. On failure the
    transaction rolls back and StoreWriteError is raised; the stored record
    is left as it was.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with wal_connection(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS learned_preferences (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    preference_type TEXT NOT NULL,
                    preference_key TEXT NOT NULL,
                    preference_value TEXT NOT NULL,
                    confidence REAL NOT NULL DEFAULT 0.5,
                    learned_from TEXT NOT NULL DEFAULT '[]',
                    last_updated TIMESTAMP NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    UNIQUE (user_id, preference_type, preference_key)
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS knowledge_topics (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    topic TEXT NOT NULL,
                    mention_count INTEGER NOT NULL DEFAULT 1,
                    related_keywords TEXT NOT NULL DEFAULT '[]',
                    notes TEXT NOT NULL DEFAULT '',
                    last_mentioned TIMESTAMP NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    UNIQUE (user_id, topic)
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS personality_traits (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    trait_name TEXT NOT NULL,
                    trait_value TEXT NOT NULL,
                    history TEXT NOT NULL DEFAULT '[]',
                    last_updated TIMESTAMP NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    UNIQUE (user_id, trait_name)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_topics_mentions
                ON knowledge_topics(user_id, mention_count DESC)
            """)

    # --- preferences ---

    async def get_preference(
        self, user_id: str, preference_type: str, preference_key: str
    ) -> Preference | None:
        row = self._fetch_one(
            """SELECT * FROM learned_preferences
               WHERE user_id = ? AND preference_type = ? AND preference_key = ?""",
            (user_id, preference_type, preference_key),
        )
        return self._row_to_preference(row) if row else None

    async def get_preferences(self, user_id: str) -> list[Preference]:
        """All preferences for a user, highest confidence first."""
        rows = self._fetch_all(
            "SELECT * FROM learned_preferences WHERE user_id = ? ORDER BY confidence DESC",
            (user_id,),
        )
        return [self._row_to_preference(r) for r in rows]

    async def update_preference(
        self,
        user_id: str,
        preference_type: str,
        preference_key: str,
        value: str,
        conversation_id: str,
        base_confidence: float = 0.5,
    ) -> Preference:
        require(user_id, "user_id")
        require(conversation_id, "conversation_id")
        try:
            with immediate_transaction(self.db_path) as conn:
                row = conn.execute(
                    """SELECT * FROM learned_preferences
                       WHERE user_id = ? AND preference_type = ? AND preference_key = ?""",
                    (user_id, preference_type, preference_key),
                ).fetchone()
                existing = self._row_to_preference(row) if row else None
                pref = merge_preference(
                    existing,
                    user_id,
                    preference_type,
                    preference_key,
                    value,
                    conversation_id,
                    base_confidence=base_confidence,
                )
                if existing is None:
                    conn.execute(
                        """INSERT INTO learned_preferences
                           (id, user_id, preference_type, preference_key, preference_value,
                            confidence, learned_from, last_updated, created_at)
                           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                        (
                            pref.id,
                            pref.user_id,
                            pref.preference_type,
                            pref.preference_key,
                            pref.preference_value,
                            pref.confidence,
                            json.dumps(pref.learned_from),
                            pref.last_updated.isoformat(),
                            pref.created_at.isoformat(),
                        ),
                    )
                else:
                    conn.execute(
                        """UPDATE learned_preferences
                           SET preference_value = ?, confidence = ?, learned_from = ?, last_updated = ?
                           WHERE id = ?""",
                        (
                            pref.preference_value,
                            pref.confidence,
                            json.dumps(pref.learned_from),
                            pref.last_updated.isoformat(),
                            pref.id,
                        ),
                    )
        except sqlite3.Error as e:
            raise StoreWriteError(f"Preference update failed: {e}") from e

        logger.debug(
            "learning.preference_updated",
            preference=f"{preference_type}.{preference_key}",
            value=value,
            confidence=pref.confidence,
        )
        return pref

    # --- topics ---

    async def get_topic(self, user_id: str, topic: str) -> Topic | None:
        row = self._fetch_one(
            "SELECT * FROM knowledge_topics WHERE user_id = ? AND topic = ?",
            (user_id, topic),
        )
        return self._row_to_topic(row) if row else None

    async def get_topics(self, user_id: str) -> list[Topic]:
        """All topics for a user, most mentioned first."""
        rows = self._fetch_all(
            """SELECT * FROM knowledge_topics WHERE user_id = ?
               ORDER BY mention_count DESC, last_mentioned DESC""",
            (user_id,),
        )
        return [self._row_to_topic(r) for r in rows]

    async def update_topic(
        self,
        user_id: str,
        topic: str,
        keywords: list[str] | None = None,
        note: str = "",
    ) -> Topic:
        require(user_id, "user_id")
        try:
            with immediate_transaction(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM knowledge_topics WHERE user_id = ? AND topic = ?",
                    (user_id, topic),
                ).fetchone()
                existing = self._row_to_topic(row) if row else None
                merged = merge_topic(existing, user_id, topic, keywords, note)
                if existing is None:
                    conn.execute(
                        """INSERT INTO knowledge_topics
                           (id, user_id, topic, mention_count, related_keywords, notes,
                            last_mentioned, created_at)
                           VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                        (
                            merged.id,
                            merged.user_id,
                            merged.topic,
                            merged.mention_count,
                            json.dumps(merged.related_keywords),
                            merged.notes,
                            merged.last_mentioned.isoformat(),
                            merged.created_at.isoformat(),
                        ),
                    )
                else:
                    conn.execute(
                        """UPDATE knowledge_topics
                           SET mention_count = ?, related_keywords = ?, notes = ?, last_mentioned = ?
                           WHERE id = ?""",
                        (
                            merged.mention_count,
                            json.dumps(merged.related_keywords),
                            merged.notes,
                            merged.last_mentioned.isoformat(),
                            merged.id,
                        ),
                    )
        except sqlite3.Error as e:
            raise StoreWriteError(f"Topic update failed: {e}") from e

        logger.debug("learning.topic_updated", topic=topic, mentions=merged.mention_count)
        return merged

    # --- traits ---

    async def get_trait(self, user_id: str, trait_name: str) -> Trait | None:
        row = self._fetch_one(
            "SELECT * FROM personality_traits WHERE user_id = ? AND trait_name = ?",
            (user_id, trait_name),
        )
        return self._row_to_trait(row) if row else None

    async def get_traits(self, user_id: str) -> list[Trait]:
        rows = self._fetch_all(
            "SELECT * FROM personality_traits WHERE user_id = ? ORDER BY created_at ASC",
            (user_id,),
        )
        return [self._row_to_trait(r) for r in rows]

    async def update_trait(self, user_id: str, trait_name: str, value: str, reason: str) -> Trait:
        require(user_id, "user_id")
        try:
            with immediate_transaction(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM personality_traits WHERE user_id = ? AND trait_name = ?",
                    (user_id, trait_name),
                ).fetchone()
                existing = self._row_to_trait(row) if row else None
                trait = merge_trait(existing, user_id, trait_name, value, reason)
                history = json.dumps([c.to_dict() for c in trait.history])
                if existing is None:
                    conn.execute(
                        """INSERT INTO personality_traits
                           (id, user_id, trait_name, trait_value, history, last_updated, created_at)
                           VALUES (?, ?, ?, ?, ?, ?, ?)""",
                        (
                            trait.id,
                            trait.user_id,
                            trait.trait_name,
                            trait.trait_value,
                            history,
                            trait.last_updated.isoformat(),
                            trait.created_at.isoformat(),
                        ),
                    )
                else:
                    conn.execute(
                        """UPDATE personality_traits
                           SET trait_value = ?, history = ?, last_updated = ?
                           WHERE id = ?""",
                        (trait.trait_value, history, trait.last_updated.isoformat(), trait.id),
                    )
        except sqlite3.Error as e:
            raise StoreWriteError(f"Trait update failed: {e}") from e

        logger.info("learning.trait_updated", trait=trait_name, value=value, changes=len(trait.history))
        return trait

    # --- helpers ---

    def _fetch_one(self, sql: str, params: tuple) -> sqlite3.Row | None:
        try:
            with wal_connection(self.db_path, row_factory=True) as conn:
                return conn.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StoreReadError(str(e)) from e

    def _fetch_all(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        try:
            with wal_connection(self.db_path, row_factory=True) as conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreReadError(str(e)) from e

    @staticmethod
    def _row_to_preference(row: sqlite3.Row) -> Preference:
        d = dict(row)
        return Preference(
            id=d["id"],
            user_id=d["user_id"],
            preference_type=d["preference_type"],
            preference_key=d["preference_key"],
            preference_value=d["preference_value"],
            confidence=d["confidence"],
            learned_from=json.loads(d["learned_from"] or "[]"),
            last_updated=datetime.fromisoformat(d["last_updated"]),
            created_at=datetime.fromisoformat(d["created_at"]),
        )

    @staticmethod
    def _row_to_topic(row: sqlite3.Row) -> Topic:
        d = dict(row)
        return Topic(
            id=d["id"],
            user_id=d["user_id"],
            topic=d["topic"],
            mention_count=d["mention_count"],
            related_keywords=json.loads(d["related_keywords"] or "[]"),
            notes=d["notes"] or "",
            last_mentioned=datetime.fromisoformat(d["last_mentioned"]),
            created_at=datetime.fromisoformat(d["created_at"]),
        )

    @staticmethod
    def _row_to_trait(row: sqlite3.Row) -> Trait:
        d = dict(row)
        return Trait(
            id=d["id"],
            user_id=d["user_id"],
            trait_name=d["trait_name"],
            trait_value=d["trait_value"],
            history=[TraitChange.from_dict(c) for c in json.loads(d["history"] or "[]")],
            last_updated=datetime.fromisoformat(d["last_updated"]),
            created_at=datetime.fromisoformat(d["created_at"]),
        )
