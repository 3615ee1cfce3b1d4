"""Conversation persistence: per-user chat history in SQLite."""

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

import structlog

from db import wal_connection
from learning.errors import StoreReadError, StoreWriteError, require
from shared_types import MessageRole

from .models import Conversation, Message

logger = structlog.get_logger()


class ConversationStore:
    """SQLite persistence for conversations and their messages."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with wal_connection(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS conversations (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    started_at TIMESTAMP NOT NULL,
                    last_interaction TIMESTAMP NOT NULL,
                    context_summary TEXT NOT NULL DEFAULT ''
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id TEXT PRIMARY KEY,
                    conversation_id TEXT NOT NULL,
                    role TEXT NOT NULL CHECK(role IN ('user','assistant')),
                    content TEXT NOT NULL,
                    timestamp TIMESTAMP NOT NULL,
                    FOREIGN KEY (conversation_id) REFERENCES conversations(id)
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_conv_user ON conversations(user_id, last_interaction DESC)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_msg_conv ON messages(conversation_id, timestamp ASC)"
            )

    async def create_conversation(self, user_id: str) -> Conversation:
        require(user_id, "user_id")
        now = datetime.now()
        conv = Conversation(
            id=uuid.uuid4().hex,
            user_id=user_id,
            started_at=now,
            last_interaction=now,
        )
        try:
            with wal_connection(self.db_path) as conn:
                conn.execute(
                    """INSERT INTO conversations (id, user_id, started_at, last_interaction, context_summary)
                       VALUES (?, ?, ?, ?, ?)""",
                    (conv.id, user_id, now.isoformat(), now.isoformat(), ""),
                )
        except sqlite3.Error as e:
            raise StoreWriteError(f"Could not create conversation: {e}") from e
        logger.info("conversation.created", conversation_id=conv.id)
        return conv

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        try:
            with wal_connection(self.db_path, row_factory=True) as conn:
                row = conn.execute(
                    "SELECT * FROM conversations WHERE id = ?", (conversation_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreReadError(str(e)) from e
        return self._row_to_conversation(row) if row else None

    async def get_recent_conversations(self, user_id: str, limit: int = 5) -> list[Conversation]:
        """Most recently active conversations first."""
        try:
            with wal_connection(self.db_path, row_factory=True) as conn:
                rows = conn.execute(
                    """SELECT * FROM conversations WHERE user_id = ?
                       ORDER BY last_interaction DESC LIMIT ?""",
                    (user_id, limit),
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreReadError(str(e)) from e
        return [self._row_to_conversation(r) for r in rows]

    async def add_message(self, conversation_id: str, role: MessageRole, content: str) -> Message:
        """Store a message and bump the conversation's last_interaction."""
        require(conversation_id, "conversation_id")
        msg = Message(
            id=uuid.uuid4().hex,
            conversation_id=conversation_id,
            role=MessageRole(role),
            content=content,
            timestamp=datetime.now(),
        )
        ts = msg.timestamp.isoformat()
        try:
            with wal_connection(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO messages (id, conversation_id, role, content, timestamp) VALUES (?, ?, ?, ?, ?)",
                    (msg.id, conversation_id, msg.role.value, content, ts),
                )
                conn.execute(
                    "UPDATE conversations SET last_interaction = ? WHERE id = ?",
                    (ts, conversation_id),
                )
        except sqlite3.Error as e:
            raise StoreWriteError(f"Could not store {msg.role.value} message: {e}") from e
        return msg

    async def get_messages(self, conversation_id: str) -> list[Message]:
        """All messages of a conversation, oldest first."""
        try:
            with wal_connection(self.db_path, row_factory=True) as conn:
                rows = conn.execute(
                    """SELECT * FROM messages WHERE conversation_id = ?
                       ORDER BY timestamp ASC, rowid ASC""",
                    (conversation_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreReadError(str(e)) from e
        return [self._row_to_message(r) for r in rows]

    async def update_context(self, conversation_id: str, context_summary: str) -> None:
        now = datetime.now().isoformat()
        try:
            with wal_connection(self.db_path) as conn:
                conn.execute(
                    "UPDATE conversations SET context_summary = ?, last_interaction = ? WHERE id = ?",
                    (context_summary, now, conversation_id),
                )
        except sqlite3.Error as e:
            raise StoreWriteError(f"Could not update conversation context: {e}") from e

    @staticmethod
    def _row_to_conversation(row: sqlite3.Row) -> Conversation:
        d = dict(row)
        return Conversation(
            id=d["id"],
            user_id=d["user_id"],
            started_at=datetime.fromisoformat(d["started_at"]),
            last_interaction=datetime.fromisoformat(d["last_interaction"]),
            context_summary=d["context_summary"] or "",
        )

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> Message:
        d = dict(row)
        return Message(
            id=d["id"],
            conversation_id=d["conversation_id"],
            role=MessageRole(d["role"]),
            content=d["content"],
            timestamp=datetime.fromisoformat(d["timestamp"]),
        )
