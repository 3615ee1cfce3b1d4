"""Tests for the shared SQLite helpers."""

import sqlite3
from unittest.mock import patch

import pytest

from db import immediate_transaction, wal_connection


def _open_tracked(opened):
    real_connect = sqlite3.connect

    def connect(*args, **kwargs):
        conn = real_connect(*args, **kwargs)
        opened.append(conn)
        return conn

    return connect


def _assert_closed(conn):
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")


class TestWalConnection:
    def test_closed_after_block(self, db_path):
        with wal_connection(db_path) as conn:
            conn.execute("SELECT 1")
        _assert_closed(conn)

    def test_closed_after_error(self, db_path):
        with pytest.raises(RuntimeError):
            with wal_connection(db_path) as conn:
                raise RuntimeError("boom")
        _assert_closed(conn)

    def test_commits_on_success(self, db_path):
        with wal_connection(db_path) as conn:
            conn.execute("CREATE TABLE t (x INTEGER)")
            conn.execute("INSERT INTO t VALUES (1)")
        with wal_connection(db_path) as conn:
            assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1

    def test_rolls_back_on_error(self, db_path):
        with wal_connection(db_path) as conn:
            conn.execute("CREATE TABLE t (x INTEGER)")
        with pytest.raises(RuntimeError):
            with wal_connection(db_path) as conn:
                conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("boom")
        with wal_connection(db_path) as conn:
            assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0

    def test_row_factory(self, db_path):
        with wal_connection(db_path, row_factory=True) as conn:
            row = conn.execute("SELECT 1 AS one").fetchone()
        assert row["one"] == 1


class TestImmediateTransaction:
    def test_closed_after_block(self, db_path):
        with immediate_transaction(db_path) as conn:
            conn.execute("SELECT 1")
        _assert_closed(conn)


class TestStoresCloseConnections:
    @pytest.mark.asyncio
    async def test_learning_store(self, learning_store):
        opened = []
        with patch("db.sqlite3.connect", side_effect=_open_tracked(opened)):
            await learning_store.update_preference("u1", "communication_style", "formality", "formal", "c1")
            await learning_store.get_preferences("u1")
            await learning_store.get_topic("u1", "music")
        assert opened
        for conn in opened:
            _assert_closed(conn)

    @pytest.mark.asyncio
    async def test_conversation_store(self, conversation_store):
        opened = []
        with patch("db.sqlite3.connect", side_effect=_open_tracked(opened)):
            conv = await conversation_store.create_conversation("u1")
            await conversation_store.add_message(conv.id, "user", "hello")
            await conversation_store.get_messages(conv.id)
            await conversation_store.get_recent_conversations("u1")
        assert len(opened) >= 4
        for conn in opened:
            _assert_closed(conn)
