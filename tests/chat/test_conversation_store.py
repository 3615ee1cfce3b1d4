"""Tests for ConversationStore: CRUD, ordering, context updates."""

import asyncio

import pytest

from learning.errors import ValidationError
from shared_types import MessageRole


@pytest.mark.asyncio
async def test_create_and_list(conversation_store):
    conv = await conversation_store.create_conversation("u1")
    assert conv.id
    assert conv.context_summary == ""
    recent = await conversation_store.get_recent_conversations("u1")
    assert [c.id for c in recent] == [conv.id]


@pytest.mark.asyncio
async def test_recent_ordered_by_last_interaction(conversation_store):
    old = await conversation_store.create_conversation("u1")
    await asyncio.sleep(0.001)
    new = await conversation_store.create_conversation("u1")
    await asyncio.sleep(0.001)
    await conversation_store.add_message(old.id, MessageRole.USER, "bump")

    recent = await conversation_store.get_recent_conversations("u1")
    assert [c.id for c in recent] == [old.id, new.id]

    limited = await conversation_store.get_recent_conversations("u1", limit=1)
    assert [c.id for c in limited] == [old.id]


@pytest.mark.asyncio
async def test_other_users_hidden(conversation_store):
    await conversation_store.create_conversation("u1")
    assert await conversation_store.get_recent_conversations("u2") == []


@pytest.mark.asyncio
async def test_messages_in_order(conversation_store):
    conv = await conversation_store.create_conversation("u1")
    await conversation_store.add_message(conv.id, MessageRole.USER, "hi")
    await conversation_store.add_message(conv.id, MessageRole.ASSISTANT, "hello")
    await conversation_store.add_message(conv.id, "user", "bye")

    msgs = await conversation_store.get_messages(conv.id)
    assert [m.content for m in msgs] == ["hi", "hello", "bye"]
    assert msgs[1].role == MessageRole.ASSISTANT
    assert msgs[2].role == MessageRole.USER


@pytest.mark.asyncio
async def test_update_context(conversation_store):
    conv = await conversation_store.create_conversation("u1")
    await conversation_store.update_context(conv.id, "Last discussed: rivers")
    stored = await conversation_store.get_conversation(conv.id)
    assert stored.context_summary == "Last discussed: rivers"
    assert stored.last_interaction >= conv.last_interaction


@pytest.mark.asyncio
async def test_empty_user_rejected(conversation_store):
    with pytest.raises(ValidationError):
        await conversation_store.create_conversation("")


@pytest.mark.asyncio
async def test_invalid_role_rejected(conversation_store):
    conv = await conversation_store.create_conversation("u1")
    with pytest.raises(ValueError):
        await conversation_store.add_message(conv.id, "system", "nope")
