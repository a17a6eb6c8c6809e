"""
Session store tests — implicit creation and per-user locking
"""
import asyncio

import pytest

from intakebot.models.session import ChatSession, Mode, State
from intakebot.services.session_store import SessionStore


def test_get_or_create_defaults():
    store = SessionStore()
    session = store.get_or_create("U1")
    assert session == ChatSession(user_id="U1", state=State.IDLE, mode=Mode.AUTOMATED, fields={}, tags=[])
    assert store.get_or_create("U1") is session
    assert len(store) == 1


def test_put_replaces_record():
    store = SessionStore()
    store.get_or_create("U1")
    store.put(ChatSession(user_id="U1", state=State.SHUTTLE_ASK_DATE))
    assert store.get("U1").state == State.SHUTTLE_ASK_DATE
    assert store.get("missing") is None


@pytest.mark.asyncio
async def test_same_user_turns_are_serialized():
    store = SessionStore()
    order = []

    async def turn(name):
        async with store.locked("U1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(turn("a"), turn("b"))
    assert order == ["a-in", "a-out", "b-in", "b-out"]


@pytest.mark.asyncio
async def test_different_users_run_in_parallel():
    store = SessionStore()
    order = []

    async def turn(user_id):
        async with store.locked(user_id):
            order.append(f"{user_id}-in")
            await asyncio.sleep(0.01)
            order.append(f"{user_id}-out")

    await asyncio.gather(turn("U1"), turn("U2"))
    assert order[:2] == ["U1-in", "U2-in"]
