"""
Shared pytest fixtures for the ChatDesk client core.

Async code is driven with asyncio.run() from plain sync tests.
"""

import asyncio
import random

import pytest

from config import ClientConfig
from errors import TransportError
from services.chat_session import ChatSessionManager
from services.kv_store import KeyValueStore
from services.simulator import ReplySimulator


class FakeDispatcher:
    """In-memory Dispatcher.

    ``reply`` is returned from send(); if it is an exception it is raised.
    When ``gate`` is set, send() waits on it so tests can hold a request
    in flight.
    """

    def __init__(self, reply="Hello there!", gate: asyncio.Event = None):
        self.reply = reply
        self.gate = gate
        self.sent = []
        self.torn_down = []
        self.teardown_error = None
        self.completions = ["how do I reset", "how do I login"]
        self.completion_calls = []
        self.info = {"sessionId": "remote", "messages": 7}
        self.cta_calls = []
        self.feedback_calls = []
        self.aux_error = None

    async def send(self, message, session_id):
        self.sent.append((message, session_id))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if isinstance(self.reply, BaseException):
            raise self.reply
        return self.reply

    async def teardown(self, session_id):
        self.torn_down.append(session_id)
        if self.teardown_error is not None:
            raise self.teardown_error
        return None

    async def session_info(self, session_id):
        if self.aux_error is not None:
            raise self.aux_error
        return self.info

    async def autocomplete(self, partial, session_id):
        self.completion_calls.append(partial)
        if self.aux_error is not None:
            raise self.aux_error
        return self.completions

    async def cta_action(self, button, session_id):
        if self.aux_error is not None:
            raise self.aux_error
        self.cta_calls.append((button, session_id))
        return {"ok": True}

    async def feedback(self, message_id, rating, comment, session_id):
        if self.aux_error is not None:
            raise self.aux_error
        self.feedback_calls.append((message_id, rating, comment, session_id))
        return {"ok": True}


@pytest.fixture
def client_config():
    """Config with no Redis and no simulated latency."""
    return ClientConfig(
        redis_enabled=False,
        simulated_mode_default=False,
        sim_latency_min_ms=0,
        sim_latency_max_ms=0,
    )


@pytest.fixture
def preference_store():
    return KeyValueStore(enabled=False, prefix="test:pref:")


@pytest.fixture
def identity_store():
    return KeyValueStore(enabled=False, prefix="test:identity:", ttl=3600)


@pytest.fixture
def simulator():
    """Seeded simulator with no artificial delay."""
    return ReplySimulator(rng=random.Random(7), latency_ms=(0, 0))


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def make_manager(preference_store, identity_store, simulator, client_config):
    """Factory for managers sharing the test stores."""

    def _make(dispatcher=None, offline=False):
        return ChatSessionManager(
            dispatcher=None if offline else dispatcher,
            preference_store=preference_store,
            identity_store=identity_store,
            simulator=simulator,
            config=client_config,
        )

    return _make


@pytest.fixture
def manager(make_manager, dispatcher):
    return make_manager(dispatcher)


@pytest.fixture
def rate_limited():
    return TransportError("Backend rejected request", status_code=429)


@pytest.fixture
def dispatcher_factory():
    """Build extra FakeDispatchers with a custom reply or gate."""
    return FakeDispatcher
