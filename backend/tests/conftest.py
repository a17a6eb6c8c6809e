"""
Pytest configuration for intake bot tests
"""
import asyncio
import json
import os
import sys
import tempfile
from pathlib import Path

import httpx
import pytest

# Add backend directory to path so we can import intakebot
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before the settings singleton is built
_tmp_dir = tempfile.mkdtemp(prefix="intakebot-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_dir}/ledger.db"
os.environ["LOG_DIR"] = f"{_tmp_dir}/logs"
os.environ["LINE_CHANNEL_SECRET"] = "test-channel-secret"
os.environ["LINE_CHANNEL_ACCESS_TOKEN"] = ""
os.environ["GEMINI_API_KEY"] = ""

from intakebot.config import Settings  # noqa: E402
from intakebot.services.conversation_service import ConversationService  # noqa: E402
from intakebot.services.line_client import LineMessagingClient  # noqa: E402
from intakebot.services.session_store import SessionStore  # noqa: E402
from intakebot.services.state_machine import StateMachine  # noqa: E402

CHANNEL_SECRET = "test-channel-secret"


class FakeSink:
    """Completion sink double that records calls."""

    def __init__(self, error: Exception | None = None, delay: float = 0):
        self.calls = []
        self.error = error
        self.delay = delay

    async def record(self, flow_label, fields):
        self.calls.append((flow_label, dict(fields)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error


class FakeResponder:
    """Fallback responder double."""

    def __init__(self, answer: str = "AI answer", error: Exception | None = None, delay: float = 0):
        self.answer = answer
        self.error = error
        self.delay = delay
        self.calls = []

    async def respond(self, text):
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.answer


class LineRecorder:
    """httpx.MockTransport handler that stores every reply request."""

    def __init__(self, failing_tokens=()):
        self.requests = []
        self.failing_tokens = set(failing_tokens)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if body["replyToken"] in self.failing_tokens:
            return httpx.Response(500, json={"message": "boom"})
        return httpx.Response(200, json={})


@pytest.fixture
def settings():
    return Settings(
        SINK_TIMEOUT_SECONDS=0.2,
        FALLBACK_TIMEOUT_SECONDS=0.2,
        LINE_CHANNEL_SECRET=CHANNEL_SECRET,
        LINE_CHANNEL_ACCESS_TOKEN="test-access-token",
    )


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def responder():
    return FakeResponder()


@pytest.fixture
def engine(sink, responder, settings):
    return StateMachine(sink=sink, responder=responder, settings=settings)


@pytest.fixture
def line_recorder():
    return LineRecorder(failing_tokens={"bad-token"})


@pytest.fixture
def conversation(engine, settings, line_recorder):
    line_client = LineMessagingClient(settings=settings, transport=httpx.MockTransport(line_recorder))
    return ConversationService(SessionStore(), engine, line_client)
