"""
Core pytest fixtures and configuration for the relay bot tests.

Provides realistic Slack events, a recording chat transport and a mocked
inference backend so message flows can be tested without Slack or a
running inference server.
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import relay_bot, agents and clients
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from unittest.mock import AsyncMock
from typing import Any, Dict

from clients.inference_client import InferenceResult
from relay_bot.conversation_store import ConversationStore
from relay_bot.message_processor import ChatTransport, InboundMessage, MessageProcessor


BOT_USER_ID = "U0RELAYBOT"
MENTION = f"<@{BOT_USER_ID}>"


# ============================================================================
# Slack Event Fixtures
# ============================================================================


@pytest.fixture
def sample_mention_event() -> Dict[str, Any]:
    """
    Realistic Slack app_mention event in a public channel.

    Returns:
        Dict[str, Any]: Dict matching Slack event structure
    """
    return {
        "type": "app_mention",
        "user": "U01TEST123",
        "text": f"{MENTION} what is a monad?",
        "ts": "1700000000.000100",
        "channel": "C01TEST",
    }


@pytest.fixture
def sample_thread_reply_event() -> Dict[str, Any]:
    """Slack app_mention posted as a reply inside an existing thread."""
    return {
        "type": "app_mention",
        "user": "U01TEST123",
        "text": f"{MENTION} and a functor?",
        "ts": "1700000050.000200",
        "thread_ts": "1700000000.000100",
        "channel": "C01TEST",
    }


# ============================================================================
# Processor Collaborators
# ============================================================================


class RecordingTransport(ChatTransport):
    """
    In-memory ChatTransport recording every call.

    Set fail_on_send to the 1-based send number that should fail, or
    fetch_results to the texts returned by fetch_message_text.
    """

    def __init__(self):
        self.sent = []
        self.typing = []
        self.fetched = []
        self.fetch_results: Dict[str, str] = {}
        self.fail_on_send = None
        self.typing_ok = True

    async def send_message(self, channel_id, text, thread_id=None):
        if self.fail_on_send is not None and len(self.sent) + 1 >= self.fail_on_send:
            return None
        self.sent.append({"channel": channel_id, "text": text, "thread": thread_id})
        return f"1700000100.{len(self.sent):06d}"

    async def fetch_message_text(self, channel_id, message_id):
        self.fetched.append(message_id)
        return self.fetch_results.get(message_id)

    async def set_typing(self, channel_id, thread_id=None):
        self.typing.append(channel_id)
        return self.typing_ok


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def mock_backend() -> AsyncMock:
    """
    Mock inference client with async ask() method.

    Returns:
        AsyncMock: Backend returning a short answer and continuation prompt
    """
    mock = AsyncMock()
    mock.ask.return_value = InferenceResult(
        answer="A monad is a monoid in the category of endofunctors.",
        continuation="  what is a monad? A monad is a monoid...  ",
    )
    return mock


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def processor(transport, mock_backend, store) -> MessageProcessor:
    """MessageProcessor wired to the recording transport, no send delay."""
    return MessageProcessor(
        transport=transport,
        backend=mock_backend,
        store=store,
        bot_user_id=BOT_USER_ID,
        chunk_size=2000,
        send_delay=0,
    )


@pytest.fixture
def mention() -> str:
    """Mention token for the test bot."""
    return MENTION


@pytest.fixture
def make_message():
    """Factory building InboundMessages from a user in C01TEST."""

    def _make(text: str, message_id: str = "100.1", reply_to=None, **kwargs):
        defaults = {
            "author_id": "U01TEST123",
            "channel_id": "C01TEST",
            "message_id": message_id,
            "text": text,
            "reply_to": reply_to,
            "thread_id": reply_to or message_id,
        }
        defaults.update(kwargs)
        return InboundMessage(**defaults)

    return _make
