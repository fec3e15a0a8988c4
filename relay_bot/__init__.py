"""
Thread relay core for the Slack relay bot.

Turns inbound chat messages into prompts for a single inference backend
and delivers the answers back into the originating conversation:
- chunker: split long answers to fit the transport's message limit
- conversation_store: message id -> prompt map used to stitch reply chains
- message_processor: one flow per inbound message
- slack_transport: ChatTransport implementation over the Slack Web API
"""

from relay_bot.chunker import split_message
from relay_bot.conversation_store import ConversationStore
from relay_bot.message_processor import ChatTransport, InboundMessage, MessageProcessor

__all__ = [
    "split_message",
    "ConversationStore",
    "ChatTransport",
    "InboundMessage",
    "MessageProcessor",
]
