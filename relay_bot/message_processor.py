"""
Message processor - turns one inbound chat message into relayed answers.

Each inbound message is handled as an independent flow:
resolve the effective prompt (fresh mention or threaded reply), record it,
ask the inference backend once, post the answer back in ordered chunks, and
record the backend's continuation prompt for future replies.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from relay_bot.chunker import DEFAULT_CHUNK_SIZE, split_message
from relay_bot.conversation_store import ConversationStore
from relay_bot.exceptions import InferenceError

logger = logging.getLogger(__name__)

DEFAULT_SEND_DELAY = 0.5  # seconds between consecutive chunk sends


@dataclass
class InboundMessage:
    """Chat message delivered by the transport"""
    author_id: str
    channel_id: str
    message_id: str
    text: str
    is_bot: bool = False
    reply_to: Optional[str] = None  # id of the message this one replies to
    thread_id: Optional[str] = None  # where the transport should place replies


@dataclass
class PendingRequest:
    """Resolved prompt for a single flow"""
    channel_id: str
    prompt: str
    message_id: str


class ChatTransport(ABC):
    """
    Narrow chat transport contract used by the processor.

    Implementations report failures through their return values and must not
    raise for ordinary API errors.
    """

    @abstractmethod
    async def send_message(
        self, channel_id: str, text: str, thread_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Post a message to a channel.

        Returns:
            Id of the posted message, or None if the send failed
        """
        pass

    @abstractmethod
    async def fetch_message_text(
        self, channel_id: str, message_id: str
    ) -> Optional[str]:
        """
        Fetch the text of an existing message.

        Returns:
            Message text, or None if it could not be fetched
        """
        pass

    @abstractmethod
    async def set_typing(
        self, channel_id: str, thread_id: Optional[str] = None
    ) -> bool:
        """
        Show a typing indicator in the channel.

        Returns:
            True if the indicator was set
        """
        pass


class MessageProcessor:
    """Relays inbound messages to the inference backend with reply chaining"""

    def __init__(
        self,
        transport: ChatTransport,
        backend,
        store: ConversationStore,
        bot_user_id: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        send_delay: float = DEFAULT_SEND_DELAY,
    ):
        """
        Args:
            transport: ChatTransport used for sends, fetches and typing
            backend: Object with an async ask(prompt) -> InferenceResult
            store: Shared ConversationStore
            bot_user_id: The bot's own user id (messages from it are ignored)
            chunk_size: Maximum characters per outbound message
            send_delay: Pause between consecutive chunk sends
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.transport = transport
        self.backend = backend
        self.store = store
        self.bot_user_id = bot_user_id
        self.mention_token = f"<@{bot_user_id}>"
        self.chunk_size = chunk_size
        self.send_delay = send_delay

    def strip_mention(self, text: str) -> str:
        """Remove the bot mention token and surrounding whitespace."""
        return text.replace(self.mention_token, "").strip()

    async def resolve_prompt(self, message: InboundMessage) -> str:
        """
        Build the effective prompt for a message.

        Fresh mentions use their own text. Replies are prefixed with the
        prompt stored for the replied-to message, or with that message's
        original text when nothing (or an empty prompt) is stored. An
        unreachable original leaves just the new text.

        Returns:
            Effective prompt ("" means nothing to ask)
        """
        text = self.strip_mention(message.text)

        if message.reply_to is None:
            return text

        prefix, found = await self.store.get(message.reply_to)
        if not found or not prefix:
            fetched = await self.transport.fetch_message_text(
                message.channel_id, message.reply_to
            )
            if fetched is None:
                logger.warning(
                    f"Could not fetch replied-to message {message.reply_to}, "
                    f"continuing without thread context"
                )
                prefix = ""
            else:
                prefix = self.strip_mention(fetched)

        return " ".join(part for part in (prefix, text) if part)

    async def handle(self, message: InboundMessage) -> None:
        """Process one inbound message from prompt resolution to final send."""
        if message.author_id == self.bot_user_id:
            logger.debug(f"Ignoring own message {message.message_id}")
            return

        prompt = await self.resolve_prompt(message)
        if not prompt:
            logger.debug(f"Nothing to ask for message {message.message_id}")
            return

        request = PendingRequest(
            channel_id=message.channel_id,
            prompt=prompt,
            message_id=message.message_id,
        )

        # Record before the backend call so replies arriving mid-flight can chain
        await self.store.set(request.message_id, request.prompt)

        if not await self.transport.set_typing(request.channel_id, message.thread_id):
            logger.debug(f"Typing indicator unavailable in {request.channel_id}")

        start_time = datetime.now()
        try:
            result = await self.backend.ask(request.prompt)
        except InferenceError as e:
            logger.error(f"Inference failed for message {request.message_id}: {e}")
            return

        sent_ids = await self._send_chunks(request, result.answer, message.thread_id)
        if sent_ids is None:
            return

        continuation = result.continuation.strip()
        await self.store.set(request.message_id, continuation)
        for sent_id in sent_ids:
            await self.store.set(sent_id, continuation)
        # Thread root follows the latest turn, for transports whose replies
        # reference the root rather than the previous message
        if message.thread_id and message.thread_id != request.message_id:
            await self.store.set(message.thread_id, continuation)

        latency = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Answered message {request.message_id} in {latency:.2f}s "
            f"({len(result.answer)} chars, {len(sent_ids)} messages)"
        )

    async def _send_chunks(
        self, request: PendingRequest, answer: str, thread_id: Optional[str]
    ) -> Optional[List[str]]:
        """
        Post answer chunks in order.

        Returns:
            Ids of the posted messages, or None if a send failed
        """
        chunks = split_message(answer, self.chunk_size)
        sent_ids = []

        for i, chunk in enumerate(chunks):
            if i > 0 and self.send_delay > 0:
                await asyncio.sleep(self.send_delay)

            sent_id = await self.transport.send_message(
                request.channel_id, chunk, thread_id
            )
            if sent_id is None:
                logger.error(
                    f"Send failed for chunk {i + 1}/{len(chunks)} of message "
                    f"{request.message_id}, dropping the rest"
                )
                return None
            sent_ids.append(sent_id)

        return sent_ids
