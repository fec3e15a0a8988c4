"""
Slack transport for the relay processor.

Wraps the async Slack Web client behind the ChatTransport contract and
converts Slack events into InboundMessage objects.
"""

import logging
from typing import Any, Dict, Optional

from slack_sdk.errors import SlackApiError

from relay_bot.message_processor import ChatTransport, InboundMessage

logger = logging.getLogger(__name__)

TYPING_STATUS = "is thinking..."


def message_from_event(event: Dict[str, Any]) -> InboundMessage:
    """
    Convert a Slack message/app_mention event to an InboundMessage.

    A message inside a thread (thread_ts differs from ts) is treated as a
    reply to the thread root. Answers are always posted into the thread.
    """
    ts = event.get("ts", "")
    thread_ts = event.get("thread_ts")
    reply_to = thread_ts if thread_ts and thread_ts != ts else None

    return InboundMessage(
        author_id=event.get("user") or event.get("bot_id", ""),
        channel_id=event.get("channel", ""),
        message_id=ts,
        text=event.get("text", ""),
        is_bot=bool(event.get("bot_id")) or event.get("subtype") == "bot_message",
        reply_to=reply_to,
        thread_id=thread_ts or ts,
    )


class SlackTransport(ChatTransport):
    """ChatTransport over slack_sdk's AsyncWebClient"""

    def __init__(self, client, typing_status: str = TYPING_STATUS):
        self.client = client
        self.typing_status = typing_status

    async def send_message(
        self, channel_id: str, text: str, thread_id: Optional[str] = None
    ) -> Optional[str]:
        try:
            response = await self.client.chat_postMessage(
                channel=channel_id, text=text, thread_ts=thread_id
            )
            return response["ts"]
        except SlackApiError as e:
            logger.error(f"Error sending message to {channel_id}: {e}")
            return None

    async def fetch_message_text(
        self, channel_id: str, message_id: str
    ) -> Optional[str]:
        try:
            response = await self.client.conversations_replies(
                channel=channel_id, ts=message_id, limit=1, inclusive=True
            )
        except SlackApiError as e:
            logger.warning(f"Error fetching message {message_id}: {e}")
            return None

        for msg in response.get("messages", []):
            if msg.get("ts") == message_id:
                return msg.get("text", "")

        logger.warning(f"Message {message_id} not found in {channel_id}")
        return None

    async def set_typing(
        self, channel_id: str, thread_id: Optional[str] = None
    ) -> bool:
        """Set the Assistant thread status; only works in Assistant threads."""
        if not thread_id:
            return False
        try:
            await self.client.assistant_threads_setStatus(
                channel_id=channel_id,
                thread_ts=thread_id,
                status=self.typing_status,
            )
            return True
        except SlackApiError as e:
            logger.debug(f"Error setting typing status in {channel_id}: {e}")
            return False
