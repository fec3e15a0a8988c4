"""
Relay Agent - Slack bot that relays mentions to the inference backend

Connects to Slack via Socket Mode and hands every relevant event to the
MessageProcessor as its own asyncio task:
- @mentions in channels (fresh questions or thread replies)
- Direct messages
"""

import asyncio
from typing import Any, Dict, Optional, Set

from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler

from agent_platform import Agent
from clients.inference_client import DEFAULT_BACKEND_URL, DEFAULT_MODEL, InferenceClient
from relay_bot.chunker import DEFAULT_CHUNK_SIZE
from relay_bot.conversation_store import ConversationStore
from relay_bot.message_processor import DEFAULT_SEND_DELAY, MessageProcessor
from relay_bot.slack_transport import SlackTransport, message_from_event


class RelayAgent(Agent):
    """Slack relay bot with reply-chain context"""

    def __init__(
        self,
        config: Dict,
        app: Optional[AsyncApp] = None,
        backend: Optional[InferenceClient] = None,
        store: Optional[ConversationStore] = None,
    ):
        super().__init__("relay_agent", config)

        self.bot_token = config.get("bot_token")
        self.app_token = config.get("app_token")

        if not self.bot_token or not self.app_token:
            raise ValueError("Missing Slack tokens in relay agent config.")

        # Initialize Slack app
        self.app = app or AsyncApp(token=self.bot_token)
        self.socket_handler = None

        self.backend = backend or InferenceClient(
            url=config.get("backend_url", DEFAULT_BACKEND_URL),
            model=config.get("model", DEFAULT_MODEL),
            timeout=config.get("backend_timeout"),
        )
        self.store = store or ConversationStore(max_entries=config.get("max_entries"))
        self.transport = SlackTransport(self.app.client)
        self.allowed_bot_ids = config.get("allowed_bot_ids", [])

        # Created once the bot's own user id is known
        self.processor: Optional[MessageProcessor] = None
        self._tasks: Set[asyncio.Task] = set()

        self._register_handlers()

    def _register_handlers(self):
        """Register Slack event handlers"""

        @self.app.event("app_mention")
        async def handle_mention(event):
            """Handle @mentions in channels and threads"""
            self.dispatch(event)

        @self.app.event("message")
        async def handle_message(event):
            """Handle direct messages"""
            if event.get("channel_type") != "im":
                return
            self.dispatch(event)

    def should_relay(self, event: Dict[str, Any]) -> bool:
        """Filter out edits, joins and other message subtypes"""
        return event.get("subtype") in (None, "bot_message")

    def is_allowed_bot(self, event: Dict[str, Any]) -> bool:
        """Bot-authored events pass only for whitelisted test bots"""
        bot_id = event.get("bot_id", "")
        return bool(bot_id and bot_id in self.allowed_bot_ids)

    def dispatch(self, event: Dict[str, Any]) -> Optional[asyncio.Task]:
        """
        Start an independent processing flow for a Slack event.

        Returns:
            The spawned task, or None if the event was dropped
        """
        if self.processor is None:
            self.logger.warning("Event received before Slack session was ready")
            return None

        if not self.should_relay(event):
            self.logger.debug(f"Ignoring event subtype {event.get('subtype')}")
            return None

        message = message_from_event(event)
        if message.is_bot and not self.is_allowed_bot(event):
            self.logger.debug(f"Ignoring bot message {message.message_id}")
            return None

        task = asyncio.create_task(self._run_flow(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_flow(self, message):
        try:
            await self.processor.handle(message)
        except Exception as e:
            self.logger.error(
                f"Unhandled error processing message {message.message_id}: {e}",
                exc_info=True,
            )

    async def connect(self) -> str:
        """
        Authenticate with Slack and build the message processor.

        Returns:
            The bot's user id

        Raises:
            SlackApiError: If authentication fails
        """
        auth_test = await self.app.client.auth_test()
        bot_user_id = auth_test["user_id"]
        self.logger.info(
            f"✅ Slack auth OK (bot: {auth_test.get('user', 'Unknown')}, id: {bot_user_id})"
        )

        self.processor = MessageProcessor(
            transport=self.transport,
            backend=self.backend,
            store=self.store,
            bot_user_id=bot_user_id,
            chunk_size=self.config.get("chunk_size", DEFAULT_CHUNK_SIZE),
            send_delay=self.config.get("send_delay", DEFAULT_SEND_DELAY),
        )
        return bot_user_id

    async def run(self) -> bool:
        """
        Main agent loop - starts Socket Mode handler (blocks indefinitely)
        """
        self.logger.info("Starting relay agent with Socket Mode...")

        await self.connect()

        if await self.backend.health_check():
            self.logger.info("✅ Inference backend reachable")
        else:
            self.logger.warning(f"⚠️ Inference backend unreachable at {self.backend.url}")

        self.socket_handler = AsyncSocketModeHandler(self.app, self.app_token)
        self.logger.info("✅ Relay agent connected and ready")

        # This blocks forever, listening for events
        await self.socket_handler.start_async()
        return True

    async def close(self):
        """Wait for in-flight flows, then release connections"""
        if self._tasks:
            self.logger.info(f"Waiting for {len(self._tasks)} in-flight messages...")
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self.socket_handler:
            await self.socket_handler.close_async()
        await self.backend.close()
