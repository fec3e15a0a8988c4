#!/usr/bin/env python3
"""
Relay Bot Launcher - Entry point for the Slack relay service

Loads configuration, initializes RelayAgent, and starts the service.
Designed to run as systemd service or standalone for testing.
"""

import os
import sys
import signal
import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from agent_platform import configure_logging
from agents.relay_agent import RelayAgent
from relay_bot.config import build_config, load_secrets
from relay_bot.exceptions import ConfigError

logger = logging.getLogger("relay_service")


class RelayBotService:
    """Service wrapper for the relay bot"""

    def __init__(self, secrets_file: Optional[Path] = None):
        self.secrets_file = Path(
            secrets_file
            or os.getenv("RELAY_SECRETS_FILE")
            or Path(__file__).parent / "secrets.env"
        )
        self.agent: Optional[RelayAgent] = None
        self.shutdown_event = asyncio.Event()

    def load_config(self) -> Dict:
        """Read the secrets file once and build the agent configuration"""
        print(f"📝 Loading secrets from {self.secrets_file}")
        config = build_config(load_secrets(self.secrets_file))

        print("\n✅ Configuration:")
        print(f"   Backend: {config['backend_url']} ({config['model']})")
        print(f"   Chunks:  {config['chunk_size']} chars, {config['send_delay']}s apart")
        print(f"   Store:   {config['max_entries'] or 'unbounded'}")
        print(f"   Bot:     {config['bot_token'][:20]}...")
        print()
        return config

    def setup_signals(self):
        """Setup signal handlers for graceful shutdown"""

        def signal_handler(signum, frame):
            print(f"\n📡 Received signal {signum}, shutting down gracefully...")
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def run(self):
        """Main service loop"""
        config = self.load_config()

        self.setup_signals()

        print("🤖 Initializing relay agent...")
        self.agent = RelayAgent(config)

        print("🚀 Starting relay bot service...\n")

        try:
            service_task = asyncio.create_task(self.agent.execute())
            shutdown_task = asyncio.create_task(self.shutdown_event.wait())

            # Wait for either service to fail or shutdown signal
            done, pending = await asyncio.wait(
                [service_task, shutdown_task], return_when=asyncio.FIRST_COMPLETED
            )

            for task in pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

            # Surface a failed Slack session
            if service_task in done:
                service_task.result()

            print("\n👋 Relay bot service stopped gracefully")

        finally:
            print("🧹 Cleaning up...")
            await self.agent.close()


def main():
    """Entry point"""
    configure_logging(
        level=os.getenv("RELAY_LOG_LEVEL", "INFO"),
        log_dir=os.getenv("RELAY_LOG_DIR"),
    )

    print("=" * 60)
    print("  Slack Relay Bot Service")
    print("=" * 60)
    print()

    service = RelayBotService()

    try:
        asyncio.run(service.run())
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Interrupted by user")
    except Exception as e:
        logger.error(f"Service crashed: {e}", exc_info=True)
        print(f"\n💥 Service crashed: {e}")
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
