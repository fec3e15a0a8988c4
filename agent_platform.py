"""
Agent Platform - base class and logging setup for relay agents
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Configure process-wide logging.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        log_dir: Optional directory for an agent_platform.log file
    """
    handlers = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "agent_platform.log"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


class Agent:
    """Base class for all agents"""

    def __init__(self, name: str, config: Optional[Dict] = None):
        self.name = name
        self.config = config or {}
        self.start_time = None
        self.end_time = None
        self.logger = logging.getLogger(self.name)

    async def run(self) -> bool:
        """
        Main agent execution. Override in subclass.

        Returns:
            True if successful, False otherwise
        """
        raise NotImplementedError("Subclass must implement run()")

    async def execute(self) -> bool:
        """
        Execute the agent with timing.

        Exceptions from run() propagate after being logged; a service that
        cannot establish its session is fatal to the process.
        """
        self.start_time = datetime.now()
        logger.info(f"[{self.name}] Starting execution...")

        try:
            result = await self.run()
        except Exception as e:
            self.end_time = datetime.now()
            logger.error(
                f"[{self.name}] ✗ ERROR: {e} (took {self.duration():.2f}s)",
                exc_info=True,
            )
            raise

        self.end_time = datetime.now()
        status = "✓ SUCCESS" if result else "✗ FAILED"
        logger.info(f"[{self.name}] {status} (took {self.duration():.2f}s)")
        return result

    def duration(self) -> float:
        """Seconds between start and end (or now, while running)"""
        if not self.start_time:
            return 0.0
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()
