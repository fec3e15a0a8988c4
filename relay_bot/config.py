"""
Configuration loading for the relay bot service.

Secrets (Slack tokens) come from a secrets file read once at startup;
everything else comes from environment variables with defaults.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from clients.inference_client import DEFAULT_BACKEND_URL, DEFAULT_MODEL
from relay_bot.chunker import DEFAULT_CHUNK_SIZE
from relay_bot.exceptions import ConfigError
from relay_bot.message_processor import DEFAULT_SEND_DELAY

REQUIRED_SECRETS = [
    "SLACK_BOT_TOKEN",  # Bot token from api.slack.com (xoxb-...)
    "SLACK_APP_TOKEN",  # App token for Socket Mode (xapp-...)
]


def load_secrets(path: Path) -> Dict[str, str]:
    """
    Load secrets from a secrets.env style file.

    Accepts `KEY=value` and `export KEY="value"` lines; skips comments,
    blank lines and SOPS encrypted values.

    Args:
        path: Path to the secrets file

    Returns:
        Dict with every required secret present and non-empty

    Raises:
        ConfigError: If the file is missing or a required secret is empty
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Secrets file not found: {path}")

    secrets: Dict[str, str] = {}
    with open(path) as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            # SOPS encrypted lines
            if "ENC[" in line:
                continue

            if "=" not in line:
                continue

            if line.startswith("export "):
                line = line[7:]

            key, value = line.split("=", 1)
            secrets[key.strip()] = value.strip().strip('"').strip("'")

    missing = [key for key in REQUIRED_SECRETS if not secrets.get(key)]
    if missing:
        raise ConfigError(
            f"Missing required secrets in {path}: {', '.join(missing)}"
        )

    return secrets


def _env_number(name: str, default, cast, allow_zero: bool = False):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _allowed_bot_ids() -> list:
    allowed = os.getenv("ALLOWED_TEST_BOT_IDS", "").split(",")
    return [b.strip() for b in allowed if b.strip()]


def build_config(secrets: Dict[str, str]) -> Dict[str, Any]:
    """
    Build the agent configuration from secrets and environment.

    Raises:
        ConfigError: If a numeric setting is malformed
    """
    timeout: Optional[float] = _env_number("BACKEND_TIMEOUT", None, float)
    max_entries: Optional[int] = _env_number("RELAY_MAX_ENTRIES", None, int)

    return {
        "bot_token": secrets["SLACK_BOT_TOKEN"],
        "app_token": secrets["SLACK_APP_TOKEN"],
        "backend_url": os.getenv("BACKEND_URL") or DEFAULT_BACKEND_URL,
        "model": os.getenv("BACKEND_MODEL") or DEFAULT_MODEL,
        "backend_timeout": timeout,
        "chunk_size": _env_number("RELAY_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, int),
        "send_delay": _env_number(
            "RELAY_SEND_DELAY", DEFAULT_SEND_DELAY, float, allow_zero=True
        ),
        "max_entries": max_entries,
        "allowed_bot_ids": _allowed_bot_ids(),
    }
