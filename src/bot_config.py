# halbot - Discord Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Bot Configuration

Runtime settings for the bot, command handling and the reminder scheduler.
Values are read from environment variables (a .env file is loaded by the
entry point before this runs).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


class ConfigError(Exception):
    """Raised when a required setting is missing or malformed."""


class MissingTokenError(ConfigError):
    """Raised when DISCORD_TOKEN is not set."""


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class BotConfig:
    """Configuration for the bot process."""

    token: str
    owner_id: Optional[int] = None
    command_prefix: str = "!"

    # Delay of the "nospam" bucket used by !hi
    nospam_delay: float = 5.0

    # Scheduler settings
    tick_seconds: float = 0.25
    workers: int = 4

    # Reminder settings
    retry_delay_seconds: float = 5.0
    max_send_retries: int = 0  # 0 = retry forever
    min_reminder_delay_ms: int = 500

    log_level: str = "INFO"

    def __post_init__(self):
        if not self.token:
            raise MissingTokenError("DISCORD_TOKEN environment variable not set")
        if not 0 < self.tick_seconds < 1:
            raise ConfigError("SCHEDULER_TICK_SECONDS must be between 0 and 1")
        if self.workers < 1:
            raise ConfigError("WORKER_THREADS must be at least 1")
        if self.max_send_retries < 0 or self.min_reminder_delay_ms < 0:
            raise ConfigError("Reminder limits must not be negative")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Unknown LOG_LEVEL {self.log_level!r}")

    @classmethod
    def from_env(cls) -> "BotConfig":
        """Create config from environment variables with defaults."""
        owner = os.getenv("OWNER_ID")
        return cls(
            token=os.getenv("DISCORD_TOKEN", ""),
            owner_id=_int_env("OWNER_ID", owner) if owner else None,
            command_prefix=os.getenv("COMMAND_PREFIX", "!"),
            nospam_delay=_float_env("NOSPAM_DELAY_SECONDS", "5"),
            tick_seconds=_float_env("SCHEDULER_TICK_SECONDS", "0.25"),
            workers=_int_env("WORKER_THREADS", "4"),
            retry_delay_seconds=_float_env("REMINDER_RETRY_SECONDS", "5"),
            max_send_retries=_int_env("REMINDER_MAX_RETRIES", "0"),
            min_reminder_delay_ms=_int_env("REMINDER_MIN_DELAY_MS", "500"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
