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
Bot event tracking.

Events go to the bot_events table when DATABASE_URL is set and
ANALYTICS_ENABLED is not "false"; otherwise every call is a no-op.

Usage:
    from analytics import track

    track("command_used", "command", user_id=123, properties={"command_name": "hi"})
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("halbot.analytics")

_pool: Optional[asyncpg.Pool] = None
_pool_failed = False
_background: set[asyncio.Task] = set()


def _enabled() -> bool:
    return (
        os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"
        and bool(os.getenv("DATABASE_URL"))
    )


async def _get_pool() -> Optional[asyncpg.Pool]:
    """Create the pool on first use; give up for the process after one failure."""
    global _pool, _pool_failed
    if _pool is None and not _pool_failed:
        try:
            _pool = await asyncpg.create_pool(
                os.getenv("DATABASE_URL"), min_size=1, max_size=2
            )
        except (OSError, ValueError, asyncpg.PostgresError) as e:
            _pool_failed = True
            logger.warning(f"Analytics disabled, could not connect: {e}")
    return _pool


async def track_async(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Record one event and wait for the insert.

    Args:
        event_name: Event identifier (e.g. "reminder_delivered")
        event_category: One of: command, reminder, reaction, error
        user_id: Discord user ID (optional)
        channel_id: Discord channel ID (optional)
        guild_id: Discord guild ID (optional)
        properties: Extra event data

    Returns:
        True if the event was written
    """
    if not _enabled():
        return False

    pool = await _get_pool()
    if pool is None:
        return False

    try:
        await pool.execute(
            """
            INSERT INTO bot_events
                (event_name, event_category, user_id, channel_id, guild_id, properties)
            VALUES ($1, $2, $3, $4, $5, $6)
            """,
            event_name,
            event_category,
            user_id,
            channel_id,
            guild_id,
            json.dumps(properties or {}),
        )
        return True
    except (OSError, asyncpg.PostgresError) as e:
        logger.debug(f"Analytics insert failed for {event_name}: {e}")
        return False


def track(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """Record an event in the background without blocking the caller."""
    if not _enabled():
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # Called outside the event loop
        return

    task = loop.create_task(
        track_async(event_name, event_category, user_id, channel_id, guild_id, properties)
    )
    _background.add(task)
    task.add_done_callback(_background.discard)


async def shutdown() -> None:
    """Close the connection pool. Called from the bot's close()."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
