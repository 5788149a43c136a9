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
Reaction Trigger Registry

Maps (message ID, user ID) to a trigger that runs when that user reacts to
that message. Triggers decide after each run whether they keep listening.
"""

import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import discord

logger = logging.getLogger("halbot.reminders.triggers")

TriggerKey = tuple[int, int]


class ListenResult(enum.Enum):
    STOP_LISTENING = "stop"
    KEEP_LISTENING = "keep"


STOP_LISTENING = ListenResult.STOP_LISTENING
KEEP_LISTENING = ListenResult.KEEP_LISTENING


@dataclass(frozen=True)
class ReactionEvent:
    """A reaction added to a message."""

    message_id: int
    user_id: int
    channel_id: Optional[int] = None
    emoji: str = ""

    @property
    def key(self) -> TriggerKey:
        return (self.message_id, self.user_id)

    @classmethod
    def from_payload(cls, payload: discord.RawReactionActionEvent) -> "ReactionEvent":
        return cls(
            message_id=payload.message_id,
            user_id=payload.user_id,
            channel_id=payload.channel_id,
            emoji=str(payload.emoji),
        )


class ReactionTrigger(ABC):
    @abstractmethod
    async def run(self, event: ReactionEvent) -> ListenResult:
        ...


class ReactionTriggerRegistry:
    """
    Registered reaction triggers, at most one per key.

    Triggers for different keys may run at the same time (bounded by the
    worker count); runs for the same key are serialized.
    """

    def __init__(self, workers: int = 4):
        self._triggers: dict[TriggerKey, ReactionTrigger] = {}
        self._key_locks: dict[TriggerKey, asyncio.Lock] = {}
        self._lock = asyncio.Lock()
        self._workers = asyncio.Semaphore(workers)

    def __len__(self) -> int:
        return len(self._triggers)

    def __contains__(self, key: TriggerKey) -> bool:
        return key in self._triggers

    async def register(self, key: TriggerKey, trigger: ReactionTrigger) -> None:
        """Install the trigger for key, replacing any existing one."""
        async with self._lock:
            if key in self._triggers:
                logger.warning(
                    f"Replacing reaction trigger for message {key[0]} / user {key[1]}"
                )
            self._triggers[key] = trigger
            self._key_locks.setdefault(key, asyncio.Lock())
        logger.debug(f"Registered reaction trigger for message {key[0]} / user {key[1]}")

    async def dispatch(self, event: ReactionEvent) -> bool:
        """
        Run the trigger matching the event, if any.

        Returns:
            True if a trigger ran
        """
        key = event.key
        while True:
            async with self._lock:
                key_lock = self._key_locks.get(key)
            if key_lock is None:
                return False

            async with key_lock:
                async with self._lock:
                    # The trigger was removed (and maybe registered again)
                    # while this event waited for the key lock
                    if self._key_locks.get(key) is not key_lock:
                        continue
                    trigger = self._triggers[key]

                await self._run(key, trigger, event)
                return True

    async def _run(
        self, key: TriggerKey, trigger: ReactionTrigger, event: ReactionEvent
    ) -> None:
        async with self._workers:
            try:
                result = await trigger.run(event)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    f"Reaction trigger for message {key[0]} raised, removing it: {e}",
                    exc_info=True,
                )
                result = STOP_LISTENING

        if result is STOP_LISTENING:
            async with self._lock:
                # Keep a trigger that was registered while this one ran
                if self._triggers.get(key) is trigger:
                    del self._triggers[key]
                    del self._key_locks[key]
            logger.debug(f"Reaction trigger for message {key[0]} / user {key[1]} finished")
