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
Reminder Actions

The scheduled action that delivers a reminder and the reaction trigger that
thanks the user for reacting to it.
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

import discord

from analytics import track

from .scheduler import DONE, RepeatAt, ScheduledAction, TaskResult, TaskScheduler
from .triggers import (
    STOP_LISTENING,
    ListenResult,
    ReactionEvent,
    ReactionTrigger,
    ReactionTriggerRegistry,
)

if TYPE_CHECKING:
    from discord_bot import HalBot

logger = logging.getLogger("halbot.reminders.actions")

THANKS_MESSAGE = "Thanks for reacting!"
RETRY_DELAY = timedelta(seconds=5)


class ThanksForReacting(ReactionTrigger):
    """Sends a one-time acknowledgement to the reminder's channel."""

    def __init__(self, bot: "HalBot", channel_id: int):
        self.bot = bot
        self.channel_id = channel_id

    async def run(self, event: ReactionEvent) -> ListenResult:
        try:
            await self.bot.send_message(self.channel_id, THANKS_MESSAGE)
        except discord.DiscordException as e:
            logger.error(f"Could not send message: {e}")
        else:
            track(
                "reaction_acknowledged",
                "reaction",
                user_id=event.user_id,
                channel_id=self.channel_id,
                properties={"message_id": event.message_id, "emoji": event.emoji},
            )
        return STOP_LISTENING


class ReminderAction(ScheduledAction):
    """
    Sends a reminder message to the channel it was requested in.

    After a successful send, a ThanksForReacting trigger is registered for the
    requesting user on the sent message. A failed send is retried after
    ``retry_delay`` whether or not the reminder repeats; with
    ``max_retries`` > 0 the reminder is dropped after that many consecutive
    failures.
    """

    def __init__(
        self,
        bot: "HalBot",
        scheduler: TaskScheduler,
        triggers: ReactionTriggerRegistry,
        channel_id: int,
        author_id: int,
        content: str,
        delay: timedelta,
        repeat: bool,
        retry_delay: timedelta = RETRY_DELAY,
        max_retries: int = 0,
    ):
        self.bot = bot
        self.scheduler = scheduler
        self.triggers = triggers
        self.channel_id = channel_id
        self.author_id = author_id
        self.content = content
        self.delay = delay
        self.repeat = repeat
        self.retry_delay = retry_delay
        self.max_retries = max_retries
        self.failures = 0

    async def run(self) -> TaskResult:
        try:
            sent = await self.bot.send_message(self.channel_id, self.content)
        except discord.DiscordException as e:
            self.failures += 1
            logger.error(f"Error sending message: {e}.")
            track(
                "reminder_send_failed",
                "error",
                user_id=self.author_id,
                channel_id=self.channel_id,
                properties={"error_type": type(e).__name__, "failures": self.failures},
            )
            if self.max_retries and self.failures > self.max_retries:
                logger.warning(
                    f"Giving up on reminder for user {self.author_id} "
                    f"after {self.failures} failed sends"
                )
                return DONE
            return RepeatAt(self.scheduler.now() + self.retry_delay)

        self.failures = 0
        await self.triggers.register(
            (sent.id, self.author_id),
            ThanksForReacting(self.bot, sent.channel.id),
        )

        track(
            "reminder_delivered",
            "reminder",
            user_id=self.author_id,
            channel_id=self.channel_id,
            properties={"repeat": self.repeat},
        )

        if self.repeat:
            return RepeatAt(self.scheduler.now() + self.delay)
        return DONE
