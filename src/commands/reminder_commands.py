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
Reminder Command

!rme / !rm <delay_ms> <repeat> <message>

Posts the message in the same channel after the delay, optionally again
every delay after that. Reacting to the posted message gets a thank-you.
"""

import logging
from datetime import timedelta

from discord.ext import commands

from analytics import track
from bot_config import BotConfig
from reminders import ReactionTriggerRegistry, ReminderAction, TaskScheduler

logger = logging.getLogger("halbot.commands.reminder")

# Keeps now + delay (and every repeat after it) well inside datetime's range
MAX_DELAY_MS = 100 * 365 * 24 * 60 * 60 * 1000


class ReminderCommands(commands.Cog):
    """
    Commands:
    - !rme / !rm <delay_ms> <repeat> <message> - Schedule a reminder
    """

    def __init__(
        self,
        bot: commands.Bot,
        scheduler: TaskScheduler,
        triggers: ReactionTriggerRegistry,
        config: BotConfig,
    ):
        self.bot = bot
        self.scheduler = scheduler
        self.triggers = triggers
        self.config = config

    @commands.command(
        name="rme",
        aliases=["rm"],
        usage="<delay_ms> <repeat:true|false> <message>",
    )
    async def remind_me(
        self,
        ctx: commands.Context,
        delay_ms: commands.Range[int, 0, MAX_DELAY_MS],
        repeat: bool,
        *,
        message: str,
    ):
        """Posts a message after a delay in milliseconds, optionally repeating."""
        if delay_ms < self.config.min_reminder_delay_ms:
            raise commands.BadArgument(
                f"delay_ms must be at least {self.config.min_reminder_delay_ms}"
            )

        delay = timedelta(milliseconds=delay_ms)
        action = ReminderAction(
            bot=self.bot,
            scheduler=self.scheduler,
            triggers=self.triggers,
            channel_id=ctx.channel.id,
            author_id=ctx.author.id,
            content=message,
            delay=delay,
            repeat=repeat,
            retry_delay=timedelta(seconds=self.config.retry_delay_seconds),
            max_retries=self.config.max_send_retries,
        )
        task_id = await self.scheduler.add_task(delay, action)

        logger.info(
            f"Scheduled reminder task {task_id} for user {ctx.author.id} "
            f"in channel {ctx.channel.id}: delay={delay_ms}ms, repeat={repeat}"
        )
        track(
            "reminder_scheduled",
            "reminder",
            user_id=ctx.author.id,
            channel_id=ctx.channel.id,
            properties={"delay_ms": delay_ms, "repeat": repeat},
        )


async def setup(bot: commands.Bot):
    """
    Standard discord.py cog setup function.

    The cog shares the bot's scheduler and trigger registry.
    """
    await bot.add_cog(
        ReminderCommands(bot, bot.scheduler, bot.triggers, bot.config)
    )
