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

"""Shared fakes for the bot tests."""

import asyncio
import itertools
import sys
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Optional
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest
import pytest_asyncio
import pytz
from discord.ext import commands

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bot_config import BotConfig
from discord_bot import HalBot

OWNER_ID = 104970046811435008
USER_ID = 4242
CHANNEL_ID = 777
BOT_USER_ID = 9999

START = datetime(2026, 1, 1, 12, 0, tzinfo=pytz.UTC)


class FakeClock:
    """Datetime clock that only moves when told to."""

    def __init__(self):
        self.current = START

    def __call__(self) -> datetime:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += timedelta(milliseconds=ms)


class FakeBot:
    """Stands in for HalBot.send_message when delivering reminders."""

    def __init__(self):
        self.sent = []
        self.fail_next = 0
        self._ids = itertools.count(9000)

    async def send_message(self, channel_id: int, content: str):
        if self.fail_next:
            self.fail_next -= 1
            raise discord.DiscordException("send failed")
        message = SimpleNamespace(
            id=next(self._ids),
            channel=SimpleNamespace(id=channel_id),
            content=content,
        )
        self.sent.append(message)
        return message

    @property
    def sent_texts(self) -> list[str]:
        return [m.content for m in self.sent]


def make_message(
    content: str,
    author_id: int = USER_ID,
    channel_id: int = CHANNEL_ID,
    name: str = "dave",
    guild: Optional[object] = None,
    at: float = 0,
) -> MagicMock:
    """A message posted ``at`` seconds after START."""
    message = MagicMock()
    message.content = content
    message.author.id = author_id
    message.author.name = name
    message.author.bot = False
    message.channel.id = channel_id
    message.channel.send = AsyncMock()
    message.guild = guild
    message.created_at = START + timedelta(seconds=at)
    message.edited_at = None
    return message


def replies(message) -> list[str]:
    """Texts sent as replies to ``message``."""
    return [
        c.args[0]
        for c in message.channel.send.await_args_list
        if c.kwargs.get("reference") is message
    ]


async def run_command(bot: commands.Bot, message) -> None:
    """Process a message and wait for the events it dispatched."""
    await bot.process_commands(message)
    events = [t for t in asyncio.all_tasks() if t.get_name().startswith("discord.py: ")]
    await asyncio.gather(*events)


@pytest.fixture(autouse=True)
def context_send():
    """Send through the message's channel instead of the HTTP client."""

    async def send(ctx, content=None, **kwargs):
        return await ctx.channel.send(content, **kwargs)

    with patch.object(commands.Context, "send", send):
        yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bot():
    return FakeBot()


@pytest_asyncio.fixture
async def halbot():
    """A HalBot with an event loop and a bot user but no connection or cogs."""
    client = HalBot(BotConfig(token="test-token", owner_id=OWNER_ID))
    user = SimpleNamespace(id=BOT_USER_ID, name="HAL", display_name="HAL")
    with patch.object(HalBot, "user", new_callable=PropertyMock, return_value=user):
        async with client:
            yield client
