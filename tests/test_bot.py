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

"""Tests for configuration and the bot's event wiring."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bot_config import BotConfig, ConfigError, MissingTokenError
from conftest import OWNER_ID, make_message
from discord_bot import HalBot, main


class TestBotConfig:
    def test_defaults(self):
        with patch.dict("os.environ", {"DISCORD_TOKEN": "abc"}, clear=True):
            config = BotConfig.from_env()
        assert config.token == "abc"
        assert config.owner_id is None
        assert config.command_prefix == "!"
        assert config.nospam_delay == 5
        assert config.workers == 4
        assert config.retry_delay_seconds == 5
        assert config.max_send_retries == 0
        assert config.min_reminder_delay_ms == 500
        assert config.tick_seconds < 1

    def test_custom_values(self):
        with patch.dict("os.environ", {
            "DISCORD_TOKEN": "abc",
            "OWNER_ID": str(OWNER_ID),
            "COMMAND_PREFIX": "?",
            "WORKER_THREADS": "8",
            "REMINDER_MAX_RETRIES": "3",
            "LOG_LEVEL": "debug",
        }, clear=True):
            config = BotConfig.from_env()
        assert config.owner_id == OWNER_ID
        assert config.command_prefix == "?"
        assert config.workers == 8
        assert config.max_send_retries == 3
        assert config.log_level == "DEBUG"

    def test_missing_token(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(MissingTokenError):
                BotConfig.from_env()

    @pytest.mark.parametrize("name,value", [
        ("OWNER_ID", "artie"),
        ("WORKER_THREADS", "0"),
        ("SCHEDULER_TICK_SECONDS", "1.5"),
        ("REMINDER_MIN_DELAY_MS", "-1"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, name, value):
        with patch.dict("os.environ", {"DISCORD_TOKEN": "abc", name: value}, clear=True):
            with pytest.raises(ConfigError):
                BotConfig.from_env()


class TestMain:
    @pytest.mark.asyncio
    async def test_missing_token_exits_non_zero(self, capsys):
        with patch.dict("os.environ", {}, clear=True):
            assert await main() == 1
        out = capsys.readouterr().out
        assert "DISCORD_TOKEN" in out
        assert "Please set it in your .env file" in out

    @pytest.mark.asyncio
    async def test_malformed_value_has_no_env_file_hint(self, capsys):
        with patch.dict("os.environ", {"DISCORD_TOKEN": "abc", "WORKER_THREADS": "many"}, clear=True):
            assert await main() == 1
        out = capsys.readouterr().out
        assert "WORKER_THREADS" in out
        assert ".env" not in out


class TestHalBot:
    @pytest.mark.asyncio
    async def test_setup_registers_commands(self):
        bot = HalBot(BotConfig(token="abc", owner_id=OWNER_ID))
        await bot.setup_hook()

        for name in ("hi", "hal", "help", "rme", "rm"):
            assert bot.get_command(name) is not None
        assert bot.get_command("rm") is bot.get_command("rme")

    @pytest.mark.asyncio
    async def test_bot_messages_are_not_processed(self):
        bot = HalBot(BotConfig(token="abc"))
        message = make_message("!hi")
        message.author.bot = True

        with patch.object(bot, "process_commands", AsyncMock()) as process:
            await bot.on_message(message)
            process.assert_not_awaited()

            message.author.bot = False
            await bot.on_message(message)
            process.assert_awaited_once_with(message)

    @pytest.mark.asyncio
    async def test_reactions_reach_trigger_registry(self):
        bot = HalBot(BotConfig(token="abc"))
        payload = MagicMock()
        payload.message_id = 1
        payload.user_id = 2
        payload.channel_id = 3

        with patch.object(bot.triggers, "dispatch", AsyncMock()) as dispatch:
            await bot.on_raw_reaction_add(payload)

        event = dispatch.await_args.args[0]
        assert event.key == (1, 2)
        assert event.channel_id == 3

    @pytest.mark.asyncio
    async def test_send_message_fetches_uncached_channel(self):
        bot = HalBot(BotConfig(token="abc"))
        channel = MagicMock()
        channel.send = AsyncMock(return_value="sent")

        with patch.object(bot, "get_channel", return_value=None), \
                patch.object(bot, "fetch_channel", AsyncMock(return_value=channel)):
            assert await bot.send_message(5, "hello") == "sent"
        channel.send.assert_awaited_once_with("hello")
