"""
halbot Discord Bot

Connects to Discord, runs "!" commands and the reminder scheduler.
Reactions on reminder messages are matched against registered triggers.
"""

import asyncio
import logging
import math
import sys

import discord
from discord.ext import commands
from dotenv import load_dotenv

import analytics
from bot_config import BotConfig, ConfigError, MissingTokenError
from commands import general_commands, reminder_commands
from commands.general_commands import HalHelpCommand
from reminders import ReactionEvent, ReactionTriggerRegistry, TaskScheduler

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("halbot")

RATE_LIMIT_MESSAGE = "Try this again in {seconds} seconds."


class HalBot(commands.Bot):
    """
    Discord bot that owns the task scheduler and the reaction trigger
    registry, and hands them to the cogs that need them.
    """

    def __init__(self, config: BotConfig):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.messages = True
        intents.reactions = True

        super().__init__(
            command_prefix=config.command_prefix,
            intents=intents,
            owner_id=config.owner_id,
            help_command=HalHelpCommand(),
        )

        self.config = config
        self.scheduler = TaskScheduler(
            workers=config.workers, tick_seconds=config.tick_seconds
        )
        self.triggers = ReactionTriggerRegistry(workers=config.workers)

    async def setup_hook(self):
        """Called when the bot is starting up."""
        await general_commands.setup(self)
        await reminder_commands.setup(self)

        names = ", ".join(sorted(c.name for c in self.commands))
        logger.info(f"Setup: registered commands {names}")
        logger.info(f"Setup: OWNER_ID={'set' if self.config.owner_id else 'missing'}")
        if self.config.owner_id is None:
            logger.warning("OWNER_ID not set - owner-only commands fall back to the application owner")

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"{self.user.name} is connected!")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")
        self.scheduler.start()

    async def on_message(self, message: discord.Message):
        """Run prefixed commands."""
        # Ignore other bots and the bot itself
        if message.author.bot:
            return

        await self.process_commands(message)

    async def on_command_completion(self, ctx: commands.Context):
        track_command(ctx, "command_used")

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        """Log command failures; only rate limits and bad input get a reply."""
        if isinstance(error, commands.CommandNotFound):
            logger.info(f"Could not find command: '{ctx.invoked_with}'")
            return

        name = ctx.command.qualified_name if ctx.command else ctx.invoked_with

        if isinstance(error, commands.CommandOnCooldown):
            track_command(ctx, "command_rate_limited")
            seconds = math.ceil(error.retry_after)
            try:
                await ctx.send(RATE_LIMIT_MESSAGE.format(seconds=seconds))
            except discord.DiscordException as e:
                logger.warning(f"Could not send rate limit notice: {e}")
        elif isinstance(error, commands.CheckFailure):
            logger.info(f"Check failed for '{name}' (user {ctx.author.id}): {error}")
            track_command(ctx, "command_denied")
        elif isinstance(error, commands.UserInputError):
            logger.warning(f"Bad arguments for '{name}': {error}")
            usage = f"{ctx.prefix}{ctx.invoked_with} {ctx.command.signature}".rstrip()
            try:
                await ctx.reply(f"{error}\nUsage: `{usage}`")
            except discord.DiscordException as e:
                logger.warning(f"Could not send usage hint: {e}")
        elif isinstance(error, commands.CommandInvokeError):
            logger.error(f"Command '{name}' failed: {error.original}", exc_info=error.original)
        else:
            logger.warning(f"Command '{name}' failed: {error}")

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        """Hand reactions to the trigger registry."""
        if self.user is not None and payload.user_id == self.user.id:
            return

        await self.triggers.dispatch(ReactionEvent.from_payload(payload))

    async def send_message(self, channel_id: int, content: str) -> discord.Message:
        """Send a message to a channel."""
        channel = self.get_channel(channel_id)
        if channel is None:
            channel = await self.fetch_channel(channel_id)
        return await channel.send(content)

    async def close(self):
        """Clean up resources on shutdown."""
        self.scheduler.stop()
        await analytics.shutdown()
        await super().close()


def track_command(ctx: commands.Context, event_name: str) -> None:
    analytics.track(
        event_name,
        "command",
        user_id=ctx.author.id,
        channel_id=ctx.channel.id,
        guild_id=ctx.guild.id if ctx.guild else None,
        properties={"command_name": ctx.command.qualified_name if ctx.command else None},
    )


async def main() -> int:
    """Run the bot until the connection ends. Returns the exit status."""
    try:
        config = BotConfig.from_env()
    except MissingTokenError as e:
        print(f"Error: {e}")
        print("Please set it in your .env file")
        return 1
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    logging.getLogger().setLevel(config.log_level)

    try:
        bot = HalBot(config)
    except Exception as e:
        print(f"Error creating client: {e}")
        return 1

    try:
        async with bot:
            await bot.start(config.token)
    except discord.LoginFailure as e:
        print(f"Error logging in: {e}")
        return 1
    except discord.DiscordException as e:
        print(f"An error occurred while running the client: {e}")
        return 1
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
