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
General Commands

!hi, !hal (owner only) and the embed help command.
"""

import logging
from typing import Any, Mapping, Optional

import discord
from discord.ext import commands

logger = logging.getLogger("halbot.commands.general")

GREETING = "こんにちは!"
HAL_REPLY = ":red_circle: Yes, Artie?"


def nospam_cooldown(ctx: commands.Context) -> commands.Cooldown:
    """One use per NOSPAM_DELAY_SECONDS for each user."""
    return commands.Cooldown(1, ctx.bot.config.nospam_delay)


class GeneralCommands(commands.Cog):
    """
    Small text commands.

    Commands:
    - !hi - Greeting, rate limited per user
    - !hal - Scripted HAL-9000 line (owner only)
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="hi", extras={"nospam": True})
    @commands.dynamic_cooldown(nospam_cooldown, commands.BucketType.user)
    async def hi(self, ctx: commands.Context):
        """Says hi!"""
        await ctx.reply(GREETING)
        logger.info(f"id: {ctx.author.id} - user: {ctx.author.name}: said hi!")

    @commands.command(name="hal")
    @commands.is_owner()
    async def hal(self, ctx: commands.Context):
        """HAL-9000"""
        try:
            await ctx.send(HAL_REPLY)
        except discord.DiscordException as e:
            logger.error(f"Error sending message: {e}")


class HalHelpCommand(commands.HelpCommand):
    """!help [command] as embeds, listing only what the invoker may run."""

    def __init__(self):
        super().__init__(
            command_attrs={
                "help": "Lists the available commands.",
                "usage": "[command]",
            }
        )

    def _title(self, command: commands.Command) -> str:
        prefix = self.context.prefix or ""
        title = f"{prefix}{command.name}"
        if command.aliases:
            title += f" ({', '.join(prefix + a for a in command.aliases)})"
        return title

    async def send_bot_help(
        self, mapping: Mapping[Optional[commands.Cog], list[commands.Command[Any, ..., Any]]]
    ):
        prefix = self.context.prefix or ""
        embed = discord.Embed(
            title="Commands",
            description=f"Use `{prefix}help <command>` for details on a command.",
            color=discord.Color.blue(),
        )
        for command in await self.filter_commands(self.context.bot.commands, sort=True):
            embed.add_field(
                name=self._title(command),
                value=command.short_doc or "No description.",
                inline=False,
            )
        await self.get_destination().send(embed=embed)

    async def send_command_help(self, command: commands.Command):
        prefix = self.context.prefix or ""
        embed = discord.Embed(
            title=f"{prefix}{command.name}",
            description=command.help or "No description.",
            color=discord.Color.blue(),
        )
        usage = f"{prefix}{command.name} {command.signature}".rstrip()
        embed.add_field(name="Usage", value=f"`{usage}`", inline=False)
        if command.aliases:
            embed.add_field(
                name="Aliases",
                value=", ".join(f"`{prefix}{a}`" for a in command.aliases),
                inline=True,
            )
        if command.extras.get("nospam"):
            embed.add_field(
                name="Rate limit",
                value=f"Once every {self.context.bot.config.nospam_delay:g} seconds",
                inline=True,
            )
        if command.checks:
            embed.add_field(name="Restricted", value="Owner only", inline=True)
        await self.get_destination().send(embed=embed)

    def command_not_found(self, string: str) -> str:
        return f"No command named '{string}'."


async def setup(bot: commands.Bot):
    """Standard discord.py cog setup function."""
    await bot.add_cog(GeneralCommands(bot))
