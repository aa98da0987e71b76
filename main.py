import logging
import os
from dotenv import load_dotenv, find_dotenv
import discord
from discord.ext import commands

from rollcore.logging_config import setup_logging
from rollcore.config import ConfigManager
from cogs.dice import DiceCog
from cogs.help import HelpCog

# --- 啟動階段 ---
load_dotenv(find_dotenv())
setup_logging(level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO))
logger = logging.getLogger("trpg_bot")

TOKEN = os.getenv("DISCORD_TOKEN")
if not TOKEN:
    raise RuntimeError("請在 .env 設定 DISCORD_TOKEN")

intents = discord.Intents.default()
intents.message_content = True  # 需要讀取訊息內容才能解析擲骰
bot = commands.Bot(command_prefix="rpg!", intents=intents, help_command=None)

# 共用設定管理器（讓各 cogs 使用）
config_manager = ConfigManager()

@bot.event
async def setup_hook():
    await bot.add_cog(DiceCog(bot, config_manager))
    await bot.add_cog(HelpCog(bot))

@bot.event
async def on_ready():
    logger.info(f"Logged in as {bot.user} (id={bot.user.id})")

@bot.event
async def on_command_error(ctx: commands.Context, error: commands.CommandError):
    if isinstance(error, commands.CommandNotFound):
        return
    # 有自己 error handler 的指令已經回覆過
    if ctx.command and ctx.command.has_error_handler():
        return
    if isinstance(error, commands.MissingRequiredArgument):
        await ctx.reply(f"缺少參數，請看 `{ctx.prefix}help`")
        return
    if isinstance(error, commands.NoPrivateMessage):
        await ctx.reply("這個指令只能在伺服器中使用。")
        return
    logger.error(f"Command error in {ctx.command}: {error}", exc_info=error)

def main():
    bot.run(TOKEN, log_handler=None)

if __name__ == "__main__":
    main()
