# cogs/dice.py
import logging
import discord
from discord.ext import commands
from rollcore.cde import ELEMENT_ALIASES, compute_cde
from rollcore.config import ConfigManager, LIMIT_NAMES
from rollcore.errors import DiceError
from rollcore.roller import Roller
from rollcore.rollresult import RepeatedRollResult

logger = logging.getLogger("trpg_bot")

# Discord embed description 上限 4096，保留一點空間
DESC_LIMIT = 4000

def _clip(text: str) -> str:
    if len(text) <= DESC_LIMIT:
        return text
    return text[:DESC_LIMIT] + "\n…（內容過長已截斷）"

class DiceCog(commands.Cog, name="Dice"):
    def __init__(self, bot: commands.Bot, config: ConfigManager):
        self.bot = bot
        self.config = config

    @commands.Cog.listener()
    async def on_ready(self):
        logger.info("DiceCog ready.")

    # ---- 一般擲骰 ----
    @commands.command(name="roll", aliases=["r"],
                      help="擲骰：rpg!roll <骰式> 例：rpg!roll 4d6kh3 / rpg!roll ^+3 2d6+1 ! 傷害")
    async def roll(self, ctx: commands.Context, *, expr: str):
        limits = self.config.get_limits(ctx.guild.id if ctx.guild else None)
        try:
            result = Roller(expr, limits).roll()
        except DiceError as e:
            logger.info(f"Bad roll by {ctx.author} in #{ctx.channel}: {e}")
            return await ctx.reply(str(e))

        if isinstance(result, RepeatedRollResult):
            title = f"🎲 連續擲骰 x{len(result.results)}"
        else:
            title = "🎲 擲骰結果"
        embed = discord.Embed(title=title, description=_clip(str(result)), color=discord.Color.random())
        embed.set_footer(text=f"{ctx.author} • #{ctx.channel}")
        await ctx.reply(embed=embed)

    # ---- 五行判讀 ----
    @commands.command(name="cde",
                      help="五行判讀：rpg!cde [元素] <骰式> 例：rpg!cde fire 6d10 / rpg!cde 6d10（用伺服器預設元素）")
    async def cde(self, ctx: commands.Context, *, args: str):
        head, _, rest = args.strip().partition(" ")
        if head.lower() in ELEMENT_ALIASES and rest.strip():
            element, expr = head, rest
        else:
            element = self.config.get_default_element(ctx.guild.id if ctx.guild else None)
            expr = args

        limits = self.config.get_limits(ctx.guild.id if ctx.guild else None)
        try:
            roll = Roller(expr, limits).roll()
            res = compute_cde(roll, element)
        except DiceError as e:
            logger.info(f"Bad cde by {ctx.author} in #{ctx.channel}: {e}")
            return await ctx.reply(str(e))

        embed = discord.Embed(title=f"☯️ 五行判讀：{res.elements[0]}",
                              description=_clip(str(res)), color=discord.Color.gold())
        embed.set_footer(text=f"{ctx.author} • #{ctx.channel}")
        await ctx.reply(embed=embed)

    # ---- 伺服器設定 ----
    @commands.command(name="limits", help="查看/設定擲骰上限：rpg!limits [max_dice|max_sides|max_repeat] [數值]")
    @commands.guild_only()
    async def limits(self, ctx: commands.Context, name: str = None, value: int = None):
        if name is None:
            lim = self.config.get_limits(ctx.guild.id)
            return await ctx.reply(
                f"骰子顆數上限：{lim.max_dice}｜骰面上限：{lim.max_sides}｜連續次數上限：{lim.max_repeat}")
        if not ctx.author.guild_permissions.manage_guild:
            return await ctx.reply("你沒有權限（需要「管理伺服器」）。")
        if name not in LIMIT_NAMES or value is None:
            return await ctx.reply("用法：`rpg!limits <max_dice|max_sides|max_repeat> <數值>`")
        self.config.set_limit(ctx.guild.id, name, value)
        await ctx.reply(f"已設定 {name} = {getattr(self.config.get_limits(ctx.guild.id), name)}")
        logger.info(f"Limit {name}={value} set by {ctx.author} in guild {ctx.guild.id}")

    @commands.command(name="element", help="設定 rpg!cde 的預設元素：rpg!element <fire|earth|metal|water|wood>")
    @commands.guild_only()
    @commands.has_guild_permissions(manage_guild=True)
    async def set_element(self, ctx: commands.Context, name: str):
        try:
            self.config.set_default_element(ctx.guild.id, name)
        except DiceError as e:
            return await ctx.reply(str(e))
        await ctx.reply(f"預設元素已設為 {self.config.get_default_element(ctx.guild.id)}")
        logger.info(f"Default element set to {name} by {ctx.author} in guild {ctx.guild.id}")

    @set_element.error
    async def set_element_error(self, ctx: commands.Context, error):
        if isinstance(error, commands.MissingRequiredArgument):
            await ctx.reply("用法：`rpg!element <fire|earth|metal|water|wood>`")
        elif isinstance(error, commands.MissingPermissions):
            await ctx.reply("你沒有權限（需要「管理伺服器」）。")
        else:
            await ctx.reply(f"設定失敗：{error}")
            logger.error(f"element error: {error}")
