# cogs/help.py
from __future__ import annotations

import logging
import discord
from discord.ext import commands

logger = logging.getLogger("trpg_bot")

# ---- 內部：產生各頁 Embed ----
def _embed_home(prefix: str) -> discord.Embed:
    e = discord.Embed(
        title="📖 指令總覽",
        description="按下方按鈕切換分類；連續擲骰：在骰式前加 `^次數`（加總用 `^+次數`）。",
        color=discord.Color.blurple(),
    )
    e.add_field(
        name="🎲 擲骰",
        value=f"`{prefix}roll <骰式>`（縮寫 `{prefix}r`）",
        inline=False,
    )
    e.add_field(
        name="☯️ 五行判讀",
        value=f"`{prefix}cde [元素] <骰式>`",
        inline=False,
    )
    e.add_field(
        name="🛠️ 設定（管理伺服器）",
        value=f"`{prefix}limits ...`｜`{prefix}element <元素>`",
        inline=False,
    )
    e.set_footer(text=f"提示：例如 `{prefix}r 4d6kh3`、`{prefix}cde water 6d10`")
    return e

def _embed_dice(prefix: str) -> discord.Embed:
    e = discord.Embed(title="🎲 擲骰", color=discord.Color.green())
    e.add_field(
        name=f"{prefix}roll  /  {prefix}r",
        value=(
            "**用法**：\n"
            f"- 一般：`{prefix}r 3d10`、`{prefix}r (2d6+3)*2`、`{prefix}r 1d20 - 1d4`\n"
            f"- 保留/捨棄：`{prefix}r 4d6kh3`（kh/kl/dh/dl + 數量）\n"
            f"- 成功計數：`{prefix}r 6d10t8f1`（≥8 算成功、≤1 扣一）\n"
            f"- Fudge：`{prefix}r 4dF`\n"
            f"- 連續：`{prefix}r ^5 2d6`、`{prefix}r ^+3 1d8`（加總）\n"
            f"- 註解：`{prefix}r 1d20+5 ! 攻擊`"
        ),
        inline=False,
    )
    return e

def _embed_cde(prefix: str) -> discord.Embed:
    e = discord.Embed(title="☯️ 五行判讀（香港：異聞錄）", color=discord.Color.gold())
    e.add_field(
        name=f"{prefix}cde [元素] <骰式>",
        value=(
            "**用法**：\n"
            f"- `{prefix}cde fire 6d10`（元素：fire/feu、earth/terre、metal/métal、water/eau、wood/bois）\n"
            f"- 省略元素時使用伺服器預設（`{prefix}element` 設定）\n"
            "**限制**：只接受單一組 d10，不能有運算或連續擲骰。"
        ),
        inline=False,
    )
    return e

def _embed_settings(prefix: str) -> discord.Embed:
    e = discord.Embed(title="🛠️ 伺服器設定", color=discord.Color.orange())
    e.add_field(
        name=f"{prefix}limits [max_dice|max_sides|max_repeat] [數值]",
        value="不帶參數時顯示目前上限；設定需要「管理伺服器」權限。",
        inline=False,
    )
    e.add_field(
        name=f"{prefix}element <元素>",
        value=f"設定 `{prefix}cde` 的預設元素。",
        inline=False,
    )
    return e

PAGES = {
    "home": _embed_home,
    "dice": _embed_dice,
    "cde": _embed_cde,
    "settings": _embed_settings,
}

# ---- 互動面板 ----
class HelpView(discord.ui.View):
    def __init__(self, author_id: int, prefix: str, timeout: float = 180.0):
        super().__init__(timeout=timeout)
        self.author_id = author_id
        self.prefix = prefix
        self.page = "home"
        self.message: discord.Message | None = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.author_id:
            await interaction.response.send_message("只有發起者可以操作這個幫助面板。", ephemeral=True)
            return False
        return True

    async def on_timeout(self) -> None:
        for c in self.children:
            if isinstance(c, discord.ui.Button):
                c.disabled = True
        if self.message:
            try:
                await self.message.edit(view=self)
            except discord.HTTPException as e:
                logger.debug(f"help panel timeout edit failed: {e}")

    async def _show(self, interaction: discord.Interaction, page: str):
        self.page = page
        emb = PAGES.get(page, _embed_home)(self.prefix)
        await interaction.response.edit_message(embed=emb, view=self)

    @discord.ui.button(label="總覽", style=discord.ButtonStyle.secondary)
    async def btn_home(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "home")

    @discord.ui.button(label="擲骰", style=discord.ButtonStyle.primary)
    async def btn_dice(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "dice")

    @discord.ui.button(label="五行", style=discord.ButtonStyle.secondary)
    async def btn_cde(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "cde")

    @discord.ui.button(label="設定", style=discord.ButtonStyle.secondary)
    async def btn_settings(self, interaction: discord.Interaction, _: discord.ui.Button):
        await self._show(interaction, "settings")

    @discord.ui.button(label="關閉", style=discord.ButtonStyle.danger)
    async def btn_close(self, interaction: discord.Interaction, _: discord.ui.Button):
        await interaction.response.edit_message(content="（已關閉說明）", embed=None, view=None)

# ---- Cog ----
class HelpCog(commands.Cog, name="Help"):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_ready(self):
        logger.info("HelpCog ready.")

    @commands.command(name="help", aliases=["h"], help="顯示互動式說明")
    async def help_cmd(self, ctx: commands.Context, *, section: str | None = None):
        prefix = ctx.prefix or "rpg!"
        view = HelpView(author_id=ctx.author.id, prefix=prefix)
        # 選擇預設頁
        sec = (section or "").lower().strip()
        page = {
            "dice": "dice", "roll": "dice", "r": "dice",
            "cde": "cde", "element": "settings",
            "limits": "settings", "settings": "settings",
        }.get(sec, "home")
        view.page = page
        msg = await ctx.reply(embed=PAGES[page](prefix), view=view)
        view.message = msg
