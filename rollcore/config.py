from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
import logging
from typing import Dict, Optional

from rollcore.cde import Element

logger = logging.getLogger("trpg_bot")

LIMIT_NAMES = ("max_dice", "max_sides", "max_repeat")

@dataclass
class RollLimits:
    max_dice: int = 100
    max_sides: int = 1000
    max_repeat: int = 50

@dataclass
class GlobalConfig:
    limits: RollLimits = field(default_factory=RollLimits)

@dataclass
class GuildConfig:
    limits: RollLimits = field(default_factory=RollLimits)
    default_element: str = "fire"   # rpg!cde 省略元素時使用

def _limits_from(raw: dict, fallback: RollLimits) -> RollLimits:
    return RollLimits(
        # 檔案可能被手動改成字串等型別；轉不了就讓呼叫端退回預設值
        max_dice=int(raw.get("max_dice", fallback.max_dice)),
        max_sides=int(raw.get("max_sides", fallback.max_sides)),
        max_repeat=int(raw.get("max_repeat", fallback.max_repeat)),
    )

class ConfigManager:
    def __init__(self, global_path: str = "data/config.global.json", guilds_dir: str = "data/guilds"):
        self.global_path = Path(global_path)
        self.guilds_dir = Path(guilds_dir)
        self.guilds_dir.mkdir(parents=True, exist_ok=True)
        self.global_path.parent.mkdir(parents=True, exist_ok=True)

        self.global_config = self._load_global()
        self.guild_cache: Dict[int, GuildConfig] = {}

    # ---------- Global ----------
    def _load_global(self) -> GlobalConfig:
        try:
            if self.global_path.exists():
                raw = json.loads(self.global_path.read_text(encoding="utf-8"))
                return GlobalConfig(limits=_limits_from(raw.get("limits", {}), RollLimits()))
        except Exception as e:
            logger.error(f"讀取全域設定失敗：{e}")
        return GlobalConfig()

    # ---------- Guild ----------
    def _guild_file(self, guild_id: int) -> Path:
        return self.guilds_dir / f"{guild_id}.json"

    def _load_guild(self, guild_id: int) -> GuildConfig:
        path = self._guild_file(guild_id)
        base = self.global_config.limits
        if not path.exists():
            return GuildConfig(limits=RollLimits(**asdict(base)))
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            element = raw.get("default_element", "fire")
            Element.parse(element)
            return GuildConfig(
                limits=_limits_from(raw.get("limits", {}), base),
                default_element=element,
            )
        except Exception as e:
            logger.error(f"讀取伺服器設定失敗（{guild_id}）：{e}，使用預設值")
            return GuildConfig(limits=RollLimits(**asdict(base)))

    def _save_guild(self, guild_id: int):
        cfg = self.guild_cache.get(guild_id)
        if cfg is None:
            return
        path = self._guild_file(guild_id)
        payload = asdict(cfg)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info(f"伺服器設定已儲存：{guild_id}")

    def get_guild_cfg(self, guild_id: int) -> GuildConfig:
        cfg = self.guild_cache.get(guild_id)
        if cfg is None:
            cfg = self._load_guild(guild_id)
            self.guild_cache[guild_id] = cfg
        return cfg

    # Guild 欄位存取（guild_id 為 None 時用全域值，例如私訊）
    def get_limits(self, guild_id: Optional[int] = None) -> RollLimits:
        if guild_id is None:
            return self.global_config.limits
        return self.get_guild_cfg(guild_id).limits

    def set_limit(self, guild_id: int, name: str, value: int):
        if name not in LIMIT_NAMES:
            raise ValueError("name 必須是 max_dice / max_sides / max_repeat")
        cfg = self.get_guild_cfg(guild_id)
        setattr(cfg.limits, name, max(1, int(value)))
        self._save_guild(guild_id)

    def get_default_element(self, guild_id: Optional[int] = None) -> str:
        if guild_id is None:
            return "fire"
        return self.get_guild_cfg(guild_id).default_element

    def set_default_element(self, guild_id: int, name: str):
        # 不認得的元素直接拋 MalformedInput
        element = Element.parse(name)
        cfg = self.get_guild_cfg(guild_id)
        cfg.default_element = element.label
        self._save_guild(guild_id)
