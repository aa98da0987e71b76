# rollcore/cde.py
"""五行 d10 判讀（《香港：異聞錄》/ Hong Kong : Chroniques de l'étrange）。

每個元素有一張固定的 10 格對照表（骰面 1~10 → 結果），依五行相生相剋排列：
- Success：與擲骰元素相同
- Lucky：擲骰元素所生
- Ill：生擲骰元素者
- Loksyu：擲骰元素所剋（分陰 / 陽）
- Tin Ji：剋擲骰元素者
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from rollcore.errors import MalformedInput, ShapeMismatch
from rollcore.rollresult import HistoryEntry, Roll, RollResult, render_entry

logger = logging.getLogger("trpg_bot.cde")


class Element(Enum):
    FIRE = ("fire", "㊋")
    EARTH = ("earth", "㊏")
    METAL = ("metal", "㊎")
    WATER = ("water", "㊌")
    WOOD = ("wood", "㊍")

    def __init__(self, label: str, glyph: str):
        self.label = label
        self.glyph = glyph

    @property
    def display(self) -> str:
        return f"{self.glyph} {self.label}"

    @classmethod
    def parse(cls, name: str) -> "Element":
        el = ELEMENT_ALIASES.get((name or "").strip().lower())
        if el is None:
            raise MalformedInput("Element must be one of `fire`, `earth`, `metal`, `water` or `wood`")
        return el


class Outcome(Enum):
    SUCCESS = "success"
    LUCKY = "lucky"
    ILL = "ill"
    LOKSYU_YIN = "loksyu_yin"
    LOKSYU_YANG = "loksyu_yang"
    TIN_JI = "tin_ji"


ELEMENT_ALIASES: Dict[str, Element] = {
    "fire": Element.FIRE, "feu": Element.FIRE,
    "earth": Element.EARTH, "terre": Element.EARTH,
    "metal": Element.METAL, "métal": Element.METAL,
    "water": Element.WATER, "eau": Element.WATER,
    "wood": Element.WOOD, "bois": Element.WOOD,
}

# 相生：木 → 火 → 土 → 金 → 水 → 木
GENERATES: Dict[Element, Element] = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}
# 相剋：火剋金、金剋木、木剋土、土剋水、水剋火
DOMINATES: Dict[Element, Element] = {
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
}

_S, _L, _I, _YI, _YA, _T = (
    Outcome.SUCCESS, Outcome.LUCKY, Outcome.ILL,
    Outcome.LOKSYU_YIN, Outcome.LOKSYU_YANG, Outcome.TIN_JI,
)

# 依法文 Starter Kit p.26；索引 0 對應骰面 1
OUTCOME_TABLE: Dict[Element, Tuple[Outcome, ...]] = {
    #               1   2   3   4   5   6   7   8   9   10
    Element.FIRE:  (_T, _S, _YA, _I, _L, _T, _S, _YI, _I, _L),
    Element.EARTH: (_YA, _I, _L, _T, _S, _YI, _I, _L, _T, _S),
    Element.METAL: (_L, _T, _S, _YI, _I, _L, _T, _S, _YA, _I),
    Element.WATER: (_S, _YI, _I, _L, _T, _S, _YA, _I, _L, _T),
    Element.WOOD:  (_I, _L, _T, _S, _YA, _I, _L, _T, _S, _YI),
}


def outcome_of(element: Element, face: int) -> Outcome:
    return OUTCOME_TABLE[element][face - 1]


def relative_labels(element: Element) -> Tuple[str, str, str, str, str]:
    """自身、所生、生我、所剋、剋我。"""
    generating = next(e for e, g in GENERATES.items() if g is element)
    dominating = next(e for e, d in DOMINATES.items() if d is element)
    return (
        element.display,
        GENERATES[element].display,
        generating.display,
        DOMINATES[element].display,
        dominating.display,
    )


@dataclass(frozen=True)
class CdeResult:
    success: int = 0
    lucky: int = 0
    ill: int = 0
    loksyu: Tuple[int, int] = (0, 0)  # (Yin, Yang)
    tin_ji: int = 0
    # 以下兩欄不參與比較
    history: Optional[HistoryEntry] = field(default=None, compare=False)
    elements: Tuple[str, ...] = field(default=("",) * 5, compare=False)

    def __str__(self) -> str:
        trace = render_entry(self.history) if self.history is not None else ""
        return (
            f"{trace}\n"
            f"Success ({self.elements[0]}): {self.success}\n"
            f"Lucky dice ({self.elements[1]}): {self.lucky}\n"
            f"Ill dice ({self.elements[2]}): {self.ill}\n"
            f"Loksyu ({self.elements[3]}): {self.loksyu[0]} ● Yin / {self.loksyu[1]} ○ Yang\n"
            f"Tin Ji ({self.elements[4]}): {self.tin_ji}\n"
        )


def compute_cde(res, element: str) -> CdeResult:
    if not isinstance(res, RollResult):
        raise ShapeMismatch("Not a single roll result")
    history = res.get_history()
    if len(history) != 1:
        raise ShapeMismatch("Should have only one roll")
    entry = history[0]
    if not isinstance(entry, Roll):
        raise ShapeMismatch("RollHistory must be a Roll variant")

    el = Element.parse(element)
    if any(not 1 <= face <= 10 for face in entry.values):
        raise MalformedInput("Element reading needs d10 results (1~10)")
    counts = {o: 0 for o in Outcome}
    for face in entry.values:
        counts[outcome_of(el, face)] += 1

    logger.debug(f"cde {el.label}: {entry.values} -> {counts}")
    return CdeResult(
        success=counts[Outcome.SUCCESS],
        lucky=counts[Outcome.LUCKY],
        ill=counts[Outcome.ILL],
        loksyu=(counts[Outcome.LOKSYU_YIN], counts[Outcome.LOKSYU_YANG]),
        tin_ji=counts[Outcome.TIN_JI],
        history=entry,
        elements=relative_labels(el),
    )
