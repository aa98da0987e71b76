# rollcore/rollresult.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from rollcore.modifier import NoModifier, TotalModifier, apply_modifier, fudge_score

SEPARATORS = ("+", "-", "*", "/")
FUDGE_SYMBOLS = {-1: "-", 0: "▢", 1: "+"}


# ---- 歷史紀錄：只會附加，建立後不再修改 ----
@dataclass(frozen=True)
class Roll:
    values: Tuple[int, ...]


@dataclass(frozen=True)
class FudgeRoll:
    values: Tuple[int, ...]


@dataclass(frozen=True)
class Value:
    value: int


@dataclass(frozen=True)
class Separator:
    op: str

    def __post_init__(self):
        if self.op not in SEPARATORS:
            raise ValueError(f"unknown separator: {self.op!r}")


HistoryEntry = Union[Roll, FudgeRoll, Value, Separator]


def render_entry(entry: HistoryEntry) -> str:
    if isinstance(entry, Roll):
        return "[" + ", ".join(str(v) for v in entry.values) + "]"
    if isinstance(entry, FudgeRoll):
        return "[" + ", ".join(FUDGE_SYMBOLS[fudge_score(v)] for v in entry.values) + "]"
    if isinstance(entry, Value):
        return str(entry.value)
    return f" {entry.op} "


class TotalState(Enum):
    STALE = "stale"   # 歷史有變動，total 尚未重算
    FRESH = "fresh"   # total 對應目前的歷史


def _trunc_div(a: int, b: int) -> int:
    # 向零截斷；b == 0 直接拋 ZeroDivisionError，由呼叫端先擋
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class RollResult:
    """一次擲骰（或子運算式）的結果與完整歷程。"""

    def __init__(self) -> None:
        self._total = 0
        self._history: List[HistoryEntry] = []
        self._reason: Optional[str] = None
        self._state = TotalState.STALE

    @classmethod
    def with_total(cls, total: int) -> "RollResult":
        """常數值：total 已確定，歷史只有一筆 Value。"""
        r = cls()
        r._total = total
        r._history.append(Value(total))
        r._state = TotalState.FRESH
        return r

    @classmethod
    def _combined(cls, total: int, history: List[HistoryEntry], reason: Optional[str]) -> "RollResult":
        r = cls()
        r._total = total
        r._history = history
        r._reason = reason
        r._state = TotalState.FRESH
        return r

    # ---- 狀態 ----
    @property
    def state(self) -> TotalState:
        return self._state

    def get_total(self) -> int:
        return self._total

    def get_history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def add_reason(self, reason: str) -> None:
        self._reason = reason

    def get_reason(self) -> Optional[str]:
        return self._reason

    # ---- 建立歷史 ----
    def record_roll(self, values: Sequence[int], is_fudge: bool = False) -> None:
        ordered = tuple(sorted(values, reverse=True))
        self._history.append(FudgeRoll(ordered) if is_fudge else Roll(ordered))
        self._state = TotalState.STALE

    def push_value(self, value: int) -> None:
        self._history.append(Value(value))
        self._state = TotalState.STALE

    def pool(self) -> List[int]:
        flat: List[int] = []
        for entry in self._history:
            if isinstance(entry, (Roll, FudgeRoll)):
                flat.extend(entry.values)
            elif isinstance(entry, Value):
                flat.append(entry.value)
        return flat

    def compute_total(self, modifier: TotalModifier = NoModifier()) -> int:
        """依 modifier 計算 total；已是 FRESH 時直接回傳快取值。"""
        if self._state is TotalState.STALE:
            self._total = apply_modifier(self.pool(), modifier)
            self._state = TotalState.FRESH
        return self._total

    # ---- 四則運算：產生新的結果，不共用任何一方的歷史串列 ----
    def _combine(self, other: "RollResult", op: str, total: int) -> "RollResult":
        history = list(self._history)
        if other._history:
            history.append(Separator(op))
        history.extend(other._history)
        return RollResult._combined(total, history, self._reason)

    def __add__(self, other: "RollResult") -> "RollResult":
        if not isinstance(other, RollResult):
            return NotImplemented
        return self._combine(other, "+", self._total + other._total)

    def __sub__(self, other: "RollResult") -> "RollResult":
        if not isinstance(other, RollResult):
            return NotImplemented
        return self._combine(other, "-", self._total - other._total)

    def __mul__(self, other: "RollResult") -> "RollResult":
        if not isinstance(other, RollResult):
            return NotImplemented
        return self._combine(other, "*", self._total * other._total)

    def __truediv__(self, other: "RollResult") -> "RollResult":
        if not isinstance(other, RollResult):
            return NotImplemented
        return self._combine(other, "/", _trunc_div(self._total, other._total))

    # ---- 顯示 ----
    def render(self) -> str:
        if not self._history:
            return str(self._total)
        return "".join(render_entry(e) for e in self._history)

    def __str__(self) -> str:
        s = f"`{self.render()}` Result: **{self._total}**"
        if self._reason is not None:
            s += f", Reason: `{self._reason}`"
        return s

    def __repr__(self) -> str:
        return f"RollResult(total={self._total}, history={self._history!r}, reason={self._reason!r}, state={self._state.name})"


@dataclass
class RepeatedRollResult:
    """`^N` 連續擲骰：每次各自獨立；`^+N` 另外加總。"""

    results: List[RollResult] = field(default_factory=list)
    total: Optional[int] = None
    reason: Optional[str] = None

    def __str__(self) -> str:
        lines = [str(r) for r in self.results]
        if self.total is not None:
            lines.append(f"Sum: **{self.total}**")
        if self.reason is not None:
            lines.append(f"Reason: `{self.reason}`")
        return "\n".join(lines)
