# rollcore/roller.py
"""骰式解析與擲骰。

支援：
- `NdS`、`dS`（N 預設 1）、`NdF`（Fudge 骰，以 d6 擲出再摺成 -/▢/+）
- 每組骰後可接一個選項：`khN` `klN` `dhN` `dlN`（N 預設 1；`k` = `kh`、`d` = `dl`），或 `tN`（可再接 `fN`）
- 常數、四則運算與括號：`(2d6+3)*2`、`1d20 - 1d4`
- 連續擲骰前綴：`^N 骰式`（各自獨立）、`^+N 骰式`（另外加總）
- 註解：`骰式 ! 理由`
"""
from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from rollcore.config import RollLimits
from rollcore.errors import MalformedInput
from rollcore.modifier import (
    DropHi, DropLo, Fudge, KeepHi, KeepLo, NoModifier, TargetFailure, TotalModifier,
)
from rollcore.rollresult import RepeatedRollResult, RollResult

logger = logging.getLogger("trpg_bot.roller")

TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<dice>(?P<count>\d*)d(?P<sides>\d+|F)(?P<opts>(?:(?:kh|kl|dh|dl|k|d)\d*|(?:t|f)\d+)*))"
    r"|(?P<num>\d+)"
    r"|(?P<op>[-+*/()])"
    r")",
    re.IGNORECASE,
)
OPT_RE = re.compile(r"(kh|kl|dh|dl|k|d|t|f)(\d*)", re.IGNORECASE)
REPEAT_RE = re.compile(r"^\s*\^(?P<sum>\+)?(?P<times>\d+)\s+(?P<rest>.*)$", re.DOTALL)

FUDGE_SIDES = 6


class RandomSource:
    """預設亂數來源。任何具有 `draw(n, sides)` 的物件都能替代。"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def draw(self, n: int, sides: int) -> List[int]:
        return [self.rng.randint(1, sides) for _ in range(n)]


# ---- 語法樹 ----
@dataclass(frozen=True)
class DiceTerm:
    count: int
    sides: int
    fudge: bool
    modifier: TotalModifier


@dataclass(frozen=True)
class Constant:
    value: int


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


Node = Union[DiceTerm, Constant, BinaryOp]


# 單獨的 k / d 等同 kh / dl
OPT_ALIASES = {"k": "kh", "d": "dl"}


def _parse_options(opts: str, count: int) -> TotalModifier:
    found = [
        (OPT_ALIASES.get(k.lower(), k.lower()), int(v) if v else 1)
        for k, v in OPT_RE.findall(opts)
    ]
    if not found:
        return NoModifier()

    keys = [k for k, _ in found]
    if keys in (["kh"], ["kl"], ["dh"], ["dl"]):
        kind, n = found[0]
        if n > count:
            raise MalformedInput(f"`{kind}{n}`：數量不可超過骰子顆數 {count}")
        return {"kh": KeepHi, "kl": KeepLo, "dh": DropHi, "dl": DropLo}[kind](n)
    if keys == ["t"]:
        # 沒有 f 時不計失敗（骰面至少為 1）
        return TargetFailure(found[0][1], 0)
    if keys == ["t", "f"]:
        return TargetFailure(found[0][1], found[1][1])
    raise MalformedInput(f"無法辨識的選項組合：`{opts}`（每組骰只能有一個 kh/kl/dh/dl，或 t 後接 f）")


class _Parser:
    def __init__(self, text: str, limits: RollLimits):
        self.limits = limits
        self.tokens = self._tokenize(text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> List[re.Match]:
        tokens = []
        pos = 0
        text = text.rstrip()
        while pos < len(text):
            m = TOKEN_RE.match(text, pos)
            if not m or m.end() == pos:
                raise MalformedInput(f"骰式不合法，無法解析：`{text[pos:].strip()}`")
            tokens.append(m)
            pos = m.end()
        if not tokens:
            raise MalformedInput("骰式是空的。範例：3d10、4d6kh3、4dF、6d10t8f1")
        return tokens

    def _peek_op(self) -> Optional[str]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos].group("op")
        return None

    def parse(self) -> Node:
        node = self._expr()
        if self.pos != len(self.tokens):
            raise MalformedInput(f"多餘的內容：`{self.tokens[self.pos].group(0).strip()}`")
        return node

    def _expr(self) -> Node:
        node = self._term()
        while self._peek_op() in ("+", "-"):
            op = self._peek_op()
            self.pos += 1
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._factor()
        while self._peek_op() in ("*", "/"):
            op = self._peek_op()
            self.pos += 1
            node = BinaryOp(op, node, self._factor())
        return node

    def _factor(self) -> Node:
        if self.pos >= len(self.tokens):
            raise MalformedInput("骰式不完整")
        tok = self.tokens[self.pos]
        self.pos += 1
        if tok.group("op") == "(":
            node = self._expr()
            if self._peek_op() != ")":
                raise MalformedInput("括號沒有閉合")
            self.pos += 1
            return node
        if tok.group("num") is not None:
            return Constant(int(tok.group("num")))
        if tok.group("dice") is not None:
            return self._dice(tok)
        raise MalformedInput(f"不該出現的符號：`{tok.group('op')}`")

    def _dice(self, tok: re.Match) -> DiceTerm:
        count = int(tok.group("count") or "1")
        if not (1 <= count <= self.limits.max_dice):
            raise MalformedInput(f"骰子顆數 1~{self.limits.max_dice}")

        sides_s = tok.group("sides")
        opts = tok.group("opts") or ""
        if sides_s.upper() == "F":
            if opts:
                raise MalformedInput("Fudge 骰不能加選項")
            return DiceTerm(count, FUDGE_SIDES, True, Fudge())

        sides = int(sides_s)
        if not (2 <= sides <= self.limits.max_sides):
            raise MalformedInput(f"骰面數 2~{self.limits.max_sides}")
        return DiceTerm(count, sides, False, _parse_options(opts, count))


def split_reason(expr: str) -> Tuple[str, Optional[str]]:
    core, sep, reason = expr.partition("!")
    reason = reason.strip()
    return core, (reason if sep and reason else None)


class Roller:
    def __init__(self, expr: str, limits: Optional[RollLimits] = None):
        self.expr = expr
        self.limits = limits or RollLimits()

        core, self.reason = split_reason(expr)
        self.times = 1
        self.sum_repeats = False
        m = REPEAT_RE.match(core)
        if m:
            self.times = int(m.group("times"))
            self.sum_repeats = m.group("sum") is not None
            if not (1 <= self.times <= self.limits.max_repeat):
                raise MalformedInput(f"連續次數 1~{self.limits.max_repeat}")
            core = m.group("rest")
            self.repeated = True
        else:
            self.repeated = False

        self.ast = _Parser(core, self.limits).parse()

    def roll(self):
        return self.roll_with_source(RandomSource())

    def roll_with_source(self, source) -> Union[RollResult, RepeatedRollResult]:
        if not self.repeated:
            result = self._eval(self.ast, source)
            if self.reason is not None:
                result.add_reason(self.reason)
            logger.debug(f"roll `{self.expr}` -> {result.get_total()}")
            return result

        results = [self._eval(self.ast, source) for _ in range(self.times)]
        total = sum(r.get_total() for r in results) if self.sum_repeats else None
        logger.debug(f"roll `{self.expr}` x{self.times} -> {[r.get_total() for r in results]}")
        return RepeatedRollResult(results=results, total=total, reason=self.reason)

    def _eval(self, node: Node, source) -> RollResult:
        if isinstance(node, Constant):
            return RollResult.with_total(node.value)
        if isinstance(node, DiceTerm):
            r = RollResult()
            r.record_roll(source.draw(node.count, node.sides), node.fudge)
            r.compute_total(node.modifier)
            return r

        left = self._eval(node.left, source)
        right = self._eval(node.right, source)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if right.get_total() == 0:
            raise MalformedInput("不能除以 0")
        return left / right
