# rollcore/modifier.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Union


@dataclass(frozen=True)
class NoModifier:
    pass


@dataclass(frozen=True)
class KeepHi:
    n: int


@dataclass(frozen=True)
class KeepLo:
    n: int


@dataclass(frozen=True)
class DropHi:
    n: int


@dataclass(frozen=True)
class DropLo:
    n: int


@dataclass(frozen=True)
class TargetFailure:
    target: int
    failure: int


@dataclass(frozen=True)
class Fudge:
    pass


TotalModifier = Union[NoModifier, KeepHi, KeepLo, DropHi, DropLo, TargetFailure, Fudge]


def fudge_score(face: int) -> int:
    # d6 面值摺成 -1 / 0 / +1
    if face <= 2:
        return -1
    if face <= 4:
        return 0
    return 1


def select(pool: Sequence[int], modifier: TotalModifier) -> Sequence[int]:
    """從已遞增排序的骰池取出要計分的連續區段。

    n 的範圍由呼叫端（Roller）先行檢查，這裡不再驗證。
    """
    size = len(pool)
    if isinstance(modifier, KeepHi):
        return pool[size - modifier.n:]
    if isinstance(modifier, KeepLo):
        return pool[:modifier.n]
    if isinstance(modifier, DropHi):
        return pool[:size - modifier.n]
    if isinstance(modifier, DropLo):
        return pool[modifier.n:]
    return pool


def reduce(values: Sequence[int], modifier: TotalModifier) -> int:
    if isinstance(modifier, TargetFailure):
        total = 0
        for v in values:
            # 先判定成功：門檻設反時同一顆骰只算成功
            if v >= modifier.target:
                total += 1
            elif v <= modifier.failure:
                total -= 1
        return total
    if isinstance(modifier, Fudge):
        return sum(fudge_score(v) for v in values)
    return int(sum(values))


def apply_modifier(pool: List[int], modifier: TotalModifier) -> int:
    ordered = sorted(pool)
    return reduce(select(ordered, modifier), modifier)
