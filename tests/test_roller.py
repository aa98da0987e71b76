"""Tests for the dice expression roller."""

import random

import pytest

from rollcore.config import RollLimits
from rollcore.errors import DiceError, MalformedInput
from rollcore.roller import RandomSource, Roller
from rollcore.rollresult import FudgeRoll, RepeatedRollResult, Roll, Separator, Value


def _roll(expr, faces, scripted, limits=None):
    return Roller(expr, limits).roll_with_source(scripted(faces))


class TestRoller:
    """Test suite for evaluating expressions."""

    def test_plain_dice(self, scripted):
        """Test a single group of dice."""
        r = _roll("3d10", [3, 1, 2], scripted)
        assert r.get_total() == 6
        assert r.get_history() == (Roll((3, 2, 1)),)

    def test_default_count(self, scripted):
        """Test that `d20` rolls one die."""
        source = scripted([17])
        r = Roller("d20").roll_with_source(source)
        assert r.get_total() == 17
        assert source.calls == [(1, 20)]

    @pytest.mark.parametrize(
        "expr,expected",
        [("4d6kh3", 13), ("4d6dl1", 13), ("4d6kl1", 1), ("4d6dh1", 8), ("4D6KH3", 13)],
    )
    def test_keep_drop_options(self, expr, expected, scripted):
        """Test keep/drop options on a single group."""
        assert _roll(expr, [1, 6, 3, 4], scripted).get_total() == expected

    @pytest.mark.parametrize(
        "expr,expected",
        [
            ("4d6kh", 6),
            ("4d6k", 6),
            ("4d6k1", 6),
            ("4d6k3", 13),
            ("4d6kl", 1),
            ("4d6dh", 8),
            ("4d6dl", 13),
            ("4d6d", 13),
            ("4d6d1", 13),
            ("4d6d2", 10),
        ],
    )
    def test_keep_drop_default_count(self, expr, expected, scripted):
        """Test that a missing count means one and bare k/d mean kh/dl."""
        assert _roll(expr, [1, 6, 3, 4], scripted).get_total() == expected

    def test_target_failure(self, scripted):
        """Test success counting with a failure threshold."""
        assert _roll("6d10t8f1", [10, 8, 7, 1, 5, 9], scripted).get_total() == 2

    def test_target_without_failure(self, scripted):
        """Test success counting alone."""
        assert _roll("4d10t7", [1, 7, 9, 3], scripted).get_total() == 2

    def test_fudge_dice(self, scripted):
        """Test fudge dice are drawn as d6 and scored -1/0/+1."""
        source = scripted([1, 3, 6, 5])
        r = Roller("4dF").roll_with_source(source)
        assert source.calls == [(4, 6)]
        assert r.get_history() == (FudgeRoll((6, 5, 3, 1)),)
        assert str(r) == "`[+, +, ▢, -]` Result: **1**"

    def test_dice_plus_constant(self, scripted):
        """Test the trace of a group plus a constant."""
        r = _roll("2d6 + 3", [2, 5], scripted)
        assert r.get_total() == 10
        assert r.get_history() == (Roll((5, 2)), Separator("+"), Value(3))
        assert str(r) == "`[5, 2] + 3` Result: **10**"

    def test_modifier_applies_per_group(self, scripted):
        """Test that an option only affects its own group."""
        r = _roll("2d6kh1 + 2d6", [1, 6, 2, 3], scripted)
        assert r.get_total() == 11

    @pytest.mark.parametrize(
        "expr,expected",
        [("2*3+4", 10), ("10-2*3", 4), ("(1+2)*3", 9), ("7/2", 3), ("1-8/3", -1), ("2-3-4", -5)],
    )
    def test_arithmetic_precedence(self, expr, expected, scripted):
        """Test operator precedence and grouping with constants."""
        assert _roll(expr, [], scripted).get_total() == expected

    def test_parentheses_with_dice(self, scripted):
        """Test a grouped sub-expression."""
        r = _roll("(1d4+2)*3", [2], scripted)
        assert r.get_total() == 12
        assert r.render() == "[2] + 2 * 3"

    def test_reason(self, scripted):
        """Test that text after `!` becomes the reason."""
        r = _roll("1d20+5 ! attack", [12], scripted)
        assert r.get_reason() == "attack"
        assert str(r) == "`[12] + 5` Result: **17**, Reason: `attack`"

    def test_empty_reason_is_ignored(self, scripted):
        """Test that a bare `!` does not set a reason."""
        assert _roll("1d6 !", [3], scripted).get_reason() is None

    def test_repeated(self, scripted):
        """Test `^N` rolls the expression N times."""
        rep = _roll("^3 1d6", [1, 2, 3], scripted)
        assert isinstance(rep, RepeatedRollResult)
        assert [r.get_total() for r in rep.results] == [1, 2, 3]
        assert rep.total is None

    def test_repeated_sum(self, scripted):
        """Test `^+N` also sums the totals."""
        rep = _roll("^+3 1d6 ! dmg", [1, 2, 3], scripted)
        assert rep.total == 6
        assert rep.reason == "dmg"

    def test_random_source(self):
        """Test the default source stays within the die's faces."""
        faces = RandomSource(random.Random(42)).draw(50, 6)
        assert len(faces) == 50
        assert all(1 <= f <= 6 for f in faces)

    def test_roll_uses_random_source(self):
        """Test that roll() works without an explicit source."""
        total = Roller("3d6").roll().get_total()
        assert 3 <= total <= 18


class TestRollerErrors:
    """Test suite for rejected expressions."""

    @pytest.mark.parametrize(
        "expr",
        [
            "",
            "abc",
            "2d6 +",
            "(1d6",
            "1d6)",
            "2d6 3",
            "0d6",
            "1d1",
            "4d6kh5",
            "4d6dl5",
            "4d6k5",
            "4d6kd",
            "4dFkh1",
            "1d6f2",
            "1d6kh1t3",
            "1d6kh1kl1",
            "^0 1d6",
            "^51 1d6",
        ],
    )
    def test_malformed(self, expr):
        """Test that invalid expressions are rejected when parsed."""
        with pytest.raises(MalformedInput):
            Roller(expr)

    def test_errors_are_dice_errors(self):
        """Test that roller errors share the DiceError base."""
        with pytest.raises(DiceError):
            Roller("nope")
        with pytest.raises(ValueError):
            Roller("nope")

    def test_division_by_zero(self, scripted):
        """Test that a zero divisor is reported before dividing."""
        with pytest.raises(MalformedInput):
            _roll("1d6 / (2-2)", [4], scripted)

    def test_limits(self, scripted):
        """Test that limits bound dice, sides and repeats."""
        with pytest.raises(MalformedInput):
            Roller("200d6")
        with pytest.raises(MalformedInput):
            Roller("1d2000")
        small = RollLimits(max_dice=5, max_sides=20, max_repeat=2)
        with pytest.raises(MalformedInput):
            Roller("6d6", small)
        with pytest.raises(MalformedInput):
            Roller("^3 1d6", small)
        assert _roll("200d6", [1] * 200, scripted, RollLimits(max_dice=300)).get_total() == 200
