import pytest

from chesscore.rootmove import (
    InfoFull,
    InfoIteration,
    InfoShort,
    LimitsType,
    RootMove,
    Skill,
    Stack,
)
from chesscore.score import InternalUnits, Mate, score_from_value
from chesscore.types import BLACK, VALUE_INFINITE, VALUE_MATE, WHITE, Move, parse_square


def _mv(a, b):
    return Move.make(parse_square(a), parse_square(b))


def test_stack_defaults():
    ss = Stack()
    assert ss.current_move == Move.none()
    assert ss.excluded_move == Move.none()
    assert ss.pv == []
    assert ss.in_check is False


def test_root_move_defaults():
    m = _mv("e2", "e4")
    rm = RootMove(m)
    assert rm.pv == [m]
    assert rm.move == m
    assert rm.score == -VALUE_INFINITE
    assert rm.previous_score == -VALUE_INFINITE
    assert rm.mean_squared_score == -VALUE_INFINITE * VALUE_INFINITE
    assert rm.score_lowerbound is False and rm.score_upperbound is False


def test_root_move_equality_with_move():
    m = _mv("g1", "f3")
    rm = RootMove(m)
    assert rm == m
    assert not rm == _mv("g1", "h3")
    assert rm == RootMove(m)
    assert rm in [RootMove(_mv("a2", "a3")), rm]


def test_root_move_sorts_descending_by_score():
    a, b, c = RootMove(_mv("a2", "a3")), RootMove(_mv("b2", "b3")), RootMove(_mv("c2", "c3"))
    a.score, b.score, c.score = 10, 50, -5
    ordered = sorted([a, b, c])
    assert [rm.score for rm in ordered] == [50, 10, -5]


def test_root_move_tie_broken_by_previous_score():
    a, b = RootMove(_mv("a2", "a3")), RootMove(_mv("b2", "b3"))
    a.score = b.score = 7
    a.previous_score, b.previous_score = 1, 3
    assert b < a
    assert not a < b
    assert sorted([a, b])[0] is b


def test_root_move_sort_is_stable():
    moves = [RootMove(_mv(f"{f}2", f"{f}3")) for f in "abcd"]
    moves[2].score = 100
    result = sorted(moves)
    assert result[0] is moves[2]
    assert [rm for rm in result[1:]] == [moves[0], moves[1], moves[3]]


def test_root_move_not_hashable():
    with pytest.raises(TypeError):
        hash(RootMove(_mv("e2", "e4")))


def test_limits_time_management():
    limits = LimitsType()
    assert limits.use_time_management() is False
    limits.time[BLACK] = 1000
    assert limits.use_time_management() is True
    other = LimitsType()
    other.time[WHITE] = 5
    assert other.use_time_management() is True
    assert LimitsType().time == [0, 0]


def test_limits_instances_independent():
    a, b = LimitsType(), LimitsType()
    a.searchmoves.append("e2e4")
    assert b.searchmoves == []


def test_skill_from_level():
    assert Skill(20, 0).enabled() is False
    skill = Skill(5, 0)
    assert skill.enabled() is True
    assert skill.level == 5.0
    assert skill.time_to_pick(6)
    assert not skill.time_to_pick(5)
    assert skill.best == Move.none()


def test_skill_from_lowest_elo_clamps_to_zero():
    skill = Skill(20, Skill.LOWEST_ELO)
    assert skill.level == 0.0
    assert skill.enabled()
    assert skill.time_to_pick(1)


def test_skill_from_elo_is_bounded_and_monotonic():
    levels = [Skill(0, elo).level for elo in range(Skill.LOWEST_ELO, Skill.HIGHEST_ELO + 1, 110)]
    assert all(0.0 <= lv <= 19.0 for lv in levels)
    assert levels == sorted(levels)
    assert Skill(0, 10000).level == 19.0
    assert Skill(0, 10000).enabled()


def test_info_structures():
    score = score_from_value(VALUE_MATE - 3, lambda v: v)
    short = InfoShort(depth=4, score=score)
    assert short.score == Mate(3)
    full = InfoFull(depth=10, score=InternalUnits(25), sel_depth=14, pv="e2e4 e7e5")
    assert isinstance(full, InfoShort)
    assert full.pv.split() == ["e2e4", "e7e5"]
    assert full.bound == ""
    it = InfoIteration(depth=3, currmove="e2e4", currmovenumber=1)
    assert (it.depth, it.currmove, it.currmovenumber) == (3, "e2e4", 1)