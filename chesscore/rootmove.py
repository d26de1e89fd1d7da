"""Search bookkeeping: node types, stack entries, root moves, limits and skill level."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .score import Score
from .types import BLACK, VALUE_INFINITE, WHITE, Move


class NodeType(IntEnum):
    """Kind of node in the search tree."""

    NON_PV = 0
    PV = 1
    ROOT = 2


@dataclass
class Stack:
    """Per-ply search information, remembered for shallower and deeper nodes."""

    pv: list[Move] = field(default_factory=list)
    continuation_history: Any = None
    continuation_correction_history: Any = None
    ply: int = 0
    current_move: Move = field(default_factory=Move.none)
    excluded_move: Move = field(default_factory=Move.none)
    static_eval: int = 0
    stat_score: int = 0
    move_count: int = 0
    in_check: bool = False
    tt_pv: bool = False
    tt_hit: bool = False
    cutoff_cnt: int = 0
    reduction: int = 0
    is_tt_move: bool = False


class RootMove:
    """A move at the root of the search with its score and principal variation.

    Root moves sort in descending order of score, ties broken by the
    previous iteration's score.
    """

    __hash__ = None  # mutable

    def __init__(self, move: Move) -> None:
        self.effort = 0
        self.score = -VALUE_INFINITE
        self.previous_score = -VALUE_INFINITE
        self.average_score = -VALUE_INFINITE
        self.mean_squared_score = -VALUE_INFINITE * VALUE_INFINITE
        self.uci_score = -VALUE_INFINITE
        self.score_lowerbound = False
        self.score_upperbound = False
        self.sel_depth = 0
        self.tb_rank = 0
        self.tb_score = 0
        self.pv: list[Move] = [move]

    @property
    def move(self) -> Move:
        """The first move of the principal variation."""
        return self.pv[0]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Move):
            return self.pv[0] == other
        if isinstance(other, RootMove):
            return self.pv[0] == other.pv[0]
        return NotImplemented

    def __lt__(self, other: "RootMove") -> bool:
        if not isinstance(other, RootMove):
            return NotImplemented
        if other.score != self.score:
            return other.score < self.score
        return other.previous_score < self.previous_score

    def __repr__(self) -> str:
        return f"RootMove({self.pv[0].uci()}, score={self.score})"


@dataclass
class LimitsType:
    """Limits on the analysis requested by the caller."""

    searchmoves: list[str] = field(default_factory=list)
    time: list[int] = field(default_factory=lambda: [0, 0])
    inc: list[int] = field(default_factory=lambda: [0, 0])
    npmsec: int = 0
    movetime: int = 0
    start_time: int = 0
    movestogo: int = 0
    depth: int = 0
    mate: int = 0
    perft: int = 0
    infinite: int = 0
    nodes: int = 0
    ponder_mode: bool = False

    def use_time_management(self) -> bool:
        """Whether a clock time was given for either side."""
        return bool(self.time[WHITE] or self.time[BLACK])


class Skill:
    """Strength limit expressed as a skill level, optionally derived from an Elo rating."""

    LOWEST_ELO = 1320
    HIGHEST_ELO = 3190

    def __init__(self, skill_level: int, uci_elo: int) -> None:
        if uci_elo:
            e = (uci_elo - self.LOWEST_ELO) / (self.HIGHEST_ELO - self.LOWEST_ELO)
            raw = ((37.2473 * e - 40.8525) * e + 22.2943) * e - 0.311438
            self.level = min(max(raw, 0.0), 19.0)
        else:
            self.level = float(skill_level)
        self.best = Move.none()

    def enabled(self) -> bool:
        return self.level < 20.0

    def time_to_pick(self, depth: int) -> bool:
        return depth == 1 + int(self.level)


@dataclass
class InfoShort:
    """Minimal search report: depth and score."""

    depth: int
    score: Score


@dataclass
class InfoFull(InfoShort):
    """Complete search report for one principal variation."""

    sel_depth: int = 0
    multi_pv: int = 1
    wdl: str = ""
    bound: str = ""
    time_ms: int = 0
    nodes: int = 0
    nps: int = 0
    tb_hits: int = 0
    pv: str = ""
    hashfull: int = 0


@dataclass
class InfoIteration:
    """Report of the root move currently being searched."""

    depth: int
    currmove: str
    currmovenumber: int