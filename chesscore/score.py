"""Representation of a search value as mate, tablebase or centipawn score."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from .types import VALUE_INFINITE, VALUE_MATE, VALUE_TB, is_decisive


@dataclass(frozen=True)
class Mate:
    """Mate in ``plies``; negative when the side to move is being mated."""

    plies: int


@dataclass(frozen=True)
class Tablebase:
    """Tablebase win or loss at ``plies`` distance."""

    plies: int
    win: bool


@dataclass(frozen=True)
class InternalUnits:
    """A non-decisive score already converted to centipawns."""

    value: int


Score = Union[Mate, Tablebase, InternalUnits]


def score_from_value(value: int, to_cp: Callable[[int], int]) -> Score:
    """Classify ``value``; ``to_cp`` converts ordinary values to centipawns."""
    if not -VALUE_INFINITE < value < VALUE_INFINITE:
        raise ValueError(f"value out of range: {value}")
    if not is_decisive(value):
        return InternalUnits(to_cp(value))
    if abs(value) <= VALUE_TB:
        distance = VALUE_TB - abs(value)
        return Tablebase(distance, True) if value > 0 else Tablebase(-distance, False)
    distance = VALUE_MATE - abs(value)
    return Mate(distance) if value > 0 else Mate(-distance)