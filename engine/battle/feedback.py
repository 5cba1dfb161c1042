"""
Floating combat numbers.

A pure observer of the combat session: the session reports MP/AP spent and
damage dealt, each tagged with the tile where it happened, and the
presentation layer draws them until they expire.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Literal

from settings import FLOATING_NUMBER_DURATION
from world.grid import TileCoord

FloatingNumberType = Literal["damage", "ap", "mp"]


@dataclass(frozen=True)
class FloatingNumber:
    id: int
    value: int
    kind: FloatingNumberType
    tile: TileCoord
    created_at: float


class FloatingNumberLog:
    """Live floating numbers plus optional listeners notified on each add."""

    def __init__(self, duration: float = FLOATING_NUMBER_DURATION) -> None:
        self.duration = duration
        self.numbers: List[FloatingNumber] = []
        self.listeners: List[Callable[[FloatingNumber], None]] = []
        self._next_id = 0

    def add_floating_number(
        self,
        value: int,
        kind: FloatingNumberType,
        tile: TileCoord,
        now: float = 0.0,
    ) -> FloatingNumber:
        entry = FloatingNumber(id=self._next_id, value=value, kind=kind, tile=tile, created_at=now)
        self._next_id += 1
        self.numbers.append(entry)
        for listener in list(self.listeners):
            listener(entry)
        return entry

    def remove_floating_number(self, number_id: int) -> None:
        self.numbers = [n for n in self.numbers if n.id != number_id]

    def expire(self, now: float) -> None:
        self.numbers = [n for n in self.numbers if now - n.created_at < self.duration]

    def clear_all(self) -> None:
        self.numbers = []

    def of_kind(self, kind: FloatingNumberType) -> List[FloatingNumber]:
        return [n for n in self.numbers if n.kind == kind]
