from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TurnResult:
    message: str
    refresh: bool = False  # redraw the current room after this turn
    quit: bool = False
