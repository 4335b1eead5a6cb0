"""
Policy outputs and their wire commands.

    QueenAction     WAIT | MOVE <x> <y> | BUILD <siteId> <STRUCTURE_NAME>
    TrainDirective  TRAIN [<siteId> ...]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from RoyaleBot.world.entities import Position, UnitType


class BuildTarget(str, Enum):
    BARRACKS_KNIGHT = "BARRACKS-KNIGHT"
    BARRACKS_ARCHER = "BARRACKS-ARCHER"
    BARRACKS_GIANT  = "BARRACKS-GIANT"
    TOWER           = "TOWER"
    MINE            = "MINE"

    @classmethod
    def barracks_for(cls, unit_type: UnitType) -> "BuildTarget":
        return _BARRACKS_TARGETS[unit_type]


_BARRACKS_TARGETS: dict[UnitType, BuildTarget] = {
    UnitType.KNIGHT: BuildTarget.BARRACKS_KNIGHT,
    UnitType.ARCHER: BuildTarget.BARRACKS_ARCHER,
    UnitType.GIANT:  BuildTarget.BARRACKS_GIANT,
}


class QueenActionKind(str, Enum):
    WAIT  = "WAIT"
    MOVE  = "MOVE"
    BUILD = "BUILD"


@dataclass(frozen=True)
class QueenAction:
    kind: QueenActionKind
    position: Optional[Position] = None
    site_id: Optional[int] = None
    target: Optional[BuildTarget] = None

    @classmethod
    def wait(cls) -> "QueenAction":
        return cls(QueenActionKind.WAIT)

    @classmethod
    def move(cls, position: Position) -> "QueenAction":
        return cls(QueenActionKind.MOVE, position=position)

    @classmethod
    def build(cls, site_id: int, target: BuildTarget) -> "QueenAction":
        return cls(QueenActionKind.BUILD, site_id=site_id, target=target)

    def to_command(self) -> str:
        if self.kind is QueenActionKind.MOVE:
            return f"MOVE {self.position.x} {self.position.y}"
        if self.kind is QueenActionKind.BUILD:
            return f"BUILD {self.site_id} {self.target.value}"
        return "WAIT"


@dataclass(frozen=True)
class TrainOrder:
    site_id: int
    unit_type: UnitType
    price: int


@dataclass(frozen=True)
class TrainDirective:
    orders: tuple[TrainOrder, ...] = ()

    @property
    def site_ids(self) -> tuple[int, ...]:
        return tuple(order.site_id for order in self.orders)

    @property
    def gold_spent(self) -> int:
        return sum(order.price for order in self.orders)

    def to_command(self) -> str:
        return " ".join(["TRAIN", *(str(site_id) for site_id in self.site_ids)])
