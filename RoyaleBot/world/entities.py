"""
World entities - sites, structures and units as the referee describes them.

Structures and units are tagged unions: one frozen dataclass per concept
with an enum discriminant (``kind`` / ``unit_type``) and, for structures,
an optional variant payload. Consumers dispatch on the discriminant, never
on the Python class.

Wire discriminants
------------------
    structureType   -1 empty   0 mine    1 tower    2 barracks
    owner           -1 none    0 friend  1 enemy
    unitType        -1 queen   0 knight  1 archer   2 giant
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# ---------------------------------------------------------------------------
# Discriminants
# ---------------------------------------------------------------------------

class Team(Enum):
    NONE     = -1
    FRIENDLY = 0
    ENEMY    = 1


class UnitType(Enum):
    QUEEN  = -1
    KNIGHT = 0
    ARCHER = 1
    GIANT  = 2

    @property
    def radius(self) -> int:
        """Collision radius used by the spatial oracle."""
        return QUEEN_RADIUS if self is UnitType.QUEEN else 0


class StructureKind(Enum):
    EMPTY    = -1
    MINE     = 0
    TOWER    = 1
    BARRACKS = 2


QUEEN_RADIUS: int = 30

# Units a barracks can produce, keyed by the barracks param2 wire value.
BARRACKS_UNIT_TYPES: dict[int, UnitType] = {
    UnitType.KNIGHT.value: UnitType.KNIGHT,
    UnitType.ARCHER.value: UnitType.ARCHER,
    UnitType.GIANT.value:  UnitType.GIANT,
}


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Position:
    x: int
    y: int


@dataclass(frozen=True)
class Site:
    """Map-static site geometry, read once during initialization."""
    site_id: int
    position: Position
    radius: int


# ---------------------------------------------------------------------------
# Structure payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TowerInfo:
    health: int
    attack_radius: int


@dataclass(frozen=True)
class MineInfo:
    income_level: int


@dataclass(frozen=True)
class BarracksInfo:
    unit_type: UnitType
    turns_until_ready: int

    @property
    def is_ready(self) -> bool:
        return self.turns_until_ready == 0


StructurePayload = Union[TowerInfo, MineInfo, BarracksInfo, None]


@dataclass(frozen=True)
class Structure:
    """
    The occupant of one site for one turn.

    ``payload`` matches ``kind``: None for EMPTY, MineInfo for MINE,
    TowerInfo for TOWER, BarracksInfo for BARRACKS.
    """
    site: Site
    kind: StructureKind
    team: Team
    gold_available: int
    max_mine_size: int
    payload: StructurePayload = None

    # ── Common accessors ──────────────────────────────────────────────────

    @property
    def site_id(self) -> int:
        return self.site.site_id

    @property
    def position(self) -> Position:
        return self.site.position

    @property
    def radius(self) -> int:
        return self.site.radius

    # ── Variant accessors ─────────────────────────────────────────────────

    @property
    def tower(self) -> TowerInfo:
        assert isinstance(self.payload, TowerInfo), self.kind
        return self.payload

    @property
    def mine(self) -> MineInfo:
        assert isinstance(self.payload, MineInfo), self.kind
        return self.payload

    @property
    def barracks(self) -> BarracksInfo:
        assert isinstance(self.payload, BarracksInfo), self.kind
        return self.payload

    def describe(self) -> str:
        """One-line summary for debug logs."""
        base = f"site={self.site_id} {self.kind.name} team={self.team.name}"
        if self.kind is StructureKind.TOWER:
            return f"{base} hp={self.tower.health} range={self.tower.attack_radius}"
        if self.kind is StructureKind.MINE:
            return f"{base} income={self.mine.income_level}/{self.max_mine_size}"
        if self.kind is StructureKind.BARRACKS:
            return f"{base} {self.barracks.unit_type.name} ready_in={self.barracks.turns_until_ready}"
        return f"{base} gold={self.gold_available}"


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Unit:
    position: Position
    team: Team
    unit_type: UnitType
    health: int

    @property
    def radius(self) -> int:
        return self.unit_type.radius


def team_from_wire(owner: int) -> Optional[Team]:
    """Map an owner wire value to a Team, or None when it is not recognised."""
    try:
        return Team(owner)
    except ValueError:
        return None
