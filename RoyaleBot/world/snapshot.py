"""
Snapshot Builder - Stage 1 of the turn pipeline.

Turns one turn's raw referee records into typed entities and partitions
them by owner into two TeamState views. Pure: the same RawTurn always
builds an equal Snapshot, and nothing survives into the next turn except
the site geometry the builder was created with.

Lenient parsing
---------------
Records with an unknown discriminant (structure type, barracks unit type,
unit type, owner) or an unknown site id are dropped with a DEBUG line
instead of failing the turn. Malformed records never get this far; the
protocol reader rejects them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from RoyaleBot.logger import get_logger
from RoyaleBot.world.entities import (
    BARRACKS_UNIT_TYPES,
    BarracksInfo,
    MineInfo,
    Position,
    Site,
    Structure,
    StructureKind,
    Team,
    TowerInfo,
    Unit,
    UnitType,
    team_from_wire,
)

log = get_logger()


# ---------------------------------------------------------------------------
# Raw records (one per input line)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SiteRecord:
    site_id: int
    gold_available: int
    max_mine_size: int
    structure_type: int
    owner: int
    param1: int
    param2: int


@dataclass(frozen=True)
class UnitRecord:
    x: int
    y: int
    owner: int
    unit_type: int
    health: int


@dataclass(frozen=True)
class RawTurn:
    gold: int
    touched_site_id: int
    sites: tuple[SiteRecord, ...]
    units: tuple[UnitRecord, ...]


# ---------------------------------------------------------------------------
# Team and world views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TeamState:
    """
    Everything one side owns this turn.

    Collections keep input order; policies that need a spatial order build
    their own sorted view with RoyaleBot.world.spatial.nearest_first.
    """
    queen: Optional[Unit] = None
    knights: tuple[Unit, ...] = ()
    archers: tuple[Unit, ...] = ()
    giants: tuple[Unit, ...] = ()
    knight_barracks: tuple[Structure, ...] = ()
    archer_barracks: tuple[Structure, ...] = ()
    giant_barracks: tuple[Structure, ...] = ()
    towers: tuple[Structure, ...] = ()
    mines: tuple[Structure, ...] = ()

    def barracks_for(self, unit_type: UnitType) -> tuple[Structure, ...]:
        if unit_type is UnitType.KNIGHT:
            return self.knight_barracks
        if unit_type is UnitType.ARCHER:
            return self.archer_barracks
        if unit_type is UnitType.GIANT:
            return self.giant_barracks
        return ()

    @property
    def all_barracks(self) -> tuple[Structure, ...]:
        return self.knight_barracks + self.archer_barracks + self.giant_barracks

    @property
    def army_size(self) -> int:
        return len(self.knights) + len(self.archers) + len(self.giants)

    @property
    def site_count(self) -> int:
        return len(self.all_barracks) + len(self.towers) + len(self.mines)


@dataclass(frozen=True)
class Snapshot:
    gold: int
    touched_site_id: int
    empty_sites: tuple[Structure, ...]
    friendly: TeamState
    enemy: TeamState
    turn: int = 0

    def team(self, team: Team) -> TeamState:
        return self.friendly if team is Team.FRIENDLY else self.enemy


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

@dataclass
class _TeamBuckets:
    """Mutable accumulator used only while one snapshot is being built."""
    queen: Optional[Unit] = None
    knights: list[Unit] = field(default_factory=list)
    archers: list[Unit] = field(default_factory=list)
    giants: list[Unit] = field(default_factory=list)
    knight_barracks: list[Structure] = field(default_factory=list)
    archer_barracks: list[Structure] = field(default_factory=list)
    giant_barracks: list[Structure] = field(default_factory=list)
    towers: list[Structure] = field(default_factory=list)
    mines: list[Structure] = field(default_factory=list)

    def add_structure(self, structure: Structure) -> None:
        if structure.kind is StructureKind.TOWER:
            self.towers.append(structure)
        elif structure.kind is StructureKind.MINE:
            self.mines.append(structure)
        elif structure.kind is StructureKind.BARRACKS:
            unit_type = structure.barracks.unit_type
            if unit_type is UnitType.KNIGHT:
                self.knight_barracks.append(structure)
            elif unit_type is UnitType.ARCHER:
                self.archer_barracks.append(structure)
            else:
                self.giant_barracks.append(structure)

    def add_unit(self, unit: Unit) -> None:
        if unit.unit_type is UnitType.QUEEN:
            self.queen = unit
        elif unit.unit_type is UnitType.KNIGHT:
            self.knights.append(unit)
        elif unit.unit_type is UnitType.ARCHER:
            self.archers.append(unit)
        else:
            self.giants.append(unit)

    def freeze(self) -> TeamState:
        return TeamState(
            queen=self.queen,
            knights=tuple(self.knights),
            archers=tuple(self.archers),
            giants=tuple(self.giants),
            knight_barracks=tuple(self.knight_barracks),
            archer_barracks=tuple(self.archer_barracks),
            giant_barracks=tuple(self.giant_barracks),
            towers=tuple(self.towers),
            mines=tuple(self.mines),
        )


class SnapshotBuilder:
    """
    Builds a Snapshot from a RawTurn against the map-static site geometry.

    One builder lives for the whole game; build() keeps no state between
    calls.
    """

    def __init__(self, sites: dict[int, Site]) -> None:
        self.sites = dict(sites)

    def build(self, raw: RawTurn, turn: int = 0) -> Snapshot:
        buckets = {Team.FRIENDLY: _TeamBuckets(), Team.ENEMY: _TeamBuckets()}
        empty_sites: list[Structure] = []

        for record in raw.sites:
            structure = self.structure_from_record(record, turn=turn)
            if structure is None:
                continue
            if structure.kind is StructureKind.EMPTY:
                empty_sites.append(structure)
            else:
                buckets[structure.team].add_structure(structure)

        for record in raw.units:
            unit = self.unit_from_record(record, turn=turn)
            if unit is not None:
                buckets[unit.team].add_unit(unit)

        return Snapshot(
            gold=raw.gold,
            touched_site_id=raw.touched_site_id,
            empty_sites=tuple(empty_sites),
            friendly=buckets[Team.FRIENDLY].freeze(),
            enemy=buckets[Team.ENEMY].freeze(),
            turn=turn,
        )

    # ── Record conversion ────────────────────────────────────────────────

    def structure_from_record(self, record: SiteRecord, turn: int = 0) -> Optional[Structure]:
        """Convert one site record, or return None when it has to be dropped."""
        site = self.sites.get(record.site_id)
        if site is None:
            log.debug("Dropping record for unknown site %d", record.site_id, turn=turn)
            return None

        try:
            kind = StructureKind(record.structure_type)
        except ValueError:
            log.debug(
                "Dropping site %d: unknown structure type %d",
                record.site_id, record.structure_type, turn=turn,
            )
            return None

        if kind is StructureKind.EMPTY:
            return Structure(
                site=site,
                kind=kind,
                team=Team.NONE,
                gold_available=record.gold_available,
                max_mine_size=record.max_mine_size,
            )

        team = team_from_wire(record.owner)
        if team is None or team is Team.NONE:
            log.debug(
                "Dropping site %d: %s without an owner (%d)",
                record.site_id, kind.name, record.owner, turn=turn,
            )
            return None

        if kind is StructureKind.TOWER:
            payload = TowerInfo(health=record.param1, attack_radius=record.param2)
        elif kind is StructureKind.MINE:
            payload = MineInfo(income_level=record.param1)
        else:
            unit_type = BARRACKS_UNIT_TYPES.get(record.param2)
            if unit_type is None:
                log.debug(
                    "Dropping site %d: unknown barracks unit type %d",
                    record.site_id, record.param2, turn=turn,
                )
                return None
            payload = BarracksInfo(unit_type=unit_type, turns_until_ready=record.param1)

        return Structure(
            site=site,
            kind=kind,
            team=team,
            gold_available=record.gold_available,
            max_mine_size=record.max_mine_size,
            payload=payload,
        )

    def unit_from_record(self, record: UnitRecord, turn: int = 0) -> Optional[Unit]:
        """Convert one unit record, or return None when it has to be dropped."""
        try:
            unit_type = UnitType(record.unit_type)
        except ValueError:
            log.debug("Dropping unit: unknown unit type %d", record.unit_type, turn=turn)
            return None

        team = team_from_wire(record.owner)
        if team is None or team is Team.NONE:
            log.debug("Dropping %s: unknown owner %d", unit_type.name, record.owner, turn=turn)
            return None

        return Unit(
            position=Position(record.x, record.y),
            team=team,
            unit_type=unit_type,
            health=record.health,
        )
