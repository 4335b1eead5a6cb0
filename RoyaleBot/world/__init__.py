"""
RoyaleBot.world - typed view of one turn of the game.

Public API
----------
    from RoyaleBot.world import (
        Site,
        Snapshot,
        SnapshotBuilder,
        TeamState,
        EconomyLedger,
        surface_distance,
        nearest_first,
    )
    from RoyaleBot.world.entities import StructureKind, Team, UnitType
    from RoyaleBot.world.snapshot import RawTurn, SiteRecord, UnitRecord
"""

from RoyaleBot.world.entities import (
    Position,
    Site,
    Structure,
    StructureKind,
    Team,
    Unit,
    UnitType,
)
from RoyaleBot.world.ledger import EconomyLedger
from RoyaleBot.world.snapshot import (
    RawTurn,
    SiteRecord,
    Snapshot,
    SnapshotBuilder,
    TeamState,
    UnitRecord,
)
from RoyaleBot.world.spatial import nearest, nearest_first, surface_distance

__all__ = [
    "Position",
    "Site",
    "Structure",
    "StructureKind",
    "Team",
    "Unit",
    "UnitType",
    "EconomyLedger",
    "RawTurn",
    "SiteRecord",
    "Snapshot",
    "SnapshotBuilder",
    "TeamState",
    "UnitRecord",
    "nearest",
    "nearest_first",
    "surface_distance",
]
