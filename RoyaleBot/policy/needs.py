"""
Needs assessment - Stage 2 of the turn pipeline.

Derives the per-turn signals both policies read: queen safety, army
health, enemy aggression, which unit types we need, and which barracks
types are missing. Pure deterministic math over one Snapshot.

apply_reservations() is the only part that touches the ledger: it sets
aside gold for archers and giants we need but cannot buy yet, so that
knight production does not eat the savings.
"""

from __future__ import annotations

from dataclasses import dataclass

from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.world.ledger import EconomyLedger
from RoyaleBot.world.snapshot import Snapshot
from RoyaleBot.world.spatial import nearest, surface_distance


@dataclass(frozen=True)
class NeedsAssessment:
    """The compressed decision signals for a single turn."""

    # Safety
    queen_safe: bool = True

    # Army health
    avg_archer_health: int = 100
    archers_expiring_soon: bool = False

    # Enemy pressure
    enemy_aggressive: bool = False

    # Unit needs
    need_archers: bool = False
    need_giants: bool = False

    # Missing production
    need_archers_barracks: bool = False
    need_giants_barracks: bool = False
    need_knights_barracks: bool = False

    @property
    def any_barracks_needed(self) -> bool:
        return (
            self.need_archers_barracks
            or self.need_giants_barracks
            or self.need_knights_barracks
        )


def is_queen_safe(snapshot: Snapshot, config: PolicyConfig) -> bool:
    """
    False when the nearest enemy knight is inside the safety radius.

    Only the nearest knight is checked. Without a friendly queen there is
    nothing to protect and the answer is True.
    """
    queen = snapshot.friendly.queen
    if queen is None:
        return True
    closest = nearest(queen, snapshot.enemy.knights)
    if closest is None:
        return True
    return surface_distance(queen, closest) >= config.queen_safe_radius


def average_archer_health(snapshot: Snapshot, config: PolicyConfig) -> int:
    archers = snapshot.friendly.archers
    if not archers:
        return config.neutral_archer_health
    return sum(archer.health for archer in archers) // len(archers)


def is_enemy_aggressive(snapshot: Snapshot) -> bool:
    """Enemy knights on the field, or an enemy knight barracks mid-production."""
    if snapshot.enemy.knights:
        return True
    return any(
        barracks.barracks.turns_until_ready > 0
        for barracks in snapshot.enemy.knight_barracks
    )


def assess_needs(snapshot: Snapshot, config: PolicyConfig) -> NeedsAssessment:
    friendly = snapshot.friendly
    enemy = snapshot.enemy

    avg_health = average_archer_health(snapshot, config)
    expiring = bool(friendly.archers) and avg_health < config.min_avg_archer_health
    aggressive = is_enemy_aggressive(snapshot)

    need_archers = aggressive and (
        len(friendly.archers) < config.max_archers_before_saturation or expiring
    )
    need_giants = (
        not friendly.giants
        and len(enemy.towers) > config.enemy_towers_trigger_giant
    )

    barracks_slots = snapshot.gold // config.avg_gold_per_barracks_slot
    need_knights_barracks = (
        not friendly.knight_barracks
        and len(friendly.all_barracks) < barracks_slots
    )

    return NeedsAssessment(
        queen_safe=is_queen_safe(snapshot, config),
        avg_archer_health=avg_health,
        archers_expiring_soon=expiring,
        enemy_aggressive=aggressive,
        need_archers=need_archers,
        need_giants=need_giants,
        need_archers_barracks=need_archers and not friendly.archer_barracks,
        need_giants_barracks=need_giants and not friendly.giant_barracks,
        need_knights_barracks=need_knights_barracks,
    )


def apply_reservations(needs: NeedsAssessment, ledger: EconomyLedger, config: PolicyConfig) -> None:
    """Reserve gold for needed archers/giants we cannot pay for yet."""
    if needs.need_archers and ledger.available_gold() < config.price_of_archer:
        ledger.reserve(config.price_of_archer)
    if needs.need_giants and ledger.available_gold() < config.price_of_giant:
        ledger.reserve(config.price_of_giant)
