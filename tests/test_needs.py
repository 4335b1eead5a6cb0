"""Test the per-turn needs assessment and gold reservations."""
import dataclasses

from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.policy.needs import (
    NeedsAssessment,
    apply_reservations,
    assess_needs,
    average_archer_health,
    is_enemy_aggressive,
    is_queen_safe,
)
from RoyaleBot.world.ledger import EconomyLedger
from tests.factories import (
    ENEMY,
    KNIGHT,
    archer,
    barracks,
    empty,
    giant,
    knight,
    make_snapshot,
    queen,
    tower,
)

FAR_KNIGHT = knight(1100, 100)


# ── Queen safety ──────────────────────────────────────────────────────────────

def test_knight_inside_safe_radius_makes_queen_unsafe(sites):
    """Knight 70 px from the queen centre is 40 px away surface to surface."""
    config = PolicyConfig(queen_safe_radius=60)
    snap = make_snapshot(sites, [], [queen(100, 300), knight(170, 300)])
    assert not is_queen_safe(snap, config)


def test_knight_exactly_at_safe_radius_is_safe(sites):
    config = PolicyConfig(queen_safe_radius=60)
    snap = make_snapshot(sites, [], [queen(100, 300), knight(190, 300)])
    assert is_queen_safe(snap, config)


def test_only_enemy_knights_threaten_the_queen(sites):
    config = PolicyConfig(queen_safe_radius=60)
    units = [queen(100, 300), knight(120, 300, owner=0), archer(110, 300, owner=ENEMY)]
    assert is_queen_safe(make_snapshot(sites, [], units), config)


def test_no_queen_counts_as_safe(sites, config):
    assert is_queen_safe(make_snapshot(sites, [], [knight(0, 0)]), config)


# ── Army health and aggression ────────────────────────────────────────────────

def test_average_archer_health_is_floored(sites, config):
    snap = make_snapshot(sites, [], [archer(0, 0, hp=45), archer(0, 0, hp=20)])
    assert average_archer_health(snap, config) == 32


def test_average_archer_health_is_neutral_without_archers(sites, config):
    snap = make_snapshot(sites, [], [])
    assert average_archer_health(snap, config) == 100


def test_knights_on_the_field_are_aggressive(sites):
    assert is_enemy_aggressive(make_snapshot(sites, [], [FAR_KNIGHT]))


def test_enemy_knight_barracks_in_production_is_aggressive(sites):
    busy = make_snapshot(sites, [barracks(3, KNIGHT, owner=ENEMY, ready_in=3)], [])
    idle = make_snapshot(sites, [barracks(3, KNIGHT, owner=ENEMY, ready_in=0)], [])
    assert is_enemy_aggressive(busy)
    assert not is_enemy_aggressive(idle)


# ── Need flags ────────────────────────────────────────────────────────────────

def test_need_archers_when_aggressive_and_short(sites, config):
    snap = make_snapshot(sites, [], [queen(100, 300), FAR_KNIGHT, archer(0, 0)])
    needs = assess_needs(snap, config)
    assert needs.enemy_aggressive
    assert needs.need_archers
    assert needs.need_archers_barracks


def test_saturated_healthy_archers_are_enough(sites, config):
    archers = [archer(0, 0, hp=45) for _ in range(4)]
    needs = assess_needs(make_snapshot(sites, [], [FAR_KNIGHT, *archers]), config)
    assert not needs.archers_expiring_soon
    assert not needs.need_archers


def test_expiring_archers_are_replaced_even_when_saturated(sites, config):
    archers = [archer(0, 0, hp=10) for _ in range(4)]
    needs = assess_needs(make_snapshot(sites, [], [FAR_KNIGHT, *archers]), config)
    assert needs.archers_expiring_soon
    assert needs.need_archers


def test_no_archers_needed_against_a_passive_enemy(sites, config):
    needs = assess_needs(make_snapshot(sites, [], [queen(100, 300)]), config)
    assert not needs.need_archers
    assert not needs.need_archers_barracks


def test_existing_archer_barracks_clears_the_barracks_need(sites, config):
    snap = make_snapshot(sites, [barracks(2, 1)], [FAR_KNIGHT])
    needs = assess_needs(snap, config)
    assert needs.need_archers
    assert not needs.need_archers_barracks


def test_need_giants_against_many_towers(sites, config):
    towers = [tower(i, owner=ENEMY) for i in range(1, 6)]
    needs = assess_needs(make_snapshot(sites, towers, []), config)
    assert needs.need_giants
    assert needs.need_giants_barracks


def test_one_giant_is_enough(sites, config):
    towers = [tower(i, owner=ENEMY) for i in range(1, 6)]
    needs = assess_needs(make_snapshot(sites, towers, [giant(0, 0)]), config)
    assert not needs.need_giants


def test_tower_count_at_trigger_does_not_need_giants(sites, config):
    towers = [tower(i, owner=ENEMY) for i in range(1, 5)]
    needs = assess_needs(make_snapshot(sites, towers, []), config)
    assert not needs.need_giants


def test_need_knights_barracks_scales_with_gold(sites, config):
    assert assess_needs(make_snapshot(sites, [empty(0)], [], gold=130), config).need_knights_barracks
    assert not assess_needs(make_snapshot(sites, [empty(0)], [], gold=50), config).need_knights_barracks


def test_knight_barracks_present_clears_knight_need(sites, config):
    snap = make_snapshot(sites, [barracks(1, KNIGHT, ready_in=5)], [], gold=500)
    assert not assess_needs(snap, config).need_knights_barracks


def test_assessment_is_deterministic(sites, config):
    snap = make_snapshot(sites, [barracks(3, KNIGHT, owner=ENEMY, ready_in=1)], [queen(1, 1)], gold=200)
    assert assess_needs(snap, config) == assess_needs(snap, config)


# ── Reservations ─────────────────────────────────────────────────────────────

def test_reserve_for_archers_we_cannot_afford(config):
    ledger = EconomyLedger.open(60)
    apply_reservations(NeedsAssessment(need_archers=True), ledger, config)
    assert ledger.reserved == 100


def test_no_reservation_when_affordable(config):
    ledger = EconomyLedger.open(150)
    apply_reservations(NeedsAssessment(need_archers=True), ledger, config)
    assert ledger.reserved == 0


def test_reservations_stack(config):
    ledger = EconomyLedger.open(50)
    apply_reservations(NeedsAssessment(need_archers=True, need_giants=True), ledger, config)
    assert ledger.reserved == 240
    assert ledger.gold == 50


def test_giant_reservation_sees_archer_reservation(config):
    """120 covers an archer but not an archer plus a giant."""
    ledger = EconomyLedger.open(120)
    apply_reservations(NeedsAssessment(need_archers=True, need_giants=True), ledger, config)
    assert ledger.reserved == 140


def test_custom_prices_drive_reservations():
    config = dataclasses.replace(PolicyConfig(), price_of_archer=30)
    ledger = EconomyLedger.open(40)
    apply_reservations(NeedsAssessment(need_archers=True), ledger, config)
    assert ledger.reserved == 0
