"""Test the queen rule chain against hand-built snapshots."""
import dataclasses
import re

import pytest

from RoyaleBot.policy.actions import BuildTarget, QueenActionKind
from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.policy.needs import assess_needs
from RoyaleBot.policy.queen_policy import select_queen_action
from RoyaleBot.world.entities import Position, Site
from tests.factories import (
    ARCHER,
    ENEMY,
    archer,
    barracks,
    empty,
    knight,
    make_snapshot,
    mine,
    queen,
    standard_sites,
    tower,
)

QUEEN = queen(100, 300)
FAR_KNIGHT = knight(1100, 100)
NO_MINES = PolicyConfig(min_mines=0)


def decide(sites, records, units, gold=0, config=None):
    config = config or PolicyConfig()
    snap = make_snapshot(sites, records, units, gold=gold)
    return select_queen_action(snap, assess_needs(snap, config), config)


# ── Mines ─────────────────────────────────────────────────────────────────────

def test_claim_mine_on_empty_site_with_gold(sites):
    """gold=150, one empty site with 50 gold, no mines, queen safe."""
    decision = decide(sites, [empty(2, gold=50)], [QUEEN], gold=150)
    assert decision.rule == "claim_mine"
    assert decision.action.to_command() == "BUILD 2 MINE"


def test_upgrade_nearest_mine_below_max(sites):
    records = [mine(0, income=3), mine(3), mine(1), empty(5)]
    decision = decide(sites, records, [QUEEN])
    assert decision.rule == "upgrade_mine"
    assert decision.action.to_command() == "BUILD 1 MINE"


def test_claim_mine_skips_depleted_sites(sites):
    decision = decide(sites, [empty(0, gold=0), empty(4, gold=80)], [QUEEN])
    assert decision.action.to_command() == "BUILD 4 MINE"


def test_claim_mine_stops_at_min_mines(sites):
    records = [mine(i, income=3) for i in range(3)] + [empty(4), empty(5)]
    decision = decide(sites, records, [QUEEN])
    assert decision.rule != "claim_mine"


def test_farthest_first_expansion(sites):
    config = PolicyConfig(expand_farthest_first=True)
    records = [empty(1), empty(3), empty(5, gold=0)]
    decision = decide(sites, records, [QUEEN], config=config)
    assert decision.action.to_command() == "BUILD 3 MINE"


# ── Safety gate ───────────────────────────────────────────────────────────────

def test_unsafe_queen_skips_mine_and_repair_rules(sites):
    """Enemy knight 40 px away with a 60 px safety radius."""
    config = PolicyConfig(queen_safe_radius=60)
    records = [
        empty(0, gold=100),
        mine(1, income=1),
        empty(2, gold=100),
        tower(3, hp=100),
        barracks(4, ARCHER),
        empty(5),
    ]
    decision = decide(sites, records, [QUEEN, knight(170, 300)], config=config)

    assert decision.rule == "raise_tower"
    assert decision.action.to_command() == "BUILD 0 TOWER"


def test_same_board_with_distant_knight_upgrades_the_mine(sites):
    config = PolicyConfig(queen_safe_radius=60)
    records = [empty(0), mine(1, income=1), tower(3, hp=100), barracks(4, ARCHER)]
    decision = decide(sites, records, [QUEEN, FAR_KNIGHT], config=config)
    assert decision.action.to_command() == "BUILD 1 MINE"


# ── Barracks ──────────────────────────────────────────────────────────────────

def test_archer_barracks_preferred_over_giant(sites):
    records = [empty(0)] + [tower(i, owner=ENEMY) for i in range(1, 6)]
    decision = decide(sites, records, [QUEEN, FAR_KNIGHT], config=NO_MINES)
    assert decision.rule == "missing_barracks"
    assert decision.action.target is BuildTarget.BARRACKS_ARCHER
    assert decision.action.to_command() == "BUILD 0 BARRACKS-ARCHER"


def test_giant_barracks_when_archers_are_covered():
    wide = {i: Site(site_id=i, position=Position(100 + 150 * i, 500), radius=40) for i in range(8)}
    records = (
        [barracks(0, ARCHER)]
        + [tower(i, owner=ENEMY) for i in range(1, 6)]
        + [empty(6), empty(7)]
    )
    decision = decide(wide, records, [QUEEN, FAR_KNIGHT], config=NO_MINES)
    assert decision.action.to_command() == "BUILD 6 BARRACKS-GIANT"


def test_knight_barracks_when_gold_allows(sites):
    decision = decide(sites, [empty(2), empty(3)], [QUEEN], gold=200, config=NO_MINES)
    assert decision.action.to_command() == "BUILD 2 BARRACKS-KNIGHT"


# ── Towers ────────────────────────────────────────────────────────────────────

def test_repair_nearest_weak_tower(sites):
    records = [tower(1, hp=700), tower(2, hp=100), tower(3, hp=50), empty(5)]
    decision = decide(sites, records, [QUEEN], config=NO_MINES)
    assert decision.rule == "repair_tower"
    assert decision.action.to_command() == "BUILD 2 TOWER"


def test_raise_tower_on_nearest_empty_site(sites):
    records = [tower(1), empty(5), empty(3)]
    decision = decide(sites, records, [QUEEN], config=NO_MINES)
    assert decision.rule == "raise_tower"
    assert decision.action.to_command() == "BUILD 3 TOWER"


# ── Fallbacks ─────────────────────────────────────────────────────────────────

def test_retreat_to_first_archer_barracks_when_towers_are_maxed(sites):
    records = [tower(i) for i in range(4)] + [barracks(4, ARCHER), empty(5)]
    decision = decide(sites, records, [QUEEN], config=NO_MINES)
    assert decision.rule == "retreat_to_archers"
    assert decision.action.kind is QueenActionKind.MOVE
    assert decision.action.to_command() == "MOVE 900 500"


def test_no_empty_site_skips_straight_to_retreat(sites):
    records = [mine(0), tower(1), tower(2), tower(3, hp=50), barracks(4, ARCHER), mine(5)]
    decision = decide(sites, records, [QUEEN], gold=500)
    assert decision.action.to_command() == "MOVE 900 500"


def test_no_empty_site_and_no_archer_barracks_waits(sites):
    records = [mine(i) for i in range(6)]
    decision = decide(sites, records, [QUEEN], gold=500)
    assert decision.rule == "wait"
    assert decision.action.to_command() == "WAIT"


def test_missing_queen_waits(sites):
    decision = decide(sites, [empty(0)], [archer(10, 10)], gold=300)
    assert decision.rule == "no_queen"
    assert decision.action.to_command() == "WAIT"


def test_selection_leaves_snapshot_order_alone(sites, config):
    snap = make_snapshot(sites, [empty(5), empty(0), empty(3)], [QUEEN])
    select_queen_action(snap, assess_needs(snap, config), config)
    assert [s.site_id for s in snap.empty_sites] == [5, 0, 3]


def test_selection_is_deterministic(sites, config):
    snap = make_snapshot(sites, [empty(5), mine(0), tower(2, hp=10)], [QUEEN, FAR_KNIGHT], gold=90)
    needs = assess_needs(snap, config)
    assert select_queen_action(snap, needs, config) == select_queen_action(snap, needs, config)


COMMAND = re.compile(r"^(WAIT|MOVE -?\d+ -?\d+|BUILD \d+ (MINE|TOWER|BARRACKS-(KNIGHT|ARCHER|GIANT)))$")


@pytest.mark.parametrize(
    "records, units, gold",
    [
        ([], [QUEEN], 0),
        ([empty(0)], [QUEEN], 0),
        ([empty(0, gold=0)], [QUEEN, knight(120, 300)], 1000),
        ([mine(0), barracks(1, ARCHER)], [QUEEN], 10),
        ([tower(i, owner=ENEMY) for i in range(5)] + [empty(5)], [QUEEN, FAR_KNIGHT], 300),
    ],
)
def test_every_decision_is_one_legal_command(records, units, gold):
    decision = decide(standard_sites(), records, units, gold=gold)
    assert COMMAND.match(decision.action.to_command())
