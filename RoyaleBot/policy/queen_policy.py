"""
Queen policy - ordered rule chain for the single queen command per turn.

Re-evaluated from scratch every turn. Rules are checked in order; the
first one that returns an action wins and the rest are never looked at.
If nothing fires the queen waits.

Priority table
--------------
  1. upgrade_mine        safe, and a friendly mine is below its max size
  2. claim_mine          safe, too few mines, an empty site still has gold
  3. missing_barracks    a needed barracks type is absent (Archer > Giant > Knight)
  4. repair_tower        safe, and a friendly tower is below the target health
  5. raise_tower         fewer towers than the configured maximum
  6. retreat_to_archers  fall back onto the first archer barracks
  7. WAIT                default

Rules 1–5 need an empty site somewhere on the map; when every site is
taken they are skipped and the chain goes straight to the retreat. The
queen-safety gate (rules 1, 2 and 4) comes from the needs assessment.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Optional

from RoyaleBot.logger import get_logger
from RoyaleBot.policy.actions import BuildTarget, QueenAction
from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.policy.needs import NeedsAssessment
from RoyaleBot.world.entities import Structure, UnitType
from RoyaleBot.world.snapshot import Snapshot
from RoyaleBot.world.spatial import nearest_first

log = get_logger()


# ── Rule context ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class QueenContext:
    """
    Read-only inputs shared by every rule, plus distance-sorted views.

    The sorted views are built lazily and at most once per turn; they are
    new tuples, the snapshot's own collections keep input order.
    """
    snapshot: Snapshot
    needs: NeedsAssessment
    config: PolicyConfig

    @cached_property
    def empty_sites(self) -> tuple[Structure, ...]:
        return nearest_first(
            self.snapshot.friendly.queen,
            self.snapshot.empty_sites,
            farthest=self.config.expand_farthest_first,
        )

    @cached_property
    def mines(self) -> tuple[Structure, ...]:
        return nearest_first(self.snapshot.friendly.queen, self.snapshot.friendly.mines)

    @cached_property
    def towers(self) -> tuple[Structure, ...]:
        return nearest_first(self.snapshot.friendly.queen, self.snapshot.friendly.towers)


# ── Rule dataclass ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class _QueenRule:
    """
    One entry in the priority table.

    decide(ctx) → an action when the rule fires, None to fall through.
    requires_empty_site means the rule is skipped when no site is free.
    """
    name: str
    decide: Callable[[QueenContext], Optional[QueenAction]]
    requires_empty_site: bool = True


@dataclass(frozen=True)
class QueenDecision:
    rule: str
    action: QueenAction


# ── Rules ─────────────────────────────────────────────────────────────────────

def _upgrade_mine(ctx: QueenContext) -> Optional[QueenAction]:
    if not ctx.needs.queen_safe:
        return None
    for mine in ctx.mines:
        if mine.mine.income_level < mine.max_mine_size:
            return QueenAction.build(mine.site_id, BuildTarget.MINE)
    return None


def _claim_mine(ctx: QueenContext) -> Optional[QueenAction]:
    if not ctx.needs.queen_safe:
        return None
    if len(ctx.snapshot.friendly.mines) >= ctx.config.min_mines:
        return None
    for site in ctx.empty_sites:
        if site.gold_available != 0:
            return QueenAction.build(site.site_id, BuildTarget.MINE)
    return None


def _missing_barracks(ctx: QueenContext) -> Optional[QueenAction]:
    needs = ctx.needs
    friendly = ctx.snapshot.friendly
    preference = (
        (UnitType.ARCHER, needs.need_archers_barracks),
        (UnitType.GIANT,  needs.need_giants_barracks),
        (UnitType.KNIGHT, needs.need_knights_barracks),
    )
    for unit_type, needed in preference:
        if needed and not friendly.barracks_for(unit_type):
            return QueenAction.build(
                ctx.empty_sites[0].site_id, BuildTarget.barracks_for(unit_type)
            )
    return None


def _repair_tower(ctx: QueenContext) -> Optional[QueenAction]:
    if not ctx.needs.queen_safe:
        return None
    for tower in ctx.towers:
        if tower.tower.health < ctx.config.target_tower_health:
            return QueenAction.build(tower.site_id, BuildTarget.TOWER)
    return None


def _raise_tower(ctx: QueenContext) -> Optional[QueenAction]:
    if len(ctx.snapshot.friendly.towers) >= ctx.config.max_friendly_towers:
        return None
    return QueenAction.build(ctx.empty_sites[0].site_id, BuildTarget.TOWER)


def _retreat_to_archers(ctx: QueenContext) -> Optional[QueenAction]:
    archer_barracks = ctx.snapshot.friendly.archer_barracks
    if not archer_barracks:
        return None
    return QueenAction.move(archer_barracks[0].position)


# ── Priority table ────────────────────────────────────────────────────────────

_RULES: tuple[_QueenRule, ...] = (
    _QueenRule("upgrade_mine",       _upgrade_mine),
    _QueenRule("claim_mine",         _claim_mine),
    _QueenRule("missing_barracks",   _missing_barracks),
    _QueenRule("repair_tower",       _repair_tower),
    _QueenRule("raise_tower",        _raise_tower),
    _QueenRule("retreat_to_archers", _retreat_to_archers, requires_empty_site=False),
)


# ── Selector ──────────────────────────────────────────────────────────────────

def select_queen_action(
    snapshot: Snapshot,
    needs: NeedsAssessment,
    config: PolicyConfig,
) -> QueenDecision:
    """Return the first action from the priority table, or WAIT."""
    if snapshot.friendly.queen is None:
        log.warning("No friendly queen in snapshot, waiting", turn=snapshot.turn)
        return QueenDecision("no_queen", QueenAction.wait())

    ctx = QueenContext(snapshot=snapshot, needs=needs, config=config)
    has_empty_site = bool(snapshot.empty_sites)

    for rule in _RULES:
        if rule.requires_empty_site and not has_empty_site:
            continue
        action = rule.decide(ctx)
        if action is not None:
            return QueenDecision(rule.name, action)

    return QueenDecision("wait", QueenAction.wait())
