"""
Training policy - spends this turn's gold on ready barracks.

Spend order
-----------
  1. archers  when needed, at the first archer barracks
  2. giants   when needed, at the first giant barracks
  3. knights  every ready knight barracks, in input order, until gold
                runs out or dips below the reservation

Each purchase checks that the barracks is ready and that gold covers the
price before the ledger is charged. Specialty units ignore the
reservation (they are what it was made for); knights respect it.
"""

from __future__ import annotations

from typing import Optional

from RoyaleBot.logger import get_logger
from RoyaleBot.policy.actions import TrainDirective, TrainOrder
from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.policy.needs import NeedsAssessment
from RoyaleBot.world.entities import Structure, UnitType
from RoyaleBot.world.ledger import EconomyLedger
from RoyaleBot.world.snapshot import Snapshot

log = get_logger()


def _train_specialty(
    barracks: tuple[Structure, ...],
    unit_type: UnitType,
    price: int,
    ledger: EconomyLedger,
    turn: int,
) -> Optional[TrainOrder]:
    """Train one unit at the first barracks of its type, if ready and affordable."""
    if not barracks:
        return None
    first = barracks[0]
    if not first.barracks.is_ready:
        log.debug(
            "%s barracks %d busy for %d more turns",
            unit_type.name, first.site_id, first.barracks.turns_until_ready, turn=turn,
        )
        return None
    if not ledger.can_afford(price):
        return None
    ledger.spend(price)
    return TrainOrder(first.site_id, unit_type, price)


def plan_training(
    snapshot: Snapshot,
    needs: NeedsAssessment,
    ledger: EconomyLedger,
    config: PolicyConfig,
) -> TrainDirective:
    """Choose the barracks to train at this turn and charge the ledger."""
    friendly = snapshot.friendly
    turn = snapshot.turn
    orders: list[TrainOrder] = []

    if needs.need_archers:
        order = _train_specialty(
            friendly.archer_barracks, UnitType.ARCHER, config.price_of_archer, ledger, turn
        )
        if order is not None:
            orders.append(order)

    if needs.need_giants:
        order = _train_specialty(
            friendly.giant_barracks, UnitType.GIANT, config.price_of_giant, ledger, turn
        )
        if order is not None:
            orders.append(order)

    for barracks in friendly.knight_barracks:
        if ledger.gold < ledger.reserved:
            log.debug("Saving %d gold for archers/giants, knights paused", ledger.reserved, turn=turn)
            break
        if not ledger.can_afford(config.price_of_knight):
            break
        if not barracks.barracks.is_ready:
            continue
        ledger.spend(config.price_of_knight)
        orders.append(TrainOrder(barracks.site_id, UnitType.KNIGHT, config.price_of_knight))

    return TrainDirective(tuple(orders))
