"""
Royale Bot - Main Bot Class

The per-turn pipeline:
- Stage 1: raw referee records → immutable Snapshot
- Stage 2: needs assessment + gold reservations on a fresh ledger
- Stage 3: queen rule chain (one command)
- Stage 4: training policy (spends the ledger)
- Stats, decision logs and turn timing on the side
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from RoyaleBot.game_stats import GameStatsTracker
from RoyaleBot.logger import get_logger
from RoyaleBot.policy.actions import TrainDirective
from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.policy.needs import NeedsAssessment, apply_reservations, assess_needs
from RoyaleBot.policy.queen_policy import QueenDecision, select_queen_action
from RoyaleBot.policy.training_policy import plan_training
from RoyaleBot.world.entities import Site
from RoyaleBot.world.ledger import EconomyLedger
from RoyaleBot.world.snapshot import RawTurn, Snapshot, SnapshotBuilder


log = get_logger()


@dataclass(frozen=True)
class TurnDecision:
    """Everything decided for one turn; commands() is what goes on the wire."""
    queen: QueenDecision
    training: TrainDirective
    needs: NeedsAssessment

    def commands(self) -> tuple[str, str]:
        return self.queen.action.to_command(), self.training.to_command()


class RoyaleBot:
    """
    Owns the map geometry and the turn counter; everything else is rebuilt
    every turn from the snapshot.
    """

    def __init__(
        self,
        config: Optional[PolicyConfig] = None,
        name: str = "Royale Bot",
        turn_budget_ms: float = 50.0,
    ) -> None:
        self.config = config or PolicyConfig()
        self.name = name
        self.turn_budget_ms = turn_budget_ms
        self.turn: int = 0
        self.builder: Optional[SnapshotBuilder] = None
        self.game_stats = GameStatsTracker(turn_budget_ms)

    def on_start(self, sites: dict[int, Site]) -> None:
        """Store the map-static site geometry. Called once before the first turn."""
        self.builder = SnapshotBuilder(sites)
        log.game_event("GAME_START", f"Bot: {self.name} | sites={len(sites)}", turn=0)
        log.debug("Policy config: %s", self.config, turn=0)

    def on_step(self, raw: RawTurn) -> TurnDecision:
        """Main turn entry point - this is where the decisions happen."""
        if self.builder is None:
            raise RuntimeError("on_start() must be called before the first turn")

        turn = self.turn
        started = time.perf_counter()

        # STAGE 1: typed snapshot
        snapshot = self.builder.build(raw, turn=turn)
        built = time.perf_counter()
        self._log_snapshot(snapshot)

        # STAGE 2-4: decisions
        decision = self.decide(snapshot)
        finished = time.perf_counter()

        input_ms = (built - started) * 1000.0
        action_ms = (finished - built) * 1000.0
        total_ms = input_ms + action_ms
        log.debug("Timing | input=%.3f action=%.3f", input_ms, action_ms, turn=turn)
        if total_ms > self.turn_budget_ms:
            log.warning(
                "Turn took %.1f ms (budget %.1f ms)", total_ms, self.turn_budget_ms, turn=turn
            )

        self.game_stats.update(snapshot, decision, total_ms)
        self.turn += 1
        return decision

    def decide(self, snapshot: Snapshot) -> TurnDecision:
        """Run both policies against one snapshot."""
        turn = snapshot.turn
        ledger = EconomyLedger.open(snapshot.gold)

        needs = assess_needs(snapshot, self.config)
        apply_reservations(needs, ledger, self.config)
        log.signals(needs, ledger, turn=turn)

        queen = select_queen_action(snapshot, needs, self.config)
        training = plan_training(snapshot, needs, ledger, self.config)

        decision = TurnDecision(queen=queen, training=training, needs=needs)
        queen_line, train_line = decision.commands()
        log.decision("QueenPolicy", queen.rule, queen_line, turn=turn)
        log.decision("TrainingPolicy", _training_rule(training), train_line, turn=turn)
        return decision

    def on_end(self, reason: str) -> str:
        """Log the end of the game and the stats report."""
        log.game_event("GAME_END", f"turns={self.turn} | reason={reason}", turn=self.turn)
        return self.game_stats.finalize(reason, self.turn)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _log_snapshot(self, snapshot: Snapshot) -> None:
        friendly, enemy = snapshot.friendly, snapshot.enemy
        log.debug(
            "Snapshot | gold=%d touching=%d empty=%d | ours: K=%d A=%d G=%d towers=%d mines=%d barracks=%d"
            " | theirs: K=%d A=%d G=%d towers=%d mines=%d barracks=%d",
            snapshot.gold, snapshot.touched_site_id, len(snapshot.empty_sites),
            len(friendly.knights), len(friendly.archers), len(friendly.giants),
            len(friendly.towers), len(friendly.mines), len(friendly.all_barracks),
            len(enemy.knights), len(enemy.archers), len(enemy.giants),
            len(enemy.towers), len(enemy.mines), len(enemy.all_barracks),
            turn=snapshot.turn,
        )


def _training_rule(training: TrainDirective) -> str:
    if not training.orders:
        return "idle"
    return "+".join(sorted({order.unit_type.name.lower() for order in training.orders}))
