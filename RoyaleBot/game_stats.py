"""
GameStatsTracker - end-of-game performance metrics.

Accumulates statistics throughout the match and writes a formatted summary
to the log when the referee closes the input. The summary is emitted as a
GAME_STATS game-event so it appears at GAME level in the log file and is
easy to grep (royale_log_analyzer.py picks it up as well).

The tracker only observes. Nothing in here feeds back into a decision.

Tracked statistics
------------------
Activity:
  turns_played       Turns the bot answered.
  queen_commands     Queen commands issued, by kind (WAIT / MOVE / BUILD).
  builds             BUILD commands, by structure name.
  units_trained      Units ordered, by unit type.
  gold_spent         Total gold charged by the training policy.

Peaks (best values seen at any single turn):
  peak_gold          Most gold held at the start of a turn.
  peak_army          Largest friendly army (knights + archers + giants).
  peak_sites         Most sites owned at once (barracks, towers, mines).

Safety and timing:
  unsafe_turns       Turns where an enemy knight was inside the safety radius.
  slowest_turn_ms    Longest decision time observed.
  over_budget_turns  Turns slower than the configured budget.

Integration
-----------
    # on_start
    self.game_stats = GameStatsTracker(turn_budget_ms)

    # on_step (every turn)
    self.game_stats.update(snapshot, decision, elapsed_ms)

    # end of input
    self.game_stats.finalize(reason, end_turn)
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from RoyaleBot.logger import get_logger
from RoyaleBot.policy.actions import QueenActionKind

log = get_logger()

if TYPE_CHECKING:
    from RoyaleBot.royale_bot import TurnDecision
    from RoyaleBot.world.snapshot import Snapshot


class GameStatsTracker:
    """
    Lightweight accumulator for all end-game statistics.

    Call update()   once per turn, after the decision is made.
    Call finalize() once, when the game is over.
    """

    def __init__(self, turn_budget_ms: float = 50.0) -> None:
        self.turn_budget_ms = turn_budget_ms

        # ── Activity ───────────────────────────────────────────────────────
        self.turns_played: int = 0
        self.queen_commands: Counter[str] = Counter()
        self.builds: Counter[str] = Counter()
        self.units_trained: Counter[str] = Counter()
        self.gold_spent: int = 0

        # ── Peak stats ─────────────────────────────────────────────────────
        self.peak_gold: int = 0
        self.peak_army: int = 0
        self.peak_sites: int = 0

        # ── Safety / timing ────────────────────────────────────────────────
        self.unsafe_turns: int = 0
        self.slowest_turn_ms: float = 0.0
        self.over_budget_turns: int = 0

    # ── Per-turn sampling ─────────────────────────────────────────────────────

    def update(self, snapshot: "Snapshot", decision: "TurnDecision", elapsed_ms: float) -> None:
        self.turns_played += 1

        queen = decision.queen.action
        self.queen_commands[queen.kind.value] += 1
        if queen.kind is QueenActionKind.BUILD:
            self.builds[queen.target.value] += 1

        for order in decision.training.orders:
            self.units_trained[order.unit_type.name] += 1
        self.gold_spent += decision.training.gold_spent

        self.peak_gold = max(self.peak_gold, snapshot.gold)
        self.peak_army = max(self.peak_army, snapshot.friendly.army_size)
        self.peak_sites = max(self.peak_sites, snapshot.friendly.site_count)

        if not decision.needs.queen_safe:
            self.unsafe_turns += 1

        self.slowest_turn_ms = max(self.slowest_turn_ms, elapsed_ms)
        if elapsed_ms > self.turn_budget_ms:
            self.over_budget_turns += 1

    # ── Finalization ──────────────────────────────────────────────────────────

    def finalize(self, reason: str, end_turn: int) -> str:
        """Log the full report at GAME level and return it."""
        report = self._format_report(reason)
        log.game_event("GAME_STATS", "\n" + report, turn=end_turn)
        return report

    def _format_report(self, reason: str) -> str:
        W = 52

        def row(label: str, value: str) -> str:
            return f"  {label:<24} : {value}"

        def counts(counter: Counter) -> str:
            if not counter:
                return "none"
            return ", ".join(f"{name}={count}" for name, count in sorted(counter.items()))

        sep_thick = "═" * W
        sep_thin  = "─" * W

        # ── header ──────────────────────────────────────────────────────
        lines = [
            sep_thick,
            "  END-OF-GAME STATS",
            sep_thick,
            row("End Reason",        reason),
            row("Turns Played",      str(self.turns_played)),
        ]

        # ── activity ─────────────────────────────────────────────────────
        lines += [
            sep_thin,
            "  ACTIVITY",
            row("Queen Commands",    counts(self.queen_commands)),
            row("Builds",            counts(self.builds)),
            row("Units Trained",     counts(self.units_trained)),
            row("Gold Spent",        f"{self.gold_spent:,}"),
        ]

        # ── peaks ────────────────────────────────────────────────────────
        lines += [
            sep_thin,
            "  PEAKS  (best values achieved during match)",
            row("Peak Gold",         str(self.peak_gold)),
            row("Largest Army",      f"{self.peak_army} units"),
            row("Most Sites Owned",  str(self.peak_sites)),
        ]

        # ── safety / timing ──────────────────────────────────────────────
        lines += [
            sep_thin,
            "  TIMING",
            row("Unsafe Queen Turns", str(self.unsafe_turns)),
            row("Slowest Turn (ms)", f"{self.slowest_turn_ms:.2f}"),
            row("Over-Budget Turns", str(self.over_budget_turns)),
            sep_thick,
        ]

        return "\n".join(lines)
