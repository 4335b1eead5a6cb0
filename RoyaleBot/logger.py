"""
RoyaleBot Logger - turn-stamped logging for the bot.

Every record carries the turn it belongs to, and the rotating log file
keeps the whole game (signals, rule choices, stats) for replay and for
royale_log_analyzer.py. The referee reads commands from stdout, so the
console handler writes to stderr and never touches the command channel.

Usage
-----
    from RoyaleBot.logger import get_logger

    log = get_logger()
    log.debug("Raw site record: %s", record)
    log.warning("Turn took %.1f ms", elapsed_ms, turn=12)

    log.game_event("GAME_START", "Bot: Royale Bot | sites=24", turn=0)
    log.decision("QueenPolicy", "claim_mine", "BUILD 3 MINE", turn=12)
    log.signals(needs, ledger, turn=12)

The log file lives at  logs/royale_<timestamp>.log  next to run.py.
Set ROYALE_LOG_TO_FILE=0 to keep everything on stderr (the arena usually
has no writable working directory).
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


# ── Configuration ────────────────────────────────────────────────────────────

LOG_DIR          = Path("logs")          # Relative to CWD (i.e. project root)
LOG_LEVEL        = logging.DEBUG         # File log level  (very verbose)
CONSOLE_LEVEL    = logging.getLevelName(os.environ.get("ROYALE_CONSOLE_LEVEL", "INFO").upper())
LOG_TO_FILE      = os.environ.get("ROYALE_LOG_TO_FILE", "1") != "0"
LOG_BACKUP_COUNT = 10                    # How many old log files to keep
MAX_BYTES        = 5 * 1024 * 1024       # 5 MB per file before rotating


# ── Custom log levels ─────────────────────────────────────────────────────────

GAME_EVENT_LEVEL = 25   # between INFO (20) and WARNING (30)
DECISION_LEVEL   = 15   # between DEBUG (10) and INFO (20)

logging.addLevelName(GAME_EVENT_LEVEL, "GAME")
logging.addLevelName(DECISION_LEVEL,   "DECISION")


# ── Custom formatter ──────────────────────────────────────────────────────────

class RoyaleFormatter(logging.Formatter):
    """
    Adds a [turn] column when a 'turn' extra field is present, so log lines
    can be correlated directly to a specific game turn.

    Example output:
        2026-10-18 21:14:03.412 | INFO    |      - | Logger initialised
        2026-10-18 21:14:05.001 | GAME    |      0 | GAME_START | Bot: Royale Bot | sites=24
        2026-10-18 21:14:05.002 | DECISIO |     12 | QueenPolicy | rule=claim_mine cmd=BUILD 3 MINE
    """

    BASE_FMT = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(turn_col)6s | %(message)s"
    DATE_FMT = "%Y-%m-%d %H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        turn = getattr(record, "turn", None)
        record.turn_col = "-" if turn is None else str(turn)
        record.levelname = record.levelname[:7]  # keep column width fixed
        return super().format(record)


# ── Logger factory ────────────────────────────────────────────────────────────

_logger_instance: Optional["RoyaleLogger"] = None


def get_logger(name: str = "royale") -> "RoyaleLogger":
    """
    Return the singleton RoyaleLogger, creating it on first call.

    Call this once at module level in each file that needs logging:

        log = get_logger()
    """
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = RoyaleLogger(name)
    return _logger_instance


class RoyaleLogger:
    """
    Wrapper around the stdlib logger that threads a ``turn`` number into
    every record and adds the game-specific helpers below.

    stdout belongs to the referee, so nothing here ever writes to it.
    """

    def __init__(self, name: str = "royale") -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(LOG_LEVEL)
        self.log_file: Optional[Path] = None

        # handlers survive a second RoyaleLogger on the same name
        if not self._logger.handlers:
            self._attach_handlers()

    # ── Setup ─────────────────────────────────────────────────────────────────

    def _attach_handlers(self) -> None:
        formatter = RoyaleFormatter(RoyaleFormatter.BASE_FMT, RoyaleFormatter.DATE_FMT)

        stderr = logging.StreamHandler(sys.stderr)
        stderr.setLevel(CONSOLE_LEVEL)
        stderr.setFormatter(formatter)
        self._logger.addHandler(stderr)

        if LOG_TO_FILE:
            self.log_file = _session_log_path()
            rotating = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            rotating.setLevel(LOG_LEVEL)
            rotating.setFormatter(formatter)
            self._logger.addHandler(rotating)
            self.info("Logging to %s", self.log_file.resolve())

    # ── Standard log levels ───────────────────────────────────────────────────

    def _log(self, level: int, msg: str, args: tuple, turn: Optional[int], **kwargs) -> None:
        self._logger.log(level, msg, *args, extra={"turn": turn}, **kwargs)

    def debug(self, msg: str, *args, turn: Optional[int] = None, **kwargs) -> None:
        self._log(logging.DEBUG, msg, args, turn, **kwargs)

    def info(self, msg: str, *args, turn: Optional[int] = None, **kwargs) -> None:
        self._log(logging.INFO, msg, args, turn, **kwargs)

    def warning(self, msg: str, *args, turn: Optional[int] = None, **kwargs) -> None:
        self._log(logging.WARNING, msg, args, turn, **kwargs)

    def error(self, msg: str, *args, turn: Optional[int] = None, **kwargs) -> None:
        self._log(logging.ERROR, msg, args, turn, **kwargs)

    def exception(self, msg: str, *args, turn: Optional[int] = None, **kwargs) -> None:
        self._log(logging.ERROR, msg, args, turn, exc_info=True, **kwargs)

    # ── Game-specific helpers ─────────────────────────────────────────────────

    def game_event(self, event_type: str, detail: str, turn: Optional[int] = None) -> None:
        """
        Named milestone at GAME level (start, end, stats report).

            log.game_event("GAME_END", "turns=187 | reason=end_of_input", turn=187)
        """
        self._log(GAME_EVENT_LEVEL, "%s | %s", (event_type.upper(), detail), turn)

    def decision(self, policy: str, rule: str, command: str, turn: Optional[int] = None) -> None:
        """
        The command a policy committed to and the rule that produced it.

            log.decision("TrainingPolicy", "knight", "TRAIN 4 7", turn=12)
        """
        self._log(DECISION_LEVEL, "%s | rule=%s cmd=%s", (policy, rule, command), turn)

    def signals(self, needs, ledger, turn: Optional[int] = None) -> None:
        """
        One DEBUG line with the turn's needs and ledger as key=value pairs.

        royale_log_analyzer.py charts every key it finds, so a field added
        here shows up there without further changes.
        """
        fields = (
            ("gold",       ledger.gold),
            ("avail",      ledger.available_gold()),
            ("reserved",   ledger.reserved),
            ("archer_hp",  needs.avg_archer_health),
            ("aggr",       needs.enemy_aggressive),
            ("need_arch",  needs.need_archers),
            ("need_giant", needs.need_giants),
            ("queen_safe", needs.queen_safe),
        )
        body = " ".join(f"{key}={int(value)}" for key, value in fields)
        self._log(logging.DEBUG, "Signals | %s", (body,), turn)


def _session_log_path() -> Path:
    """logs/royale_<YYYYmmdd_HHMMSS>.log, creating the directory if needed."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR / f"royale_{datetime.now():%Y%m%d_%H%M%S}.log"
