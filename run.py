"""
Run script for Royale Bot using config.py settings.

Reads the referee protocol on stdin and answers on stdout, one pair of
command lines per turn, until the referee closes the stream.
"""

import subprocess
import sys
from pathlib import Path

import config
from RoyaleBot.logger import get_logger
from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.protocol import (
    EndOfInput,
    LineReader,
    ProtocolError,
    read_sites,
    read_turn,
    write_commands,
)
from RoyaleBot.royale_bot import RoyaleBot

log = get_logger()


def main(stdin=sys.stdin, stdout=sys.stdout) -> int:
    """Play one game. Returns the process exit code."""

    log.info("=" * 50)
    log.info("%s", config.BOT_NAME)
    log.info("=" * 50)

    echo = (lambda line: log.debug("IN  %s", line)) if config.ECHO_INPUT else None
    reader = LineReader(stdin, echo=echo)

    bot = RoyaleBot(
        config=PolicyConfig.from_settings(config),
        name=config.BOT_NAME,
        turn_budget_ms=config.TURN_TIME_BUDGET_MS,
    )

    sites = read_sites(reader)
    bot.on_start(sites)

    reason = "end_of_input"
    try:
        while True:
            raw = read_turn(reader, len(sites))
            decision = bot.on_step(raw)
            write_commands(stdout, decision.commands())
    except EndOfInput:
        log.info("Referee closed the input after %d turns", bot.turn)
    except KeyboardInterrupt:
        reason = "interrupted"
        log.info("Game stopped by user")
    except ProtocolError:
        reason = "protocol_error"
        raise
    finally:
        bot.on_end(reason)

    if config.RUN_LOG_ANALYZER:
        analyzer = Path(__file__).parent / "royale_log_analyzer.py"
        log.info("Running post-game log analyzer...")
        result = subprocess.run(
            [sys.executable, str(analyzer)],
            cwd=str(Path(__file__).parent),
        )
        if result.returncode != 0:
            log.warning("Log analyzer exited with code %d", result.returncode)

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log.exception("Unexpected error in main: %s", e)
        sys.exit(1)
