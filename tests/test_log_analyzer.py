"""Test the post-game log analyzer against a log written by a real game."""
import io
import json
import logging

import numpy as np
import pytest

import royale_log_analyzer as analyzer
import run
from RoyaleBot.logger import RoyaleFormatter
from tests.factories import (
    ARCHER,
    KNIGHT,
    barracks,
    empty,
    init_text,
    knight,
    mine,
    queen,
    raw_turn,
    standard_sites,
    turn_text,
)

SESSION = "royale_20261018_120000.log"


@pytest.fixture
def game_log(tmp_path):
    """Play a three-turn game with a file handler attached; return the log dir."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    handler = logging.FileHandler(log_dir / SESSION, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(RoyaleFormatter(fmt=RoyaleFormatter.BASE_FMT, datefmt=RoyaleFormatter.DATE_FMT))
    logger = logging.getLogger("royale")
    logger.addHandler(handler)

    turns = [
        raw_turn([empty(i) for i in range(6)], [queen(100, 300)], gold=150),
        raw_turn(
            [mine(0, income=3), mine(1, income=3), mine(2, income=3),
             barracks(3, KNIGHT), barracks(4, ARCHER), empty(5)],
            [queen(100, 300), knight(1100, 100)],
            gold=260,
        ),
        raw_turn([empty(i) for i in range(6)], [queen(100, 300)], gold=10),
    ]
    text = init_text(standard_sites()) + "".join(turn_text(t) for t in turns)
    try:
        run.main(io.StringIO(text), io.StringIO())
    finally:
        logger.removeHandler(handler)
        handler.close()
    return log_dir


def test_parse_session_recovers_the_game(game_log):
    groups = analyzer.group_log_files(game_log)
    assert list(groups) == [SESSION]

    data = analyzer.parse_session(groups[SESSION])

    assert data["bot_name"] == "Royale Bot"
    assert data["exit_condition"] == "end_of_input"
    assert data["turns_played"] == 3
    assert sorted(data["signals_by_turn"]) == [0, 1, 2]
    assert data["signals_by_turn"][1]["gold"] == 260.0
    assert data["rule_totals"]["QueenPolicy"]["claim_mine"] == 2
    assert data["rule_totals"]["TrainingPolicy"]["archer+knight"] == 1
    assert data["end_stats"]["stat_turns_played"] == "3"
    assert data["end_stats"]["stat_end_reason"] == "end_of_input"


def test_session_row_flattens_stats_and_signals(game_log):
    data = analyzer.parse_session(analyzer.group_log_files(game_log)[SESSION])
    row = analyzer.session_to_row(SESSION, data)

    assert row["datetime"] == "2026-10-18T12:00:00"
    assert row["turns_played"] == 3
    assert row["mean_gold"] == pytest.approx((150 + 260 + 10) / 3, abs=0.01)
    assert json.loads(row["rule_totals"])["QueenPolicy"]["raise_tower"] == 1


def test_main_writes_baseline_charts_and_seen(game_log, tmp_path):
    baseline = tmp_path / "baseline.csv"
    seen = tmp_path / "seen.json"
    charts = tmp_path / "charts"
    argv = ["--log-dir", str(game_log), "--baseline", str(baseline),
            "--seen", str(seen), "--charts-dir", str(charts)]

    assert analyzer.main(argv) == 0

    assert json.loads(seen.read_text()) == [SESSION]
    rows = analyzer.load_baseline(str(baseline))
    assert [r["session_key"] for r in rows] == [SESSION]
    assert (charts / "royale_20261018_120000_rules.png").exists()
    assert (charts / "royale_20261018_120000_signals.png").exists()
    assert (charts / "royale_20261018_120000_economy.png").exists()

    # second run: nothing new
    assert analyzer.main(argv) == 0
    assert len(analyzer.load_baseline(str(baseline))) == 1


def test_missing_log_dir_is_an_error(tmp_path):
    assert analyzer.main(["--log-dir", str(tmp_path / "nope")]) == 1


def test_rotated_files_are_read_oldest_first(tmp_path):
    for name in [SESSION, SESSION + ".1", SESSION + ".2", "other.txt"]:
        (tmp_path / name).write_text("")
    groups = analyzer.group_log_files(tmp_path)
    assert [f.name for f in groups[SESSION]] == [SESSION + ".2", SESSION + ".1", SESSION]


def test_rolling_mean_averages_what_exists():
    out = analyzer.rolling_mean([2.0, 4.0, 6.0, 8.0], window=2)
    assert np.allclose(out, [2.0, 3.0, 5.0, 7.0])


def test_stat_lines_ignore_decoration():
    stats = {}
    analyzer._try_parse_stat_line("═" * 20, stats)
    analyzer._try_parse_stat_line("  PEAKS  (best values achieved during match)", stats)
    analyzer._try_parse_stat_line("  Gold Spent               : 1,240", stats)
    analyzer._try_parse_stat_line("  Slowest Turn (ms)        : 0.41", stats)
    assert stats == {"stat_gold_spent": "1240", "stat_slowest_turn_ms": "0.41"}


def test_units_ordered_come_from_train_lines(game_log):
    data = analyzer.parse_session(analyzer.group_log_files(game_log)[SESSION])
    assert data["commands_by_turn"][1]["TrainingPolicy"] == "TRAIN 4 3"
    assert analyzer.trained_per_turn(data["commands_by_turn"]) == {0: 0, 1: 2, 2: 0}
    assert analyzer.session_to_row(SESSION, data)["units_ordered"] == 2


def test_continuation_lines_are_not_records():
    assert analyzer.parse_record("  Turns Played             : 3") is None
    record = analyzer.parse_record(
        "2026-10-18 12:00:00.004 | DECISIO |     12 | QueenPolicy | rule=claim_mine cmd=BUILD 3 MINE"
    )
    assert record.level == "DECISIO"
    assert record.turn == 12
    assert record.message == "QueenPolicy | rule=claim_mine cmd=BUILD 3 MINE"
