#!/usr/bin/env python3
"""
Royale Bot Log Analyzer

Post-game companion to run.py. Picks up every session in ./logs that has
not been analysed yet, then for each one:

  * rebuilds the per-turn signals, commands and rule choices,
  * draws three charts (rule usage, signals, economy) into ./charts,
  * adds one summary row to baseline.csv.

Signal fields, rule names and stat rows are read from the log as they
appear, so adding a field to log.signals() or a row to the stats report
needs no change here.

    python royale_log_analyzer.py                 # new sessions only
    python royale_log_analyzer.py --force-all     # re-process everything
"""

from __future__ import annotations

import argparse
import csv
import json
import math
import os
import re
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np

# ── Locations ────────────────────────────────────────────────────────────────
_HERE              = Path(__file__).parent
DEFAULT_LOG_DIR    = str(_HERE / "logs")
BASELINE_FILE      = str(_HERE / "baseline.csv")
SEEN_SESSIONS_FILE = str(_HERE / "seen_sessions.json")
CHARTS_DIR         = str(_HERE / "charts")

SMOOTHING_WINDOW = 10   # turns per rolling-mean window

# ── Line formats written by RoyaleBot.logger ─────────────────────────────────
# 2026-10-18 21:14:05.002 | DECISIO |     12 | QueenPolicy | rule=claim_mine cmd=BUILD 3 MINE
RECORD_RE = re.compile(
    r"^(?P<ts>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3})"
    r" \| (?P<level>\w+)\s*"
    r"\| \s*(?P<turn>\S+) "
    r"\| ?(?P<msg>.*)$"
)
SESSION_KEY_RE = re.compile(r"^(royale_(\d{8})_(\d{6})\.log)")

GAME_START_RE = re.compile(r"^GAME_START \| Bot: (?P<bot>[^|]+)")
GAME_END_RE   = re.compile(r"^GAME_END \| turns=(?P<turns>\d+) \| reason=(?P<reason>\S+)")
DECISION_RE   = re.compile(r"^(?P<policy>\w+) \| rule=(?P<rule>\S+) cmd=(?P<cmd>.*)$")
SIGNALS_RE    = re.compile(r"^Signals \| (?P<body>.*)$")
KEY_VALUE_RE  = re.compile(r"(\w+)=(-?\d+(?:\.\d+)?)")

# Stats report rows look like "  Gold Spent               : 1,240".
STAT_ROW_RE  = re.compile(r"^ {1,6}(?P<label>[A-Za-z][\w /()%\-]*?)\s+: (?P<value>.+?)\s*$")
STAT_SKIP_RE = re.compile(r"^[\s═─]*$|END-OF-GAME STATS|^\s*(ACTIVITY|PEAKS|TIMING)\b")

BASELINE_PREFIX_COLS = [
    "session_key", "datetime", "bot_name", "exit_condition", "turns_played",
]


@dataclass(frozen=True)
class LogRecord:
    timestamp: str
    level: str
    turn: Optional[int]
    message: str


def parse_record(line: str) -> Optional[LogRecord]:
    """One formatted log line, or None for continuation lines."""
    m = RECORD_RE.match(line)
    if m is None:
        return None
    turn_text = m.group("turn")
    return LogRecord(
        timestamp=m.group("ts"),
        level=m.group("level"),
        turn=int(turn_text) if turn_text.lstrip("-").isdigit() else None,
        message=m.group("msg").strip(),
    )


# ── Session files ────────────────────────────────────────────────────────────

def group_log_files(log_dir: Path) -> dict[str, list[Path]]:
    """
    Map each session key (royale_<date>_<time>.log) to its files.

    RotatingFileHandler pushes older lines into .log.1, .log.2, ...; the
    files are returned oldest first so lines replay in order.
    """
    sessions: dict[str, list[Path]] = defaultdict(list)
    for path in log_dir.glob("royale_*.log*"):
        m = SESSION_KEY_RE.match(path.name)
        if m is not None:
            sessions[m.group(1)].append(path)
    return {
        key: sorted(paths, key=_rotation_index, reverse=True)
        for key, paths in sorted(sessions.items())
    }


def _rotation_index(path: Path) -> int:
    suffix = path.suffix.lstrip(".")
    if suffix == "log":
        return 0
    return int(suffix) if suffix.isdigit() else 999


def load_seen_sessions(path: str) -> set:
    if not os.path.exists(path):
        return set()
    with open(path, encoding="utf-8") as fh:
        return set(json.load(fh))


def save_seen_sessions(seen: set, path: str) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(sorted(seen), fh, indent=2)


# ── Parsing ──────────────────────────────────────────────────────────────────

def parse_session(files: list[Path]) -> dict:
    """
    Replay a session's files and collect what the bot logged.

    Returns a dict with bot_name, exit_condition, turns_played, end_stats,
    rule_totals ({policy: {rule: count}}), signals_by_turn, commands_by_turn
    ({turn: {policy: command}}), level_counts and game_events.
    """
    session = {
        "bot_name":         "",
        "exit_condition":   "crash_or_incomplete",
        "turns_played":     0,
        "end_stats":        {},
        "rule_totals":      defaultdict(Counter),
        "signals_by_turn":  {},
        "commands_by_turn": defaultdict(dict),
        "level_counts":     Counter(),
        "game_events":      [],
    }
    reading_stats = False

    for path in files:
        with open(path, encoding="utf-8", errors="replace") as fh:
            for line in fh:
                line = line.rstrip("\n")
                record = parse_record(line)
                if record is None:
                    if reading_stats:
                        _try_parse_stat_line(line, session["end_stats"])
                    continue
                reading_stats = record.message.startswith("GAME_STATS")
                _absorb(record, session)

    session["rule_totals"] = {p: dict(rules) for p, rules in session["rule_totals"].items()}
    session["commands_by_turn"] = dict(session["commands_by_turn"])
    session["level_counts"] = dict(session["level_counts"])
    return session


def _absorb(record: LogRecord, session: dict) -> None:
    session["level_counts"][record.level] += 1
    msg = record.message

    m = GAME_START_RE.match(msg)
    if m:
        session["bot_name"] = m.group("bot").strip()
        session["game_events"].append(
            {"type": "GAME_START", "turn": record.turn, "bot": session["bot_name"], "ts": record.timestamp}
        )
        return

    m = GAME_END_RE.match(msg)
    if m:
        session["turns_played"] = int(m.group("turns"))
        session["exit_condition"] = m.group("reason")
        session["game_events"].append(
            {"type": "GAME_END", "turn": record.turn, "reason": m.group("reason"), "ts": record.timestamp}
        )
        return

    if record.level.startswith("DECISIO"):
        m = DECISION_RE.match(msg)
        if m:
            session["rule_totals"][m.group("policy")][m.group("rule")] += 1
            if record.turn is not None:
                session["commands_by_turn"][record.turn][m.group("policy")] = m.group("cmd")
        return

    m = SIGNALS_RE.match(msg)
    if m and record.turn is not None:
        values = {key: float(value) for key, value in KEY_VALUE_RE.findall(m.group("body"))}
        if values:
            session["signals_by_turn"][record.turn] = values


def _try_parse_stat_line(line: str, stats: dict) -> None:
    """Store one 'Label : value' row of the stats report as stat_<label>."""
    if STAT_SKIP_RE.search(line):
        return
    m = STAT_ROW_RE.match(line)
    if m is None:
        return
    key = "stat_" + re.sub(r"[^a-z0-9]+", "_", m.group("label").lower()).strip("_")
    value = m.group("value")
    if re.fullmatch(r"-?[\d,]+(\.\d+)?", value):
        value = value.replace(",", "")
    stats.setdefault(key, value)


# ── Series helpers ───────────────────────────────────────────────────────────

def rolling_mean(values: list[float], window: int) -> np.ndarray:
    """Trailing rolling mean; the first window-1 points average what exists."""
    data = np.asarray(values, dtype=float)
    if data.size == 0 or window <= 1:
        return data
    totals = np.concatenate(([0.0], np.cumsum(data)))
    ends = np.arange(1, data.size + 1)
    starts = np.maximum(0, ends - window)
    return (totals[ends] - totals[starts]) / (ends - starts)


def signal_summary(signals_by_turn: dict[int, dict[str, float]]) -> dict[str, float]:
    """Mean of every signal over the session, keyed mean_<signal>."""
    series: dict[str, list[float]] = defaultdict(list)
    for values in signals_by_turn.values():
        for name, value in values.items():
            series[name].append(value)
    return {f"mean_{name}": round(float(np.mean(vals)), 2) for name, vals in series.items()}


def trained_per_turn(commands_by_turn: dict[int, dict[str, str]]) -> dict[int, int]:
    """Units ordered each turn, counted from the TRAIN line's site ids."""
    return {
        turn: len(commands.get("TrainingPolicy", "TRAIN").split()) - 1
        for turn, commands in commands_by_turn.items()
    }


# ── Charts ───────────────────────────────────────────────────────────────────

def make_charts(session_key: str, data: dict, charts_dir: Path) -> list[Path]:
    """Write the session's charts and return their paths."""
    charts_dir.mkdir(parents=True, exist_ok=True)
    label = session_key[:-len(".log")] if session_key.endswith(".log") else session_key
    written: list[Path] = []

    if data["rule_totals"]:
        written.append(_rule_chart(label, data["rule_totals"], charts_dir))
    if data["signals_by_turn"]:
        written.append(_signal_chart(label, data["signals_by_turn"], charts_dir))
        if data.get("commands_by_turn"):
            written.append(_economy_chart(label, data, charts_dir))

    for path in written:
        print(f"  Chart: {path}")
    return written


def _rule_chart(label: str, rule_totals: dict, charts_dir: Path) -> Path:
    policies = sorted(rule_totals)
    fig, axes = plt.subplots(1, len(policies), figsize=(6 * len(policies), 4.5), squeeze=False)
    for ax, policy in zip(axes[0], policies):
        rules = sorted(rule_totals[policy].items(), key=lambda kv: kv[1], reverse=True)
        names = [name for name, _ in rules]
        counts = [count for _, count in rules]
        ax.barh(names[::-1], counts[::-1], color="steelblue")
        ax.set_title(policy)
        ax.set_xlabel("Turns")
        for y, count in enumerate(counts[::-1]):
            ax.annotate(str(count), (count, y), xytext=(3, 0),
                        textcoords="offset points", va="center", fontsize=7)
    fig.suptitle(f"Rule usage - {label}")
    return _save(fig, charts_dir / f"{label}_rules.png")


def _signal_chart(label: str, signals_by_turn: dict, charts_dir: Path) -> Path:
    turns = sorted(signals_by_turn)
    names = list(dict.fromkeys(name for t in turns for name in signals_by_turn[t]))
    ncols = 2
    nrows = math.ceil(len(names) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(13, max(4, 2.8 * nrows)),
                             sharex=True, squeeze=False)
    flat = axes.ravel()
    colours = plt.get_cmap("tab10")
    for i, name in enumerate(names):
        values = [signals_by_turn[t].get(name, np.nan) for t in turns]
        ax = flat[i]
        ax.plot(turns, values, color=colours(i % 10), linewidth=0.7, alpha=0.45)
        ax.plot(turns, rolling_mean(values, SMOOTHING_WINDOW), color=colours(i % 10), linewidth=1.5)
        ax.set_title(name, fontsize=9)
        ax.xaxis.set_major_locator(mticker.MaxNLocator(integer=True))
    for ax in flat[len(names):]:
        ax.set_visible(False)
    for ax in flat[max(0, len(names) - ncols):len(names)]:
        ax.set_xlabel("Turn")
    fig.suptitle(f"Signals - {label}")
    return _save(fig, charts_dir / f"{label}_signals.png")


def _economy_chart(label: str, data: dict, charts_dir: Path) -> Path:
    """Gold and reservations against units trained, turn by turn."""
    signals = data["signals_by_turn"]
    turns = sorted(signals)
    gold = [signals[t].get("gold", np.nan) for t in turns]
    reserved = [signals[t].get("reserved", np.nan) for t in turns]
    trained = trained_per_turn(data["commands_by_turn"])

    fig, ax = plt.subplots(figsize=(12, 4))
    ax.plot(turns, gold, label="gold", color="goldenrod")
    ax.plot(turns, reserved, label="reserved", color="firebrick", linestyle="--")
    ax.set_xlabel("Turn")
    ax.set_ylabel("Gold")
    ax.xaxis.set_major_locator(mticker.MaxNLocator(integer=True))

    units = ax.twinx()
    units.bar(turns, [trained.get(t, 0) for t in turns], color="seagreen", alpha=0.3, label="units trained")
    units.set_ylabel("Units trained")
    units.yaxis.set_major_locator(mticker.MaxNLocator(integer=True))

    handles = ax.get_legend_handles_labels()[0] + units.get_legend_handles_labels()[0]
    ax.legend(handles, [h.get_label() for h in handles], loc="upper left", fontsize=8)
    fig.suptitle(f"Economy - {label}")
    return _save(fig, charts_dir / f"{label}_economy.png")


def _save(fig, path: Path) -> Path:
    fig.tight_layout()
    fig.savefig(path, dpi=110)
    plt.close(fig)
    return path


# ── Baseline CSV ─────────────────────────────────────────────────────────────

def load_baseline(path: str) -> list[dict]:
    if not os.path.exists(path):
        return []
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def save_baseline(rows: list[dict], path: str) -> None:
    """Prefix columns first, then every other column in first-seen order."""
    columns = list(dict.fromkeys([*BASELINE_PREFIX_COLS, *(col for row in rows for col in row)]))
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def session_to_row(session_key: str, data: dict) -> dict:
    """Flatten one parsed session into a baseline row."""
    started = ""
    m = SESSION_KEY_RE.match(session_key)
    if m:
        try:
            started = datetime.strptime(m.group(2) + m.group(3), "%Y%m%d%H%M%S").isoformat()
        except ValueError:
            started = ""

    row = {
        "session_key":    session_key,
        "datetime":       started,
        "bot_name":       data["bot_name"],
        "exit_condition": data["exit_condition"],
        "turns_played":   data["turns_played"],
        **data["end_stats"],
        **signal_summary(data["signals_by_turn"]),
        "rule_totals":    json.dumps(data["rule_totals"], sort_keys=True),
    }
    trained = trained_per_turn(data.get("commands_by_turn", {}))
    row["units_ordered"] = sum(trained.values())
    row.update({f"level_count_{level}": n for level, n in data.get("level_counts", {}).items()})
    return row


# ── Entry point ──────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Analyse Royale Bot game logs")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIR, help="directory holding royale_*.log files")
    parser.add_argument("--baseline", default=BASELINE_FILE, help="baseline CSV to update")
    parser.add_argument("--seen", default=SEEN_SESSIONS_FILE, help="JSON list of processed sessions")
    parser.add_argument("--charts-dir", default=CHARTS_DIR, help="where to write PNG charts")
    parser.add_argument("--force-all", action="store_true", help="ignore the seen list")
    args = parser.parse_args(argv)

    log_dir = Path(args.log_dir)
    if not log_dir.is_dir():
        print(f"[ERROR] No log directory at {log_dir}")
        return 1

    seen = set() if args.force_all else load_seen_sessions(args.seen)
    sessions = {key: files for key, files in group_log_files(log_dir).items() if key not in seen}
    if not sessions:
        print("Nothing new to analyse.")
        return 0

    rows = {row["session_key"]: row for row in load_baseline(args.baseline)}
    charts_dir = Path(args.charts_dir)

    for key, files in sessions.items():
        print(f"\n{key}  ({len(files)} file(s))")
        data = parse_session(files)
        print(f"  {data['bot_name'] or '?'}: {data['turns_played']} turns, ended by {data['exit_condition']}")
        print(f"  signals on {len(data['signals_by_turn'])} turns, {len(data['end_stats'])} stat rows")
        make_charts(key, data, charts_dir)
        rows[key] = session_to_row(key, data)
        seen.add(key)

    save_baseline(list(rows.values()), args.baseline)
    save_seen_sessions(seen, args.seen)
    print(f"\nBaseline: {args.baseline} ({len(rows)} sessions)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
