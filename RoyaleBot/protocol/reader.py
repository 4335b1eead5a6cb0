"""
Referee input reader.

The referee speaks a line-oriented protocol of whitespace-separated
integers. Every record is one line; the reader checks the field count of
each record and raises ProtocolError on anything it cannot parse. Running
out of input exactly where a new turn would start raises EndOfInput,
which the driver treats as the end of the game.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional, TextIO

from RoyaleBot.world.entities import Position, Site
from RoyaleBot.world.snapshot import RawTurn, SiteRecord, UnitRecord


class ProtocolError(ValueError):
    """Malformed or truncated referee input. Fatal for the current turn."""


class EndOfInput(ProtocolError):
    """The referee closed the stream at a record boundary."""


class LineReader:
    """
    Pulls integer records from a text stream one line at a time.

    ``echo`` (optional) is called with every raw line read, which is how
    the driver logs the referee input when ECHO_INPUT is on.
    """

    def __init__(self, stream: TextIO, echo: Optional[Callable[[str], None]] = None) -> None:
        self._lines: Iterator[str] = iter(stream)
        self._pending: Optional[str] = None
        self._echo = echo
        self.lines_read: int = 0

    def read_ints(self, expected: int, what: str) -> list[int]:
        line = self._next_line(what)
        parts = line.split()
        if len(parts) != expected:
            raise ProtocolError(
                f"line {self.lines_read}: {what} needs {expected} fields, got {len(parts)}: {line!r}"
            )
        try:
            return [int(part) for part in parts]
        except ValueError as exc:
            raise ProtocolError(f"line {self.lines_read}: {what} is not numeric: {line!r}") from exc

    def read_int(self, what: str) -> int:
        return self.read_ints(1, what)[0]

    def at_end(self) -> bool:
        """True when the stream is exhausted. Only called at turn boundaries."""
        if self._pending is not None:
            return False
        try:
            self._pending = next(self._lines)
        except StopIteration:
            return True
        return False

    def _next_line(self, what: str) -> str:
        if self._pending is not None:
            line, self._pending = self._pending, None
        else:
            try:
                line = next(self._lines)
            except StopIteration:
                raise ProtocolError(f"input ended while reading {what}") from None
        self.lines_read += 1
        line = line.rstrip("\n")
        if self._echo is not None:
            self._echo(line)
        return line


# ── Records ──────────────────────────────────────────────────────────────────

def read_sites(reader: LineReader) -> dict[int, Site]:
    """Read the initialization block: site count then one geometry line per site."""
    count = reader.read_int("numSites")
    if count < 0:
        raise ProtocolError(f"negative site count {count}")
    sites: dict[int, Site] = {}
    for _ in range(count):
        site_id, x, y, radius = reader.read_ints(4, "site geometry")
        sites[site_id] = Site(site_id=site_id, position=Position(x, y), radius=radius)
    return sites


def read_turn(reader: LineReader, num_sites: int) -> RawTurn:
    """Read one turn's block. Raises EndOfInput when no turn is left."""
    if reader.at_end():
        raise EndOfInput("referee closed the input stream")

    gold, touched_site_id = reader.read_ints(2, "gold/touchedSite")

    site_records = []
    for _ in range(num_sites):
        fields = reader.read_ints(7, "site state")
        site_records.append(SiteRecord(*fields))

    num_units = reader.read_int("numUnits")
    if num_units < 0:
        raise ProtocolError(f"negative unit count {num_units}")
    unit_records = []
    for _ in range(num_units):
        fields = reader.read_ints(5, "unit")
        unit_records.append(UnitRecord(*fields))

    return RawTurn(
        gold=gold,
        touched_site_id=touched_site_id,
        sites=tuple(site_records),
        units=tuple(unit_records),
    )
