"""
Referee output writer - the two command lines of a turn.
"""

from __future__ import annotations

from typing import TextIO


def write_commands(stream: TextIO, commands: tuple[str, str]) -> None:
    """Write the queen line and the training line, then flush."""
    queen_line, train_line = commands
    stream.write(f"{queen_line}\n{train_line}\n")
    stream.flush()
