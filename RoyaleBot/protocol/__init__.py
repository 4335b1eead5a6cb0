"""
RoyaleBot.protocol - the referee's line protocol.

Public API
----------
    from RoyaleBot.protocol import (
        LineReader,
        ProtocolError,
        EndOfInput,
        read_sites,
        read_turn,
        write_commands,
    )
"""

from RoyaleBot.protocol.reader import (
    EndOfInput,
    LineReader,
    ProtocolError,
    read_sites,
    read_turn,
)
from RoyaleBot.protocol.writer import write_commands

__all__ = [
    "EndOfInput",
    "LineReader",
    "ProtocolError",
    "read_sites",
    "read_turn",
    "write_commands",
]
