"""
EconomyLedger - this turn's gold and the share of it that is spoken for.

Lifecycle
---------
A new ledger is opened from each snapshot (gold from the referee, nothing
reserved). The needs assessment adds reservations for unit types we are
saving towards; the training policy then spends against it.

The ledger trusts its caller: spend() does not refuse an overdraft, so
every purchase is guarded by can_afford() first. ``reserved`` may exceed
``gold``; that simply means the reservation cannot be covered yet.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EconomyLedger:
    gold: int
    reserved: int = 0

    @classmethod
    def open(cls, gold: int) -> "EconomyLedger":
        return cls(gold=gold, reserved=0)

    def available_gold(self) -> int:
        """Gold that lower-priority spending may use this turn."""
        return self.gold - self.reserved

    def reserve(self, amount: int) -> None:
        self.reserved += amount

    def can_afford(self, price: int) -> bool:
        return self.gold >= price

    def spend(self, amount: int) -> None:
        self.gold -= amount
