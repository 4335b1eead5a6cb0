"""
PolicyConfig - tunable constants shared by the queen and training policies.

Defaults are the values the bot ships with. config.py at the project root
can override any of them by defining the upper-case constant of the same
name (e.g. QUEEN_SAFE_RADIUS = 200); see PolicyConfig.from_settings().
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from types import ModuleType
from typing import Optional


@dataclass(frozen=True)
class PolicyConfig:
    # ── Economy ──────────────────────────────────────────────────────────
    avg_gold_per_barracks_slot: int = 60     # gold per barracks we can keep busy
    price_of_archer: int = 100
    price_of_knight: int = 80
    price_of_giant: int = 140

    # ── Army composition ─────────────────────────────────────────────────
    max_archers_before_saturation: int = 4
    min_avg_archer_health: int = 30          # below this, archers are expiring
    enemy_towers_trigger_giant: int = 4      # more enemy towers than this → giants

    # ── Expansion / defence ──────────────────────────────────────────────
    min_mines: int = 3
    max_friendly_towers: int = 4
    target_tower_health: int = 400
    queen_safe_radius: int = 150

    # Visit the farthest empty site first (land-grab ordering).
    expand_farthest_first: bool = False

    @property
    def neutral_archer_health(self) -> int:
        """Average archer health assumed when we have no archers at all."""
        return max(100, self.min_avg_archer_health)

    @classmethod
    def from_settings(cls, settings: Optional[ModuleType]) -> "PolicyConfig":
        """
        Build a config from a settings module's upper-case constants.

        Names the module does not define keep their dataclass default.
        """
        if settings is None:
            return cls()
        overrides = {}
        for f in fields(cls):
            constant = f.name.upper()
            if hasattr(settings, constant):
                overrides[f.name] = getattr(settings, constant)
        return cls(**overrides)
