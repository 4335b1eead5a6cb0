"""
RoyaleBot.policy - per-turn decision making.

Public API
----------
    from RoyaleBot.policy import (
        PolicyConfig,
        NeedsAssessment,
        assess_needs,
        apply_reservations,
        select_queen_action,
        plan_training,
    )
    from RoyaleBot.policy.actions import QueenAction, TrainDirective, BuildTarget
"""

from RoyaleBot.policy.actions import (
    BuildTarget,
    QueenAction,
    QueenActionKind,
    TrainDirective,
    TrainOrder,
)
from RoyaleBot.policy.config import PolicyConfig
from RoyaleBot.policy.needs import NeedsAssessment, apply_reservations, assess_needs
from RoyaleBot.policy.queen_policy import QueenDecision, select_queen_action
from RoyaleBot.policy.training_policy import plan_training

__all__ = [
    "BuildTarget",
    "QueenAction",
    "QueenActionKind",
    "TrainDirective",
    "TrainOrder",
    "PolicyConfig",
    "NeedsAssessment",
    "apply_reservations",
    "assess_needs",
    "QueenDecision",
    "select_queen_action",
    "plan_training",
]
