"""
Reward tracker -- running sum of the reward signal carried by ledger events.

The table lives in scoring.constants.REWARD_SIGNALS; actions missing from it
contribute 0 unless the caller supplies an explicit reward.
"""

from __future__ import annotations

from typing import Mapping, Optional

from ai_learning.ledger import Action
from scoring.constants import REWARD_SIGNALS


def reward_for(action: Action | str, supplied: Optional[float] = None,
               table: Mapping[str, float] = REWARD_SIGNALS) -> float:
    if supplied is not None:
        return float(supplied)
    return float(table.get(Action.parse(action).value, 0.0))


class RewardTracker:
    def __init__(self, cumulative: float = 0.0):
        self._cumulative = float(cumulative)

    def add(self, reward: float) -> float:
        self._cumulative += reward
        return self._cumulative

    def cumulative_reward(self) -> float:
        return self._cumulative

    def reset(self):
        self._cumulative = 0.0
