"""
Model state -- everything one user session has learned, in one aggregate.

    preferences        PreferenceStore
    liked              entity id -> LikedEmbedding (liked or saved entities)
    ledger             InteractionLedger
    pairs              PairPreference list (bounded like the ledger)
    rewards            RewardTracker
    totals             action -> lifetime event count (survives ledger eviction)
    entities           entity id -> last FeatureTuple seen (for id lookups)

to_dict()/from_dict() define the persisted document; vectors are stored as
plain float lists.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from ai_learning.ledger import Action, InteractionLedger, PairPreference
from ai_learning.rewards import RewardTracker
from scoring.constants import CATALOG_MAX_ENTITIES, CONSTANTS_VERSION, LEDGER_MAX_EVENTS
from scoring.embeddings import LikedEmbedding
from scoring.features import FeatureTuple
from scoring.preferences import PreferenceStore

logger = logging.getLogger(__name__)

STATE_VERSION = 1


@dataclass
class ModelState:
    preferences: PreferenceStore = field(default_factory=PreferenceStore)
    liked: dict[str, LikedEmbedding] = field(default_factory=dict)
    ledger: InteractionLedger = field(default_factory=InteractionLedger)
    pairs: list[PairPreference] = field(default_factory=list)
    rewards: RewardTracker = field(default_factory=RewardTracker)
    totals: Counter = field(default_factory=Counter)
    entities: dict[str, FeatureTuple] = field(default_factory=dict)

    @classmethod
    def empty(cls, max_events: int = LEDGER_MAX_EVENTS) -> "ModelState":
        return cls(ledger=InteractionLedger(max_events=max_events))

    def remember(self, features: FeatureTuple):
        if not features.id:
            return
        self.entities.pop(features.id, None)
        self.entities[features.id] = features
        while len(self.entities) > CATALOG_MAX_ENTITIES:
            self.entities.pop(next(iter(self.entities)))

    def add_pair(self, pair: PairPreference):
        self.pairs.append(pair)
        overflow = len(self.pairs) - self.ledger.max_events
        if overflow > 0:
            del self.pairs[:overflow]

    def count(self, action: Action) -> int:
        self.totals[action.value] += 1
        return self.totals[action.value]

    def total(self, action: Action) -> int:
        return self.totals[action.value]

    def entity(self, entity_id: str) -> Optional[FeatureTuple]:
        return self.entities.get(entity_id)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "version": STATE_VERSION,
            "constants_version": CONSTANTS_VERSION,
            "preferences": self.preferences.to_dict(),
            "liked": [item.to_dict() for item in self.liked.values()],
            "ledger": self.ledger.export(),
            "pairs": [p.to_dict() for p in self.pairs],
            "cumulative_reward": self.rewards.cumulative_reward(),
            "totals": dict(self.totals),
            "entities": [f.to_dict() for f in self.entities.values()],
        }

    @classmethod
    def from_dict(cls, data: Optional[dict], max_events: int = LEDGER_MAX_EVENTS) -> "ModelState":
        if not data:
            return cls.empty(max_events)
        if data.get("version", STATE_VERSION) != STATE_VERSION:
            logger.warning("State version %s differs from %s, loading best effort",
                           data.get("version"), STATE_VERSION)

        state = cls(
            preferences=PreferenceStore.from_dict(data.get("preferences")),
            ledger=InteractionLedger.from_export(data.get("ledger"), max_events=max_events),
            rewards=RewardTracker(float(data.get("cumulative_reward") or 0.0)),
        )
        for item in data.get("liked") or []:
            liked = LikedEmbedding.from_dict(item)
            if liked.entity_id:
                state.liked[liked.entity_id] = liked
        for item in data.get("pairs") or []:
            state.add_pair(PairPreference.from_dict(item))
        for item in data.get("entities") or []:
            state.remember(FeatureTuple.from_dict(item))
        totals = data.get("totals")
        if isinstance(totals, dict):
            state.totals.update({str(k): int(v) for k, v in totals.items()})
        else:
            # documents written before lifetime totals were kept
            state.totals.update(e.action.value for e in state.ledger.events())
        return state
