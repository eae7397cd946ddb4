"""
Interaction ledger -- bounded, append-only log of feedback events.

    append(event)          -> number of events evicted to respect the cap
    events(...)            -> LedgerView (lazy, re-iterable, filterable)
    export()               -> list of plain dicts

Once the ledger holds max_events entries the oldest ones are dropped first.
Eviction only trims storage: preference and reward effects of an evicted
event are already applied and stay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterator, Optional

from scoring.constants import LEDGER_MAX_EVENTS
from scoring.features import FeatureTuple

logger = logging.getLogger(__name__)


class Action(str, Enum):
    LIKE = "LIKE"
    DISLIKE = "DISLIKE"
    SAVE = "SAVE"
    SKIP = "SKIP"
    PAIR_PREFERENCE = "PAIR_PREFERENCE"
    ANNOTATION = "ANNOTATION"
    VOICE_INPUT = "VOICE_INPUT"
    TEXT_INPUT = "TEXT_INPUT"

    @classmethod
    def parse(cls, value) -> "Action":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class InteractionEvent:
    action: Action
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    features: Optional[FeatureTuple] = None
    rationale: Optional[str] = None
    reward: float = 0.0
    timestamp: str = field(default_factory=utc_now)
    # polarity of ANNOTATION events; None means "not stated"
    positive: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
            "features": self.features.to_dict() if self.features else None,
            "rationale": self.rationale,
            "reward": self.reward,
            "timestamp": self.timestamp,
            "positive": self.positive,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InteractionEvent":
        features = data.get("features")
        return cls(
            action=Action.parse(data["action"]),
            entity_id=data.get("entity_id"),
            entity_type=data.get("entity_type"),
            features=FeatureTuple.from_dict(features) if features else None,
            rationale=data.get("rationale"),
            reward=float(data.get("reward") or 0.0),
            timestamp=data.get("timestamp") or utc_now(),
            positive=data.get("positive"),
        )


@dataclass
class PairPreference:
    chosen: FeatureTuple
    rejected: FeatureTuple
    rationale: Optional[str] = None
    timestamp: str = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "chosen": self.chosen.to_dict(),
            "rejected": self.rejected.to_dict(),
            "rationale": self.rationale,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PairPreference":
        return cls(
            chosen=FeatureTuple.from_dict(data.get("chosen") or {}),
            rejected=FeatureTuple.from_dict(data.get("rejected") or {}),
            rationale=data.get("rationale"),
            timestamp=data.get("timestamp") or utc_now(),
        )


class LedgerView:
    """Filtered window over a ledger. Every iteration walks a fresh snapshot."""

    def __init__(self, source: "InteractionLedger", predicate: Callable[[InteractionEvent], bool]):
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> Iterator[InteractionEvent]:
        for event in list(self._source._events):
            if self._predicate(event):
                yield event

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def count(self) -> int:
        return len(self)

    def to_list(self) -> list[InteractionEvent]:
        return list(self)


class InteractionLedger:
    def __init__(self, max_events: int = LEDGER_MAX_EVENTS):
        if max_events <= 0:
            raise ValueError("max_events must be positive")
        self.max_events = max_events
        self._events: list[InteractionEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: InteractionEvent) -> int:
        self._events.append(event)
        overflow = len(self._events) - self.max_events
        if overflow > 0:
            del self._events[:overflow]
            logger.debug("Ledger full, evicted %d oldest event(s)", overflow)
            return overflow
        return 0

    def events(
        self,
        action: Action | str | None = None,
        entity_id: Optional[str] = None,
        since: Optional[str] = None,
    ) -> LedgerView:
        wanted = Action.parse(action) if action else None

        def _match(event: InteractionEvent) -> bool:
            if wanted is not None and event.action != wanted:
                return False
            if entity_id is not None and event.entity_id != entity_id:
                return False
            if since is not None and event.timestamp < since:
                return False
            return True

        return LedgerView(self, _match)

    def last(self) -> Optional[InteractionEvent]:
        return self._events[-1] if self._events else None

    def clear(self):
        self._events.clear()

    def export(self) -> list[dict]:
        return [e.to_dict() for e in self._events]

    @classmethod
    def from_export(cls, data: list[dict] | None, max_events: int = LEDGER_MAX_EVENTS) -> "InteractionLedger":
        ledger = cls(max_events=max_events)
        for item in data or []:
            try:
                ledger.append(InteractionEvent.from_dict(item))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable ledger event: %s", e)
        return ledger
