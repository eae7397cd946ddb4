"""
Preference store -- per-(category, value) reinforcement accumulators.

Every LIKE / SAVE adds PREFERENCE_STEP to the positive side of each value the
entity carries; every DISLIKE adds it to the negative side. Accumulators only
ever grow (no decay), so net = positive - negative moves monotonically with
feedback. Keys compare case-insensitively; the first spelling seen is kept for
display. Records iterate in insertion order, which fixes the order in which the
scorer emits reasons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from scoring.constants import (
    EXACT_MATCH_CATEGORIES,
    MAX_AFFILIATIONS_LEARNED,
    MAX_REASONS_PER_RECORD,
    PREFERENCE_CATEGORIES,
    PREFERENCE_STEP,
)
from scoring.features import FeatureTuple

logger = logging.getLogger(__name__)


@dataclass
class PreferenceRecord:
    category: str
    value: str
    positive: float = 0.0
    negative: float = 0.0
    positive_reasons: list[str] = field(default_factory=list)
    negative_reasons: list[str] = field(default_factory=list)

    @property
    def net(self) -> float:
        return self.positive - self.negative

    @property
    def key(self) -> tuple[str, str]:
        return make_key(self.category, self.value)

    def reinforce(self, positive: bool, rationale: Optional[str] = None, step: float = PREFERENCE_STEP):
        if positive:
            self.positive += step
            _remember(self.positive_reasons, rationale)
        else:
            self.negative += step
            _remember(self.negative_reasons, rationale)

    def matches(self, features: FeatureTuple) -> bool:
        """Exact (case-insensitive) for scalar categories, substring-in-tag for lists."""
        needle = self.value.lower()
        if self.category in EXACT_MATCH_CATEGORIES:
            current = getattr(features, self.category, None)
            return bool(current) and current.lower() == needle
        if self.category == "highlight":
            return any(needle in tag.lower() for tag in features.highlights)
        if self.category == "affiliation":
            return any(needle in aff.lower() for aff in features.affiliations)
        return False

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "value": self.value,
            "positive": round(self.positive, 6),
            "negative": round(self.negative, 6),
            "net": round(self.net, 6),
            "positive_reasons": list(self.positive_reasons),
            "negative_reasons": list(self.negative_reasons),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PreferenceRecord":
        return cls(
            category=str(data.get("category", "")),
            value=str(data.get("value", "")),
            positive=max(0.0, float(data.get("positive", 0.0))),
            negative=max(0.0, float(data.get("negative", 0.0))),
            positive_reasons=list(data.get("positive_reasons") or [])[-MAX_REASONS_PER_RECORD:],
            negative_reasons=list(data.get("negative_reasons") or [])[-MAX_REASONS_PER_RECORD:],
        )


def _remember(reasons: list[str], rationale: Optional[str]):
    text = (rationale or "").strip()
    if not text or text in reasons:
        return
    reasons.append(text)
    del reasons[:-MAX_REASONS_PER_RECORD]


def make_key(category: str, value: str) -> tuple[str, str]:
    return category.strip().lower(), value.strip().lower()


def preference_pairs(features: FeatureTuple) -> list[tuple[str, str]]:
    """(category, value) pairs an update touches, in a fixed order."""
    pairs: list[tuple[str, str]] = []
    for category in ("role", "industry", "region", "company", "signal"):
        value = getattr(features, category, None)
        if value:
            pairs.append((category, value))
    for tag in features.highlights:
        pairs.append(("highlight", tag))
    # affiliations are most recent first
    for aff in features.affiliations[:MAX_AFFILIATIONS_LEARNED]:
        pairs.append(("affiliation", aff))
    return pairs


class PreferenceStore:
    """Insertion-ordered map of PreferenceRecord keyed by (category, value)."""

    def __init__(self):
        self._records: dict[tuple[str, str], PreferenceRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PreferenceRecord]:
        return iter(self._records.values())

    def update(self, features: FeatureTuple, positive: bool, rationale: Optional[str] = None) -> list[PreferenceRecord]:
        touched = []
        for category, value in preference_pairs(features):
            key = make_key(category, value)
            record = self._records.get(key)
            if record is None:
                record = PreferenceRecord(category=category, value=value.strip())
                self._records[key] = record
            record.reinforce(positive, rationale)
            touched.append(record)
        logger.debug(
            "Preference update (%s) touched %d records for %s",
            "+" if positive else "-", len(touched), features.id,
        )
        return touched

    def lookup(self, category: str, value: str) -> Optional[PreferenceRecord]:
        if category not in PREFERENCE_CATEGORIES:
            return None
        return self._records.get(make_key(category, value))

    def records(self) -> list[PreferenceRecord]:
        return list(self._records.values())

    def top(self, limit: Optional[int] = None) -> list[PreferenceRecord]:
        """Records sorted by |net| descending; ties keep insertion order."""
        ranked = sorted(self._records.values(), key=lambda r: abs(r.net), reverse=True)
        return ranked[:limit] if limit else ranked

    def clear(self):
        self._records.clear()

    def to_dict(self) -> list[dict]:
        return [r.to_dict() for r in self._records.values()]

    @classmethod
    def from_dict(cls, data: list[dict] | None) -> "PreferenceStore":
        store = cls()
        for item in data or []:
            record = PreferenceRecord.from_dict(item)
            if not record.category or not record.value:
                continue
            store._records.setdefault(record.key, record)
        return store
