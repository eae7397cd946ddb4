"""
Scorer -- explainable 0..100 score for a candidate FeatureTuple.

    score(features, store, liked)   -> ScoreResult(score, reasons, warnings)
    rank(candidates, store, liked)  -> [(features, ScoreResult)] best first

Pipeline (reasons and warnings are emitted in this order):
    1. baseline BASE_SCORE
    2. preference matches, in store insertion order
    3. similarity to the closest liked entity
    4. seniority / founder-signal heuristics
    5. clamp to [MIN_SCORE, MAX_SCORE] and round

Pure: reads the store and the liked set, never mutates them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from scoring.constants import (
    BASE_SCORE,
    HIGH_VALUE_SENIORITY,
    HIGH_VALUE_SIGNALS,
    MATCH_GAIN,
    MATCH_THRESHOLD,
    MAX_SCORE,
    MIN_SCORE,
    SENIORITY_BONUS,
    SIGNAL_BONUS,
    SIMILARITY_FLOOR,
    SIMILARITY_GAIN,
)
from scoring.embeddings import LikedEmbedding, embed, similarity
from scoring.features import FeatureTuple
from scoring.preferences import PreferenceStore

_SENIORITY = frozenset(s.lower() for s in HIGH_VALUE_SENIORITY)
_NORMALIZE = re.compile(r"[^a-z0-9]")


def _normalize_signal(value: str) -> str:
    return _NORMALIZE.sub("", value.lower())


_SIGNALS = frozenset(_normalize_signal(s) for s in HIGH_VALUE_SIGNALS)


@dataclass(frozen=True)
class ScoreResult:
    score: int
    reasons: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
        }


def score(
    features: FeatureTuple,
    store: PreferenceStore,
    liked: Optional[Mapping[str, LikedEmbedding]] = None,
) -> ScoreResult:
    total = BASE_SCORE
    reasons: list[str] = []
    warnings: list[str] = []

    # preference matches
    for record in store:
        net = record.net
        if abs(net) <= MATCH_THRESHOLD or not record.matches(features):
            continue
        if net > 0:
            total += net * MATCH_GAIN
            reasons.append(f"✓ {record.category}: {record.value} (+{net:.2f})")
        else:
            total -= abs(net) * MATCH_GAIN
            warnings.append(f"⚠ {record.category}: {record.value} ({net:.2f})")

    # similarity to liked entities
    if features.text and liked:
        query = embed(features.text)
        best: Optional[LikedEmbedding] = None
        best_sim = 0.0
        for item in liked.values():
            sim = similarity(query, item.vector)
            if best is None or sim > best_sim:
                best, best_sim = item, sim
        if best is not None and best_sim > SIMILARITY_FLOOR:
            total += best_sim * SIMILARITY_GAIN
            label = best.name or best.entity_id
            reasons.append(f"🔗 Similar to liked {label} ({round(best_sim * 100)}%)")

    # heuristics
    seniority = features.seniority or features.role
    if seniority and seniority.strip().lower() in _SENIORITY:
        total += SENIORITY_BONUS
        reasons.append(f"High seniority: {seniority}")

    if features.signal and _normalize_signal(features.signal) in _SIGNALS:
        total += SIGNAL_BONUS
        reasons.append(f"Founder signal: {features.signal}")

    clamped = max(MIN_SCORE, min(MAX_SCORE, total))
    return ScoreResult(score=int(round(clamped)), reasons=tuple(reasons), warnings=tuple(warnings))


def rank(
    candidates: Iterable[FeatureTuple],
    store: PreferenceStore,
    liked: Optional[Mapping[str, LikedEmbedding]] = None,
) -> list[tuple[FeatureTuple, ScoreResult]]:
    """Score every candidate and sort best first; equal scores keep input order."""
    scored = [(f, score(f, store, liked)) for f in candidates]
    scored.sort(key=lambda pair: pair[1].score, reverse=True)
    return scored
