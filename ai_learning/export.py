"""
Training-data export.

    build_export_document(state)   -> the "preference-pairs" JSON document
    build_dpo_examples(state)      -> prompt/chosen/rejected dicts
    export_dpo_jsonl(state, path)  -> number of lines written

DPO examples come from explicit pair preferences and from LIKE / DISLIKE
events still held by the ledger.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ai_learning.ledger import Action, utc_now
from ai_learning.state import ModelState
from scoring.features import FeatureTuple

logger = logging.getLogger(__name__)

EXPORT_FORMAT = "preference-pairs"


def build_export_document(state: ModelState) -> dict:
    ledger = state.ledger
    return {
        "format": EXPORT_FORMAT,
        "timestamp": utc_now(),
        "stats": {
            "likes": state.total(Action.LIKE),
            "dislikes": state.total(Action.DISLIKE),
            "pairs": len(state.pairs),
            "cumulative_reward": state.rewards.cumulative_reward(),
        },
        "pairs": [p.to_dict() for p in state.pairs],
        "events": ledger.export(),
        "preferences": state.preferences.to_dict(),
    }


def describe(features: FeatureTuple) -> str:
    """One-line candidate summary used inside prompts."""
    parts = [features.name or features.id or "unknown"]
    if features.role:
        parts.append(features.role)
    if features.company:
        parts.append(f"at {features.company}")
    details = [v for v in (features.industry, features.region, features.signal) if v]
    if details:
        parts.append(f"({', '.join(details)})")
    if features.highlights:
        parts.append(f"highlights: {', '.join(features.highlights)}")
    return " ".join(parts)


def build_dpo_examples(state: ModelState) -> list[dict]:
    examples = []

    for pair in state.pairs:
        note = f" {pair.rationale}" if pair.rationale else ""
        examples.append({
            "prompt": (
                "Which candidate is the better fit?\n"
                f"A: {describe(pair.chosen)}\n"
                f"B: {describe(pair.rejected)}"
            ),
            "chosen": f"A is the better fit.{note}",
            "rejected": "B is the better fit.",
            "source": Action.PAIR_PREFERENCE.value,
        })

    for event in state.ledger.events():
        if event.action not in (Action.LIKE, Action.DISLIKE) or event.features is None:
            continue
        note = f" {event.rationale}" if event.rationale else ""
        good = event.action == Action.LIKE
        examples.append({
            "prompt": f"Evaluate this candidate:\n{describe(event.features)}",
            "chosen": ("This candidate is a good fit." if good else "This candidate is not a good fit.") + note,
            "rejected": "This candidate is not a good fit." if good else "This candidate is a good fit.",
            "source": event.action.value,
            "entity_id": event.entity_id,
        })

    return examples


def export_dpo_jsonl(state: ModelState, path) -> int:
    examples = build_dpo_examples(state)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        for example in examples:
            f.write(json.dumps(example, ensure_ascii=False) + "\n")
    logger.info("Exported %d DPO examples to %s", len(examples), target)
    return len(examples)
