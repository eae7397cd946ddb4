"""
Preference engine -- one user's session: feedback in, explainable scores out.

    record(action, entity, rationale)  -> FeedbackResult   (LIKE, SAVE, ...)
    prefer(chosen, rejected, reason)   -> FeedbackResult   (pair preference)
    score(entity) / score_by_id(id)    -> ScoreResult | None
    rank(entities)                     -> [(FeatureTuple, ScoreResult)]
    similar(entity, top_k)             -> [SimilarEntity]
    stats() / preferences() / export() / clear_history()

State is loaded lazily on first access (Uninitialized -> Active) and written
through to the session repository after every mutation. A failed write is
logged and surfaced as a warning string; the in-memory update stands.

One RLock guards the whole state, so an engine can sit behind a threaded
host such as FastAPI's sync routes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Any, Iterable, Optional

from ai_learning.export import build_dpo_examples, build_export_document, export_dpo_jsonl
from ai_learning.ledger import Action, InteractionEvent, PairPreference
from ai_learning.rewards import reward_for
from ai_learning.state import ModelState
from domain.errors import CommandError, PersistenceError
from domain.session_repository import SessionRepository
from scoring import scorer
from scoring.constants import LEDGER_MAX_EVENTS, MAX_REASONS_PER_RECORD
from scoring.embeddings import LikedEmbedding, embed, similarity
from scoring.features import FeatureTuple, extract
from scoring.scorer import ScoreResult

logger = logging.getLogger(__name__)

# actions that must point at an entity
_ENTITY_ACTIONS = frozenset({Action.LIKE, Action.DISLIKE, Action.SAVE, Action.SKIP, Action.ANNOTATION})
# actions whose rationale is the payload itself
_TEXT_ACTIONS = frozenset({Action.ANNOTATION, Action.VOICE_INPUT, Action.TEXT_INPUT})


@dataclass(frozen=True)
class FeedbackResult:
    event: InteractionEvent
    cumulative_reward: float
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "event": self.event.to_dict(),
            "cumulative_reward": self.cumulative_reward,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class SimilarEntity:
    entity_id: str
    name: str
    similarity: float
    reasons: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "name": self.name,
            "similarity": round(self.similarity, 4),
            "reasons": list(self.reasons),
        }


class PreferenceEngine:
    def __init__(self, repository: Optional[SessionRepository] = None, max_events: int = LEDGER_MAX_EVENTS):
        self._repository = repository
        self._max_events = max_events
        self._state: Optional[ModelState] = None
        self._load_warnings: tuple[str, ...] = ()
        self._lock = RLock()

    @classmethod
    def from_config(cls) -> "PreferenceEngine":
        """Engine wired to the repository selected by config_env."""
        import config_env

        backend = config_env.PREFS_STORE_BACKEND
        if backend == "memory":
            from data.dummy_session_repository_impl import DummySessionRepositoryImpl
            repository = DummySessionRepositoryImpl()
        elif backend == "sqlite":
            from data.sqlite_session_repository_impl import SQLiteSessionRepositoryImpl
            repository = SQLiteSessionRepositoryImpl(config_env.PREFS_SQLITE_PATH, config_env.PREFS_SESSION_KEY)
        else:
            if backend != "json":
                logger.warning("Unknown PREFS_STORE_BACKEND %r, using json", backend)
            from data.json_session_repository_impl import JsonSessionRepositoryImpl
            repository = JsonSessionRepositoryImpl(config_env.PREFS_STATE_PATH)
        return cls(repository=repository, max_events=config_env.PREFS_LEDGER_MAX_EVENTS)

    # ------------------------------------------------------------------
    # Lazy loading / persistence
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> ModelState:
        self._ensure_loaded()
        return self._state

    def _ensure_loaded(self):
        if self._state is not None:
            return
        with self._lock:
            if self._state is not None:
                return
            document = None
            if self._repository is not None:
                try:
                    document = self._repository.load()
                except PersistenceError as e:
                    logger.error("Could not load session state, starting empty: %s", e)
                    self._load_warnings = (f"State not loaded: {e}",)
            try:
                self._state = ModelState.from_dict(document, max_events=self._max_events)
            except (TypeError, ValueError, KeyError, AttributeError) as e:
                logger.error("Stored session state is unreadable, starting empty: %s", e)
                self._load_warnings = (f"State not loaded: {e}",)
                self._state = ModelState.empty(self._max_events)
            logger.info(
                "Session state ready: %d preferences, %d liked, %d events",
                len(self._state.preferences), len(self._state.liked), len(self._state.ledger),
            )

    def _persist(self) -> tuple[str, ...]:
        if self._repository is None:
            return ()
        try:
            self._repository.save(self._state.to_dict())
        except PersistenceError as e:
            logger.error("Could not save session state: %s", e)
            return (f"State not saved: {e}",)
        return ()

    def _write_through(self) -> tuple[str, ...]:
        # a failed load is reported once, with the first mutation after it
        warnings = self._load_warnings + self._persist()
        self._load_warnings = ()
        return warnings

    def close(self):
        if self._repository is not None:
            self._repository.on_end()

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def record(
        self,
        action: Action | str,
        entity: Any = None,
        rationale: Optional[str] = None,
        reward: Optional[float] = None,
        positive: Optional[bool] = None,
    ) -> FeedbackResult:
        try:
            action = Action.parse(action)
        except ValueError:
            raise CommandError(f"Unknown action: {action!r}") from None
        if action == Action.PAIR_PREFERENCE:
            raise CommandError("Pair preferences are recorded with prefer()")

        rationale = (rationale or "").strip() or None
        features = extract(entity) if entity is not None else None
        if action in _ENTITY_ACTIONS and features is None:
            raise CommandError(f"{action.value} needs an entity")
        if action in _TEXT_ACTIONS and not rationale:
            raise CommandError(f"{action.value} needs some text")

        with self._lock:
            self._ensure_loaded()
            state = self._state
            event = InteractionEvent(
                action=action,
                entity_id=features.id if features else None,
                entity_type=features.entity_type if features else None,
                features=features,
                rationale=rationale,
                reward=reward_for(action, reward),
                positive=positive if action == Action.ANNOTATION else None,
            )

            if features is not None:
                state.remember(features)
                self._apply_preferences(state, action, features, rationale, positive)

            state.ledger.append(event)
            state.count(action)
            total = state.rewards.add(event.reward)
            warnings = self._write_through()

        logger.info("Recorded %s for %s (reward %+.1f, total %.1f)",
                    action.value, event.entity_id or "-", event.reward, total)
        return FeedbackResult(event=event, cumulative_reward=total, warnings=warnings)

    @staticmethod
    def _apply_preferences(state: ModelState, action: Action, features: FeatureTuple,
                           rationale: Optional[str], positive: Optional[bool]):
        if action in (Action.LIKE, Action.SAVE):
            state.preferences.update(features, True, rationale)
            if features.id and features.text:
                liked = state.liked.get(features.id)
                if liked is None:
                    liked = LikedEmbedding(features.id, features.name or features.id, embed(features.text))
                    state.liked[features.id] = liked
                else:
                    liked.vector = embed(features.text)
                if rationale and rationale not in liked.reasons:
                    liked.reasons.append(rationale)
                    del liked.reasons[:-MAX_REASONS_PER_RECORD]
        elif action == Action.DISLIKE:
            state.preferences.update(features, False, rationale)
            if features.id:
                state.liked.pop(features.id, None)
        elif action == Action.ANNOTATION:
            state.preferences.update(features, positive is not False, rationale)

    def like(self, entity, rationale: Optional[str] = None) -> FeedbackResult:
        return self.record(Action.LIKE, entity, rationale)

    def dislike(self, entity, rationale: Optional[str] = None) -> FeedbackResult:
        return self.record(Action.DISLIKE, entity, rationale)

    def save(self, entity, rationale: Optional[str] = None) -> FeedbackResult:
        return self.record(Action.SAVE, entity, rationale)

    def skip(self, entity) -> FeedbackResult:
        return self.record(Action.SKIP, entity)

    def annotate(self, entity, text: str, positive: Optional[bool] = None) -> FeedbackResult:
        return self.record(Action.ANNOTATION, entity, text, positive=positive)

    def voice_input(self, text: str, entity=None, reward: Optional[float] = None) -> FeedbackResult:
        return self.record(Action.VOICE_INPUT, entity, text, reward=reward)

    def text_input(self, text: str, entity=None, reward: Optional[float] = None) -> FeedbackResult:
        return self.record(Action.TEXT_INPUT, entity, text, reward=reward)

    def prefer(self, chosen, rejected, rationale: Optional[str] = None) -> FeedbackResult:
        if chosen is None or rejected is None:
            raise CommandError("A pair preference needs two entities")
        chosen_f, rejected_f = extract(chosen), extract(rejected)
        if chosen_f.id and chosen_f.id == rejected_f.id:
            raise CommandError("Cannot prefer an entity over itself")
        rationale = (rationale or "").strip() or None

        with self._lock:
            self._ensure_loaded()
            state = self._state
            state.remember(chosen_f)
            state.remember(rejected_f)
            pair = PairPreference(chosen=chosen_f, rejected=rejected_f, rationale=rationale)
            state.add_pair(pair)
            event = InteractionEvent(
                action=Action.PAIR_PREFERENCE,
                entity_id=chosen_f.id,
                entity_type=chosen_f.entity_type,
                features=chosen_f,
                rationale=rationale,
                reward=reward_for(Action.PAIR_PREFERENCE),
                timestamp=pair.timestamp,
            )
            state.ledger.append(event)
            state.count(Action.PAIR_PREFERENCE)
            total = state.rewards.add(event.reward)
            warnings = self._write_through()

        logger.info("Recorded preference %s > %s", chosen_f.id, rejected_f.id)
        return FeedbackResult(event=event, cumulative_reward=total, warnings=warnings)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, entity) -> ScoreResult:
        features = extract(entity)
        with self._lock:
            self._ensure_loaded()
            return scorer.score(features, self._state.preferences, self._state.liked)

    def score_by_id(self, entity_id: str) -> Optional[ScoreResult]:
        with self._lock:
            self._ensure_loaded()
            features = self._state.entity(entity_id)
            if features is None:
                return None
            return scorer.score(features, self._state.preferences, self._state.liked)

    def lookup_entity(self, entity_id: str) -> Optional[FeatureTuple]:
        with self._lock:
            self._ensure_loaded()
            return self._state.entity(entity_id)

    def rank(self, entities: Iterable, limit: Optional[int] = None) -> list[tuple[FeatureTuple, ScoreResult]]:
        candidates = [extract(e) for e in entities]
        with self._lock:
            self._ensure_loaded()
            ranked = scorer.rank(candidates, self._state.preferences, self._state.liked)
        return ranked[:limit] if limit else ranked

    def similar(self, entity, top_k: int = 5) -> list[SimilarEntity]:
        features = extract(entity)
        if not features.text:
            return []
        query = embed(features.text)
        with self._lock:
            self._ensure_loaded()
            matches = [
                SimilarEntity(item.entity_id, item.name, similarity(query, item.vector), tuple(item.reasons))
                for item in self._state.liked.values()
                if item.entity_id != features.id
            ]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:top_k]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def cumulative_reward(self) -> float:
        with self._lock:
            return self.state.rewards.cumulative_reward()

    def lookup(self, category: str, value: str) -> Optional[dict]:
        with self._lock:
            record = self.state.preferences.lookup(category, value)
            return record.to_dict() if record else None

    def preferences(self, limit: Optional[int] = None) -> list[dict]:
        """Learned preferences, strongest |net| first."""
        with self._lock:
            return [r.to_dict() for r in self.state.preferences.top(limit)]

    def events(self, action: Action | str | None = None, entity_id: Optional[str] = None) -> list[InteractionEvent]:
        with self._lock:
            return self.state.ledger.events(action, entity_id=entity_id).to_list()

    def stats(self) -> dict:
        with self._lock:
            state = self.state
            ledger = state.ledger
            records = state.preferences.records()
            preferred = sorted((r for r in records if r.net > 0), key=lambda r: r.net, reverse=True)[:5]
            avoided = sorted((r for r in records if r.net < 0), key=lambda r: r.net)[:5]
            return {
                "likes": state.total(Action.LIKE),
                "dislikes": state.total(Action.DISLIKE),
                "saves": state.total(Action.SAVE),
                "skips": state.total(Action.SKIP),
                "annotations": state.total(Action.ANNOTATION),
                "pairs": len(state.pairs),
                "events": len(ledger),
                "liked_entities": len(state.liked),
                "preferences": len(records),
                "cumulative_reward": state.rewards.cumulative_reward(),
                "top_preferred": [f"{r.category}: {r.value}" for r in preferred],
                "top_avoided": [f"{r.category}: {r.value}" for r in avoided],
            }

    def interaction_patterns(self) -> dict:
        """Industries and seniorities the user leans towards, plus an engagement score."""
        with self._lock:
            events = self.state.ledger.events().to_list()

        def _values(actions, attr):
            seen = []
            for e in events:
                value = getattr(e.features, attr, None) if e.features else None
                if e.action in actions and value and value not in seen:
                    seen.append(value)
            return seen

        positive = (Action.LIKE, Action.SAVE)
        feedback = sum(1 for e in events if e.action in (Action.LIKE, Action.DISLIKE))
        questions = sum(1 for e in events if e.action in (Action.VOICE_INPUT, Action.TEXT_INPUT))
        return {
            "preferred_industries": _values(positive, "industry")[:5],
            "avoided_industries": _values((Action.DISLIKE,), "industry")[:3],
            "preferred_seniorities": _values(positive, "seniority")[:3],
            "engagement_score": min(100, feedback * 2 + questions * 5),
        }

    # ------------------------------------------------------------------
    # Export / reset
    # ------------------------------------------------------------------

    def export(self) -> dict:
        with self._lock:
            return build_export_document(self.state)

    def export_to(self, path) -> Path:
        document = self.export()
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
        logger.info("Exported %d events and %d pairs to %s",
                    len(document["events"]), len(document["pairs"]), target)
        return target

    def dpo_examples(self) -> list[dict]:
        with self._lock:
            return build_dpo_examples(self.state)

    def export_dpo(self, path) -> int:
        with self._lock:
            return export_dpo_jsonl(self.state, path)

    def clear_history(self) -> tuple[str, ...]:
        """Forget everything learned. Returns persistence warnings, if any."""
        with self._lock:
            self._state = ModelState.empty(self._max_events)
            self._load_warnings = ()
            warnings: tuple[str, ...] = ()
            if self._repository is not None:
                try:
                    self._repository.clear()
                except PersistenceError as e:
                    logger.error("Could not clear stored session: %s", e)
                    warnings = (f"Stored state not cleared: {e}",)
        logger.info("Session history cleared")
        return warnings
