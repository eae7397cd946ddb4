"""Pydantic schemas for FastAPI request / response models."""

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------

class FeedbackRequest(BaseModel):
    action: str = Field(..., description="LIKE, DISLIKE, SAVE, SKIP, ANNOTATION, VOICE_INPUT or TEXT_INPUT")
    entity: Optional[dict[str, Any]] = None  # raw person / company / signal record
    rationale: Optional[str] = None
    reward: Optional[float] = None  # overrides the reward table
    positive: Optional[bool] = None  # ANNOTATION polarity


class PairRequest(BaseModel):
    chosen: dict[str, Any]
    rejected: dict[str, Any]
    rationale: Optional[str] = None


class FeedbackResponse(BaseModel):
    action: str
    entity_id: Optional[str] = None
    reward: float
    cumulative_reward: float
    timestamp: str
    warnings: list[str] = []


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

class ScoreRequest(BaseModel):
    entity: dict[str, Any]


class RankRequest(BaseModel):
    entities: list[dict[str, Any]]
    limit: Optional[int] = Field(None, ge=1)


class ScoreResponse(BaseModel):
    entity_id: Optional[str] = None
    name: Optional[str] = None
    score: int = Field(..., ge=0, le=100)
    reasons: list[str] = []
    warnings: list[str] = []


class RankResponse(BaseModel):
    results: list[ScoreResponse]
    total: int


class SimilarItem(BaseModel):
    entity_id: str
    name: str
    similarity: float
    reasons: list[str] = []


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

class SessionStats(BaseModel):
    likes: int
    dislikes: int
    saves: int
    skips: int
    annotations: int
    pairs: int
    events: int
    liked_entities: int
    preferences: int
    cumulative_reward: float
    top_preferred: list[str] = []
    top_avoided: list[str] = []


class PreferenceOut(BaseModel):
    category: str
    value: str
    positive: float
    negative: float
    net: float
    positive_reasons: list[str] = []
    negative_reasons: list[str] = []


class InteractionPatterns(BaseModel):
    preferred_industries: list[str] = []
    avoided_industries: list[str] = []
    preferred_seniorities: list[str] = []
    engagement_score: int = 0


class ClearResponse(BaseModel):
    cleared: bool = True
    warnings: list[str] = []
