"""Admin endpoints -- session statistics, learned preferences, export, reset."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from ai_learning.engine import PreferenceEngine
from backend.dependencies import get_engine
from backend.schemas import ClearResponse, InteractionPatterns, PreferenceOut, SessionStats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=SessionStats)
def session_stats(engine: PreferenceEngine = Depends(get_engine)):
    return SessionStats(**engine.stats())


@router.get("/preferences", response_model=list[PreferenceOut])
def learned_preferences(
    limit: int = Query(50, ge=1, le=1000),
    engine: PreferenceEngine = Depends(get_engine),
):
    return [PreferenceOut(**r) for r in engine.preferences(limit=limit)]


@router.get("/patterns", response_model=InteractionPatterns)
def interaction_patterns(engine: PreferenceEngine = Depends(get_engine)):
    return InteractionPatterns(**engine.interaction_patterns())


@router.get("/export")
def export_training_data(
    fmt: str = Query("preference-pairs", alias="format", pattern="^(preference-pairs|dpo)$"),
    engine: PreferenceEngine = Depends(get_engine),
):
    """Full preference-pairs document, or DPO examples with ?format=dpo."""
    if fmt == "dpo":
        return engine.dpo_examples()
    return engine.export()


@router.post("/clear", response_model=ClearResponse)
def clear_history(engine: PreferenceEngine = Depends(get_engine)):
    warnings = engine.clear_history()
    logger.info("Session cleared via API")
    return ClearResponse(cleared=True, warnings=list(warnings))
