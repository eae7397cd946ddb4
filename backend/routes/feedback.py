"""Feedback endpoints -- record likes, dislikes, notes and pair preferences."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ai_learning.engine import FeedbackResult, PreferenceEngine
from backend.dependencies import get_engine
from backend.schemas import FeedbackRequest, FeedbackResponse, PairRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedback"])


def _response(result: FeedbackResult) -> FeedbackResponse:
    event = result.event
    return FeedbackResponse(
        action=event.action.value,
        entity_id=event.entity_id,
        reward=event.reward,
        cumulative_reward=result.cumulative_reward,
        timestamp=event.timestamp,
        warnings=list(result.warnings),
    )


@router.post("/feedback", response_model=FeedbackResponse)
def record_feedback(req: FeedbackRequest, engine: PreferenceEngine = Depends(get_engine)):
    result = engine.record(
        req.action,
        req.entity,
        rationale=req.rationale,
        reward=req.reward,
        positive=req.positive,
    )
    return _response(result)


@router.post("/pairs", response_model=FeedbackResponse)
def record_pair(req: PairRequest, engine: PreferenceEngine = Depends(get_engine)):
    return _response(engine.prefer(req.chosen, req.rejected, req.rationale))
