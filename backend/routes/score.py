"""Score endpoints -- explainable scores, rankings and nearest liked entities."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ai_learning.engine import PreferenceEngine
from backend.dependencies import get_engine
from backend.schemas import RankRequest, RankResponse, ScoreRequest, ScoreResponse, SimilarItem
from scoring.features import FeatureTuple, extract
from scoring.scorer import ScoreResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["score"])


def _to_response(features: FeatureTuple, result: ScoreResult) -> ScoreResponse:
    return ScoreResponse(
        entity_id=features.id,
        name=features.name,
        score=result.score,
        reasons=list(result.reasons),
        warnings=list(result.warnings),
    )


@router.post("/score", response_model=ScoreResponse)
def score_entity(req: ScoreRequest, engine: PreferenceEngine = Depends(get_engine)):
    features = extract(req.entity)
    return _to_response(features, engine.score(features))


@router.get("/score/{entity_id}", response_model=ScoreResponse)
def score_known_entity(entity_id: str, engine: PreferenceEngine = Depends(get_engine)):
    features = engine.lookup_entity(entity_id)
    if features is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return _to_response(features, engine.score(features))


@router.post("/rank", response_model=RankResponse)
def rank_entities(req: RankRequest, engine: PreferenceEngine = Depends(get_engine)):
    ranked = engine.rank(req.entities, limit=req.limit)
    return RankResponse(
        results=[_to_response(f, r) for f, r in ranked],
        total=len(req.entities),
    )


@router.post("/similar", response_model=list[SimilarItem])
def similar_entities(
    req: ScoreRequest,
    top_k: int = Query(5, ge=1, le=50),
    engine: PreferenceEngine = Depends(get_engine),
):
    return [SimilarItem(**m.to_dict()) for m in engine.similar(req.entity, top_k=top_k)]
