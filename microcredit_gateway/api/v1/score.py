"""Score calculator, dashboard and home endpoints"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request

from microcredit_gateway.api.v1.schemas import FinancialProfileRequest, HomeResponse, ScoreBand, ScoreResponse
from microcredit_gateway.api.dependencies import (
    get_optional_score_store,
    get_request_id,
    get_score_service_client,
    get_score_store,
    get_scoring_strategy,
    get_session_user,
)
from microcredit_gateway.config import settings
from microcredit_gateway.domain.score_store import ScoreStore
from microcredit_gateway.domain.scoring import ScoringStrategy, result_from_record
from microcredit_gateway.domain.exceptions import InvalidProfileError, ScoreNotAvailableError, UpstreamServiceError
from microcredit_gateway.infrastructure.clients.score_service import ScoreServiceClient
from microcredit_gateway.infrastructure.observability.metrics import record_score, upstream_failure_counter
from microcredit_gateway.infrastructure.observability.logging import log_score_computed

router = APIRouter()

SCORE_BANDS = [
    ScoreBand(label="Poor", min_score=300, max_score=499),
    ScoreBand(label="Fair", min_score=500, max_score=649),
    ScoreBand(label="Good", min_score=650, max_score=749),
    ScoreBand(label="Excellent", min_score=750, max_score=900),
]


def upstream_unavailable(e: UpstreamServiceError, request_id: str) -> HTTPException:
    """Count and log an upstream failure; the message is shown inline to the user"""
    upstream_failure_counter.labels(service=e.service).inc()
    logging.error(f"Upstream error: {e}", extra={"request_id": request_id, "service": e.service})
    return HTTPException(status_code=503, detail=str(e))


async def load_held_score(
    store: ScoreStore,
    user_id: str,
    score_client: ScoreServiceClient,
    request_id: str,
) -> ScoreResponse:
    """Return the held score, fetching it from the score backend once when nothing is held"""
    try:
        if not store.has_score:
            record = await score_client.get_score(user_id)
            store.set(result_from_record(record))
        return ScoreResponse.from_result(store.get(), store.revision, with_charts=True)

    except ScoreNotAvailableError as e:
        raise HTTPException(status_code=404, detail=str(e), headers={"Location": "/calculate-score"})
    except UpstreamServiceError as e:
        raise upstream_unavailable(e, request_id)


@router.post("/score/calculate", response_model=ScoreResponse)
async def calculate_score(
    request_body: FinancialProfileRequest,
    request: Request,
    user_id: str = Depends(get_session_user),
    store: ScoreStore = Depends(get_score_store),
    strategy: ScoringStrategy = Depends(get_scoring_strategy),
    score_client: ScoreServiceClient = Depends(get_score_service_client),
):
    """
    Calculate a credit score from questionnaire answers.

    Flow:
    1. Score the profile with the configured strategy
    2. Store answers and score in the score backend (single attempt)
    3. Replace the user's held score
    4. Return score, category and breakdown
    """
    start_time = time.time()
    request_id = get_request_id(request)
    profile = request_body.to_profile()

    try:
        # 1. Score locally or via the classifier
        result = await strategy.score(profile)

        # 2. Persist to the score backend
        if settings.score_sync_enabled:
            stored = await score_client.calculate_score(user_id, profile, result)
            logging.info(
                "Score stored in backend",
                extra={"request_id": request_id, "user_id": user_id, "stored_score": stored.score},
            )

    except InvalidProfileError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except UpstreamServiceError as e:
        raise upstream_unavailable(e, request_id)

    # 3. Hold the new score for the dashboard
    store.set(result)

    duration_ms = (time.time() - start_time) * 1000
    record_score(result.strategy, result.category, result.score)
    log_score_computed(request_id, user_id, result.strategy, result.score, result.category, duration_ms)

    return ScoreResponse.from_result(result, store.revision)


@router.get("/score", response_model=ScoreResponse)
async def get_dashboard_score(
    request: Request,
    user_id: str = Depends(get_session_user),
    store: ScoreStore = Depends(get_score_store),
    score_client: ScoreServiceClient = Depends(get_score_service_client),
):
    """
    Dashboard data: score gauge and factor breakdown.

    Served from the held score; the score backend is only consulted when
    nothing is held yet.
    """
    return await load_held_score(store, user_id, score_client, get_request_id(request))


@router.post("/score/refresh", response_model=ScoreResponse)
async def refresh_score(
    request: Request,
    user_id: str = Depends(get_session_user),
    store: ScoreStore = Depends(get_score_store),
    score_client: ScoreServiceClient = Depends(get_score_service_client),
):
    """Drop the held score and re-read it from the score backend"""
    store.invalidate()
    return await load_held_score(store, user_id, score_client, get_request_id(request))


@router.get("/home", response_model=HomeResponse)
def get_home(store: Optional[ScoreStore] = Depends(get_optional_score_store)):
    """Score bands for the landing page, plus the user's held score if any"""
    if store is None or not store.has_score:
        return HomeResponse(score_bands=SCORE_BANDS)

    result = store.get()
    return HomeResponse(score_bands=SCORE_BANDS, score=result.score, category=result.category)
