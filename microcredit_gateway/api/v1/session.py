"""POST /v1/session/logout - Forget the user's held score"""

import logging
from fastapi import APIRouter, Depends, Request

from microcredit_gateway.api.dependencies import get_request_id, get_score_registry, get_session_user
from microcredit_gateway.domain.score_store import ScoreRegistry

router = APIRouter()


@router.post("/session/logout")
def logout(
    request: Request,
    user_id: str = Depends(get_session_user),
    registry: ScoreRegistry = Depends(get_score_registry),
):
    """Clear session state so the next login starts without a score"""
    registry.reset(user_id)
    logging.info("Session cleared", extra={"request_id": get_request_id(request), "user_id": user_id})
    return {"status": "logged_out", "redirect": "/login"}
