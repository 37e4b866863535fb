"""Dependency injection for FastAPI endpoints"""

import json
from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, Request
from microcredit_gateway.config import settings
from microcredit_gateway.domain.exceptions import MissingSessionError
from microcredit_gateway.domain.score_store import ScoreRegistry, ScoreStore
from microcredit_gateway.domain.scoring import ClassifierStrategy, ScoringStrategy, WeightedSumStrategy
from microcredit_gateway.infrastructure.clients.classifier import ClassifierClient
from microcredit_gateway.infrastructure.clients.score_service import ScoreServiceClient
from microcredit_gateway.infrastructure.clients.utility_bill import UtilityBillClient

score_registry = ScoreRegistry()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def resolve_user_id(user_cookie: Optional[str], user_header: Optional[str]) -> str:
    """
    Read the logged-in user's id.

    The `user` cookie carries the same JSON object the browser keeps in
    local storage ({"id": ..., ...}); `X-User-Id` is accepted for API callers.

    Raises:
        MissingSessionError: No usable identity
    """
    if user_header and user_header.strip():
        return user_header.strip()

    if user_cookie:
        try:
            user = json.loads(user_cookie)
        except ValueError:
            user = None
        if isinstance(user, dict) and user.get("id") not in (None, ""):
            return str(user["id"])

    raise MissingSessionError("User session expired. Please log in again.")


def get_session_user(
    user: Optional[str] = Cookie(default=None),
    x_user_id: Optional[str] = Header(default=None),
) -> str:
    """Logged-in user id; anything else is a hard redirect to login"""
    try:
        return resolve_user_id(user, x_user_id)
    except MissingSessionError as e:
        raise HTTPException(status_code=401, detail=str(e), headers={"Location": "/login"})


def get_score_registry() -> ScoreRegistry:
    """Provide the process-wide score registry"""
    return score_registry


def get_score_store(
    user_id: str = Depends(get_session_user),
    registry: ScoreRegistry = Depends(get_score_registry),
) -> ScoreStore:
    """Provide the current user's score store"""
    return registry.for_user(user_id)


def get_optional_score_store(
    user: Optional[str] = Cookie(default=None),
    x_user_id: Optional[str] = Header(default=None),
    registry: ScoreRegistry = Depends(get_score_registry),
) -> Optional[ScoreStore]:
    """Score store for pages that also render for anonymous visitors; never creates one"""
    try:
        return registry.peek(resolve_user_id(user, x_user_id))
    except MissingSessionError:
        return None


def get_score_service_client() -> ScoreServiceClient:
    """Provide score backend client instance"""
    return ScoreServiceClient()


def get_classifier_client() -> ClassifierClient:
    """Provide ML classifier client instance"""
    return ClassifierClient()


def get_utility_bill_client() -> UtilityBillClient:
    """Provide utility bill upload client instance"""
    return UtilityBillClient()


def get_scoring_strategy(
    classifier_client: ClassifierClient = Depends(get_classifier_client),
) -> ScoringStrategy:
    """Provide the configured scoring strategy"""
    if settings.scoring_strategy == "classifier":
        return ClassifierStrategy(classifier_client)
    return WeightedSumStrategy()
