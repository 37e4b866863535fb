"""Loan offers and the three-step loan application wizard"""

import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from microcredit_gateway.api.v1.schemas import (
    ApplicationHistoryItem,
    ApplicationHistoryResponse,
    ApplicationResponse,
    LoanOfferSchema,
    LoanOffersResponse,
    LoanSummarySchema,
    StartApplicationRequest,
    StepRequest,
    SubmitRequest,
)
from microcredit_gateway.api.dependencies import get_optional_score_store, get_request_id, get_score_store, get_session_user
from microcredit_gateway.domain.score_store import ScoreStore
from microcredit_gateway.domain.loan_wizard import LoanWizard, eligible_offers, get_offer
from microcredit_gateway.domain.exceptions import LoanOfferNotFoundError, ScoreNotAvailableError, WizardValidationError
from microcredit_gateway.infrastructure.database.models import LoanApplicationRecord
from microcredit_gateway.infrastructure.database.session import get_db
from microcredit_gateway.infrastructure.database.repositories import LoanApplicationRepository
from microcredit_gateway.infrastructure.observability.metrics import loan_application_counter

router = APIRouter()


def to_response(db_application: LoanApplicationRecord, wizard: LoanWizard) -> ApplicationResponse:
    summary = wizard.summary()
    return ApplicationResponse(
        application_id=str(db_application.id),
        status=db_application.status,
        step=wizard.step,
        step_title=wizard.step_title,
        offer=LoanOfferSchema.from_offer(wizard.offer),
        loan_amount=db_application.loan_amount,
        loan_tenure=db_application.tenure_months,
        purpose=wizard.purpose,
        personal_details=wizard.personal,
        summary=LoanSummarySchema.from_summary(summary) if summary else None,
        created_at=db_application.created_at,
        submitted_at=db_application.submitted_at,
    )


def load_application(repo: LoanApplicationRepository, application_id: str, user_id: str) -> LoanApplicationRecord:
    try:
        application_uuid = uuid.UUID(application_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid application ID format")

    db_application = repo.get_application(application_uuid, user_id)
    if not db_application:
        raise HTTPException(status_code=404, detail="Application not found")
    return db_application


def step_rejected(e: WizardValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})


@router.get("/loans/offers", response_model=LoanOffersResponse)
def list_offers(store: Optional[ScoreStore] = Depends(get_optional_score_store)):
    """Loan products the user's held score qualifies for (all of them without a score)"""
    score = store.get().score if store is not None and store.has_score else None
    return LoanOffersResponse(
        score=score,
        offers=[LoanOfferSchema.from_offer(offer) for offer in eligible_offers(score)],
    )


@router.post("/loans/applications", response_model=ApplicationResponse, status_code=201)
def start_application(
    request_body: StartApplicationRequest,
    request: Request,
    user_id: str = Depends(get_session_user),
    store: ScoreStore = Depends(get_score_store),
    db: Session = Depends(get_db),
):
    """
    Start a wizard for an offer.

    Requires a held score; the amount defaults to half the offer's maximum
    and the tenure to the middle option.
    """
    try:
        score = store.get().score
        offer = get_offer(request_body.offer_id)
    except ScoreNotAvailableError as e:
        raise HTTPException(status_code=404, detail=str(e), headers={"Location": "/calculate-score"})
    except LoanOfferNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if score < offer.min_score:
        raise HTTPException(status_code=422, detail=f"A score of at least {offer.min_score} is required for this loan")

    request_id = get_request_id(request)
    wizard = LoanWizard.start(offer)
    repo = LoanApplicationRepository(db)

    try:
        db_application = repo.create_application(user_id, wizard, score)
        db.commit()
        db.refresh(db_application)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    loan_application_counter.labels(status="started").inc()
    logging.info(
        "Loan application started",
        extra={"request_id": request_id, "user_id": user_id, "offer_id": offer.id},
    )
    return to_response(db_application, wizard)


@router.get("/loans/applications", response_model=ApplicationHistoryResponse)
def list_applications(user_id: str = Depends(get_session_user), db: Session = Depends(get_db)):
    """Recent loan applications for the user"""
    repo = LoanApplicationRepository(db)
    applications = repo.get_applications_by_user(user_id, limit=20)

    return ApplicationHistoryResponse(
        user_id=user_id,
        applications=[
            ApplicationHistoryItem(
                application_id=str(a.id),
                bank=a.bank,
                loan_amount=a.loan_amount,
                status=a.status,
                created_at=a.created_at.isoformat(),
            )
            for a in applications
        ],
    )


@router.get("/loans/applications/{application_id}", response_model=ApplicationResponse)
def get_application(application_id: str, user_id: str = Depends(get_session_user), db: Session = Depends(get_db)):
    """Current wizard state with EMI summary"""
    repo = LoanApplicationRepository(db)
    db_application = load_application(repo, application_id, user_id)
    return to_response(db_application, repo.to_wizard(db_application))


@router.post("/loans/applications/{application_id}/next", response_model=ApplicationResponse)
def next_step(
    application_id: str,
    request_body: StepRequest,
    user_id: str = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    """
    Save input for the current step and advance.

    Input is kept even when validation fails so the form can be corrected.
    """
    repo = LoanApplicationRepository(db)
    db_application = load_application(repo, application_id, user_id)
    wizard = repo.to_wizard(db_application)

    try:
        wizard.next(request_body.model_dump(exclude_unset=True))
    except WizardValidationError as e:
        repo.save_wizard(db_application, wizard)
        db.commit()
        raise step_rejected(e)

    repo.save_wizard(db_application, wizard)
    db.commit()
    return to_response(db_application, wizard)


@router.post("/loans/applications/{application_id}/back", response_model=ApplicationResponse)
def previous_step(application_id: str, user_id: str = Depends(get_session_user), db: Session = Depends(get_db)):
    """Go back one step without validating"""
    repo = LoanApplicationRepository(db)
    db_application = load_application(repo, application_id, user_id)
    wizard = repo.to_wizard(db_application)

    try:
        wizard.back()
    except WizardValidationError as e:
        raise step_rejected(e)

    repo.save_wizard(db_application, wizard)
    db.commit()
    return to_response(db_application, wizard)


@router.post("/loans/applications/{application_id}/submit", response_model=ApplicationResponse)
def submit_application(
    application_id: str,
    request_body: SubmitRequest,
    request: Request,
    user_id: str = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    """Submit from the review step once the terms are accepted"""
    repo = LoanApplicationRepository(db)
    db_application = load_application(repo, application_id, user_id)
    wizard = repo.to_wizard(db_application)

    try:
        wizard.submit(request_body.agree_terms)
    except WizardValidationError as e:
        raise step_rejected(e)

    repo.save_wizard(db_application, wizard)
    db.commit()

    loan_application_counter.labels(status="submitted").inc()
    logging.info(
        "Loan application submitted",
        extra={
            "request_id": get_request_id(request),
            "user_id": user_id,
            "application_id": str(db_application.id),
            "bank": db_application.bank,
        },
    )
    return to_response(db_application, wizard)
