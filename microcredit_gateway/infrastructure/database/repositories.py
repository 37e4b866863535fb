"""Data access layer for loan applications"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from microcredit_gateway.infrastructure.database.models import LoanApplicationRecord
from microcredit_gateway.domain.loan_wizard import LoanWizard, get_offer


class LoanApplicationRepository:
    """Repository for loan application wizards"""

    def __init__(self, db: Session):
        self.db = db

    def create_application(self, user_id: str, wizard: LoanWizard, score: Optional[int]) -> LoanApplicationRecord:
        """Persist a freshly started wizard"""
        db_application = LoanApplicationRecord(
            user_id=user_id,
            offer_id=wizard.offer.id,
            bank=wizard.offer.bank,
            interest=wizard.offer.interest,
            score_at_application=score,
        )
        self._apply(db_application, wizard)
        self.db.add(db_application)
        self.db.flush()  # Get ID without committing
        return db_application

    def save_wizard(self, db_application: LoanApplicationRecord, wizard: LoanWizard) -> LoanApplicationRecord:
        """Write wizard progress back to its record"""
        self._apply(db_application, wizard)
        if wizard.submitted and db_application.submitted_at is None:
            db_application.submitted_at = datetime.now(timezone.utc)
        self.db.flush()
        return db_application

    def get_application(self, application_id: uuid.UUID, user_id: str) -> Optional[LoanApplicationRecord]:
        """Fetch an application owned by the user"""
        return (
            self.db.query(LoanApplicationRecord)
            .filter(LoanApplicationRecord.id == application_id)
            .filter(LoanApplicationRecord.user_id == user_id)
            .first()
        )

    def get_applications_by_user(self, user_id: str, limit: int = 20) -> List[LoanApplicationRecord]:
        """Fetch recent applications for a user"""
        return (
            self.db.query(LoanApplicationRecord)
            .filter(LoanApplicationRecord.user_id == user_id)
            .order_by(LoanApplicationRecord.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def to_wizard(db_application: LoanApplicationRecord) -> LoanWizard:
        return LoanWizard(
            offer=get_offer(db_application.offer_id),
            step=db_application.step,
            loan_amount=db_application.loan_amount,
            tenure_months=db_application.tenure_months,
            purpose=db_application.purpose or "",
            personal=dict(db_application.personal_details or {}),
            submitted=db_application.status == "submitted",
        )

    @staticmethod
    def _apply(db_application: LoanApplicationRecord, wizard: LoanWizard) -> None:
        db_application.step = wizard.step
        db_application.loan_amount = _as_int(wizard.loan_amount)
        db_application.tenure_months = _as_int(wizard.tenure_months)
        db_application.purpose = wizard.purpose
        db_application.personal_details = dict(wizard.personal)
        db_application.status = "submitted" if wizard.submitted else "draft"


def _as_int(value) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None
