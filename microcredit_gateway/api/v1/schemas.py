"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from microcredit_gateway.domain.models import FinancialProfile, LoanOffer, LoanSummary, ScoreResult
from microcredit_gateway.domain.scoring import MAX_SCORE, MIN_SCORE


FACTOR_LABELS: Dict[str, str] = {
    "income": "Income Stability",
    "spending": "Expense Management",
    "savings": "Savings Ratio",
    "loans": "Debt Management",
    "location_consistency": "Location Consistency",
    "transaction_history": "Transaction History",
}
FACTOR_COLORS = ["#3b82f6", "#16a34a", "#ca8a04", "#dc2626", "#0f766e", "#9333ea"]
CATEGORY_COLORS = {
    "Excellent": "#3b82f6",
    "Good": "#16a34a",
    "Fair": "#ca8a04",
    "Poor": "#dc2626",
    "Bad": "#ca8a04",
    "Very Poor": "#dc2626",
}


class FinancialProfileRequest(BaseModel):
    """Request body for POST /v1/score/calculate (amounts in INR)"""

    monthly_income: float = Field(..., ge=0, description="Monthly income")
    grocery_spending: float = Field(0, ge=0)
    utility_bills: float = Field(0, ge=0)
    total_savings: float = Field(0, ge=0)
    rent_emi: float = Field(0, ge=0, description="Rent or EMI")
    medical_expenses: float = Field(0, ge=0)
    transportation_cost: float = Field(0, ge=0)
    loan_repayment: float = Field(0, ge=0)

    def to_profile(self) -> FinancialProfile:
        return FinancialProfile(**self.model_dump())


class ScoreBreakdownSchema(BaseModel):
    """Per-factor sub-scores"""

    income: int
    spending: int
    savings: int
    loans: int
    location_consistency: int
    transaction_history: int


class ChartDataset(BaseModel):
    data: List[float]
    background_color: List[str]


class ChartSchema(BaseModel):
    """Donut chart input; rendering happens client-side"""

    labels: List[str]
    datasets: List[ChartDataset]


class ScoreResponse(BaseModel):
    """Response for score endpoints"""

    score: int
    category: str
    strategy: str
    breakdown: ScoreBreakdownSchema
    revision: int
    score_range: List[int] = [MIN_SCORE, MAX_SCORE]
    gauge: Optional[ChartSchema] = None
    breakdown_chart: Optional[ChartSchema] = None

    @classmethod
    def from_result(cls, result: ScoreResult, revision: int, with_charts: bool = False) -> "ScoreResponse":
        breakdown = result.breakdown.as_dict()
        gauge = None
        breakdown_chart = None
        if with_charts:
            gauge_color = CATEGORY_COLORS.get(result.category, "#64748b")
            gauge = ChartSchema(
                labels=["Score", "Remaining"],
                datasets=[
                    ChartDataset(
                        data=[result.score, MAX_SCORE - result.score],
                        background_color=[gauge_color, "#e2e8f0"],
                    )
                ],
            )
            breakdown_chart = ChartSchema(
                labels=list(FACTOR_LABELS.values()),
                datasets=[
                    ChartDataset(
                        data=[breakdown[key] for key in FACTOR_LABELS],
                        background_color=FACTOR_COLORS,
                    )
                ],
            )
        return cls(
            score=result.score,
            category=result.category,
            strategy=result.strategy,
            breakdown=ScoreBreakdownSchema(**breakdown),
            revision=revision,
            gauge=gauge,
            breakdown_chart=breakdown_chart,
        )


class ScoreBand(BaseModel):
    label: str
    min_score: int
    max_score: int


class HomeResponse(BaseModel):
    """Response for GET /v1/home"""

    score_bands: List[ScoreBand]
    score: Optional[int] = None
    category: Optional[str] = None


class VerificationResponse(BaseModel):
    """Response for document upload endpoints"""

    document: str
    verified: bool
    score_updated: bool
    previous_score: Optional[int] = None
    score: Optional[ScoreResponse] = None
    acknowledgment: Optional[dict] = None


class LoanOfferSchema(BaseModel):
    """Loan product in the catalogue"""

    id: str
    bank: str
    interest: float
    max_amount: int
    tenure: List[int]
    min_score: int

    @classmethod
    def from_offer(cls, offer: LoanOffer) -> "LoanOfferSchema":
        return cls(
            id=offer.id,
            bank=offer.bank,
            interest=offer.interest,
            max_amount=offer.max_amount,
            tenure=list(offer.tenure),
            min_score=offer.min_score,
        )


class LoanOffersResponse(BaseModel):
    score: Optional[int] = None
    offers: List[LoanOfferSchema]


class StartApplicationRequest(BaseModel):
    """Request body for POST /v1/loans/applications"""

    offer_id: str = Field(..., min_length=1)


class LoanDetailsStep(BaseModel):
    """Step 1 input; all optional so missing fields report per-field errors"""

    loan_amount: Optional[float] = None
    loan_tenure: Optional[int] = None
    purpose: Optional[str] = None


class PersonalDetailsStep(BaseModel):
    """Step 2 input"""

    full_name: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    occupation: Optional[str] = None
    employer_name: Optional[str] = None
    monthly_income: Optional[Union[str, float]] = None
    pan_number: Optional[str] = None
    aadhaar_number: Optional[str] = None


class StepRequest(LoanDetailsStep, PersonalDetailsStep):
    """Request body for POST /v1/loans/applications/{id}/next"""

    pass


class SubmitRequest(BaseModel):
    agree_terms: bool = False


class InstallmentSchema(BaseModel):
    """Single instalment in a repayment schedule"""

    due_date: date
    amount: int


class LoanSummarySchema(BaseModel):
    loan_amount: int
    tenure_months: int
    interest: float
    emi: int
    processing_fee: int
    schedule: List[InstallmentSchema]

    @classmethod
    def from_summary(cls, summary: LoanSummary) -> "LoanSummarySchema":
        return cls(
            loan_amount=summary.loan_amount,
            tenure_months=summary.tenure_months,
            interest=summary.interest,
            emi=summary.emi,
            processing_fee=summary.processing_fee,
            schedule=[InstallmentSchema(due_date=i.due_date, amount=i.amount) for i in summary.schedule],
        )


class ApplicationResponse(BaseModel):
    """Wizard state for one application"""

    application_id: str
    status: str
    step: int
    step_title: str
    offer: LoanOfferSchema
    loan_amount: Optional[int] = None
    loan_tenure: Optional[int] = None
    purpose: str = ""
    personal_details: Dict[str, str] = {}
    summary: Optional[LoanSummarySchema] = None
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None


class ApplicationHistoryItem(BaseModel):
    application_id: str
    bank: str
    loan_amount: Optional[int] = None
    status: str
    created_at: str


class ApplicationHistoryResponse(BaseModel):
    """Response for GET /v1/loans/applications"""

    user_id: str
    applications: List[ApplicationHistoryItem]
