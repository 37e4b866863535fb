"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FinancialProfile:
    """Monthly questionnaire answers, all amounts in INR"""

    monthly_income: float
    grocery_spending: float = 0.0
    utility_bills: float = 0.0
    total_savings: float = 0.0
    rent_emi: float = 0.0
    medical_expenses: float = 0.0
    transportation_cost: float = 0.0
    loan_repayment: float = 0.0

    @property
    def total_expenses(self) -> float:
        return (
            self.grocery_spending
            + self.utility_bills
            + self.rent_emi
            + self.medical_expenses
            + self.transportation_cost
            + self.loan_repayment
        )

    def amounts(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ScoreBreakdown:
    """Per-factor sub-scores in [0, 100]"""

    income: int = 0
    spending: int = 0
    savings: int = 0
    loans: int = 0
    location_consistency: int = 0  # Set by utility bill verification
    transaction_history: int = 0  # Set by bank statement verification

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class ScoreResult:
    """Output of a scoring strategy"""

    score: int
    breakdown: ScoreBreakdown
    category: str
    strategy: str


@dataclass
class ScoreRecord:
    """Score record as stored by the score backend"""

    score: Optional[int]
    monthly_income: float = 0.0
    grocery_spending: float = 0.0
    total_savings: float = 0.0
    loan_repayment: float = 0.0
    rent_or_emi: float = 0.0
    utility_bills: float = 0.0

    def to_profile(self) -> FinancialProfile:
        """Rebuild the subset of the questionnaire the backend echoes back"""
        return FinancialProfile(
            monthly_income=self.monthly_income,
            grocery_spending=self.grocery_spending,
            utility_bills=self.utility_bills,
            total_savings=self.total_savings,
            rent_emi=self.rent_or_emi,
            loan_repayment=self.loan_repayment,
        )


@dataclass
class UploadedDocument:
    """File attached to a verification form"""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class UtilityBill:
    """Utility bill verification form"""

    bill_type: str
    provider: str
    consumer_number: str
    address: str
    bill_date: Optional[date]
    bill_amount: Optional[float]
    document: Optional[UploadedDocument]


@dataclass
class BankStatement:
    """Bank statement verification form"""

    bank_name: str
    account_number: str
    account_type: str
    statement_period: Optional[int]
    document: Optional[UploadedDocument]


@dataclass(frozen=True)
class LoanOffer:
    """Loan product a user can apply for"""

    id: str
    bank: str
    interest: float  # Annual rate in percent
    max_amount: int
    tenure: tuple  # Allowed tenures in months
    min_score: int = 300


@dataclass
class Installment:
    """Single payment in a repayment schedule"""

    due_date: date
    amount: int


@dataclass
class LoanSummary:
    """Review figures shown before submitting an application"""

    loan_amount: int
    tenure_months: int
    interest: float
    emi: int
    processing_fee: int
    schedule: List[Installment] = field(default_factory=list)
