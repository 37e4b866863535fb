"""Three-step loan application wizard: loan details, personal details, review"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from microcredit_gateway.domain.models import LoanOffer, LoanSummary
from microcredit_gateway.domain.emi import summarize_loan
from microcredit_gateway.domain.exceptions import LoanOfferNotFoundError, WizardValidationError
from microcredit_gateway.utils.date_utils import parse_iso_date

STEP_LOAN_DETAILS = 1
STEP_PERSONAL_DETAILS = 2
STEP_REVIEW = 3
STEP_TITLES = {
    STEP_LOAN_DETAILS: "Loan Details",
    STEP_PERSONAL_DETAILS: "Personal Details",
    STEP_REVIEW: "Review & Submit",
}

LOAN_PURPOSES = ("agriculture", "business", "education", "medical", "home", "wedding", "other")
GENDERS = ("male", "female", "other")
OCCUPATIONS = ("farmer", "labour", "shopkeeper", "artisan", "service", "other")

PERSONAL_FIELDS = (
    "full_name",
    "gender",
    "dob",
    "mobile",
    "email",
    "address",
    "city",
    "state",
    "pincode",
    "occupation",
    "employer_name",
    "monthly_income",
    "pan_number",
    "aadhaar_number",
)

FIELD_PATTERNS = {
    "mobile": (re.compile(r"^[0-9]{10}$"), "Please enter a valid 10-digit mobile number"),
    "email": (re.compile(r"\S+@\S+\.\S+"), "Please enter a valid email address"),
    "pincode": (re.compile(r"^[0-9]{6}$"), "Please enter a valid 6-digit PIN code"),
    "pan_number": (re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$"), "Please enter a valid PAN number"),
    "aadhaar_number": (re.compile(r"^[0-9]{4}$"), "Please enter the last 4 digits of your Aadhaar"),
}

LOAN_OFFERS: List[LoanOffer] = [
    LoanOffer(id="kisan-micro", bank="Gramin Vikas Bank", interest=9.5, max_amount=50_000, tenure=(6, 12, 18), min_score=300),
    LoanOffer(id="udyam-starter", bank="Sahakari Credit Society", interest=12.0, max_amount=100_000, tenure=(12, 24, 36), min_score=500),
    LoanOffer(id="shiksha-plus", bank="Jan Seva Finance", interest=10.5, max_amount=200_000, tenure=(12, 24, 36, 48), min_score=650),
    LoanOffer(id="vyapar-gold", bank="Bharat Small Finance Bank", interest=8.75, max_amount=500_000, tenure=(24, 36, 48, 60), min_score=750),
]


def get_offer(offer_id: str) -> LoanOffer:
    for offer in LOAN_OFFERS:
        if offer.id == offer_id:
            return offer
    raise LoanOfferNotFoundError(f"Loan offer not found: {offer_id}")


def eligible_offers(score: Optional[int]) -> List[LoanOffer]:
    """Offers whose minimum score the user meets; everything when no score is known"""
    if score is None:
        return list(LOAN_OFFERS)
    return [offer for offer in LOAN_OFFERS if score >= offer.min_score]


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def validate_loan_details(offer: LoanOffer, loan_amount: Any, tenure: Any, purpose: Any) -> Dict[str, str]:
    """Step 1 rules; returns errors keyed by field"""
    errors: Dict[str, str] = {}

    try:
        amount = float(loan_amount)
    except (TypeError, ValueError):
        amount = None
    if amount is None or not math.isfinite(amount) or amount <= 0:
        errors["loan_amount"] = "Please enter a loan amount"
    elif amount > offer.max_amount:
        errors["loan_amount"] = f"Loan amount cannot exceed {offer.max_amount}"

    try:
        tenure_months = int(tenure)
    except (TypeError, ValueError):
        tenure_months = None
    if tenure_months not in offer.tenure:
        errors["loan_tenure"] = "Please select a loan tenure"

    if _as_text(purpose) not in LOAN_PURPOSES:
        errors["purpose"] = "Please select a purpose for the loan"

    return errors


def validate_personal_details(details: Dict[str, Any]) -> Dict[str, str]:
    """Step 2 rules; returns errors keyed by field"""
    errors: Dict[str, str] = {}

    for name in PERSONAL_FIELDS:
        if not _as_text(details.get(name)):
            errors[name] = "This field is required"

    for name, (pattern, message) in FIELD_PATTERNS.items():
        value = _as_text(details.get(name))
        if value and not pattern.search(value):
            errors[name] = message

    gender = _as_text(details.get("gender"))
    if gender and gender not in GENDERS:
        errors["gender"] = "Please select a gender"

    occupation = _as_text(details.get("occupation"))
    if occupation and occupation not in OCCUPATIONS:
        errors["occupation"] = "Please select an occupation"

    dob = _as_text(details.get("dob"))
    if dob and parse_iso_date(dob) is None:
        errors["dob"] = "Please enter a valid date of birth"

    income = _as_text(details.get("monthly_income"))
    if income:
        try:
            if float(income) <= 0:
                errors["monthly_income"] = "Monthly income must be greater than zero"
        except ValueError:
            errors["monthly_income"] = "Monthly income must be a number"

    return errors


@dataclass
class LoanWizard:
    """
    Wizard state for one application.

    Moving forward validates the current step and blocks on any error;
    moving back never validates. Submission is only possible from the
    review step with the terms accepted.
    """

    offer: LoanOffer
    step: int = STEP_LOAN_DETAILS
    loan_amount: Optional[int] = None
    tenure_months: Optional[int] = None
    purpose: str = ""
    personal: Dict[str, str] = field(default_factory=dict)
    submitted: bool = False

    @classmethod
    def start(cls, offer: LoanOffer) -> "LoanWizard":
        """New application pre-filled with half the max amount and the middle tenure"""
        return cls(
            offer=offer,
            loan_amount=offer.max_amount // 2,
            tenure_months=offer.tenure[len(offer.tenure) // 2],
        )

    @property
    def step_title(self) -> str:
        return STEP_TITLES[self.step]

    def update(self, data: Dict[str, Any]) -> None:
        """Merge form input for the current step without validating"""
        if self.step == STEP_LOAN_DETAILS:
            if "loan_amount" in data:
                self.loan_amount = data["loan_amount"]
            if "loan_tenure" in data:
                self.tenure_months = data["loan_tenure"]
            if "purpose" in data:
                self.purpose = _as_text(data["purpose"])
        elif self.step == STEP_PERSONAL_DETAILS:
            for name in PERSONAL_FIELDS:
                if name in data:
                    self.personal[name] = _as_text(data[name])

    def validate_current_step(self) -> Dict[str, str]:
        if self.step == STEP_LOAN_DETAILS:
            return validate_loan_details(self.offer, self.loan_amount, self.tenure_months, self.purpose)
        if self.step == STEP_PERSONAL_DETAILS:
            return validate_personal_details(self.personal)
        return {}

    def next(self, data: Optional[Dict[str, Any]] = None) -> int:
        """
        Apply step input and advance.

        Raises:
            WizardValidationError: Current step has missing or malformed fields
        """
        self._ensure_open()
        if data:
            self.update(data)

        errors = self.validate_current_step()
        if errors:
            raise WizardValidationError(errors)

        if self.step == STEP_LOAN_DETAILS:
            self.loan_amount = int(float(self.loan_amount))
            self.tenure_months = int(self.tenure_months)

        self.step = min(self.step + 1, STEP_REVIEW)
        return self.step

    def back(self) -> int:
        self._ensure_open()
        self.step = max(self.step - 1, STEP_LOAN_DETAILS)
        return self.step

    def submit(self, agree_terms: bool) -> None:
        """
        Raises:
            WizardValidationError: Not on the review step, an earlier step
                no longer validates, or the terms were not accepted
        """
        self._ensure_open()
        if self.step != STEP_REVIEW:
            raise WizardValidationError({"step": "Complete all steps before submitting"})

        errors = {
            **validate_loan_details(self.offer, self.loan_amount, self.tenure_months, self.purpose),
            **validate_personal_details(self.personal),
        }
        if not agree_terms:
            errors["agree_terms"] = "You must agree to the terms and conditions"
        if errors:
            raise WizardValidationError(errors)

        self.submitted = True

    def summary(self) -> Optional[LoanSummary]:
        """EMI figures once loan details are usable"""
        if validate_loan_details(self.offer, self.loan_amount, self.tenure_months, self.purpose or "other"):
            return None
        return summarize_loan(int(float(self.loan_amount)), self.offer.interest, int(self.tenure_months))

    def _ensure_open(self) -> None:
        if self.submitted:
            raise WizardValidationError({"step": "Application has already been submitted"})
