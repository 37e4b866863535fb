"""Credit scoring engine - core business logic for score calculation"""

import math
from typing import Dict, List, Protocol, Tuple

from microcredit_gateway.domain.models import FinancialProfile, ScoreBreakdown, ScoreRecord, ScoreResult
from microcredit_gateway.domain.exceptions import ClassifierError, InvalidProfileError, ScoreNotAvailableError

MIN_SCORE = 300
MAX_SCORE = 900
BASE_SCORE = 500

# Factor weights applied to the 25/50/75/100 tier sub-scores
INCOME_WEIGHT = 1.0
EXPENSE_RATIO_WEIGHT = 0.75
SAVINGS_RATIO_WEIGHT = 0.75
DEBT_RATIO_WEIGHT = 0.5

# (threshold, sub-score) pairs, checked top-down
INCOME_TIERS: List[Tuple[float, int]] = [(30_000, 100), (20_000, 75), (10_000, 50)]
EXPENSE_RATIO_TIERS: List[Tuple[float, int]] = [(2.0, 100), (1.5, 75), (1.2, 50)]
SAVINGS_RATIO_TIERS: List[Tuple[float, int]] = [(0.20, 100), (0.10, 75), (0.05, 50)]
DEBT_RATIO_TIERS: List[Tuple[float, int]] = [(0.10, 100), (0.20, 75), (0.30, 50)]
FLOOR_TIER = 25

# Classifier rating -> flat adjustment on top of MIN_SCORE
CLASSIFIER_ADJUSTMENTS: Dict[str, int] = {
    "Excellent": 10,
    "Good": 5,
    "Bad": -5,
    "Very Poor": -10,
}

# (lower bound, label) for the dashboard gauge
SCORE_CATEGORIES: List[Tuple[int, str]] = [
    (750, "Excellent"),
    (650, "Good"),
    (500, "Fair"),
    (MIN_SCORE, "Poor"),
]


def tier_at_least(value: float, tiers: List[Tuple[float, int]]) -> int:
    """Step function where higher values earn higher sub-scores"""
    for threshold, sub_score in tiers:
        if value >= threshold:
            return sub_score
    return FLOOR_TIER


def tier_at_most(value: float, tiers: List[Tuple[float, int]]) -> int:
    """Step function where lower values earn higher sub-scores"""
    for threshold, sub_score in tiers:
        if value <= threshold:
            return sub_score
    return FLOOR_TIER


def income_tier(monthly_income: float) -> int:
    return tier_at_least(monthly_income, INCOME_TIERS)


def expense_ratio_tier(ratio: float) -> int:
    return tier_at_least(ratio, EXPENSE_RATIO_TIERS)


def savings_ratio_tier(ratio: float) -> int:
    return tier_at_least(ratio, SAVINGS_RATIO_TIERS)


def debt_ratio_tier(ratio: float) -> int:
    return tier_at_most(ratio, DEBT_RATIO_TIERS)


def calculate_ratios(profile: FinancialProfile) -> Tuple[float, float, float]:
    """
    Compute (income/expense, savings/income, debt/income) ratios.

    Zero denominators never produce NaN:
    - No expenses: income/expense ratio is +inf (top tier)
    - No income: savings ratio is 0 (bottom tier); debt ratio is 0 without
      loan repayments (top tier) and +inf with them (bottom tier)
    """
    total_expenses = profile.total_expenses
    income = profile.monthly_income

    if total_expenses > 0:
        income_to_expense = income / total_expenses
    else:
        income_to_expense = math.inf

    if income > 0:
        savings_ratio = profile.total_savings / income
        debt_ratio = profile.loan_repayment / income
    else:
        savings_ratio = 0.0
        debt_ratio = math.inf if profile.loan_repayment > 0 else 0.0

    return income_to_expense, savings_ratio, debt_ratio


def validate_profile(profile: FinancialProfile) -> None:
    """Reject negative or non-finite amounts"""
    invalid = [
        name
        for name, amount in profile.amounts().items()
        if not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount < 0
    ]
    if invalid:
        raise InvalidProfileError(f"Amounts must be non-negative numbers: {', '.join(sorted(invalid))}")


def clamp_score(raw: float) -> int:
    """Clamp to [300, 900] and round half-up to an integer"""
    bounded = min(max(raw, MIN_SCORE), MAX_SCORE)
    return int(math.floor(bounded + 0.5))


def calculate_breakdown(profile: FinancialProfile) -> ScoreBreakdown:
    """Tier sub-scores for the four questionnaire-driven factors"""
    income_to_expense, savings_ratio, debt_ratio = calculate_ratios(profile)
    return ScoreBreakdown(
        income=income_tier(profile.monthly_income),
        spending=expense_ratio_tier(income_to_expense),
        savings=savings_ratio_tier(savings_ratio),
        loans=debt_ratio_tier(debt_ratio),
    )


def compute_score(profile: FinancialProfile) -> Tuple[int, ScoreBreakdown]:
    """
    Main entry point: map a financial profile to a credit score.

    Weighted sum over tier sub-scores on top of a 500 base:
        500 + income*1.0 + expense_ratio*0.75 + savings_ratio*0.75 + debt_ratio*0.5

    Example:
        income 20000, expenses 14600, savings 500, loans 2000
        tiers 75 / 50 / 25 / 100 -> 681.25 -> 681
    """
    validate_profile(profile)
    breakdown = calculate_breakdown(profile)

    raw = (
        BASE_SCORE
        + breakdown.income * INCOME_WEIGHT
        + breakdown.spending * EXPENSE_RATIO_WEIGHT
        + breakdown.savings * SAVINGS_RATIO_WEIGHT
        + breakdown.loans * DEBT_RATIO_WEIGHT
    )

    return clamp_score(raw), breakdown


def score_category(score: int) -> str:
    """Dashboard label for a score"""
    for lower_bound, label in SCORE_CATEGORIES:
        if score >= lower_bound:
            return label
    return SCORE_CATEGORIES[-1][1]


def score_from_rating(credit_rating: str) -> int:
    """Map the classifier's categorical rating onto the score scale"""
    if credit_rating not in CLASSIFIER_ADJUSTMENTS:
        raise ClassifierError(f"Unknown credit rating from classifier: {credit_rating!r}")
    return clamp_score(MIN_SCORE + CLASSIFIER_ADJUSTMENTS[credit_rating])


class RatingPredictor(Protocol):
    async def predict(self, profile: FinancialProfile) -> str: ...


class ScoringStrategy(Protocol):
    """A named way of turning a profile into a score"""

    name: str

    async def score(self, profile: FinancialProfile) -> ScoreResult: ...


class WeightedSumStrategy:
    """Local tier-lookup formula"""

    name = "weighted"

    async def score(self, profile: FinancialProfile) -> ScoreResult:
        score, breakdown = compute_score(profile)
        return ScoreResult(
            score=score,
            breakdown=breakdown,
            category=score_category(score),
            strategy=self.name,
        )


class ClassifierStrategy:
    """
    External ML classifier rating, replacing the local formula's score.

    The factor breakdown still comes from the tier lookups so the dashboard
    has something to chart; the score itself is 300 +/- the rating adjustment.
    """

    name = "classifier"

    def __init__(self, predictor: RatingPredictor):
        self.predictor = predictor

    async def score(self, profile: FinancialProfile) -> ScoreResult:
        validate_profile(profile)
        credit_rating = await self.predictor.predict(profile)
        return ScoreResult(
            score=score_from_rating(credit_rating),
            breakdown=calculate_breakdown(profile),
            category=credit_rating,
            strategy=self.name,
        )


def result_from_record(record: ScoreRecord) -> ScoreResult:
    """
    Rebuild a held score from the score backend's stored record.

    The stored score is kept as-is (clamped); the breakdown is recomputed
    from the amounts the backend echoes back.

    Raises:
        ScoreNotAvailableError: The backend has no score for the user
    """
    if record.score is None:
        raise ScoreNotAvailableError("No score data found. Calculate your score first.")

    score = clamp_score(record.score)
    return ScoreResult(
        score=score,
        breakdown=calculate_breakdown(record.to_profile()),
        category=score_category(score),
        strategy="remote",
    )
