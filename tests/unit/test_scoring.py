"""Unit tests for credit scoring logic"""

import asyncio
import pytest
from dataclasses import replace
from unittest.mock import AsyncMock
from microcredit_gateway.domain.models import FinancialProfile, ScoreRecord
from microcredit_gateway.domain.scoring import (
    ClassifierStrategy,
    WeightedSumStrategy,
    calculate_ratios,
    clamp_score,
    compute_score,
    debt_ratio_tier,
    expense_ratio_tier,
    income_tier,
    result_from_record,
    savings_ratio_tier,
    score_category,
    score_from_rating,
)
from microcredit_gateway.domain.exceptions import ClassifierError, InvalidProfileError, ScoreNotAvailableError


def test_compute_score_worked_example(sample_profile: FinancialProfile):
    """Test the reference profile: 500 + 75 + 37.5 + 18.75 + 50 = 681.25 -> 681"""
    score, breakdown = compute_score(sample_profile)

    assert sample_profile.total_expenses == 14600
    assert breakdown.income == 75
    assert breakdown.spending == 50  # 20000 / 14600 ~ 1.37
    assert breakdown.savings == 25  # 500 / 20000 = 0.025
    assert breakdown.loans == 100  # 2000 / 20000 = 0.10
    assert breakdown.location_consistency == 0
    assert breakdown.transaction_history == 0
    assert score == 681


def test_compute_score_is_idempotent(sample_profile: FinancialProfile):
    """Test identical profiles give identical results"""
    assert compute_score(sample_profile) == compute_score(sample_profile)


def test_compute_score_range_for_extreme_profiles():
    """Test best and worst reachable profiles stay within 300-900"""
    best = FinancialProfile(monthly_income=50000, grocery_spending=5000, total_savings=20000)
    worst = FinancialProfile(monthly_income=5000, grocery_spending=9000, loan_repayment=4000)

    best_score, _ = compute_score(best)
    worst_score, _ = compute_score(worst)

    assert best_score == 800  # 500 + 100 + 75 + 75 + 50
    assert worst_score == 575  # 500 + 25 + 18.75 + 18.75 + 12.5
    assert isinstance(best_score, int)
    assert 300 <= worst_score <= best_score <= 900


@pytest.mark.parametrize("income", [0, 1, 9999, 10000, 15000, 20000, 29999, 30000, 250000])
def test_compute_score_always_in_range(sample_profile: FinancialProfile, income: float):
    """Test any valid profile with expenses yields an integer in [300, 900]"""
    score, _ = compute_score(replace(sample_profile, monthly_income=income))
    assert isinstance(score, int)
    assert 300 <= score <= 900


def test_income_tier_boundaries():
    """Test income thresholds are inclusive lower bounds"""
    assert income_tier(30000) == 100
    assert income_tier(29999.99) == 75
    assert income_tier(20000) == 75
    assert income_tier(10000) == 50
    assert income_tier(9999) == 25
    assert income_tier(0) == 25


def test_ratio_tier_boundaries():
    """Test ratio thresholds, including lower-is-better debt tiers"""
    assert expense_ratio_tier(2.0) == 100
    assert expense_ratio_tier(1.5) == 75
    assert expense_ratio_tier(1.2) == 50
    assert expense_ratio_tier(1.19) == 25

    assert savings_ratio_tier(0.20) == 100
    assert savings_ratio_tier(0.10) == 75
    assert savings_ratio_tier(0.05) == 50
    assert savings_ratio_tier(0.049) == 25

    assert debt_ratio_tier(0.10) == 100
    assert debt_ratio_tier(0.20) == 75
    assert debt_ratio_tier(0.30) == 50
    assert debt_ratio_tier(0.31) == 25


def test_income_tier_is_monotonic(sample_profile: FinancialProfile):
    """Test raising income never lowers the income sub-score"""
    previous = 0
    for income in range(0, 60001, 2500):
        _, breakdown = compute_score(replace(sample_profile, monthly_income=income))
        assert breakdown.income >= previous
        previous = breakdown.income


def test_debt_tier_never_improves_with_more_repayment(sample_profile: FinancialProfile):
    """Test raising loan repayment at fixed income never raises the debt sub-score"""
    previous = 100
    for repayment in range(0, 12001, 500):
        _, breakdown = compute_score(replace(sample_profile, loan_repayment=repayment))
        assert breakdown.loans <= previous
        previous = breakdown.loans


def test_zero_expenses_award_top_expense_tier():
    """Test no expenses is treated as an infinite income/expense ratio"""
    profile = FinancialProfile(monthly_income=12000, total_savings=1000)

    income_to_expense, _, _ = calculate_ratios(profile)
    score, breakdown = compute_score(profile)

    assert income_to_expense == float("inf")
    assert breakdown.spending == 100
    assert score == 713  # 500 + 50 + 75 + 37.5 + 50 = 712.5


def test_zero_income_has_defined_ratios():
    """Test zero income never produces NaN"""
    with_loan = FinancialProfile(monthly_income=0, grocery_spending=1000, total_savings=500, loan_repayment=200)
    without_loan = FinancialProfile(monthly_income=0, grocery_spending=1000, total_savings=500)

    _, breakdown_with_loan = compute_score(with_loan)
    _, breakdown_without_loan = compute_score(without_loan)

    assert breakdown_with_loan.savings == 25
    assert breakdown_with_loan.loans == 25
    assert breakdown_without_loan.loans == 100


def test_all_zero_profile():
    """Test an empty questionnaire still scores"""
    score, breakdown = compute_score(FinancialProfile(monthly_income=0))
    # income 25, spending 100 (no expenses), savings 25, loans 100
    assert breakdown.as_dict()["spending"] == 100
    assert score == 669  # 500 + 25 + 75 + 18.75 + 50 = 668.75


def test_negative_amount_rejected(sample_profile: FinancialProfile):
    """Test negative amounts are rejected rather than scored"""
    with pytest.raises(InvalidProfileError):
        compute_score(replace(sample_profile, medical_expenses=-1))


def test_clamp_score_bounds():
    """Test clamping to [300, 900] with half-up rounding"""
    assert clamp_score(120) == 300
    assert clamp_score(299.6) == 300
    assert clamp_score(1200) == 900
    assert clamp_score(681.25) == 681
    assert clamp_score(681.5) == 682
    assert clamp_score(900) == 900


def test_score_category_bands():
    """Test dashboard labels"""
    assert score_category(300) == "Poor"
    assert score_category(499) == "Poor"
    assert score_category(500) == "Fair"
    assert score_category(650) == "Good"
    assert score_category(749) == "Good"
    assert score_category(750) == "Excellent"
    assert score_category(900) == "Excellent"


def test_score_from_rating():
    """Test classifier ratings map to flat adjustments floored at 300"""
    assert score_from_rating("Excellent") == 310
    assert score_from_rating("Good") == 305
    assert score_from_rating("Bad") == 300
    assert score_from_rating("Very Poor") == 300

    with pytest.raises(ClassifierError):
        score_from_rating("Average")


def test_weighted_strategy(sample_profile: FinancialProfile):
    """Test the local strategy labels its result"""
    result = asyncio.run(WeightedSumStrategy().score(sample_profile))

    assert result.score == 681
    assert result.category == "Good"
    assert result.strategy == "weighted"


def test_classifier_strategy_replaces_score(sample_profile: FinancialProfile):
    """Test the classifier strategy uses the rating, not the formula"""
    predictor = AsyncMock()
    predictor.predict.return_value = "Excellent"

    result = asyncio.run(ClassifierStrategy(predictor).score(sample_profile))

    predictor.predict.assert_awaited_once_with(sample_profile)
    assert result.score == 310
    assert result.category == "Excellent"
    assert result.strategy == "classifier"
    assert result.breakdown.income == 75


def test_classifier_strategy_rejects_negative_profile(sample_profile: FinancialProfile):
    """Test invalid profiles never reach the classifier"""
    predictor = AsyncMock()

    with pytest.raises(InvalidProfileError):
        asyncio.run(ClassifierStrategy(predictor).score(replace(sample_profile, rent_emi=-5)))

    predictor.predict.assert_not_awaited()


def test_result_from_record():
    """Test a stored record is rebuilt with a recomputed breakdown"""
    record = ScoreRecord(
        score=720,
        monthly_income=35000,
        grocery_spending=5000,
        total_savings=8000,
        loan_repayment=1000,
        rent_or_emi=8000,
        utility_bills=1000,
    )

    result = result_from_record(record)

    assert result.score == 720
    assert result.category == "Good"
    assert result.strategy == "remote"
    assert result.breakdown.income == 100
    assert result.breakdown.savings == 100


def test_result_from_record_without_score():
    """Test a record without a score is reported as missing"""
    with pytest.raises(ScoreNotAvailableError):
        result_from_record(ScoreRecord(score=None))
