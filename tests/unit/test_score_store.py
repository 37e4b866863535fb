"""Unit tests for held scores and verification bonuses"""

import pytest
from microcredit_gateway.domain.models import ScoreBreakdown, ScoreResult
from microcredit_gateway.domain.score_store import ScoreRegistry, ScoreStore
from microcredit_gateway.domain.exceptions import ScoreNotAvailableError


def make_result(score: int = 681, strategy: str = "weighted", category: str = "Good") -> ScoreResult:
    return ScoreResult(
        score=score,
        breakdown=ScoreBreakdown(income=75, spending=50, savings=25, loans=100),
        category=category,
        strategy=strategy,
    )


def test_empty_store_has_no_score():
    store = ScoreStore()

    assert not store.has_score
    with pytest.raises(ScoreNotAvailableError):
        store.get()


def test_set_bumps_revision():
    store = ScoreStore()

    store.set(make_result())
    store.set(make_result(700))

    assert store.get().score == 700
    assert store.revision == 2


def test_utility_bill_bonus():
    """Test +20 points and location consistency marked verified"""
    store = ScoreStore()
    store.set(make_result(681))

    result = store.apply_utility_bill_verification()

    assert result.score == 701
    assert result.category == "Good"
    assert result.breakdown.location_consistency == 80
    # Other factors untouched
    assert result.breakdown.income == 75
    assert result.breakdown.spending == 50
    assert result.breakdown.savings == 25
    assert result.breakdown.loans == 100
    assert result.breakdown.transaction_history == 0
    assert store.get() is result


def test_bank_statement_bonus_recomputes_category():
    """Test +25 points can move the score into a higher band"""
    store = ScoreStore()
    store.set(make_result(730))

    result = store.apply_bank_statement_verification()

    assert result.score == 755
    assert result.category == "Excellent"
    assert result.breakdown.transaction_history == 80
    assert result.breakdown.location_consistency == 0


def test_bonus_capped_at_max_score():
    store = ScoreStore()
    store.set(make_result(890, category="Excellent"))

    assert store.apply_bank_statement_verification().score == 900
    assert store.apply_utility_bill_verification().score == 900


def test_classifier_rating_kept_after_bonus():
    store = ScoreStore()
    store.set(make_result(305, strategy="classifier", category="Good"))

    result = store.apply_utility_bill_verification()

    assert result.score == 325
    assert result.category == "Good"
    assert result.strategy == "classifier"


def test_bonus_without_score_fails():
    with pytest.raises(ScoreNotAvailableError):
        ScoreStore().apply_bank_statement_verification()


def test_invalidate_drops_score():
    store = ScoreStore()
    store.set(make_result())

    store.invalidate()

    assert not store.has_score
    assert store.revision == 2


def test_registry_isolates_users():
    registry = ScoreRegistry()
    registry.for_user("alice").set(make_result(700))

    assert registry.for_user("alice") is registry.for_user("alice")
    assert not registry.for_user("bob").has_score


def test_registry_reset_clears_user():
    """Test logout forgets the held score"""
    registry = ScoreRegistry()
    store = registry.for_user("alice")
    store.set(make_result())

    registry.reset("alice")

    assert not store.has_score
    assert store.revision == 0
    assert not registry.for_user("alice").has_score
    # Resetting an unknown user is a no-op
    registry.reset("nobody")


def test_registry_peek_does_not_create():
    registry = ScoreRegistry()

    assert registry.peek("alice") is None
    assert registry.peek("alice") is None

    store = registry.for_user("alice")
    assert registry.peek("alice") is store
