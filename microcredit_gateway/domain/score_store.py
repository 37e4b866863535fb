"""Session-lifetime holder of each user's current score and breakdown"""

import threading
from dataclasses import replace
from typing import Dict, Optional

from microcredit_gateway.domain.models import ScoreBreakdown, ScoreResult
from microcredit_gateway.domain.exceptions import ScoreNotAvailableError
from microcredit_gateway.domain.scoring import MAX_SCORE, score_category

UTILITY_BILL_BONUS = 20
BANK_STATEMENT_BONUS = 25
VERIFIED_FACTOR_VALUE = 80


class ScoreStore:
    """
    Current score for one user.

    The revision increases on every write so readers can tell a stale copy
    from a fresh one without a separate refresh flag.
    """

    def __init__(self) -> None:
        self._result: Optional[ScoreResult] = None
        self.revision = 0

    @property
    def has_score(self) -> bool:
        return self._result is not None

    def get(self) -> ScoreResult:
        if self._result is None:
            raise ScoreNotAvailableError("No score data found. Calculate your score first.")
        return self._result

    def set(self, result: ScoreResult) -> ScoreResult:
        """Overwrite the held score wholesale"""
        self._result = result
        self.revision += 1
        return result

    def invalidate(self) -> None:
        """Drop the held score so the next read goes back to the score backend"""
        self._result = None
        self.revision += 1

    def clear(self) -> None:
        self._result = None
        self.revision = 0

    def apply_utility_bill_verification(self) -> ScoreResult:
        """Verified address: +20 points, location consistency marked verified"""
        return self._apply_bonus(UTILITY_BILL_BONUS, location_consistency=VERIFIED_FACTOR_VALUE)

    def apply_bank_statement_verification(self) -> ScoreResult:
        """Verified transactions: +25 points, transaction history marked verified"""
        return self._apply_bonus(BANK_STATEMENT_BONUS, transaction_history=VERIFIED_FACTOR_VALUE)

    def _apply_bonus(self, bonus: int, **factor: int) -> ScoreResult:
        current = self.get()
        new_score = min(MAX_SCORE, current.score + bonus)
        breakdown: ScoreBreakdown = replace(current.breakdown, **factor)

        # Classifier ratings are not score-derived, so they stay as-is
        category = current.category if current.strategy == "classifier" else score_category(new_score)

        return self.set(
            ScoreResult(
                score=new_score,
                breakdown=breakdown,
                category=category,
                strategy=current.strategy,
            )
        )


class ScoreRegistry:
    """Per-user ScoreStore instances for the lifetime of the process"""

    def __init__(self) -> None:
        self._stores: Dict[str, ScoreStore] = {}
        self._lock = threading.Lock()

    def for_user(self, user_id: str) -> ScoreStore:
        with self._lock:
            store = self._stores.get(user_id)
            if store is None:
                store = ScoreStore()
                self._stores[user_id] = store
            return store

    def peek(self, user_id: str) -> Optional[ScoreStore]:
        """Existing store for a user, without creating one"""
        with self._lock:
            return self._stores.get(user_id)

    def reset(self, user_id: str) -> None:
        """Forget everything held for a user (logout)"""
        with self._lock:
            store = self._stores.pop(user_id, None)
        if store is not None:
            store.clear()

    def reset_all(self) -> None:
        with self._lock:
            self._stores.clear()
