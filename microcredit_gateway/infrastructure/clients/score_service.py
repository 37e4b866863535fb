"""Score backend HTTP client for reading and storing score records"""

import httpx
from typing import Any, Dict
from microcredit_gateway.domain.models import FinancialProfile, ScoreRecord, ScoreResult
from microcredit_gateway.domain.exceptions import ScoreServiceError
from microcredit_gateway.config import settings


def _amount(data: Dict[str, Any], key: str) -> float:
    value = data.get(key)
    return float(value) if value is not None else 0.0


def parse_score_record(data: Dict[str, Any]) -> ScoreRecord:
    """Parse the backend's camelCase record; missing amounts read as zero"""
    score = data.get("score")
    return ScoreRecord(
        score=int(score) if score else None,
        monthly_income=_amount(data, "monthlyIncome"),
        grocery_spending=_amount(data, "grocerySpending"),
        total_savings=_amount(data, "totalSavings"),
        loan_repayment=_amount(data, "loanRepayment"),
        rent_or_emi=_amount(data, "rentOrEmi"),
        utility_bills=_amount(data, "utilityBills"),
    )


class ScoreServiceClient:
    """Client for the external score storage backend"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.score_service_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_score(self, user_id: str) -> ScoreRecord:
        """
        Fetch the stored score record for a user.

        Raises:
            ScoreServiceError: On timeout, HTTP errors, or invalid response
        """
        return await self._request("GET", f"{self.base_url}/{user_id}")

    async def calculate_score(self, user_id: str, profile: FinancialProfile, result: ScoreResult) -> ScoreRecord:
        """
        Store questionnaire answers and the computed score for a user.

        Single attempt; the caller reports failures inline.

        Raises:
            ScoreServiceError: On timeout, HTTP errors, or invalid response
        """
        payload = {
            "monthly_income": profile.monthly_income,
            "grocery_spending": profile.grocery_spending,
            "utility_bills": profile.utility_bills,
            "savings": profile.total_savings,
            "rent_or_emi": profile.rent_emi,
            "medical_expense": profile.medical_expenses,
            "transport": profile.transportation_cost,
            "loan_repayment": profile.loan_repayment,
            "category": result.category,
            "score": result.score,
        }
        return await self._request("POST", f"{self.base_url}/calculate/{user_id}", json=payload)

    async def _request(self, method: str, url: str, **kwargs: Any) -> ScoreRecord:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    raise TypeError(f"expected object, got {type(data).__name__}")
                return parse_score_record(data)

            except httpx.TimeoutException as e:
                raise ScoreServiceError(f"Score service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ScoreServiceError(f"Score service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ScoreServiceError(f"Score service unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise ScoreServiceError(f"Invalid score data from score service: {e}") from e
