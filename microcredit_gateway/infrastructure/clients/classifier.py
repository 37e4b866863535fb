"""ML credit-rating classifier client"""

import httpx
from microcredit_gateway.config import settings
from microcredit_gateway.domain.models import FinancialProfile
from microcredit_gateway.domain.exceptions import ClassifierError
from microcredit_gateway.infrastructure.observability.metrics import classifier_latency_histogram


class ClassifierClient:
    """Client for the external /predict credit-rating endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.classifier_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def predict(self, profile: FinancialProfile) -> str:
        """
        Ask the classifier for a credit rating.

        The request body uses the questionnaire's field names; the response
        carries one of Excellent, Good, Bad, Very Poor in `credit_rating`.

        Raises:
            ClassifierError: On timeout, HTTP errors, or a response without a rating
        """
        payload = {
            "monthlyIncome": profile.monthly_income,
            "grocerySpending": profile.grocery_spending,
            "utilityBills": profile.utility_bills,
            "totalSavings": profile.total_savings,
            "rentEmi": profile.rent_emi,
            "medicalExpenses": profile.medical_expenses,
            "transportationCost": profile.transportation_cost,
            "loanRepayment": profile.loan_repayment,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with classifier_latency_histogram.time():
                    response = await client.post(f"{self.base_url}/predict", json=payload)
                response.raise_for_status()
                return str(response.json()["credit_rating"])

            except httpx.TimeoutException as e:
                raise ClassifierError(f"Classifier timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ClassifierError(f"Classifier error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ClassifierError(f"Classifier unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise ClassifierError(f"Invalid classifier response: {e}") from e
