"""Utility bill upload service client"""

import httpx
from typing import Any, Dict
from microcredit_gateway.config import settings
from microcredit_gateway.domain.models import UtilityBill
from microcredit_gateway.domain.exceptions import UtilityBillServiceError


class UtilityBillClient:
    """Client for forwarding utility bill uploads as multipart forms"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.utility_bill_service_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def upload(self, user_id: str, bill: UtilityBill) -> Dict[str, Any]:
        """
        Upload a validated bill and its document.

        Returns:
            The service's acknowledgment (opaque; wrapped as {"message": ...}
            when the body is not a JSON object)

        Raises:
            UtilityBillServiceError: On timeout or HTTP errors
        """
        data = {
            "userId": user_id,
            "billType": bill.bill_type,
            "provider": bill.provider,
            "consumerNumber": bill.consumer_number,
            "address": bill.address,
            "billDate": bill.bill_date.isoformat() if bill.bill_date else "",
            "billAmount": str(bill.bill_amount),
        }
        document = bill.document
        files = {"file": (document.filename, document.content, document.content_type)}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(f"{self.base_url}/upload", data=data, files=files)
                response.raise_for_status()

            except httpx.TimeoutException as e:
                raise UtilityBillServiceError(f"Utility bill service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise UtilityBillServiceError(
                    f"Utility bill upload rejected: {e.response.status_code} {e.response.text}".strip()
                ) from e
            except httpx.RequestError as e:
                raise UtilityBillServiceError(f"Utility bill service unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None
        return body if isinstance(body, dict) else {"message": response.text}
