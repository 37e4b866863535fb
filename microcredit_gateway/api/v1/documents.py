"""POST /v1/documents/* - Document uploads that verify score factors"""

import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from microcredit_gateway.api.v1.schemas import ScoreResponse, VerificationResponse
from microcredit_gateway.api.v1.score import upstream_unavailable
from microcredit_gateway.api.dependencies import get_request_id, get_score_store, get_session_user, get_utility_bill_client
from microcredit_gateway.config import settings
from microcredit_gateway.domain.models import BankStatement, UploadedDocument, UtilityBill
from microcredit_gateway.domain.score_store import ScoreStore
from microcredit_gateway.domain.verification import validate_bank_statement, validate_utility_bill
from microcredit_gateway.domain.exceptions import DocumentValidationError, ScoreNotAvailableError, UpstreamServiceError
from microcredit_gateway.infrastructure.clients.utility_bill import UtilityBillClient
from microcredit_gateway.infrastructure.observability.metrics import verification_counter
from microcredit_gateway.infrastructure.observability.logging import log_verification
from microcredit_gateway.utils.date_utils import parse_iso_date

router = APIRouter()


async def read_document(file: Optional[UploadFile]) -> Optional[UploadedDocument]:
    if file is None or not file.filename:
        return None
    return UploadedDocument(
        filename=file.filename,
        content_type=file.content_type or "",
        content=await file.read(),
    )


def parse_amount(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_period(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def validation_failed(e: DocumentValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})


def score_missing(e: ScoreNotAvailableError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e), headers={"Location": "/calculate-score"})


async def simulate_processing() -> None:
    """Optional pause standing in for document analysis"""
    if settings.verification_delay_seconds > 0:
        await asyncio.sleep(settings.verification_delay_seconds)


@router.post("/documents/utility-bill", response_model=VerificationResponse)
async def upload_utility_bill(
    request: Request,
    bill_type: str = Form("electricity"),
    provider: str = Form(""),
    consumer_number: str = Form(""),
    address: str = Form(""),
    bill_date: Optional[str] = Form(None),
    bill_amount: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_session_user),
    store: ScoreStore = Depends(get_score_store),
    bill_client: UtilityBillClient = Depends(get_utility_bill_client),
):
    """
    Verify the user's address with a utility bill.

    Flow:
    1. Validate form fields and document (type, 5 MiB limit)
    2. Forward the multipart upload to the utility bill service
    3. If a score is held: +20 points, location consistency verified
    """
    request_id = get_request_id(request)
    bill = UtilityBill(
        bill_type=bill_type,
        provider=provider,
        consumer_number=consumer_number,
        address=address,
        bill_date=parse_iso_date(bill_date),
        bill_amount=parse_amount(bill_amount),
        document=await read_document(file),
    )

    try:
        validate_utility_bill(bill, settings.max_upload_bytes)
        await simulate_processing()
        acknowledgment = await bill_client.upload(user_id, bill)

    except DocumentValidationError as e:
        logging.warning(f"Invalid utility bill: {e.errors}", extra={"request_id": request_id})
        raise validation_failed(e)
    except UpstreamServiceError as e:
        raise upstream_unavailable(e, request_id)

    verification_counter.labels(document="utility_bill").inc()

    if not store.has_score:
        log_verification(request_id, user_id, "utility_bill", None)
        return VerificationResponse(
            document="utility_bill",
            verified=True,
            score_updated=False,
            acknowledgment=acknowledgment,
        )

    previous_score = store.get().score
    result = store.apply_utility_bill_verification()
    log_verification(request_id, user_id, "utility_bill", result.score)

    return VerificationResponse(
        document="utility_bill",
        verified=True,
        score_updated=True,
        previous_score=previous_score,
        score=ScoreResponse.from_result(result, store.revision),
        acknowledgment=acknowledgment,
    )


@router.post("/documents/bank-statement", response_model=VerificationResponse)
async def upload_bank_statement(
    request: Request,
    bank_name: str = Form(""),
    account_number: str = Form(""),
    account_type: str = Form("savings"),
    statement_period: Optional[str] = Form("3"),
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_session_user),
    store: ScoreStore = Depends(get_score_store),
):
    """
    Verify transaction history with a bank statement.

    Requires a held score: +25 points, transaction history verified.
    """
    request_id = get_request_id(request)

    try:
        previous_score = store.get().score
    except ScoreNotAvailableError as e:
        raise score_missing(e)

    statement = BankStatement(
        bank_name=bank_name,
        account_number=account_number,
        account_type=account_type,
        statement_period=parse_period(statement_period),
        document=await read_document(file),
    )

    try:
        validate_bank_statement(statement, settings.max_upload_bytes)
    except DocumentValidationError as e:
        logging.warning(f"Invalid bank statement: {e.errors}", extra={"request_id": request_id})
        raise validation_failed(e)

    await simulate_processing()

    # The session may have ended while the statement was being processed
    try:
        result = store.apply_bank_statement_verification()
    except ScoreNotAvailableError as e:
        raise score_missing(e)

    verification_counter.labels(document="bank_statement").inc()
    log_verification(request_id, user_id, "bank_statement", result.score)

    return VerificationResponse(
        document="bank_statement",
        verified=True,
        score_updated=True,
        previous_score=previous_score,
        score=ScoreResponse.from_result(result, store.revision),
    )
