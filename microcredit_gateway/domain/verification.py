"""Validation rules for document verification uploads"""

import math
from typing import Dict

from microcredit_gateway.domain.models import BankStatement, UploadedDocument, UtilityBill
from microcredit_gateway.domain.exceptions import DocumentValidationError

BILL_TYPES = ("electricity", "water", "gas", "internet", "phone")
ACCOUNT_TYPES = ("savings", "current", "salary")
STATEMENT_PERIODS = (3, 6, 12)  # Months
DEFAULT_MAX_UPLOAD_BYTES = 5_242_880


def _check_document(
    document: UploadedDocument | None,
    errors: Dict[str, str],
    max_bytes: int,
    missing_message: str,
) -> None:
    if document is None or document.size == 0:
        errors["file"] = missing_message
        return

    content_type = (document.content_type or "").lower()
    if not (content_type.startswith("image/") or content_type == "application/pdf"):
        errors["file"] = "Invalid file type. Please upload a PDF, JPG, or PNG."
    elif document.size > max_bytes:
        errors["file"] = f"File size too large. Please upload a file smaller than {max_bytes // (1024 * 1024)}MB."


def _require(value: str, field: str, errors: Dict[str, str]) -> None:
    if not value or not value.strip():
        errors[field] = "This field is required"


def validate_utility_bill(bill: UtilityBill, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """
    Validate a utility bill upload.

    Raises:
        DocumentValidationError: With one message per offending field
    """
    errors: Dict[str, str] = {}

    _check_document(bill.document, errors, max_bytes, "Please upload a utility bill document.")

    if bill.bill_type not in BILL_TYPES:
        errors["bill_type"] = f"Bill type must be one of: {', '.join(BILL_TYPES)}"
    _require(bill.provider, "provider", errors)
    _require(bill.consumer_number, "consumer_number", errors)
    _require(bill.address, "address", errors)
    if bill.bill_date is None:
        errors["bill_date"] = "This field is required"
    if bill.bill_amount is None:
        errors["bill_amount"] = "This field is required"
    elif not math.isfinite(bill.bill_amount) or bill.bill_amount <= 0:
        errors["bill_amount"] = "Bill amount must be greater than zero"

    if errors:
        raise DocumentValidationError(errors)


def validate_bank_statement(statement: BankStatement, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """
    Validate a bank statement upload.

    Raises:
        DocumentValidationError: With one message per offending field
    """
    errors: Dict[str, str] = {}

    _check_document(statement.document, errors, max_bytes, "Please upload a bank statement document.")

    _require(statement.bank_name, "bank_name", errors)
    _require(statement.account_number, "account_number", errors)
    if statement.account_type not in ACCOUNT_TYPES:
        errors["account_type"] = f"Account type must be one of: {', '.join(ACCOUNT_TYPES)}"
    if statement.statement_period not in STATEMENT_PERIODS:
        errors["statement_period"] = "Statement period must be 3, 6 or 12 months"

    if errors:
        raise DocumentValidationError(errors)
