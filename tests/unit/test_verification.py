"""Unit tests for document verification rules"""

import pytest
from datetime import date
from microcredit_gateway.domain.models import BankStatement, UploadedDocument, UtilityBill
from microcredit_gateway.domain.verification import validate_bank_statement, validate_utility_bill
from microcredit_gateway.domain.exceptions import DocumentValidationError


@pytest.fixture
def pdf() -> UploadedDocument:
    return UploadedDocument(filename="bill.pdf", content_type="application/pdf", content=b"%PDF-1.4 test")


@pytest.fixture
def utility_bill(pdf: UploadedDocument) -> UtilityBill:
    return UtilityBill(
        bill_type="electricity",
        provider="MSEDCL",
        consumer_number="1234567890",
        address="12 Station Road, Nashik",
        bill_date=date(2025, 3, 1),
        bill_amount=845.0,
        document=pdf,
    )


@pytest.fixture
def bank_statement(pdf: UploadedDocument) -> BankStatement:
    return BankStatement(
        bank_name="State Bank of India",
        account_number="000123456789",
        account_type="savings",
        statement_period=6,
        document=pdf,
    )


def test_valid_utility_bill(utility_bill: UtilityBill):
    validate_utility_bill(utility_bill)


def test_image_upload_accepted(utility_bill: UtilityBill):
    utility_bill.document = UploadedDocument(filename="bill.png", content_type="image/png", content=b"\x89PNG")
    validate_utility_bill(utility_bill)


def test_utility_bill_missing_fields(utility_bill: UtilityBill):
    utility_bill.provider = "  "
    utility_bill.bill_date = None
    utility_bill.bill_amount = None
    utility_bill.document = None

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_utility_bill(utility_bill)

    assert set(exc_info.value.errors) == {"provider", "bill_date", "bill_amount", "file"}
    assert str(exc_info.value) == "Please fill in all required fields."


def test_utility_bill_unknown_type(utility_bill: UtilityBill):
    utility_bill.bill_type = "cable"

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_utility_bill(utility_bill)

    assert "bill_type" in exc_info.value.errors


def test_utility_bill_non_positive_amount(utility_bill: UtilityBill):
    utility_bill.bill_amount = 0

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_utility_bill(utility_bill)

    assert exc_info.value.errors == {"bill_amount": "Bill amount must be greater than zero"}


def test_wrong_file_type_rejected(utility_bill: UtilityBill):
    utility_bill.document = UploadedDocument(filename="bill.docx", content_type="application/msword", content=b"doc")

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_utility_bill(utility_bill)

    assert exc_info.value.errors["file"] == "Invalid file type. Please upload a PDF, JPG, or PNG."


def test_oversized_file_rejected(bank_statement: BankStatement):
    bank_statement.document = UploadedDocument(
        filename="statement.pdf", content_type="application/pdf", content=b"x" * 2048
    )

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_bank_statement(bank_statement, max_bytes=1024)

    assert exc_info.value.errors["file"].startswith("File size too large")


def test_valid_bank_statement(bank_statement: BankStatement):
    validate_bank_statement(bank_statement)


def test_bank_statement_invalid_choices(bank_statement: BankStatement):
    bank_statement.account_type = "fixed"
    bank_statement.statement_period = 9
    bank_statement.bank_name = ""

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_bank_statement(bank_statement)

    assert set(exc_info.value.errors) == {"account_type", "statement_period", "bank_name"}


@pytest.mark.parametrize("amount", [float("nan"), float("inf")])
def test_utility_bill_non_finite_amount(utility_bill: UtilityBill, amount: float):
    utility_bill.bill_amount = amount

    with pytest.raises(DocumentValidationError) as exc_info:
        validate_utility_bill(utility_bill)

    assert exc_info.value.errors == {"bill_amount": "Bill amount must be greater than zero"}
