"""Domain-specific exceptions"""

from typing import Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UpstreamServiceError(DomainException):
    """An external collaborator returned an error or is unavailable"""

    service = "upstream"


class ScoreServiceError(UpstreamServiceError):
    """Score backend returned an error or is unavailable"""

    service = "score_service"


class ClassifierError(UpstreamServiceError):
    """ML classifier returned an error, is unavailable, or sent an unknown rating"""

    service = "classifier"


class UtilityBillServiceError(UpstreamServiceError):
    """Utility bill upload service rejected the upload or is unavailable"""

    service = "utility_bill_service"


class InvalidProfileError(DomainException):
    """Financial profile contains negative or non-numeric amounts"""

    pass


class ScoreNotAvailableError(DomainException):
    """No score is held for the user and none could be fetched"""

    pass


class MissingSessionError(DomainException):
    """No logged-in user identity on the request"""

    pass


class FieldValidationError(DomainException):
    """Form input failed validation; errors are keyed by field name"""

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or "Please fill in all required fields.")


class DocumentValidationError(FieldValidationError):
    """Uploaded document or its form fields are invalid"""

    pass


class WizardValidationError(FieldValidationError):
    """Loan application wizard step failed validation"""

    pass


class LoanOfferNotFoundError(DomainException):
    """Requested loan offer does not exist"""

    pass
