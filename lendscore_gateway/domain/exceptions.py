"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CreditScoringError(DomainException):
    """Any failure that aborts the credit scoring flow"""

    pass


class ConfigurationError(CreditScoringError):
    """A required secret (e.g. AI gateway API key) is missing"""

    pass


class UpstreamError(CreditScoringError):
    """AI gateway unreachable or returned a non-success status"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RateLimitedError(CreditScoringError):
    """AI gateway rejected the call with 429; caller may retry later"""

    pass


class QuotaExhaustedError(CreditScoringError):
    """AI gateway rejected the call with 402; not retryable until billing is resolved"""

    pass


class MalformedResponseError(CreditScoringError):
    """AI gateway succeeded but the reply did not carry a valid credit_score_result call"""

    pass


class PersistenceError(CreditScoringError):
    """Credit score could not be written to storage"""

    pass
