"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class KYCStatus(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    COMPLETED = "completed"


class LoanStatus(str, Enum):
    """Loan lifecycle, in the order a loan moves through it"""

    PENDING = "pending"
    ACTIVE = "active"
    FUNDED = "funded"
    REPAYING = "repaying"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"


class FactorImpact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass
class Profile:
    """User identity / KYC record"""

    user_id: str
    kyc_status: Optional[str]
    full_name: str = ""
    email: str = ""


@dataclass
class Loan:
    """Borrowing request and its lifecycle state"""

    loan_id: str
    borrower_id: str
    lender_id: Optional[str]
    amount_cents: int
    interest_rate: float
    duration_months: int
    status: str


@dataclass
class LoanTransaction:
    """Funding or repayment event between two users"""

    transaction_id: str
    loan_id: str
    from_user_id: str
    to_user_id: str
    amount_cents: int
    transaction_type: str
    status: str


@dataclass
class BorrowerHistory:
    """Everything the scoring flow reads about one user"""

    profile: Optional[Profile]
    loans: List[Loan] = field(default_factory=list)
    transactions: List[LoanTransaction] = field(default_factory=list)


@dataclass(frozen=True)
class CreditIndicators:
    """Scalar summary sent to the AI gateway"""

    kyc_completed: bool
    total_loans: int
    active_loans: int
    completed_loans: int
    defaulted_loans: int
    transaction_count: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kyc_completed": self.kyc_completed,
            "total_loans": self.total_loans,
            "active_loans": self.active_loans,
            "completed_loans": self.completed_loans,
            "defaulted_loans": self.defaulted_loans,
            "transaction_count": self.transaction_count,
        }


@dataclass(frozen=True)
class ScoreFactor:
    factor: str
    impact: FactorImpact


@dataclass
class CreditScoreResult:
    """Validated output of the AI gateway"""

    score: int
    explanation: str
    factors: List[ScoreFactor]

    def factors_as_json(self) -> List[Dict[str, str]]:
        return [{"factor": f.factor, "impact": f.impact.value} for f in self.factors]
