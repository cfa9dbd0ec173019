"""Feature summarizer - reduces a borrower's records to credit indicators"""

from typing import Iterable, Optional
from lendscore_gateway.domain.models import (
    CreditIndicators,
    KYCStatus,
    Loan,
    LoanStatus,
    LoanTransaction,
    Profile,
)


def summarize_credit_profile(
    profile: Optional[Profile],
    loans: Optional[Iterable[Loan]],
    transactions: Optional[Iterable[LoanTransaction]],
) -> CreditIndicators:
    """
    Build the fixed-shape indicator record used for scoring.

    Pure and deterministic. A missing profile counts as not verified and
    missing collections count as empty, so this never raises.

    Indicators:
    - kyc_completed: profile exists and KYC status is "completed"
    - total/active/completed/defaulted loan counts (user as borrower)
    - transaction_count: size of the transaction window that was read
    """
    loans = list(loans or [])
    transactions = list(transactions or [])

    kyc_completed = profile is not None and profile.kyc_status == KYCStatus.COMPLETED.value

    return CreditIndicators(
        kyc_completed=kyc_completed,
        total_loans=len(loans),
        active_loans=sum(1 for loan in loans if loan.status == LoanStatus.ACTIVE.value),
        completed_loans=sum(1 for loan in loans if loan.status == LoanStatus.COMPLETED.value),
        defaulted_loans=sum(1 for loan in loans if loan.status == LoanStatus.DEFAULTED.value),
        transaction_count=len(transactions),
    )
