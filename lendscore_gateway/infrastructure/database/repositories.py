"""Data access layer for marketplace records and credit scores"""

from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from lendscore_gateway.infrastructure.database.models import (
    CreditScoreRecord,
    LoanRecord,
    ProfileRecord,
    TransactionRecord,
)
from lendscore_gateway.domain.exceptions import PersistenceError
from lendscore_gateway.domain.models import (
    BorrowerHistory,
    CreditScoreResult,
    Loan,
    LoanTransaction,
    Profile,
)


class BorrowerHistoryRepository:
    """Read-only aggregation of a user's profile, loans and transactions"""

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, user_id: str, transaction_limit: int = 10) -> BorrowerHistory:
        """
        Load everything the scoring flow needs for one user.

        A missing profile is returned as None. Storage errors propagate.
        """
        return BorrowerHistory(
            profile=self.get_profile(user_id),
            loans=self.get_borrower_loans(user_id),
            transactions=self.get_recent_transactions(user_id, limit=transaction_limit),
        )

    def get_profile(self, user_id: str) -> Optional[Profile]:
        row = self.db.query(ProfileRecord).filter(ProfileRecord.user_id == user_id).first()
        if row is None:
            return None
        return Profile(
            user_id=row.user_id,
            kyc_status=row.kyc_status,
            full_name=row.full_name,
            email=row.email,
        )

    def get_borrower_loans(self, user_id: str) -> List[Loan]:
        rows = self.db.query(LoanRecord).filter(LoanRecord.borrower_id == user_id).all()
        return [
            Loan(
                loan_id=str(row.id),
                borrower_id=row.borrower_id,
                lender_id=row.lender_id,
                amount_cents=row.amount_cents,
                interest_rate=row.interest_rate,
                duration_months=row.duration_months,
                status=row.status,
            )
            for row in rows
        ]

    def get_recent_transactions(self, user_id: str, limit: int = 10) -> List[LoanTransaction]:
        """Most recent transactions where the user is sender or recipient"""
        rows = (
            self.db.query(TransactionRecord)
            .filter(
                or_(
                    TransactionRecord.from_user_id == user_id,
                    TransactionRecord.to_user_id == user_id,
                )
            )
            .order_by(TransactionRecord.created_at.desc())
            .limit(limit)
            .all()
        )
        return [
            LoanTransaction(
                transaction_id=str(row.id),
                loan_id=str(row.loan_id),
                from_user_id=row.from_user_id,
                to_user_id=row.to_user_id,
                amount_cents=row.amount_cents,
                transaction_type=row.transaction_type,
                status=row.status,
            )
            for row in rows
        ]


class CreditScoreRepository:
    """Repository for append-only credit score records"""

    def __init__(self, db: Session):
        self.db = db

    def save_score(self, user_id: str, result: CreditScoreResult) -> CreditScoreRecord:
        """
        Insert a new credit score row and return it as stored.

        Raises:
            PersistenceError: On any storage failure (transaction rolled back)
        """
        db_score = CreditScoreRecord(
            user_id=user_id,
            score=result.score,
            explanation=result.explanation,
            factors=result.factors_as_json(),
        )
        try:
            self.db.add(db_score)
            self.db.commit()
            self.db.refresh(db_score)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to store credit score: {e}") from e
        return db_score

    def get_latest_score(self, user_id: str) -> Optional[CreditScoreRecord]:
        """Current score: most recent row by creation time"""
        return (
            self.db.query(CreditScoreRecord)
            .filter(CreditScoreRecord.user_id == user_id)
            .order_by(CreditScoreRecord.created_at.desc())
            .first()
        )

    def get_scores_by_user(self, user_id: str, limit: int = 20) -> List[CreditScoreRecord]:
        """Fetch recent scores for a user, newest first"""
        return (
            self.db.query(CreditScoreRecord)
            .filter(CreditScoreRecord.user_id == user_id)
            .order_by(CreditScoreRecord.created_at.desc())
            .limit(limit)
            .all()
        )
