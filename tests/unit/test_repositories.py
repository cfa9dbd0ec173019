"""Unit tests for history aggregation and credit score persistence"""

import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import seed_borrower
from lendscore_gateway.domain.exceptions import PersistenceError
from lendscore_gateway.domain.models import CreditScoreResult, FactorImpact, ScoreFactor
from lendscore_gateway.infrastructure.database.repositories import (
    BorrowerHistoryRepository,
    CreditScoreRepository,
)


def make_result(score: int) -> CreditScoreResult:
    return CreditScoreResult(
        score=score,
        explanation=f"Score {score}",
        factors=[
            ScoreFactor("KYC verified", FactorImpact.POSITIVE),
            ScoreFactor("Short history", FactorImpact.NEUTRAL),
        ],
    )


def test_fetch_unknown_user(db: Session):
    """Absent profile is not an error"""
    history = BorrowerHistoryRepository(db).fetch("ghost")

    assert history.profile is None
    assert history.loans == []
    assert history.transactions == []


def test_fetch_borrower_loans_only(db: Session):
    """Loans the user funded as lender are not borrower loans"""
    seed_borrower(db, "alice", loan_statuses=["completed", "active"])
    seed_borrower(db, "bob", kyc_status="pending", transaction_count=2)

    alice = BorrowerHistoryRepository(db).fetch("alice")
    bob = BorrowerHistoryRepository(db).fetch("bob")

    assert alice.profile.kyc_status == "completed"
    assert sorted(loan.status for loan in alice.loans) == ["active", "completed"]
    assert bob.profile.kyc_status == "pending"
    assert bob.loans == []
    assert len(bob.transactions) == 2


def test_fetch_limits_transaction_window(db: Session):
    """At most N transactions, most recent first, either direction"""
    seed_borrower(db, "carol", loan_statuses=["repaying"], transaction_count=14)

    history = BorrowerHistoryRepository(db).fetch("carol", transaction_limit=10)

    assert len(history.transactions) == 10
    assert {t.transaction_type for t in history.transactions} == {"repayment", "funding"}
    assert all("carol" in (t.from_user_id, t.to_user_id) for t in history.transactions)


def test_save_score_round_trip(db: Session):
    """Stored row equals the latest row read back for the user"""
    repo = CreditScoreRepository(db)

    repo.save_score("dave", make_result(610))
    second = repo.save_score("dave", make_result(655))

    latest = repo.get_latest_score("dave")
    assert latest.id == second.id
    assert latest.score == 655
    assert latest.factors == [
        {"factor": "KYC verified", "impact": "positive"},
        {"factor": "Short history", "impact": "neutral"},
    ]
    assert latest.created_at is not None


def test_scores_history_newest_first(db: Session):
    repo = CreditScoreRepository(db)
    for score in (500, 550, 600):
        repo.save_score("erin", make_result(score))
    repo.save_score("frank", make_result(900))

    scores = repo.get_scores_by_user("erin", limit=2)

    assert [s.score for s in scores] == [600, 550]


def test_get_latest_score_none(db: Session):
    assert CreditScoreRepository(db).get_latest_score("nobody") is None


def test_save_score_failure_raises_persistence_error():
    """Storage errors roll back and raise PersistenceError"""
    session = MagicMock(spec=Session)
    session.commit.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))

    with pytest.raises(PersistenceError):
        CreditScoreRepository(session).save_score("gina", make_result(700))

    session.rollback.assert_called_once()
