"""SQLAlchemy ORM models for the marketplace tables"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    BigInteger,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    Text,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileRecord(Base):
    """User identity and KYC state"""

    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, unique=True, index=True)
    email = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    kyc_status = Column(Text, nullable=True, default="not_started")
    kyc_completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)


class LoanRecord(Base):
    """Borrowing request and its lifecycle"""

    __tablename__ = "loans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    borrower_id = Column(Text, nullable=False, index=True)
    lender_id = Column(Text, nullable=True, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    interest_rate = Column(Float, nullable=False)
    duration_months = Column(Integer, nullable=False)
    purpose = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="pending")
    amount_repaid_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    funded_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    transactions = relationship("TransactionRecord", back_populates="loan")


class TransactionRecord(Base):
    """Append-only funding / repayment event"""

    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loans.id"), nullable=False)
    from_user_id = Column(Text, nullable=False, index=True)
    to_user_id = Column(Text, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    transaction_type = Column(Text, nullable=False)
    integrity_hash = Column(Text, nullable=False)
    block_number = Column(BigInteger, nullable=False)
    status = Column(Text, nullable=False, default="confirmed")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    loan = relationship("LoanRecord", back_populates="transactions")


class CreditScoreRecord(Base):
    """AI-generated credit assessment; one row per scoring run"""

    __tablename__ = "credit_scores"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    score = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=True)
    factors = Column(JSON, nullable=True)
    # Python-side default keeps sub-second ordering for "latest wins" reads
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
