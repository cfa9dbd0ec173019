"""Pydantic schemas for API request/response validation"""

from pydantic import AliasChoices, BaseModel, Field
from typing import List

from lendscore_gateway.infrastructure.database.models import CreditScoreRecord


class CreditScoreRequest(BaseModel):
    """Request body for POST /v1/credit-score"""

    user_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("user_id", "userId"),
        description="User identifier",
    )


class ScoreFactorSchema(BaseModel):
    """Single factor behind a score"""

    factor: str
    impact: str


class CreditScoreResponse(BaseModel):
    """Stored credit score record"""

    id: str
    user_id: str
    score: int
    explanation: str
    factors: List[ScoreFactorSchema]
    created_at: str

    @classmethod
    def from_record(cls, record: CreditScoreRecord) -> "CreditScoreResponse":
        return cls(
            id=str(record.id),
            user_id=record.user_id,
            score=record.score,
            explanation=record.explanation or "",
            factors=[ScoreFactorSchema(**f) for f in (record.factors or [])],
            created_at=record.created_at.isoformat(),
        )


class CreditScoreHistoryResponse(BaseModel):
    """Response for GET /v1/credit-score/history"""

    user_id: str
    scores: List[CreditScoreResponse]


class ErrorResponse(BaseModel):
    """Error envelope; never carries internals"""

    error: str
