"""GET /v1/credit-score/latest and /v1/credit-score/history - read back stored scores"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from lendscore_gateway.api.v1.schemas import CreditScoreHistoryResponse, CreditScoreResponse
from lendscore_gateway.config import Settings, get_settings
from lendscore_gateway.infrastructure.database.session import get_db
from lendscore_gateway.infrastructure.database.repositories import CreditScoreRepository

router = APIRouter()


@router.get("/credit-score/latest", response_model=CreditScoreResponse)
def get_latest_credit_score(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Current score: the most recently created record for the user"""
    score = CreditScoreRepository(db).get_latest_score(user_id)
    if score is None:
        raise HTTPException(status_code=404, detail="No credit score for user")
    return CreditScoreResponse.from_record(score)


@router.get("/credit-score/history", response_model=CreditScoreHistoryResponse)
def get_credit_score_history(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Retrieve past credit scores for a user.

    Returns:
        Scores ordered newest first
    """
    scores = CreditScoreRepository(db).get_scores_by_user(user_id, limit=limit or settings.history_limit)
    return CreditScoreHistoryResponse(
        user_id=user_id,
        scores=[CreditScoreResponse.from_record(s) for s in scores],
    )
