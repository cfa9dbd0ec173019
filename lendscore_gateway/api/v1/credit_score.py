"""POST /v1/credit-score - AI credit scoring endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from lendscore_gateway.api.v1.schemas import CreditScoreRequest, CreditScoreResponse, ErrorResponse
from lendscore_gateway.api.dependencies import get_ai_gateway_client, get_request_id
from lendscore_gateway.config import Settings, get_settings
from lendscore_gateway.infrastructure.database.session import get_db
from lendscore_gateway.infrastructure.database.repositories import BorrowerHistoryRepository, CreditScoreRepository
from lendscore_gateway.infrastructure.clients.ai_gateway import AIGatewayClient
from lendscore_gateway.domain.features import summarize_credit_profile
from lendscore_gateway.domain.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    PersistenceError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
)
from lendscore_gateway.infrastructure.observability.metrics import record_credit_score, record_scoring_failure
from lendscore_gateway.infrastructure.observability.logging import log_credit_score

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/credit-score",
    response_model=CreditScoreResponse,
    responses={
        402: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def calculate_credit_score(
    request_body: CreditScoreRequest,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    ai_client: AIGatewayClient = Depends(get_ai_gateway_client),
):
    """
    Score a user's creditworthiness and store the result.

    Flow (each step aborts the rest on failure):
    1. Check the AI gateway key is configured
    2. Read profile, borrower loans and recent transactions
    3. Summarize them into credit indicators
    4. Ask the AI gateway for a structured score
    5. Append a new credit score record and return it
    """
    start_time = time.time()
    request_id = get_request_id(request)
    user_id = request_body.user_id
    log_extra = {"request_id": request_id, "user_id": user_id}

    try:
        # 1. Intake
        ai_client.ensure_configured()

        # 2. Aggregate
        history = BorrowerHistoryRepository(db).fetch(user_id, transaction_limit=settings.transaction_window)

        # 3. Summarize
        indicators = summarize_credit_profile(history.profile, history.loans, history.transactions)
        logging.info("Credit indicators built", extra={**log_extra, "step": "summarize", **indicators.to_payload()})

        # 4. Score
        result = await ai_client.score(indicators)

        # 5. Persist
        db_score = CreditScoreRepository(db).save_score(user_id, result)

    except RateLimitedError as e:
        record_scoring_failure("rate_limited")
        logging.warning(f"Rate limited: {e}", extra=log_extra)
        return error_response(429, "Rate limit exceeded. Please try again later.")

    except QuotaExhaustedError as e:
        record_scoring_failure("quota_exhausted")
        logging.warning(f"Quota exhausted: {e}", extra=log_extra)
        return error_response(402, "Payment required. Please add funds to continue.")

    except ConfigurationError as e:
        record_scoring_failure("configuration_error")
        logging.error(f"Configuration error: {e}", extra=log_extra)
        return error_response(500, "Credit scoring is not configured")

    except UpstreamError as e:
        record_scoring_failure("upstream_error")
        logging.error(f"AI gateway error: {e}", extra={**log_extra, "upstream_status": e.status_code})
        return error_response(500, "Credit scoring service unavailable")

    except MalformedResponseError as e:
        record_scoring_failure("malformed_response")
        logging.error(f"Malformed AI response: {e}", extra=log_extra)
        return error_response(500, "Credit scoring service returned an invalid response")

    except PersistenceError as e:
        record_scoring_failure("persistence_error")
        logging.error(f"Persistence error: {e}", extra=log_extra)
        return error_response(500, "Failed to save credit score")

    except Exception as e:
        db.rollback()
        record_scoring_failure("internal_error")
        logging.exception(f"Unexpected error: {e}", extra=log_extra)
        return error_response(500, "Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_credit_score(result.score)
    log_credit_score(request_id, user_id, result.score, len(result.factors), duration_ms)

    return CreditScoreResponse.from_record(db_score)
