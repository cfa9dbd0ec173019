"""AI gateway HTTP client for structured credit scoring"""

import json
import logging
from typing import Any, Dict, List, Literal, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from lendscore_gateway.config import Settings
from lendscore_gateway.domain.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
)
from lendscore_gateway.domain.models import CreditIndicators, CreditScoreResult, FactorImpact, ScoreFactor
from lendscore_gateway.infrastructure.observability.metrics import (
    ai_gateway_failure_counter,
    ai_gateway_latency_histogram,
)

TOOL_NAME = "credit_score_result"

SYSTEM_PROMPT = """You are a credit scoring AI. Analyze user financial behavior and return a JSON response with:
1. score (0-1000)
2. explanation (short 2-3 sentence explanation)
3. factors (array of positive/negative factors)

Consider: KYC completion, loan history, repayment patterns, transaction frequency."""

CREDIT_SCORE_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Return structured credit score analysis",
        "parameters": {
            "type": "object",
            "properties": {
                "score": {
                    "type": "integer",
                    "minimum": 0,
                    "maximum": 1000,
                    "description": "Credit score from 0-1000",
                },
                "explanation": {
                    "type": "string",
                    "description": "Brief 2-3 sentence explanation of the score",
                },
                "factors": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "factor": {"type": "string"},
                            "impact": {"type": "string", "enum": ["positive", "negative", "neutral"]},
                        },
                        "required": ["factor", "impact"],
                    },
                },
            },
            "required": ["score", "explanation", "factors"],
        },
    },
}


class ScoreFactorPayload(BaseModel):
    factor: str
    impact: Literal["positive", "negative", "neutral"]


class CreditScorePayload(BaseModel):
    """Arguments of the forced credit_score_result function call"""

    score: int = Field(..., ge=0, le=1000, strict=True)
    explanation: str
    factors: List[ScoreFactorPayload]

    def to_result(self) -> CreditScoreResult:
        return CreditScoreResult(
            score=self.score,
            explanation=self.explanation,
            factors=[ScoreFactor(factor=f.factor, impact=FactorImpact(f.impact)) for f in self.factors],
        )


class AIGatewayClient:
    """Client for the OpenAI-compatible chat completions gateway"""

    def __init__(
        self,
        api_key: Optional[str],
        url: str,
        model: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "AIGatewayClient":
        return cls(
            api_key=settings.ai_gateway_api_key,
            url=settings.ai_gateway_url,
            model=settings.ai_model,
            timeout=settings.ai_gateway_timeout_seconds,
            transport=transport,
        )

    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: If no API key is set
        """
        if not self.api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY not configured")

    def build_request(self, indicators: CreditIndicators) -> Dict[str, Any]:
        """Chat completions body with the forced function call"""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Analyze this user's creditworthiness: {json.dumps(indicators.to_payload())}",
                },
            ],
            "tools": [CREDIT_SCORE_TOOL],
            "tool_choice": {"type": "function", "function": {"name": TOOL_NAME}},
        }

    async def score(self, indicators: CreditIndicators) -> CreditScoreResult:
        """
        Send one scoring request. No retries.

        Raises:
            ConfigurationError: API key missing
            RateLimitedError: Gateway answered 429
            QuotaExhaustedError: Gateway answered 402
            UpstreamError: Transport failure or any other non-2xx status
            MalformedResponseError: 2xx without a valid credit_score_result call
        """
        self.ensure_configured()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with ai_gateway_latency_histogram.time():
                    response = await client.post(self.url, json=self.build_request(indicators), headers=headers)
            except httpx.TimeoutException as e:
                ai_gateway_failure_counter.labels(reason="timeout").inc()
                raise UpstreamError(f"AI gateway timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                ai_gateway_failure_counter.labels(reason="transport").inc()
                raise UpstreamError(f"AI gateway request failed: {e}") from e

        return self.parse_response(response)

    def parse_response(self, response: httpx.Response) -> CreditScoreResult:
        if not response.is_success:
            logging.error(
                "AI gateway error",
                extra={"status_code": response.status_code, "body": response.text[:2000]},
            )
            if response.status_code == 429:
                ai_gateway_failure_counter.labels(reason="rate_limited").inc()
                raise RateLimitedError("AI gateway rate limit exceeded")
            if response.status_code == 402:
                ai_gateway_failure_counter.labels(reason="quota_exhausted").inc()
                raise QuotaExhaustedError("AI gateway quota exhausted")
            ai_gateway_failure_counter.labels(reason="http_status").inc()
            raise UpstreamError(
                f"AI gateway error: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            ai_gateway_failure_counter.labels(reason="malformed").inc()
            raise MalformedResponseError("AI gateway returned a non-JSON body") from e

        try:
            return parse_tool_call(data)
        except MalformedResponseError:
            ai_gateway_failure_counter.labels(reason="malformed").inc()
            raise


def parse_tool_call(data: Any) -> CreditScoreResult:
    """
    Extract and validate the credit_score_result call from a chat completion.

    Only the first tool call of the first choice is considered.
    """
    try:
        tool_calls = data["choices"][0]["message"].get("tool_calls")
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise MalformedResponseError("No choices in AI response") from e

    if not isinstance(tool_calls, list) or not tool_calls or not isinstance(tool_calls[0], dict):
        raise MalformedResponseError("No tool call in AI response")

    function = tool_calls[0].get("function")
    if not isinstance(function, dict):
        raise MalformedResponseError("Tool call has no function object")
    if function.get("name") != TOOL_NAME:
        raise MalformedResponseError(f"Unexpected tool call: {function.get('name')!r}")

    arguments = function.get("arguments")
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except ValueError as e:
            raise MalformedResponseError("Tool call arguments are not valid JSON") from e

    try:
        payload = CreditScorePayload.model_validate(arguments)
    except ValidationError as e:
        raise MalformedResponseError(f"Tool call arguments violate schema: {e}") from e

    return payload.to_result()
