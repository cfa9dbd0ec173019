import json
import uuid

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock AI Gateway", version="1.0.0")

ERROR_BODIES = {
    402: {"error": {"message": "Payment required", "type": "insufficient_quota"}},
    429: {"error": {"message": "Too many requests", "type": "rate_limit_exceeded"}},
}


@app.get("/health")
def health(): return {"status": "ok"}


def heuristic_score(indicators: dict) -> tuple[int, list[dict]]:
    """Deterministic stand-in for the model's judgement"""
    score = 500
    factors = []
    if indicators.get("kyc_completed"):
        score += 100
        factors.append({"factor": "KYC verified", "impact": "positive"})
    else:
        score -= 50
        factors.append({"factor": "KYC not completed", "impact": "negative"})

    completed = indicators.get("completed_loans", 0)
    defaulted = indicators.get("defaulted_loans", 0)
    score += 40 * completed - 150 * defaulted
    if completed:
        factors.append({"factor": f"{completed} loans repaid", "impact": "positive"})
    if defaulted:
        factors.append({"factor": f"{defaulted} loans defaulted", "impact": "negative"})
    if indicators.get("active_loans", 0) > 2:
        score -= 30
        factors.append({"factor": "Many active loans", "impact": "negative"})

    tx_count = indicators.get("transaction_count", 0)
    score += min(tx_count, 10) * 5
    factors.append({"factor": "Transaction activity", "impact": "positive" if tx_count else "neutral"})

    return max(0, min(1000, score)), factors


@app.post("/v1/chat/completions")
async def chat_completions(
    request: Request,
    x_mock_status: int | None = Header(default=None),
    x_mock_omit_tool_call: str | None = Header(default=None),
):
    if x_mock_status and x_mock_status >= 400:
        body = ERROR_BODIES.get(x_mock_status, {"error": {"message": "Upstream failure"}})
        return JSONResponse(status_code=x_mock_status, content=body)

    body = await request.json()
    user_message = next(m["content"] for m in body["messages"] if m["role"] == "user")
    indicators = json.loads(user_message.split(": ", 1)[1])
    score, factors = heuristic_score(indicators)

    message = {"role": "assistant", "content": None}
    if x_mock_omit_tool_call != "1":
        tool_name = body["tool_choice"]["function"]["name"]
        message["tool_calls"] = [
            {
                "id": f"call_{uuid.uuid4().hex[:12]}",
                "type": "function",
                "function": {
                    "name": tool_name,
                    "arguments": json.dumps({
                        "score": score,
                        "explanation": f"Heuristic score of {score} based on KYC, loan and transaction history.",
                        "factors": factors,
                    }),
                },
            }
        ]
    else:
        message["content"] = "I cannot score this user."

    return {
        "id": f"chatcmpl-{uuid.uuid4().hex[:12]}",
        "object": "chat.completion",
        "model": body.get("model"),
        "choices": [{"index": 0, "message": message, "finish_reason": "tool_calls"}],
    }
