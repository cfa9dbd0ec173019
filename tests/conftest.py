"""Pytest fixtures for testing"""

import json
import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator, Iterable, Optional

import httpx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from lendscore_gateway.api.dependencies import get_ai_gateway_client
from lendscore_gateway.api.main import create_app
from lendscore_gateway.config import Settings, get_settings
from lendscore_gateway.infrastructure.clients.ai_gateway import AIGatewayClient
from lendscore_gateway.infrastructure.database.models import (
    Base,
    LoanRecord,
    ProfileRecord,
    TransactionRecord,
)
from lendscore_gateway.infrastructure.database.session import get_db


# In-memory database shared across threads for TestClient
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

GATEWAY_URL = "http://ai-gateway.test/v1/chat/completions"


def tool_call_completion(arguments, name: str = "credit_score_result") -> dict:
    """Chat completion body carrying one function call"""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {
        "id": "chatcmpl-test",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": name, "arguments": arguments},
                        }
                    ],
                },
                "finish_reason": "tool_calls",
            }
        ],
    }


DEFAULT_RESULT = {
    "score": 720,
    "explanation": "Verified identity and a clean repayment record.",
    "factors": [{"factor": "KYC verified", "impact": "positive"}],
}


class FakeGateway:
    """Records outbound requests and replays a canned response"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: Optional[dict] = tool_call_completion(DEFAULT_RESULT)
        self.text: Optional[str] = None

    def respond(self, status_code: int = 200, payload: Optional[dict] = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self.payload = payload
        self.text = text

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)

    @property
    def last_indicators(self) -> dict:
        user_message = self.last_body["messages"][1]["content"]
        return json.loads(user_message.split(": ", 1)[1])


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        ai_gateway_url=GATEWAY_URL,
        ai_gateway_api_key="test-key",
        ai_model="test/model",
    )


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def gateway_client(test_settings: Settings, fake_gateway: FakeGateway) -> AIGatewayClient:
    return AIGatewayClient.from_settings(test_settings, transport=httpx.MockTransport(fake_gateway.handler))


def build_test_app(db: Session, settings: Settings, ai_client: AIGatewayClient):
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_ai_gateway_client] = lambda: ai_client
    return app


@pytest.fixture
def client(db: Session, test_settings: Settings, gateway_client: AIGatewayClient) -> TestClient:
    """Create FastAPI test client with test database and fake AI gateway"""
    return TestClient(build_test_app(db, test_settings, gateway_client))


def seed_borrower(
    db: Session,
    user_id: str,
    kyc_status: Optional[str] = "completed",
    loan_statuses: Iterable[str] = (),
    transaction_count: int = 0,
) -> None:
    """Insert a profile, borrower loans and transactions for one user"""
    if kyc_status is not None:
        db.add(
            ProfileRecord(
                user_id=user_id,
                email=f"{user_id}@example.com",
                full_name=user_id.title(),
                kyc_status=kyc_status,
            )
        )

    loans = [
        LoanRecord(
            borrower_id=user_id,
            amount_cents=100_000,
            interest_rate=8.5,
            duration_months=12,
            purpose="Test loan",
            status=status,
        )
        for status in loan_statuses
    ]
    if transaction_count and not loans:
        # Transactions need a loan; this one is funded by the user, not borrowed
        loans = [
            LoanRecord(
                borrower_id=f"{user_id}_counterparty",
                lender_id=user_id,
                amount_cents=50_000,
                interest_rate=6.0,
                duration_months=6,
                purpose="Funded loan",
                status="funded",
            )
        ]
    db.add_all(loans)
    db.flush()

    base_time = datetime.now(timezone.utc) - timedelta(days=30)
    for i in range(transaction_count):
        outgoing = i % 2 == 0
        db.add(
            TransactionRecord(
                loan_id=loans[0].id,
                from_user_id=user_id if outgoing else "lender_x",
                to_user_id="lender_x" if outgoing else user_id,
                amount_cents=10_000,
                transaction_type="repayment" if outgoing else "funding",
                integrity_hash=f"0x{i:064x}",
                block_number=1000 + i,
                created_at=base_time + timedelta(hours=i),
            )
        )
    db.commit()
