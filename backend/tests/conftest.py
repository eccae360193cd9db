"""Pytest fixtures for the registry backend.

Provides reusable test fixtures for:
- In-memory SQLite database session shared with the API
- In-memory blob store, Paynow gateway over a mock transport, recording notifier
- Active PREA member for organization applications
- Staff and admin bearer headers for the admin API

Usage:
    def test_start(client):
        response = client.post("/api/public/applications/individual/start", json=individual_payload())
        assert response.status_code == 201
"""

import os
import sys
from pathlib import Path
from typing import Dict, Generator, List, Tuple
from urllib.parse import parse_qsl, urlencode

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")

tests_dir = Path(__file__).parent
sys.path.insert(0, str(tests_dir.parent / "src"))
sys.path.insert(0, str(tests_dir))

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auth.jwt import create_staff_token
from database import get_db as database_get_db
from domain.documents.ports import BlobNotFoundError, BlobStorePort
from domain.payments import generate_hash
from infrastructure.payments import PaynowGateway, get_payment_gateway
from infrastructure.storage import get_blob_store
from models import Base, Member, MembershipStatus
from notifications import NotifierPort, get_notifier

from fixtures.builders import PAYNOW_INTEGRATION_ID, PAYNOW_INTEGRATION_KEY, PREA_MEMBER_NUMBER


test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# =============================================================================
# Test doubles
# =============================================================================

class InMemoryBlobStore(BlobStorePort):
    """Blob store backed by a dict; keys never put are reported missing."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    def put(self, key: str, content: bytes) -> str:
        self.objects[key] = content
        return key

    def fetch(self, key: str) -> bytes:
        if key not in self.objects:
            raise BlobNotFoundError(f"File not found: {key}")
        return self.objects[key]


class RecordingNotifier(NotifierPort):
    """Collects (to, subject, body) instead of sending email."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append((to, subject, body))
        return True

    def to(self, address: str) -> List[Tuple[str, str, str]]:
        return [message for message in self.sent if message[0] == address]


class PaynowStub:
    """Mock transport handler answering initiate calls like Paynow does."""

    def __init__(self):
        self.requests: List[Dict[str, str]] = []
        self.reply_status = "Ok"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        fields = dict(parse_qsl(request.content.decode()))
        self.requests.append(fields)

        if self.reply_status != "Ok":
            return httpx.Response(200, text=urlencode({"status": "Error", "error": "Invalid amount field"}))

        reply = {
            "status": "Ok",
            "browserurl": f"https://paynow.test/payment/{fields['reference']}",
            "pollurl": f"https://paynow.test/poll/{fields['reference']}",
            "paynowreference": "987654",
        }
        reply["hash"] = generate_hash(reply, PAYNOW_INTEGRATION_KEY)
        return httpx.Response(200, text=urlencode(reply))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def paynow_stub() -> PaynowStub:
    return PaynowStub()


@pytest.fixture
def payment_gateway(paynow_stub) -> PaynowGateway:
    return PaynowGateway(
        integration_id=PAYNOW_INTEGRATION_ID,
        integration_key=PAYNOW_INTEGRATION_KEY,
        base_url="https://paynow.test",
        client=httpx.Client(transport=httpx.MockTransport(paynow_stub)),
    )


@pytest.fixture(scope="function")
def client(db_session: Session, blob_store, payment_gateway, notifier):
    """Test client wired to the test session and the in-memory adapters."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def active_prea(db_session: Session) -> Member:
    """Active individual member eligible to act as a firm's PREA."""
    member = Member(
        member_number=PREA_MEMBER_NUMBER,
        full_name="Rudo Chikore",
        email="rudo@msasarealty.co.zw",
        member_type="individual",
        membership_status=MembershipStatus.ACTIVE.value,
    )
    db_session.add(member)
    db_session.commit()
    return member


@pytest.fixture
def staff_headers() -> Dict[str, str]:
    token = create_staff_token("staff-001", "clerk@eac.org.zw", "staff")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    token = create_staff_token("admin-001", "registrar@eac.org.zw", "admin")
    return {"Authorization": f"Bearer {token}"}
