"""
Test configuration and fixtures.

Everything runs against an in-memory SQLite database shared through a
StaticPool, with a recording fake in place of the Google Calendar client.
"""
import uuid
from datetime import datetime, time, timedelta, timezone
from types import SimpleNamespace

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.config.database import create_session_factory, create_tables
from app.config.settings import Settings
from app.core.context import build_context
from app.main import create_app
from app.models import Appointment, AuthCredential, Business, OperatingHourRule, Service
from app.services.business.business_store import BusinessStore
from app.utils.encryption import encrypt_token

TEST_ENCRYPTION_KEY = Fernet.generate_key().decode()
TEST_JWT_SECRET = "test-jwt-secret"
NEW_YORK = "America/New_York"
WEDNESDAY = 3


class FakeCalendarGateway:
    """Records every call; errors are injected by setting the *_error attributes"""

    def __init__(self):
        self.busy_blocks = []
        self.free_busy_response = None
        self.refresh_error = None
        self.free_busy_error = None
        self.insert_error = None
        self.refresh_calls = []
        self.free_busy_calls = []
        self.inserted_events = []

    def refresh_access_token(self, refresh_token):
        self.refresh_calls.append(refresh_token)
        if self.refresh_error:
            raise self.refresh_error
        return "access-token"

    def query_free_busy(self, access_token, time_min, time_max, calendar_id="primary"):
        self.free_busy_calls.append((access_token, time_min, time_max, calendar_id))
        if self.free_busy_error:
            raise self.free_busy_error
        if self.free_busy_response is not None:
            return self.free_busy_response
        return {calendar_id: list(self.busy_blocks)}

    def insert_event(self, access_token, event, calendar_id="primary"):
        self.inserted_events.append(event)
        if self.insert_error:
            raise self.insert_error
        return {"id": f"evt-{len(self.inserted_events)}", "status": "confirmed"}


def make_token(business_id, token_type="access", secret=TEST_JWT_SECRET):
    payload = {
        "sub": str(business_id),
        "type": token_type,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def seed_business(
        db,
        cipher,
        refresh_token="google-refresh-token",
        with_credential=True,
        is_active=True,
        rules=((WEDNESDAY, time(9, 0), time(17, 0), NEW_YORK),),
        duration_minutes=30,
        service_name="Haircut",
):
    """Insert a business with one service, its weekly rules and an auth record"""
    business = Business(
        business_name="Test Salon",
        email=f"{uuid.uuid4().hex[:8]}@example.com",
        is_active=is_active,
    )
    db.add(business)
    db.flush()

    service = Service(
        business_id=business.id,
        service_name=service_name,
        duration_minutes=duration_minutes,
    )
    db.add(service)

    for day, open_time, close_time, zone in rules:
        db.add(OperatingHourRule(
            business_id=business.id,
            day_of_week=day,
            open_time=open_time,
            close_time=close_time,
            time_zone=zone,
        ))

    if with_credential:
        db.add(AuthCredential(
            business_id=business.id,
            refresh_token_encrypted=encrypt_token(cipher, refresh_token),
        ))

    db.commit()
    return SimpleNamespace(business_id=business.id, service_id=service.id)


def add_appointment(db, business_id, service_id, start, end, name="Existing Customer"):
    appointment = Appointment(
        business_id=business_id,
        service_id=service_id,
        customer_name=name,
        appointment_start_time=start,
        appointment_end_time=end,
    )
    db.add(appointment)
    db.commit()
    return appointment


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY=TEST_JWT_SECRET,
        CALENDAR_ENCRYPTION_KEY=TEST_ENCRYPTION_KEY,
        GOOGLE_CLIENT_ID="test-client-id",
        GOOGLE_CLIENT_SECRET="test-client-secret",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cipher():
    return Fernet(TEST_ENCRYPTION_KEY.encode())


@pytest.fixture
def store(db, cipher):
    return BusinessStore(db, cipher)


@pytest.fixture
def gateway():
    return FakeCalendarGateway()


@pytest.fixture
def context(settings, session_factory, gateway):
    return build_context(settings, session_factory=session_factory, calendar_gateway=gateway)


@pytest.fixture
def client(context):
    """Create FastAPI test client."""
    return TestClient(create_app(context), raise_server_exceptions=False)


@pytest.fixture
def seeded(db, cipher):
    """Connected, active business open Wednesdays 09:00-17:00 New York, 30 minute service"""
    return seed_business(db, cipher)
