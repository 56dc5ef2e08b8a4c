"""
Shared fixtures: an in-memory SQLite database and a TestClient wired to it.
"""
import os

# Must be set before travel_cover is imported
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("PROOF_VERIFIER_URL", None)

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from travel_cover.database import Base, get_db
from travel_cover.main import app
from travel_cover.models.db_models import PolicyDB, PolicyStatus, PolicyType
from travel_cover.routers.verification import provide_proof_verifier
from travel_cover.services.verification import StaticProofVerifier


WALLET = "0xAbC0000000000000000000000000000000000001"


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def proof_verifier():
    return StaticProofVerifier(True)


@pytest.fixture
def client(session_factory, proof_verifier):
    """TestClient using the test database and a controllable proof verifier."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[provide_proof_verifier] = lambda: proof_verifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_policy(db_session):
    """Factory that inserts a policy and returns it."""
    created = []

    def _make(
        policy_type: PolicyType = PolicyType.TRAVEL,
        status: PolicyStatus = PolicyStatus.ACTIVE,
        expires_in: timedelta = timedelta(days=10),
        user_address: str = WALLET.lower(),
        payout_amount: float = 500.0,
        created_at: datetime = None,
    ) -> PolicyDB:
        now = datetime.utcnow()
        policy = PolicyDB(
            id=str(uuid4()),
            user_address=user_address,
            policy_type=policy_type,
            premium_amount=25.0,
            payout_amount=payout_amount,
            status=status,
            expires_at=now + expires_in,
            created_at=created_at or now + timedelta(microseconds=len(created)),
        )
        db_session.add(policy)
        db_session.commit()
        created.append(policy)
        return policy

    return _make
