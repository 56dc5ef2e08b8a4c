"""
Travel Cover - SQLAlchemy ORM Models
Relational tables for policies, payouts, the oracle audit log and identity verification
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, JSON, ForeignKey, Enum as SQLEnum, Boolean
from sqlalchemy.orm import relationship
from ..database import Base


# =============================================================================
# ENUMS
# =============================================================================

class PolicyType(str, Enum):
    """Coverage categories a policy can be purchased for."""
    TRAVEL = "travel"
    MEDICAL = "medical"
    BAGGAGE = "baggage"
    CANCELLATION = "cancellation"
    WEATHER = "weather"
    VISA = "visa"


class PolicyStatus(str, Enum):
    """Policy lifecycle status."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CLAIMED = "claimed"


class OracleEventType(str, Enum):
    """Oracle event types that can trigger a payout."""
    FLIGHT_DELAY = "flight_delay"
    EXTREME_WEATHER = "extreme_weather"
    HEALTH_EMERGENCY = "health_emergency"

    @property
    def covered_policy_type(self) -> PolicyType:
        return EVENT_POLICY_TYPES[self]

    @classmethod
    def parse(cls, value) -> Optional["OracleEventType"]:
        """Return the matching member, or None for unrecognized values."""
        try:
            return cls(value)
        except ValueError:
            return None


# Which policy type pays out for which event
EVENT_POLICY_TYPES = {
    OracleEventType.FLIGHT_DELAY: PolicyType.TRAVEL,
    OracleEventType.EXTREME_WEATHER: PolicyType.WEATHER,
    OracleEventType.HEALTH_EMERGENCY: PolicyType.MEDICAL,
}


class PayoutStatus(str, Enum):
    """Payout status. Payouts are only written once they complete."""
    COMPLETED = "completed"


class VerificationSessionStatus(str, Enum):
    """States of an identity verification session."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


PAYOUT_TRIGGER_ORACLE = "oracle_event"


# =============================================================================
# TABLES
# =============================================================================

class PolicyDB(Base):
    """Purchased coverage. Mutated only by the payout trigger, never deleted."""
    __tablename__ = "policies"

    id = Column(String(36), primary_key=True)  # UUID
    user_address = Column(String(64), nullable=False, index=True)  # Lowercase wallet address
    policy_type = Column(SQLEnum(PolicyType), nullable=False)

    premium_amount = Column(Float, nullable=False)
    payout_amount = Column(Float, nullable=False)  # Fixed at creation
    status = Column(SQLEnum(PolicyStatus), nullable=False, default=PolicyStatus.ACTIVE)
    expires_at = Column(DateTime, nullable=False)

    conditions = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    oracle_conditions = Column(JSON, nullable=True)
    contract_address = Column(String(64), nullable=True)
    token_id = Column(String(100), nullable=True)

    # Set once by the payout trigger
    claim_amount = Column(Float, nullable=True)
    claim_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    payout = relationship("PayoutDB", back_populates="policy", uselist=False)


class PayoutDB(Base):
    """Disbursement record. One per claimed policy, never mutated."""
    __tablename__ = "payouts"

    id = Column(String(36), primary_key=True)  # UUID
    policy_id = Column(String(36), ForeignKey("policies.id"), nullable=False, unique=True)
    user_address = Column(String(64), nullable=False, index=True)

    amount = Column(Float, nullable=False)  # Copied from policy.payout_amount
    status = Column(SQLEnum(PayoutStatus), nullable=False, default=PayoutStatus.COMPLETED)
    triggered_by = Column(String(50), nullable=False, default=PAYOUT_TRIGGER_ORACLE)
    event_type = Column(String(50), nullable=True)

    completed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    policy = relationship("PolicyDB", back_populates="payout")


class OracleEventDB(Base):
    """Append-only audit log of every ingested oracle event."""
    __tablename__ = "oracle_events"

    id = Column(String(36), primary_key=True)  # UUID
    event_type = Column(String(100), nullable=False, index=True)  # Stored verbatim, even if unrecognized
    event_data = Column(JSON, nullable=True)
    payout_triggered = Column(Boolean, nullable=False, default=False)

    policies_matched = Column(Integer, default=0)
    payouts_created = Column(Integer, default=0)

    processed_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class VerificationSessionDB(Base):
    """Identity-proof session. pending -> completed | failed, both terminal."""
    __tablename__ = "verification_sessions"

    id = Column(String(36), primary_key=True)  # UUID, handed to the verifier
    user_address = Column(String(64), nullable=False, index=True)
    status = Column(SQLEnum(VerificationSessionStatus), nullable=False, default=VerificationSessionStatus.PENDING)
    config = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)


class UserProfileDB(Base):
    """Per-wallet profile carrying the outcome of identity verification."""
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True)  # UUID
    wallet_address = Column(String(64), unique=True, nullable=False, index=True)

    verification_status = Column(String(20), nullable=False, default="not_started")
    verification_data = Column(JSON, nullable=True)
    verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
