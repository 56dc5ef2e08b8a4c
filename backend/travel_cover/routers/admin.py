"""
Travel Cover - Admin Router
Read-only console over policies, payouts, verification and the oracle audit log.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..database import get_db
from ..models.db_models import (
    PolicyDB, PolicyStatus, PayoutDB, OracleEventDB, UserProfileDB,
    VerificationSessionStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class PolicyStats(BaseModel):
    total: int
    active: int
    claimed: int
    expired: int


class PayoutStats(BaseModel):
    count: int
    total: float
    average: float


class UserStats(BaseModel):
    total: int
    verified: int
    unverified: int


class OracleStats(BaseModel):
    events: int
    triggering_events: int


class DashboardStats(BaseModel):
    """Dashboard statistics response."""
    policies: PolicyStats
    payouts: PayoutStats
    users: UserStats
    oracle: OracleStats
    claim_rate: float  # Percentage of policies that paid out
    verification_rate: float  # Percentage of profiles verified


class OracleEventItem(BaseModel):
    """Audit log entry."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    event_type: str = Field(..., alias="eventType")
    event_data: Optional[Dict[str, Any]] = Field(None, alias="eventData")
    payout_triggered: bool = Field(..., alias="payoutTriggered")
    policies_matched: int = Field(0, alias="policiesMatched")
    payouts_created: int = Field(0, alias="payoutsCreated")
    processed_at: datetime = Field(..., alias="processedAt")


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    """Headline counts for the admin dashboard."""
    status_counts = dict(
        db.query(PolicyDB.status, func.count(PolicyDB.id))
        .group_by(PolicyDB.status)
        .all()
    )
    total_policies = sum(status_counts.values())
    claimed = status_counts.get(PolicyStatus.CLAIMED, 0)

    payout_count, payout_total = db.query(
        func.count(PayoutDB.id), func.coalesce(func.sum(PayoutDB.amount), 0.0)
    ).one()

    total_users = db.query(func.count(UserProfileDB.id)).scalar() or 0
    verified_users = (
        db.query(func.count(UserProfileDB.id))
        .filter(UserProfileDB.verification_status == VerificationSessionStatus.COMPLETED.value)
        .scalar()
        or 0
    )

    total_events = db.query(func.count(OracleEventDB.id)).scalar() or 0
    triggering_events = (
        db.query(func.count(OracleEventDB.id))
        .filter(OracleEventDB.payout_triggered.is_(True))
        .scalar()
        or 0
    )

    logger.info(f"Admin {admin.user_id} requested dashboard stats")

    return DashboardStats(
        policies=PolicyStats(
            total=total_policies,
            active=status_counts.get(PolicyStatus.ACTIVE, 0),
            claimed=claimed,
            expired=status_counts.get(PolicyStatus.EXPIRED, 0),
        ),
        payouts=PayoutStats(
            count=payout_count,
            total=float(payout_total),
            average=float(payout_total) / payout_count if payout_count else 0.0,
        ),
        users=UserStats(
            total=total_users,
            verified=verified_users,
            unverified=total_users - verified_users,
        ),
        oracle=OracleStats(events=total_events, triggering_events=triggering_events),
        claim_rate=round(claimed / total_policies * 100, 1) if total_policies else 0.0,
        verification_rate=round(verified_users / total_users * 100, 1) if total_users else 0.0,
    )


@router.get("/oracle-events", response_model=List[OracleEventItem])
async def list_oracle_events(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    """Most recent oracle audit log entries."""
    events = (
        db.query(OracleEventDB)
        .order_by(OracleEventDB.processed_at.desc())
        .limit(limit)
        .all()
    )
    return [
        OracleEventItem(
            id=e.id,
            event_type=e.event_type,
            event_data=e.event_data,
            payout_triggered=e.payout_triggered,
            policies_matched=e.policies_matched or 0,
            payouts_created=e.payouts_created or 0,
            processed_at=e.processed_at,
        )
        for e in events
    ]
