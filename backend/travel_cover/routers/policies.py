"""
Policies and Claims API Routes

Policy purchase and lookup, plus the payouts a wallet has received.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import ValidationError
from ..models.db_models import PolicyDB, PayoutDB, PolicyType
from ..services.policies import PolicyStore


router = APIRouter(prefix="/policies", tags=["policies"])
claims_router = APIRouter(prefix="/claims", tags=["claims"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class CreatePolicyRequest(BaseModel):
    """Request to purchase a policy."""
    model_config = ConfigDict(populate_by_name=True)

    policy_type: PolicyType = Field(..., alias="policyType")
    user_address: str = Field(..., alias="userAddress")
    premium_amount: float = Field(..., alias="premiumAmount")
    payout_amount: float = Field(..., alias="payoutAmount")
    duration: Optional[str] = Field(None, description='e.g. "30 days", "1 month", "1 year"')
    location: Optional[str] = None
    conditions: Optional[str] = None
    oracle_conditions: Optional[Dict[str, Any]] = Field(None, alias="oracleConditions")
    contract_address: Optional[str] = Field(None, alias="contractAddress")
    token_id: Optional[str] = Field(None, alias="tokenId")


class PolicyView(BaseModel):
    """Policy as shown to the frontend."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    user_address: str = Field(..., alias="userAddress")
    premium: float
    payout: float
    status: str
    purchased_at: datetime = Field(..., alias="purchasedAt")
    expires_at: datetime = Field(..., alias="expiresAt")
    conditions: Optional[str] = None
    location: Optional[str] = None
    oracle_conditions: Optional[Dict[str, Any]] = Field(None, alias="oracleConditions")
    contract_address: Optional[str] = Field(None, alias="contractAddress")
    token_id: Optional[str] = Field(None, alias="tokenId")
    claim_amount: Optional[float] = Field(None, alias="claimAmount")
    claim_date: Optional[datetime] = Field(None, alias="claimDate")


class ClaimView(BaseModel):
    """A payout shown as a claim."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    policy_id: str = Field(..., alias="policyId")
    amount: float
    status: str
    triggered_by: str = Field(..., alias="triggeredBy")
    event_type: Optional[str] = Field(None, alias="eventType")
    completed_at: datetime = Field(..., alias="completedAt")


def to_policy_view(policy: PolicyDB) -> PolicyView:
    return PolicyView(
        id=policy.id,
        type=policy.policy_type.value,
        user_address=policy.user_address,
        premium=policy.premium_amount,
        payout=policy.payout_amount,
        status=policy.status.value,
        purchased_at=policy.created_at,
        expires_at=policy.expires_at,
        conditions=policy.conditions,
        location=policy.location,
        oracle_conditions=policy.oracle_conditions,
        contract_address=policy.contract_address,
        token_id=policy.token_id,
        claim_amount=policy.claim_amount,
        claim_date=policy.claim_date,
    )


def to_claim_view(payout: PayoutDB) -> ClaimView:
    return ClaimView(
        id=payout.id,
        policy_id=payout.policy_id,
        amount=payout.amount,
        status=payout.status.value,
        triggered_by=payout.triggered_by,
        event_type=payout.event_type,
        completed_at=payout.completed_at,
    )


# =============================================================================
# POLICY ENDPOINTS
# =============================================================================

@router.post("", response_model=PolicyView, status_code=201)
async def create_policy(
    request: CreatePolicyRequest,
    db: Session = Depends(get_db),
):
    """Record a policy purchase. The policy starts ACTIVE."""
    policy = PolicyStore(db).create(
        user_address=request.user_address,
        policy_type=request.policy_type,
        premium_amount=request.premium_amount,
        payout_amount=request.payout_amount,
        duration=request.duration,
        conditions=request.conditions,
        location=request.location,
        oracle_conditions=request.oracle_conditions,
        contract_address=request.contract_address,
        token_id=request.token_id,
    )
    return to_policy_view(policy)


@router.get("/user", response_model=List[PolicyView])
async def list_user_policies(
    address: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Policies owned by a wallet, newest first."""
    return [to_policy_view(p) for p in PolicyStore(db).list_for_user(address)]


@router.get("/{policy_id}", response_model=PolicyView)
async def get_policy(
    policy_id: str,
    db: Session = Depends(get_db),
):
    return to_policy_view(PolicyStore(db).get(policy_id))


# =============================================================================
# CLAIM ENDPOINTS
# =============================================================================

@claims_router.get("/user", response_model=List[ClaimView])
async def list_user_claims(
    address: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Payouts received by a wallet, newest first."""
    if not address:
        raise ValidationError("Address is required")

    payouts = (
        db.query(PayoutDB)
        .filter(PayoutDB.user_address == address.lower())
        .order_by(PayoutDB.completed_at.desc())
        .all()
    )
    return [to_claim_view(p) for p in payouts]
