"""
Policy Store

Durable record of purchased policies. Purchases create policies in ACTIVE
status; the only later mutation is the guarded ACTIVE -> CLAIMED transition
performed on behalf of the payout trigger.
"""
import logging
import re
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import uuid4

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models.db_models import PolicyDB, PolicyStatus, PolicyType

logger = logging.getLogger(__name__)


DEFAULT_DURATION = timedelta(days=30)

_DURATION_PATTERN = re.compile(r"(\d+)\s*(day|month|year)s?", re.IGNORECASE)


def parse_duration(duration: Optional[str], start: datetime) -> datetime:
    """
    Compute an expiry from a human duration ("30 days", "1 month", "2 years").

    Anything unparseable falls back to 30 days.
    """
    match = _DURATION_PATTERN.search(duration or "")
    if not match:
        return start + DEFAULT_DURATION

    amount = int(match.group(1))
    unit = match.group(2).lower()
    if unit == "day":
        return start + relativedelta(days=amount)
    if unit == "month":
        return start + relativedelta(months=amount)
    return start + relativedelta(years=amount)


class PolicyStore:
    """Reads and writes rows of the policies table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, policy_id: str) -> PolicyDB:
        policy = self.db.query(PolicyDB).filter(PolicyDB.id == policy_id).first()
        if policy is None:
            raise NotFoundError("Policy not found")
        return policy

    def list_for_user(self, address: str) -> List[PolicyDB]:
        if not address:
            raise ValidationError("Address is required")
        return (
            self.db.query(PolicyDB)
            .filter(PolicyDB.user_address == address.lower())
            .order_by(PolicyDB.created_at.desc())
            .all()
        )

    def create(
        self,
        user_address: str,
        policy_type: PolicyType,
        premium_amount: float,
        payout_amount: float,
        duration: Optional[str] = None,
        conditions: Optional[str] = None,
        location: Optional[str] = None,
        oracle_conditions: Optional[dict] = None,
        contract_address: Optional[str] = None,
        token_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PolicyDB:
        """
        Record a purchased policy.

        Raises:
            ValidationError: missing address or non-positive amounts
        """
        if not user_address:
            raise ValidationError("Missing required fields")
        if premium_amount is None or premium_amount <= 0:
            raise ValidationError("Premium amount must be positive")
        if payout_amount is None or payout_amount <= 0:
            raise ValidationError("Payout amount must be positive")

        now = now or datetime.utcnow()
        policy = PolicyDB(
            id=str(uuid4()),
            user_address=user_address.lower(),
            policy_type=policy_type,
            premium_amount=premium_amount,
            payout_amount=payout_amount,
            status=PolicyStatus.ACTIVE,
            expires_at=parse_duration(duration, now),
            conditions=conditions,
            location=location,
            oracle_conditions=oracle_conditions,
            contract_address=contract_address,
            token_id=token_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(policy)
        self.db.commit()
        self.db.refresh(policy)

        logger.info(f"Policy {policy.id} purchased: type={policy_type.value}, payout={payout_amount}")
        return policy

    def find_eligible(self, policy_type: PolicyType, now: datetime) -> List[PolicyDB]:
        """
        Policies that an event covering `policy_type` pays out on.

        Eligible means ACTIVE and not yet expired at `now`.
        """
        return (
            self.db.query(PolicyDB)
            .filter(
                PolicyDB.policy_type == policy_type,
                PolicyDB.status == PolicyStatus.ACTIVE,
                PolicyDB.expires_at > now,
            )
            .order_by(PolicyDB.created_at.asc(), PolicyDB.id.asc())
            .all()
        )

    def claim_if_active(self, policy: PolicyDB, now: datetime) -> bool:
        """
        Move a policy to CLAIMED, only if it is still ACTIVE.

        Does not commit. Returns False when another caller already claimed it.
        """
        updated = (
            self.db.query(PolicyDB)
            .filter(
                PolicyDB.id == policy.id,
                PolicyDB.status == PolicyStatus.ACTIVE,
            )
            .update(
                {
                    PolicyDB.status: PolicyStatus.CLAIMED,
                    PolicyDB.claim_amount: policy.payout_amount,
                    PolicyDB.claim_date: now,
                    PolicyDB.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated == 1
