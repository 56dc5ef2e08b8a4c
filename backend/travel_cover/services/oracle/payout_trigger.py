"""
Payout Trigger

Claims a single policy and records its payout as one unit of work: the
guarded status update and the payout insert commit together or not at all.
A policy that is no longer ACTIVE is skipped, so repeating an event never
pays the same policy twice.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import DownstreamError
from ...models.db_models import PolicyDB, PayoutDB, PayoutStatus, PAYOUT_TRIGGER_ORACLE
from ..policies.policy_store import PolicyStore

logger = logging.getLogger(__name__)


class PayoutTrigger:
    """Transitions matched policies to CLAIMED and writes their payouts."""

    def __init__(self, db: Session, policy_store: Optional[PolicyStore] = None):
        self.db = db
        self.policy_store = policy_store or PolicyStore(db)

    def trigger(
        self,
        policy: PolicyDB,
        event_type: str,
        now: Optional[datetime] = None,
    ) -> Optional[PayoutDB]:
        """
        Pay out one policy.

        Args:
            policy: A policy returned by the matcher
            event_type: The oracle event that caused the payout
            now: Claim timestamp (default: now)

        Returns:
            The new payout, or None if the policy was already claimed

        Raises:
            DownstreamError: the store rejected the update or the insert
        """
        now = now or datetime.utcnow()
        policy_id = policy.id
        amount = policy.payout_amount

        logger.info(f"Triggering payout for policy {policy_id}")

        try:
            if not self.policy_store.claim_if_active(policy, now):
                logger.info(f"Policy {policy_id} is no longer active, skipping payout")
                return None

            payout = PayoutDB(
                id=str(uuid4()),
                policy_id=policy_id,
                user_address=policy.user_address,
                amount=amount,
                status=PayoutStatus.COMPLETED,
                triggered_by=PAYOUT_TRIGGER_ORACLE,
                event_type=event_type,
                completed_at=now,
            )
            self.db.add(payout)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DownstreamError(f"Payout for policy {policy_id} failed: {e}") from e

        logger.info(f"Payout triggered for policy {policy_id}, amount: {amount}")
        return payout
