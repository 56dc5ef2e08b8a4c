"""
Oracle Event Ingestor

Accepts an external event notification, decides whether it crosses a payout
threshold and, if it does, pays out every eligible policy of the covered type.

Guarantees:
1. Exactly one audit log row per ingested event, written whatever happened
   during the payout step.
2. Each policy is paid in its own unit of work. A failure on one policy is
   logged and does not stop the others.
3. The payout loop runs under a deadline. Policies not reached in time stay
   ACTIVE; payouts already made are kept.
4. Only a failure to write the audit log fails the ingestion.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import DownstreamError
from ...models.db_models import OracleEventDB, OracleEventType
from ..policies.policy_store import PolicyStore
from .payout_trigger import PayoutTrigger
from .thresholds import evaluate_threshold

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Outcome of ingesting one oracle event."""
    event_id: str
    event_type: str
    payout_triggered: bool
    policies_matched: int = 0
    payouts_created: int = 0
    already_claimed: int = 0
    failures: List[str] = field(default_factory=list)
    deadline_exceeded: bool = False


class OracleEventIngestor:
    """Classifies oracle events and drives payouts for matching policies."""

    def __init__(
        self,
        db: Session,
        deadline_seconds: float = 10.0,
        policy_store: Optional[PolicyStore] = None,
        payout_trigger: Optional[PayoutTrigger] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.db = db
        self.deadline_seconds = deadline_seconds
        self.policy_store = policy_store or PolicyStore(db)
        self.payout_trigger = payout_trigger or PayoutTrigger(db, self.policy_store)
        self.clock = clock

    def ingest(
        self,
        event_type: str,
        event_data: Optional[Dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> IngestionResult:
        """
        Ingest one event.

        Raises:
            DownstreamError: the audit log entry could not be written
        """
        started = self.clock()
        now = now or datetime.utcnow()
        event_data = event_data if event_data is not None else {}

        logger.info(f"Processing oracle event: {event_type}")

        result = IngestionResult(
            event_id=str(uuid4()),
            event_type=str(event_type),
            payout_triggered=evaluate_threshold(event_type, event_data),
        )

        if result.payout_triggered:
            self._pay_matching_policies(OracleEventType(event_type), now, started, result)

        self._write_audit_entry(result, event_data, now)

        logger.info(
            f"Oracle event {result.event_id} ({result.event_type}) processed: "
            f"triggered={result.payout_triggered}, matched={result.policies_matched}, "
            f"paid={result.payouts_created}, failed={len(result.failures)}"
        )
        return result

    # =========================================================================
    # PAYOUT LOOP
    # =========================================================================

    def _pay_matching_policies(
        self,
        event_type: OracleEventType,
        now: datetime,
        started: float,
        result: IngestionResult,
    ) -> None:
        try:
            policies = self.policy_store.find_eligible(event_type.covered_policy_type, now)
            policy_ids = [policy.id for policy in policies]
        except Exception as e:
            self.db.rollback()
            logger.error(f"Policy lookup for {event_type.value} failed: {e}")
            result.failures.append(f"policy lookup: {e}")
            return

        result.policies_matched = len(policies)
        deadline = started + self.deadline_seconds

        for index, (policy, policy_id) in enumerate(zip(policies, policy_ids)):
            if self.clock() >= deadline:
                result.deadline_exceeded = True
                logger.warning(
                    f"Oracle event deadline of {self.deadline_seconds}s exceeded, "
                    f"{len(policies) - index} policies left unprocessed"
                )
                break

            try:
                payout = self.payout_trigger.trigger(policy, event_type.value, now)
            except DownstreamError as e:
                logger.error(f"Payout trigger failed for policy {policy_id}: {e}")
                result.failures.append(policy_id)
                continue
            except Exception:
                self.db.rollback()
                logger.exception(f"Unexpected error paying policy {policy_id}")
                result.failures.append(policy_id)
                continue

            if payout is None:
                result.already_claimed += 1
            else:
                result.payouts_created += 1

    # =========================================================================
    # AUDIT LOG
    # =========================================================================

    def _write_audit_entry(self, result: IngestionResult, event_data: Dict[str, Any], now: datetime) -> None:
        entry = OracleEventDB(
            id=result.event_id,
            event_type=result.event_type,
            event_data=event_data,
            payout_triggered=result.payout_triggered,
            policies_matched=result.policies_matched,
            payouts_created=result.payouts_created,
            processed_at=now,
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to log oracle event {result.event_id}: {e}")
            raise DownstreamError("Oracle processing failed") from e
