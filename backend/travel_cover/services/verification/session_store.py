"""
Verification Session Store

Tracks identity-proof sessions between a wallet and the external verifier.

State machine:
    PENDING -> COMPLETED   (valid proof; the user profile is marked verified)
    PENDING -> FAILED      (invalid proof)
Both outcomes are terminal. Re-verifying requires a new session.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import Settings
from ...errors import ConflictError, DownstreamError, NotFoundError, ValidationError
from ...models.db_models import UserProfileDB, VerificationSessionDB, VerificationSessionStatus
from .proof_verifier import ProofVerifier

logger = logging.getLogger(__name__)


STATUS_NOT_STARTED = "not_started"


@dataclass
class VerificationStatus:
    """Resolved verification status for an address or session."""
    status: str
    verified_at: Optional[datetime] = None
    attributes: Optional[Dict[str, Any]] = None


class VerificationSessionStore:
    """Creates, completes and reports on verification sessions."""

    def __init__(self, db: Session, settings: Settings, proof_verifier: ProofVerifier):
        self.db = db
        self.settings = settings
        self.proof_verifier = proof_verifier

    # =========================================================================
    # START
    # =========================================================================

    def start_session(self, address: Optional[str], config: Optional[Dict[str, Any]] = None) -> Tuple[str, str]:
        """
        Open a PENDING session for a wallet.

        Returns:
            (session_id, verification_url)
        """
        if not address:
            raise ValidationError("Address is required")

        config = config or {}
        session_id = str(uuid4())

        session = VerificationSessionDB(
            id=session_id,
            user_address=address.lower(),
            status=VerificationSessionStatus.PENDING,
            config=config,
            created_at=datetime.utcnow(),
        )
        try:
            self.db.add(session)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create verification session: {e}")
            raise DownstreamError("Failed to create session") from e

        logger.info(f"Verification session {session_id} started for {address.lower()}")
        return session_id, self.build_verification_url(session_id, config)

    def build_verification_url(self, session_id: str, config: Dict[str, Any]) -> str:
        payload = {
            **config,
            "scope": self.settings.verification_scope,
            "callback": self.settings.callback_url,
            "sessionId": session_id,
        }
        return f"{self.settings.verification_base_url}?config={quote(json.dumps(payload), safe='')}"

    # =========================================================================
    # CALLBACK
    # =========================================================================

    def complete_session(
        self,
        session_id: Optional[str],
        proof: Any,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> VerificationSessionDB:
        """
        Apply the verifier's callback to a PENDING session.

        Raises:
            ValidationError: missing fields, or the proof was rejected
            NotFoundError: unknown session
            ConflictError: session already completed or failed
            DownstreamError: verifier or store failure
        """
        if not session_id or proof is None:
            raise ValidationError("Missing required fields")

        session = self._get_session(session_id, "Invalid session")
        if session.status != VerificationSessionStatus.PENDING:
            raise ConflictError(f"Session already {session.status.value}")

        now = datetime.utcnow()

        if not self.proof_verifier.verify(proof):
            self._finish_if_pending(session_id, VerificationSessionStatus.FAILED, now)
            self._commit("Failed to update session")
            logger.info(f"Verification session {session_id} failed: invalid proof")
            raise ValidationError("Invalid proof")

        self._finish_if_pending(session_id, VerificationSessionStatus.COMPLETED, now)

        profile = self._get_or_create_profile(session.user_address)
        profile.verification_status = VerificationSessionStatus.COMPLETED.value
        profile.verification_data = attributes or {}
        profile.verified_at = now
        profile.updated_at = now
        self._commit("Failed to update profile")

        self.db.refresh(session)
        logger.info(f"Verification session {session_id} completed for {session.user_address}")
        return session

    # =========================================================================
    # STATUS
    # =========================================================================

    def get_status(self, address: Optional[str] = None, session_id: Optional[str] = None) -> VerificationStatus:
        """
        Resolve the verification status by address, or by session id.

        A PENDING session reports in_progress; no profile reports not_started.
        """
        if not address and not session_id:
            raise ValidationError("Address or sessionId is required")

        if address:
            wallet = address.lower()
        else:
            session = self._get_session(session_id, "Session not found")
            if session.status == VerificationSessionStatus.PENDING:
                return VerificationStatus(status=VerificationSessionStatus.IN_PROGRESS.value)
            if session.status == VerificationSessionStatus.FAILED:
                return VerificationStatus(status=VerificationSessionStatus.FAILED.value)
            wallet = session.user_address

        profile = self.db.query(UserProfileDB).filter(UserProfileDB.wallet_address == wallet).first()
        if profile is None:
            return VerificationStatus(status=STATUS_NOT_STARTED)

        return VerificationStatus(
            status=profile.verification_status or STATUS_NOT_STARTED,
            verified_at=profile.verified_at,
            attributes=profile.verification_data,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _get_session(self, session_id: str, missing_message: str) -> VerificationSessionDB:
        session = (
            self.db.query(VerificationSessionDB)
            .filter(VerificationSessionDB.id == session_id)
            .first()
        )
        if session is None:
            raise NotFoundError(missing_message)
        return session

    def _finish_if_pending(self, session_id: str, status: VerificationSessionStatus, now: datetime) -> None:
        """
        Move a session out of PENDING, only if it is still PENDING.

        Does not commit. Raises ConflictError when another callback got there first.
        """
        try:
            updated = (
                self.db.query(VerificationSessionDB)
                .filter(
                    VerificationSessionDB.id == session_id,
                    VerificationSessionDB.status == VerificationSessionStatus.PENDING,
                )
                .update(
                    {
                        VerificationSessionDB.status: status,
                        VerificationSessionDB.completed_at: now,
                    },
                    synchronize_session=False,
                )
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update session {session_id}: {e}")
            raise DownstreamError("Failed to update session") from e

        if updated != 1:
            self.db.rollback()
            logger.warning(f"Verification session {session_id} was finished by another callback")
            raise ConflictError("Session already finished")

    def _get_or_create_profile(self, wallet_address: str) -> UserProfileDB:
        profile = (
            self.db.query(UserProfileDB)
            .filter(UserProfileDB.wallet_address == wallet_address)
            .first()
        )
        if profile is None:
            profile = UserProfileDB(id=str(uuid4()), wallet_address=wallet_address)
            self.db.add(profile)
        return profile

    def _commit(self, failure_message: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{failure_message}: {e}")
            raise DownstreamError(failure_message) from e
