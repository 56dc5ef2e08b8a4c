"""
Identity Verification API Routes

Start a verification session, receive the verifier's callback, and report
verification status by wallet address or session id.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..services.verification import (
    ProofVerifier,
    VerificationSessionStore,
    get_proof_verifier,
)


router = APIRouter(prefix="/verification", tags=["verification"])


def provide_proof_verifier(settings: Settings = Depends(get_settings)) -> ProofVerifier:
    """Dependency - the configured proof verifier."""
    return get_proof_verifier(settings)


def get_session_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    proof_verifier: ProofVerifier = Depends(provide_proof_verifier),
) -> VerificationSessionStore:
    return VerificationSessionStore(db, settings, proof_verifier)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class StartVerificationRequest(BaseModel):
    """Request to open a verification session."""
    address: Optional[str] = Field(None, description="Wallet address being verified")
    config: Optional[Dict[str, Any]] = Field(None, description="Verifier configuration")


class StartVerificationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    verification_url: str = Field(..., alias="verificationUrl")


class VerificationCallbackRequest(BaseModel):
    """Callback from the external verifier."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")
    proof: Optional[Any] = None
    attributes: Optional[Dict[str, Any]] = None


class VerificationStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    verified_at: Optional[datetime] = Field(None, alias="verifiedAt")
    attributes: Optional[Dict[str, Any]] = None


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("/start", response_model=StartVerificationResponse)
async def start_verification(
    request: StartVerificationRequest,
    store: VerificationSessionStore = Depends(get_session_store),
):
    """Create a PENDING session and the URL the user verifies at."""
    session_id, verification_url = store.start_session(request.address, request.config)
    return StartVerificationResponse(session_id=session_id, verification_url=verification_url)


@router.post("/callback")
def verification_callback(
    request: VerificationCallbackRequest,
    store: VerificationSessionStore = Depends(get_session_store),
):
    """Complete or fail a session depending on the proof."""
    store.complete_session(request.session_id, request.proof, request.attributes)
    return {"success": True}


@router.get("/status", response_model=VerificationStatusResponse, response_model_exclude_none=True)
async def verification_status(
    address: Optional[str] = Query(None),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    store: VerificationSessionStore = Depends(get_session_store),
):
    """Current status. Defaults to not_started when nothing is recorded."""
    result = store.get_status(address=address, session_id=session_id)
    return VerificationStatusResponse(
        status=result.status,
        verified_at=result.verified_at,
        attributes=result.attributes,
    )
