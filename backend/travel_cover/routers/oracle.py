"""
Oracle Events API Router

Receives event notifications from the oracle network. Every event is logged;
events that cross their threshold pay out the matching active policies.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..errors import DownstreamError
from ..services.oracle import OracleEventIngestor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oracle-events", tags=["oracle"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class OracleEventRequest(BaseModel):
    """Oracle event notification."""
    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., alias="eventType", description="flight_delay, extreme_weather, health_emergency, ...")
    event_data: Optional[Dict[str, Any]] = Field(default=None, alias="eventData", description="Event payload")


class OracleEventResponse(BaseModel):
    """Result of ingesting an oracle event."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    payout_triggered: bool = Field(..., alias="payoutTriggered")


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("", response_model=OracleEventResponse)
async def ingest_oracle_event(
    request: OracleEventRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Ingest an oracle event.

    Unrecognized event types are logged and never trigger a payout.
    Individual payout failures do not fail the request.
    """
    ingestor = OracleEventIngestor(db, deadline_seconds=settings.oracle_deadline_seconds)

    try:
        result = ingestor.ingest(request.event_type, request.event_data)
    except DownstreamError as e:
        logger.error(f"Oracle monitoring error: {e}")
        raise HTTPException(status_code=500, detail="Oracle processing failed")

    return OracleEventResponse(success=True, payout_triggered=result.payout_triggered)
