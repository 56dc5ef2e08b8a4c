"""
Oracle Services

Event ingestion, payout thresholds and the payout trigger.
"""

from .thresholds import evaluate_threshold
from .payout_trigger import PayoutTrigger
from .event_ingestor import OracleEventIngestor, IngestionResult

__all__ = [
    'evaluate_threshold',
    'PayoutTrigger',
    'OracleEventIngestor',
    'IngestionResult',
]
