"""
Payout thresholds for oracle events.

Each recognized event type has exactly one rule evaluated on its payload.
Unrecognized event types never trigger.
"""
from typing import Any, Dict, Optional

from ...models.db_models import OracleEventType


FLIGHT_DELAY_THRESHOLD_MINUTES = 120
SEVERE_WEATHER_LEVEL = "high"
CRITICAL_EMERGENCY_LEVEL = "critical"


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _flight_delay(event_data: Dict[str, Any]) -> bool:
    delay = _as_number(event_data.get("delayMinutes"))
    return delay is not None and delay > FLIGHT_DELAY_THRESHOLD_MINUTES


def _extreme_weather(event_data: Dict[str, Any]) -> bool:
    return event_data.get("severity") == SEVERE_WEATHER_LEVEL


def _health_emergency(event_data: Dict[str, Any]) -> bool:
    return event_data.get("emergencyLevel") == CRITICAL_EMERGENCY_LEVEL


THRESHOLD_RULES = {
    OracleEventType.FLIGHT_DELAY: _flight_delay,
    OracleEventType.EXTREME_WEATHER: _extreme_weather,
    OracleEventType.HEALTH_EMERGENCY: _health_emergency,
}


def evaluate_threshold(event_type: Any, event_data: Any) -> bool:
    """Whether an event crosses its payout threshold."""
    parsed = OracleEventType.parse(event_type)
    if parsed is None or not isinstance(event_data, dict):
        return False
    return THRESHOLD_RULES[parsed](event_data)
