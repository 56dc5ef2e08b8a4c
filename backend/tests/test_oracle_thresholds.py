"""
Tests for oracle payout thresholds.

1. flight_delay triggers strictly above 120 minutes
2. extreme_weather triggers only on "high"
3. health_emergency triggers only on "critical"
4. Unrecognized event types never trigger
5. Malformed payloads never trigger
"""
import pytest

from travel_cover.models.db_models import OracleEventType, PolicyType
from travel_cover.services.oracle.thresholds import evaluate_threshold


class TestFlightDelay:

    def test_exactly_120_minutes_does_not_trigger(self):
        assert evaluate_threshold("flight_delay", {"delayMinutes": 120}) is False

    def test_121_minutes_triggers(self):
        assert evaluate_threshold("flight_delay", {"delayMinutes": 121}) is True

    def test_fractional_delay_above_boundary_triggers(self):
        assert evaluate_threshold("flight_delay", {"delayMinutes": 120.5}) is True

    def test_numeric_string_is_compared_as_number(self):
        assert evaluate_threshold("flight_delay", {"delayMinutes": "180"}) is True
        assert evaluate_threshold("flight_delay", {"delayMinutes": "90"}) is False

    @pytest.mark.parametrize("value", [None, "late", True, [200], {"m": 200}])
    def test_non_numeric_delay_does_not_trigger(self, value):
        assert evaluate_threshold("flight_delay", {"delayMinutes": value}) is False

    def test_missing_delay_does_not_trigger(self):
        assert evaluate_threshold("flight_delay", {"flight": "AA1234"}) is False


class TestExtremeWeather:

    def test_high_severity_triggers(self):
        assert evaluate_threshold("extreme_weather", {"severity": "high"}) is True

    @pytest.mark.parametrize("severity", ["low", "medium", "HIGH", "High", "", None])
    def test_other_severities_do_not_trigger(self, severity):
        assert evaluate_threshold("extreme_weather", {"severity": severity}) is False


class TestHealthEmergency:

    def test_critical_triggers(self):
        assert evaluate_threshold("health_emergency", {"emergencyLevel": "critical"}) is True

    def test_low_does_not_trigger(self):
        assert evaluate_threshold("health_emergency", {"emergencyLevel": "low"}) is False


class TestUnrecognizedEvents:

    @pytest.mark.parametrize("event_type", ["earthquake", "flightdelay", "FLIGHT_DELAY", "", None, 42])
    def test_unknown_event_type_never_triggers(self, event_type):
        payload = {"delayMinutes": 999, "severity": "high", "emergencyLevel": "critical"}
        assert evaluate_threshold(event_type, payload) is False

    def test_non_dict_payload_never_triggers(self):
        assert evaluate_threshold("flight_delay", None) is False
        assert evaluate_threshold("flight_delay", [("delayMinutes", 500)]) is False


class TestEventPolicyMapping:

    def test_each_event_type_covers_one_policy_type(self):
        assert OracleEventType.FLIGHT_DELAY.covered_policy_type == PolicyType.TRAVEL
        assert OracleEventType.EXTREME_WEATHER.covered_policy_type == PolicyType.WEATHER
        assert OracleEventType.HEALTH_EMERGENCY.covered_policy_type == PolicyType.MEDICAL

    def test_parse_returns_none_for_unknown(self):
        assert OracleEventType.parse("flight_delay") is OracleEventType.FLIGHT_DELAY
        assert OracleEventType.parse("volcano") is None
