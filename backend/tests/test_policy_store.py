"""
Tests for the policy store: purchase, lookup and duration parsing.
"""
from datetime import datetime, timedelta

import pytest

from travel_cover.errors import NotFoundError, ValidationError
from travel_cover.models.db_models import PolicyStatus, PolicyType
from travel_cover.services.policies import PolicyStore, parse_duration


START = datetime(2026, 1, 31, 12, 0, 0)


class TestParseDuration:

    def test_days(self):
        assert parse_duration("14 days", START) == START + timedelta(days=14)

    def test_single_month_clamps_to_month_end(self):
        assert parse_duration("1 month", START) == datetime(2026, 2, 28, 12, 0, 0)

    def test_years(self):
        assert parse_duration("2 Years", START) == datetime(2028, 1, 31, 12, 0, 0)

    @pytest.mark.parametrize("duration", [None, "", "forever", "a week"])
    def test_unparseable_defaults_to_30_days(self, duration):
        assert parse_duration(duration, START) == START + timedelta(days=30)


class TestPolicyStore:

    def test_create_lowercases_address_and_starts_active(self, db_session):
        policy = PolicyStore(db_session).create(
            user_address="0xABCDEF",
            policy_type=PolicyType.BAGGAGE,
            premium_amount=12.5,
            payout_amount=300.0,
            duration="7 days",
            now=START,
        )

        assert policy.user_address == "0xabcdef"
        assert policy.status == PolicyStatus.ACTIVE
        assert policy.expires_at == START + timedelta(days=7)
        assert policy.claim_amount is None

    @pytest.mark.parametrize("premium, payout", [(0, 100.0), (10.0, -1.0), (None, 100.0)])
    def test_create_rejects_non_positive_amounts(self, db_session, premium, payout):
        with pytest.raises(ValidationError):
            PolicyStore(db_session).create(
                user_address="0xabc",
                policy_type=PolicyType.TRAVEL,
                premium_amount=premium,
                payout_amount=payout,
            )

    def test_create_requires_address(self, db_session):
        with pytest.raises(ValidationError):
            PolicyStore(db_session).create(
                user_address="",
                policy_type=PolicyType.TRAVEL,
                premium_amount=10.0,
                payout_amount=100.0,
            )

    def test_get_unknown_policy_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            PolicyStore(db_session).get("missing")

    def test_list_for_user_is_case_insensitive_and_newest_first(self, db_session, make_policy):
        base = datetime.utcnow() - timedelta(days=2)
        older = make_policy(user_address="0xowner", created_at=base)
        newer = make_policy(user_address="0xowner", created_at=base + timedelta(days=1))
        make_policy(user_address="0xsomeoneelse")

        policies = PolicyStore(db_session).list_for_user("0xOWNER")

        assert [p.id for p in policies] == [newer.id, older.id]

    def test_claim_if_active_only_once(self, db_session, make_policy):
        policy = make_policy()
        store = PolicyStore(db_session)
        now = datetime.utcnow()

        assert store.claim_if_active(policy, now) is True
        assert store.claim_if_active(policy, now) is False
        db_session.commit()
