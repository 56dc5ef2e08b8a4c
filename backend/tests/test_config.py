"""
Tests for settings loading and token handling.
"""
import dataclasses

import pytest

from travel_cover.auth import create_access_token, decode_token
from travel_cover.config import CELO_ALFAJORES, CELO_MAINNET, load_settings


PRODUCTION_ENV = {
    "APP_ENV": "production",
    "DATABASE_URL": "postgresql://cover@db:5432/travel_cover",
    "PROOF_VERIFIER_URL": "https://verifier.example/check",
    "JWT_SECRET_KEY": "a-real-secret",
}


class TestLoadSettings:

    def test_defaults_to_development_on_testnet(self):
        settings = load_settings({})

        assert settings.environment == "development"
        assert settings.network is CELO_ALFAJORES
        assert settings.database_url.startswith("sqlite")
        assert settings.oracle_deadline_seconds == 10.0

    def test_production_selects_mainnet(self):
        settings = load_settings(PRODUCTION_ENV)

        assert settings.is_production
        assert settings.network is CELO_MAINNET
        assert settings.network.chain_id == 42220
        assert settings.database_url == PRODUCTION_ENV["DATABASE_URL"]

    @pytest.mark.parametrize("missing", ["PROOF_VERIFIER_URL", "JWT_SECRET_KEY"])
    def test_production_requires_secrets(self, missing):
        env = {k: v for k, v in PRODUCTION_ENV.items() if k != missing}
        with pytest.raises(ValueError):
            load_settings(env)

    def test_unknown_environment_is_rejected(self):
        with pytest.raises(ValueError):
            load_settings({"APP_ENV": "staging"})

    def test_settings_are_immutable(self):
        settings = load_settings({})
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.environment = "production"

    def test_callback_url_is_built_from_app_url(self):
        settings = load_settings({"APP_URL": "https://cover.example/"})
        assert settings.callback_url == "https://cover.example/verification/callback"

    def test_numeric_overrides(self):
        settings = load_settings({"ORACLE_DEADLINE_SECONDS": "2.5", "PROOF_VERIFIER_TIMEOUT": "4"})
        assert settings.oracle_deadline_seconds == 2.5
        assert settings.proof_verifier_timeout == 4.0


class TestTokens:

    def test_round_trip_keeps_subject_and_role(self):
        settings = load_settings({})
        payload = decode_token(settings, create_access_token(settings, "0xabc", "admin"))

        assert payload["sub"] == "0xabc"
        assert payload["role"] == "admin"

    def test_token_signed_with_other_secret_is_rejected(self):
        issuer = load_settings({"JWT_SECRET_KEY": "one"})
        verifier = load_settings({"JWT_SECRET_KEY": "two"})

        assert decode_token(verifier, create_access_token(issuer, "0xabc")) is None
