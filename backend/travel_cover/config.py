"""
Travel Cover - Runtime Configuration

Settings are read from the environment once and frozen. The environment tag
(APP_ENV) selects the chain network; nothing downstream branches on a
testnet flag.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional


DEFAULT_JWT_SECRET = "travel-cover-secret-key-change-in-production"

ENVIRONMENTS = ("development", "test", "production")


@dataclass(frozen=True)
class NetworkConfig:
    """Chain network and the contract addresses deployed on it."""
    name: str
    chain_id: int
    rpc_url: str
    block_explorer: str
    stablecoins: Dict[str, str] = field(default_factory=dict)
    contracts: Dict[str, str] = field(default_factory=dict)


_UNDEPLOYED = "0x0000000000000000000000000000000000000000"

CELO_MAINNET = NetworkConfig(
    name="Celo Mainnet",
    chain_id=42220,
    rpc_url="https://forno.celo.org",
    block_explorer="https://celoscan.io",
    stablecoins={
        "cUSD": "0x765DE816845861e75A25fCA122bb6898B8B1282a",
        "cEUR": "0xD8763CBa276a3738E6DE85b4b3bF5FDed6D6cA73",
    },
    contracts={
        "identityVerifier": _UNDEPLOYED,
        "insurancePolicy": _UNDEPLOYED,
        "insuranceOracle": _UNDEPLOYED,
    },
)

CELO_ALFAJORES = NetworkConfig(
    name="Celo Alfajores Testnet",
    chain_id=44787,
    rpc_url="https://alfajores-forno.celo-testnet.org",
    block_explorer="https://alfajores.celoscan.io",
    stablecoins={
        "cUSD": "0x874069Fa1Eb16D44d622F2e0Ca25eeA172369bC1",
        "cEUR": "0x10c892A6EC43a53E45D0B916B4b7D383B1b78C0F",
    },
    contracts={
        "identityVerifier": _UNDEPLOYED,
        "insurancePolicy": _UNDEPLOYED,
        "insuranceOracle": _UNDEPLOYED,
    },
)

NETWORKS_BY_ENVIRONMENT = {
    "development": CELO_ALFAJORES,
    "test": CELO_ALFAJORES,
    "production": CELO_MAINNET,
}


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""
    environment: str
    network: NetworkConfig
    database_url: str
    app_url: str = "http://localhost:8001"
    verification_base_url: str = "https://self.id/verify"
    verification_scope: str = "insurance-protocol"
    proof_verifier_url: Optional[str] = None
    proof_verifier_timeout: float = 10.0
    oracle_deadline_seconds: float = 10.0
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def callback_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/verification/callback"


def _default_database_url(environment: str) -> str:
    if environment == "production":
        return f"postgresql://{os.getenv('USER', 'postgres')}@localhost:5432/travel_cover"
    return "sqlite:///./travel_cover.db"


def load_settings(env: Optional[Dict[str, str]] = None) -> Settings:
    """
    Build Settings from an environment mapping (defaults to os.environ).

    Raises:
        ValueError: unknown APP_ENV, or a production environment missing
            the proof verifier URL or still using the default JWT secret.
    """
    env = os.environ if env is None else env

    environment = env.get("APP_ENV", "development").strip().lower()
    if environment not in ENVIRONMENTS:
        raise ValueError(f"Unknown APP_ENV '{environment}'. Must be one of: {list(ENVIRONMENTS)}")

    settings = Settings(
        environment=environment,
        network=NETWORKS_BY_ENVIRONMENT[environment],
        database_url=env.get("DATABASE_URL") or _default_database_url(environment),
        app_url=env.get("APP_URL", "http://localhost:8001"),
        verification_base_url=env.get("VERIFICATION_BASE_URL", "https://self.id/verify"),
        verification_scope=env.get("VERIFICATION_SCOPE", "insurance-protocol"),
        proof_verifier_url=env.get("PROOF_VERIFIER_URL") or None,
        proof_verifier_timeout=float(env.get("PROOF_VERIFIER_TIMEOUT", "10")),
        oracle_deadline_seconds=float(env.get("ORACLE_DEADLINE_SECONDS", "10")),
        jwt_secret_key=env.get("JWT_SECRET_KEY", DEFAULT_JWT_SECRET),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )

    if settings.is_production:
        if not settings.proof_verifier_url:
            raise ValueError("PROOF_VERIFIER_URL is required in production")
        if settings.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set in production")

    return settings


@lru_cache
def get_settings() -> Settings:
    """Dependency for FastAPI - process-wide settings."""
    return load_settings()
