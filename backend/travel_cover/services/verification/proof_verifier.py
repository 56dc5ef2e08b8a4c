"""
Proof verification capability.

The session store never decides trust itself; it asks a ProofVerifier.
HttpProofVerifier talks to the external verification service,
StaticProofVerifier is the stand-in for development and tests.
"""
import logging
from functools import lru_cache
from typing import Any

import requests

from ...config import Settings
from ...errors import DownstreamError

logger = logging.getLogger(__name__)


class ProofVerifier:
    """Interface: decide whether an opaque proof blob is valid."""

    def verify(self, proof: Any) -> bool:
        raise NotImplementedError


class StaticProofVerifier(ProofVerifier):
    """Returns a fixed answer. Never selected in production."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls = []

    def verify(self, proof: Any) -> bool:
        self.calls.append(proof)
        return self.result


class HttpProofVerifier(ProofVerifier):
    """
    Posts the proof to the verification service.

    The service answers with {"valid": <bool>}. Transport failures and
    malformed answers raise DownstreamError; only an explicit `true` is
    accepted as valid.
    """

    def __init__(self, url: str, timeout: float = 10.0, session: requests.Session = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def verify(self, proof: Any) -> bool:
        try:
            response = self.session.post(self.url, json={"proof": proof}, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Proof verification request failed: {e}")
            raise DownstreamError("Proof verification service unavailable") from e

        if not isinstance(body, dict):
            raise DownstreamError("Proof verification service returned an invalid response")
        return body.get("valid") is True


@lru_cache(maxsize=None)
def _http_proof_verifier(url: str, timeout: float) -> HttpProofVerifier:
    return HttpProofVerifier(url, timeout=timeout)


def get_proof_verifier(settings: Settings) -> ProofVerifier:
    """Pick the verifier for this deployment. The HTTP verifier is shared per URL."""
    if settings.proof_verifier_url:
        return _http_proof_verifier(settings.proof_verifier_url, settings.proof_verifier_timeout)
    if settings.is_production:
        raise ValueError("PROOF_VERIFIER_URL is required in production")
    logger.warning("No PROOF_VERIFIER_URL configured, accepting all proofs")
    return StaticProofVerifier(True)
