"""
Identity Verification Services

Session tracking and the pluggable proof verifier.
"""

from .proof_verifier import ProofVerifier, HttpProofVerifier, StaticProofVerifier, get_proof_verifier
from .session_store import VerificationSessionStore, VerificationStatus, STATUS_NOT_STARTED

__all__ = [
    'ProofVerifier',
    'HttpProofVerifier',
    'StaticProofVerifier',
    'get_proof_verifier',
    'VerificationSessionStore',
    'VerificationStatus',
    'STATUS_NOT_STARTED',
]
