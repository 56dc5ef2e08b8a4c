"""Travel Cover - Data Models"""
from .db_models import (
    # Enums
    PolicyType, PolicyStatus, OracleEventType, PayoutStatus, VerificationSessionStatus,
    # Tables
    PolicyDB, PayoutDB, OracleEventDB, VerificationSessionDB, UserProfileDB,
)

__all__ = [
    "PolicyType", "PolicyStatus", "OracleEventType", "PayoutStatus", "VerificationSessionStatus",
    "PolicyDB", "PayoutDB", "OracleEventDB", "VerificationSessionDB", "UserProfileDB",
]
