#!/usr/bin/env python3
"""
Demo Policy Seed Script
Creates one active policy of each oracle-covered type for a wallet.

Usage:
    python -m scripts.seed_policies <wallet_address> [duration]

Example:
    python -m scripts.seed_policies 0xAbC0000000000000000000000000000000000001 "30 days"
"""
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from travel_cover.database import SessionLocal, init_db
from travel_cover.errors import ValidationError
from travel_cover.models.db_models import PolicyType
from travel_cover.services.policies import PolicyStore


DEMO_POLICIES = [
    # (type, premium, payout, conditions)
    (PolicyType.TRAVEL, 15.0, 400.0, "Flight delayed more than 2 hours"),
    (PolicyType.WEATHER, 10.0, 250.0, "High severity weather at destination"),
    (PolicyType.MEDICAL, 30.0, 1500.0, "Critical health emergency while travelling"),
]


def seed_policies(wallet_address: str, duration: str) -> bool:
    """Create the demo policies for a wallet."""
    # Ensure tables exist
    init_db()

    db: Session = SessionLocal()
    try:
        store = PolicyStore(db)
        for policy_type, premium, payout, conditions in DEMO_POLICIES:
            policy = store.create(
                user_address=wallet_address,
                policy_type=policy_type,
                premium_amount=premium,
                payout_amount=payout,
                duration=duration,
                conditions=conditions,
            )
            print(f"Created {policy_type.value} policy {policy.id} (payout {payout}, expires {policy.expires_at})")
        return True

    except (ValidationError, SQLAlchemyError) as e:
        print(f"Error seeding policies: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def main():
    if len(sys.argv) not in (2, 3):
        print(__doc__)
        sys.exit(1)

    wallet_address = sys.argv[1]
    duration = sys.argv[2] if len(sys.argv) == 3 else "30 days"

    # Basic validation
    if not wallet_address.startswith("0x"):
        print("Error: Wallet address must start with 0x.")
        sys.exit(1)

    success = seed_policies(wallet_address, duration)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
