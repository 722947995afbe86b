#!/usr/bin/env python3
"""
Seed the demo account.

Creates john@doe.com (password johndoe123) with the default bankroll, or
resets its password if the account already exists.

Usage:
    python scripts/seed_demo_user.py
    python scripts/seed_demo_user.py --email me@example.com --password secret --bankroll 500
"""
import argparse
import os
import sys

# Add parent directory to path to import wagerdesk modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wagerdesk.core.config import settings
from wagerdesk.core.database import SessionLocal, init_db
from wagerdesk.services.auth_service import AuthService
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_EMAIL = "john@doe.com"
DEMO_PASSWORD = "johndoe123"


def main():
    parser = argparse.ArgumentParser(description="Create or reset the demo user")
    parser.add_argument("--email", default=DEMO_EMAIL)
    parser.add_argument("--password", default=DEMO_PASSWORD)
    parser.add_argument("--name", default="John Doe")
    parser.add_argument("--bankroll", type=float, default=settings.DEFAULT_BANKROLL)
    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        user = AuthService(db).upsert_user(args.email, args.password, name=args.name, bankroll=args.bankroll)
        logger.info(f"Seeded user {user.email} (id={user.id}, bankroll=${user.current_bankroll:,.2f})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
