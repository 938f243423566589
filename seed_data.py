#!/usr/bin/env python3
"""
Seed a fresh Gazette database.

Creates the tables, inserts the default categories and, when an email is
given, grants the administrator role to that (already registered) account.

Usage: python3 seed_data.py [admin-email]
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent / "backend"))

from gazette.core.database import Base, SessionLocal, engine
from gazette.core.errors import NotFound
from gazette.services.accounts import AccountService
from gazette.services.seeding import seed_categories
import gazette.models  # noqa: F401


def main(argv):
    print("🔌 Connecting to database...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        added = seed_categories(db)
        if added:
            print(f"✓ Added {len(added)} categories: {', '.join(added)}")
        else:
            print("⊘ Categories already present")

        if len(argv) > 1:
            email = argv[1]
            try:
                user = AccountService(db).grant_admin(email)
            except NotFound:
                print(f"❌ No account for {email}. Register it first via /inscritpion")
                return 1
            print(f"✓ {user.email} is now an administrator (roles: {', '.join(user.roles)})")
    finally:
        db.close()
        print()
        print("✓ Database connection closed")

    return 0


if __name__ == "__main__":
    print("=" * 60)
    print("  Gazette Seed Script")
    print("=" * 60)
    print()

    sys.exit(main(sys.argv))
