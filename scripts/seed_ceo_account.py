#!/usr/bin/env python3
"""
Seed the CEO account.
Registers CEO_EMAIL (the provisioning hook gives it the ceo role) and makes sure
the default sectors exist.

Usage: CEO_PASSWORD=... python scripts/seed_ceo_account.py
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from app import create_app, seed_default_sectors
from models import db, User, Profile
from services.identity_service import get_identity_service


def seed_ceo_account(password=None, full_name="CEO"):
    app = create_app()

    with app.app_context():
        db.create_all()
        added = seed_default_sectors()
        if added:
            print(f"✅ Added {added} default sectors")

        email = app.config["CEO_EMAIL"].strip().lower()
        existing_user = db.session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

        if existing_user:
            profile = db.session.get(Profile, existing_user.id)
            role = profile.role.value if profile else "no profile"
            print(f"✅ CEO account already exists (ID: {existing_user.id}, role: {role})")
            return existing_user

        password = password or os.getenv("CEO_PASSWORD")
        if not password:
            raise SystemExit("CEO_PASSWORD is not set")

        user = get_identity_service().create_account(email, password, full_name)
        profile = db.session.get(Profile, user.id)

        print("✅ CEO account created successfully!")
        print(f"   ID: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Role: {profile.role.value}")
        return user


if __name__ == '__main__':
    try:
        seed_ceo_account()
    except Exception as e:
        print(f"❌ Error seeding CEO account: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
