"""
Creates (or resets) the admin account

    ADMIN_PASSWORD=... python scripts/create_admin.py

ADMIN_EMAIL defaults to admin@livabhi.com.
"""

import asyncio
import os
import sys
from pathlib import Path
import logging
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from app.core.security import hash_password
from app.db.mongo import connect_to_mongo, close_mongo_connection
from app.services import query_service, user_service

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@livabhi.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")


async def create_admin():
    if not ADMIN_PASSWORD:
        raise ValueError("❌ ADMIN_PASSWORD must be set")

    await connect_to_mongo()

    try:
        hashed = hash_password(ADMIN_PASSWORD)
        existing = await user_service.find_user_by_email(ADMIN_EMAIL)

        if existing:
            logger.info(f"⚠️  Admin with email {ADMIN_EMAIL} already exists, resetting password and role")
            await query_service.update(
                "User",
                {"id": str(existing["_id"])},
                {"password": hashed, "role": "Admin", "status": "Verified", "is_verified": True},
            )
        else:
            await query_service.create(
                "User",
                {
                    "first_name": "Admin",
                    "last_name": "User",
                    "email": ADMIN_EMAIL,
                    "password": hashed,
                    "role": "Admin",
                    "status": "Verified",
                    "is_verified": True,
                },
            )
            logger.info("✅ Admin user created successfully!")

        logger.info(f"\n📧 Email: {ADMIN_EMAIL}")
        logger.info("   Sign in with POST /api/auth/admin-signin")

    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(create_admin())
