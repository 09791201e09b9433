"""
Database initialization script

Creates every index, then reports document counts and anything still missing:
    python scripts/init_db.py            # create + verify
    python scripts/init_db.py --check    # verify only
"""

import asyncio
import sys
from pathlib import Path
import logging
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from app.db.mongo import connect_to_mongo, close_mongo_connection, get_collection
from app.db.indexes import create_indexes, missing_indexes
from app.models.registry import TABLES

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main(check_only: bool) -> int:
    await connect_to_mongo()

    try:
        if not check_only:
            await create_indexes()

        for spec in TABLES.values():
            count = await get_collection(spec.collection).count_documents({})
            logger.info(f"  {spec.name:<14} {spec.collection:<16} {count} documents")

        missing = await missing_indexes()
        for collection, names in missing.items():
            logger.error(f"❌ {collection}: missing {', '.join(names)}")

        if missing:
            return 1
        logger.info("✅ All indexes present")
        return 0

    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    sys.exit(asyncio.run(main("--check" in sys.argv[1:])))
