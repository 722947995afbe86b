#!/usr/bin/env python3
"""
Create the Wager Desk tables in the configured database.

Uses DATABASE_URL from the environment (or .env); tables that already exist
are left untouched.
"""
import os
import sys

# Add parent directory to path to import wagerdesk modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect
from wagerdesk.core.config import settings
from wagerdesk.core.database import engine, init_db
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    backend = settings.DATABASE_URL.split(":", 1)[0]
    logger.info(f"Initializing {backend} database ({settings.ENVIRONMENT})")

    init_db()

    tables = sorted(inspect(engine).get_table_names())
    logger.info(f"{len(tables)} tables present:")
    for table in tables:
        logger.info(f"  - {table}")

    engine.dispose()


if __name__ == "__main__":
    main()
