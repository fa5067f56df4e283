#!/usr/bin/env python3
"""
Upsert every stored user into Stream.

Run after changing Stream apps or importing users directly into MongoDB:

    pip install -e .
    python scripts/upsert_all_stream_users.py
"""

import logging
from dotenv import load_dotenv

load_dotenv()

from streamify.services.stream_service import upsert_all_stream_users
from streamify.utils.db_setup import get_database_connection, close_mongo_client

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main():
    try:
        count = upsert_all_stream_users(get_database_connection())
        logger.info(f"All {count} users upserted to Stream!")
    finally:
        close_mongo_client()


if __name__ == "__main__":
    main()
