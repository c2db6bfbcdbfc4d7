"""
QuickNotes Backend — Database Initialization Command
======================================================

What:  Prepares a MongoDB database for the notes service.
How:   1. Connect (retrying while the server is still coming up)
       2. Create the notes indexes
       3. Seed a few welcome notes if the collection is empty
       4. Close the connection
Run:   quicknotes-init-db [--no-seed]
       python -m quicknotes.init_db [--no-seed]

Exit status is 0 on success and 1 on any failure.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from quicknotes.config import settings
from quicknotes.database import ConnectionManager, ensure_indexes
from quicknotes.exceptions import ConnectionErrorKind, QuickNotesError, StoreConnectionError
from quicknotes.models.note import new_note_document
from quicknotes.services.note_service import utc_now

logger = logging.getLogger(__name__)

# Failures worth waiting out; bad credentials or a malformed URI are not
_TRANSIENT_KINDS = {
    ConnectionErrorKind.UNREACHABLE,
    ConnectionErrorKind.TIMEOUT,
    ConnectionErrorKind.GENERIC,
}

SAMPLE_NOTES = [
    (
        "Welcome to QuickNotes!",
        "This is your first note. You can edit or delete it, or create new ones.\n\n"
        "Key features:\n"
        "• Create, read, update, delete notes\n"
        "• Notes sorted by last update\n"
        "• Stored in MongoDB",
    ),
    (
        "About This App",
        "This application demonstrates:\n\n"
        "• Validated note operations behind a FastAPI backend\n"
        "• The async MongoDB driver (no ORM)\n"
        "• A small, cached connection pool for short-lived instances",
    ),
    (
        "Quick Tips",
        "1. Notes are sorted by last updated\n"
        "2. Editing a note moves it to the top\n"
        "3. Titles are limited to 200 characters\n"
        "4. Content is limited to 10,000 characters",
    ),
]


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, StoreConnectionError) and error.kind in _TRANSIENT_KINDS


@retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(settings.retry_max_attempts),
    # min_wait * 2^(attempt - 1), capped at max_wait, plus up to 1s of jitter
    wait=wait_exponential(multiplier=settings.retry_min_wait, max=settings.retry_max_wait)
    + wait_random(0, 1),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def wait_for_store(connection: ConnectionManager) -> AsyncIOMotorCollection:
    """Open the connection, retrying transient failures with backoff."""
    return await connection.notes_collection()


async def seed_sample_notes(collection: AsyncIOMotorCollection) -> int:
    """Insert the sample notes into an empty collection. Returns the count inserted."""
    count = await collection.count_documents({})
    if count:
        logger.info("Database already contains %d notes; not seeding", count)
        return 0

    documents = [new_note_document(title, content, utc_now()) for title, content in SAMPLE_NOTES]
    await collection.insert_many(documents)
    logger.info("Added %d sample notes", len(documents))
    return len(documents)


async def initialize_database(connection: ConnectionManager, seed: bool = True) -> dict:
    """
    Create indexes and optionally seed. Always closes the connection.

    Returns:
        {"indexes": [...index names...], "seeded": <notes inserted>}
    """
    try:
        collection = await wait_for_store(connection)
        logger.info(
            "Connected to MongoDB (database=%s, collection=%s)",
            connection.db_name,
            connection.collection_name,
        )
        indexes = await ensure_indexes(collection)
        seeded = await seed_sample_notes(collection) if seed else 0
        return {"indexes": indexes, "seeded": seeded}
    finally:
        await connection.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quicknotes-init-db",
        description="Create MongoDB indexes for QuickNotes and seed sample notes.",
    )
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="only create indexes, never insert sample notes",
    )
    args = parser.parse_args(argv)

    from quicknotes.main import setup_logging

    setup_logging()
    connection = ConnectionManager.from_settings(settings)
    try:
        summary = asyncio.run(initialize_database(connection, seed=not args.no_seed))
    except QuickNotesError as e:
        logger.error("Database initialization failed: %s", e.message)
        return 1
    except Exception:
        logger.exception("Database initialization failed")
        return 1

    logger.info(
        "Database initialization complete (indexes: %s, sample notes: %d)",
        ", ".join(summary["indexes"]),
        summary["seeded"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
