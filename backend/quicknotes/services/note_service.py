"""
QuickNotes Backend — Note Service (CRUD Operations)
=====================================================

What:  The four note operations: list, create, update, delete.
How:   Each call walks the same path and stops at the first failure:

           received → validated → store operation → mapped → returned

       Validation is synchronous and happens before the collection is even
       requested, so bad input never costs a round trip.
Who:   Called by the route handlers in routes/notes.py with the
       application's ConnectionManager.

Error Handling Strategy:
    - ValidationError / NotFoundError / ConfigurationError /
      StoreConnectionError propagate unchanged.
    - Anything else raised by the driver is logged with its traceback and
      replaced by OperationFailedError, whose message is generic.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from quicknotes.database import NOTE_LIST_SORT, ConnectionManager
from quicknotes.exceptions import NotFoundError, OperationFailedError, QuickNotesError
from quicknotes.models.note import new_note_document
from quicknotes.schemas.note import DeleteNoteResponse, Note, document_to_note
from quicknotes.services.validation import (
    validate_create_input,
    validate_delete_input,
    validate_update_input,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds, the precision BSON keeps."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _object_id(note_id: str) -> ObjectId:
    # A string that is not an ObjectId cannot match any document
    try:
        return ObjectId(note_id)
    except (InvalidId, TypeError):
        raise NotFoundError(resource="note", resource_id=note_id) from None


class NoteService:
    """
    Business logic layer for note operations.

    Stateless apart from the clock; the connection is passed in on every
    call so one instance serves every request.

    Args:
        clock: Returns the current time. Tests substitute a controlled clock.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    async def list_notes(self, connection: ConnectionManager) -> List[Note]:
        """
        Every note, most recently updated first.

        Ties on updatedAt keep insertion order. An empty collection yields
        an empty list.
        """
        try:
            collection = await connection.notes_collection()
            documents = await collection.find({}).sort(NOTE_LIST_SORT).to_list(length=None)
            return [document_to_note(doc) for doc in documents]
        except QuickNotesError:
            raise
        except Exception as e:
            logger.error("Error fetching notes: %s", str(e), exc_info=True)
            raise OperationFailedError(
                message="Failed to fetch notes",
                context={"error_type": type(e).__name__},
            ) from e

    async def create_note(self, connection: ConnectionManager, data: Any) -> Note:
        """
        Validate, insert, then re-read the inserted document.

        The re-read returns the authoritative stored form (millisecond
        timestamps, driver-assigned _id) rather than an echo of the input.

        Raises:
            ValidationError: title/content out of bounds.
            OperationFailedError: insert failed, or the new document
                could not be read back.
        """
        payload = validate_create_input(data)
        now = self.clock()
        document = new_note_document(payload.title, payload.content, now)

        try:
            collection = await connection.notes_collection()
            result = await collection.insert_one(document)
            created = await collection.find_one({"_id": result.inserted_id})
            if created is None:
                logger.error(
                    "Note %s inserted but could not be retrieved", result.inserted_id
                )
                raise OperationFailedError(
                    message="Failed to create note",
                    context={"note_id": str(result.inserted_id)},
                )
            logger.info("Created note %s", created["_id"])
            return document_to_note(created)
        except QuickNotesError:
            raise
        except Exception as e:
            logger.error("Error creating note: %s", str(e), exc_info=True)
            raise OperationFailedError(
                message="Failed to create note",
                context={"error_type": type(e).__name__},
            ) from e

    async def update_note(self, connection: ConnectionManager, data: Any) -> Note:
        """
        Apply the supplied fields and refresh updatedAt in one atomic call.

        updatedAt always moves, even when title and content are unchanged:
        it means "last touched". The post-update document comes back from
        the same find-and-update, so there is no second read.

        Raises:
            ValidationError: missing id, or a supplied field is out of bounds.
            NotFoundError: no note has this id.
            OperationFailedError: the store call failed.
        """
        payload = validate_update_input(data)
        fields = payload.changes()
        fields["updatedAt"] = self.clock()

        try:
            collection = await connection.notes_collection()
            object_id = _object_id(payload.id)
            updated = await collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except QuickNotesError:
            raise
        except Exception as e:
            logger.error("Error updating note %s: %s", payload.id, str(e), exc_info=True)
            raise OperationFailedError(
                message="Failed to update note",
                context={"note_id": payload.id, "error_type": type(e).__name__},
            ) from e

        if updated is None:
            raise NotFoundError(resource="note", resource_id=payload.id)

        logger.info("Updated note %s (%s)", payload.id, ", ".join(sorted(fields)))
        return document_to_note(updated)

    async def delete_note(
        self, connection: ConnectionManager, data: Any
    ) -> DeleteNoteResponse:
        """
        Hard-delete one note.

        Raises:
            ValidationError: missing id.
            NotFoundError: nothing was deleted.
            OperationFailedError: the store call failed.
        """
        payload = validate_delete_input(data)

        try:
            collection = await connection.notes_collection()
            object_id = _object_id(payload.id)
            result = await collection.delete_one({"_id": object_id})
        except QuickNotesError:
            raise
        except Exception as e:
            logger.error("Error deleting note %s: %s", payload.id, str(e), exc_info=True)
            raise OperationFailedError(
                message="Failed to delete note",
                context={"note_id": payload.id, "error_type": type(e).__name__},
            ) from e

        if result.deleted_count == 0:
            raise NotFoundError(resource="note", resource_id=payload.id)

        logger.info("Deleted note %s", payload.id)
        return DeleteNoteResponse(success=True)


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
