"""
QuickNotes Backend — Notes Route Handlers
===========================================

What:  HTTP surface of the four note operations.
How:   Each handler forwards the raw body to NoteService, which validates it.
       Bodies are taken untyped so every malformed body, including a missing
       one or a JSON array, comes back as our 400 validation_error.

Routes:
    GET    /api/notes         → getNotes    (200, list)
    POST   /api/notes         → createNote  (201, note)
    PATCH  /api/notes/{id}    → updateNote  (200, note)
    DELETE /api/notes/{id}    → deleteNote  (200, {"success": true})
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Response

from quicknotes.database import ConnectionManager, get_connection_manager
from quicknotes.schemas.note import (
    ConnectionStatusResponse,
    DeleteNoteResponse,
    ErrorResponse,
    Note,
)
from quicknotes.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

_ERRORS = {
    500: {"description": "Server error", "model": ErrorResponse},
    503: {"description": "Database unavailable", "model": ErrorResponse},
}


@router.get(
    "/notes",
    response_model=List[Note],
    responses=_ERRORS,
    summary="List all notes, most recently updated first",
)
async def get_notes(
    response: Response,
    connection: ConnectionManager = Depends(get_connection_manager),
) -> List[Note]:
    notes = await note_service.list_notes(connection)
    # Notes change under the client at any time
    response.headers["Cache-Control"] = "no-store"
    return notes


@router.post(
    "/notes",
    response_model=Note,
    status_code=201,
    responses={400: {"description": "Invalid input", "model": ErrorResponse}, **_ERRORS},
    summary="Create a note",
)
async def create_note(
    payload: Any = Body(default=None),
    connection: ConnectionManager = Depends(get_connection_manager),
) -> Note:
    return await note_service.create_note(connection, payload)


@router.patch(
    "/notes/{note_id}",
    response_model=Note,
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        **_ERRORS,
    },
    summary="Update a note's title and/or content",
)
async def update_note(
    note_id: str,
    payload: Any = Body(default=None),
    connection: ConnectionManager = Depends(get_connection_manager),
) -> Note:
    if payload is None:
        payload = {}
    if isinstance(payload, dict):
        # The path is authoritative for the id
        payload = {**payload, "id": note_id}
    return await note_service.update_note(connection, payload)


@router.delete(
    "/notes/{note_id}",
    response_model=DeleteNoteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}, **_ERRORS},
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    connection: ConnectionManager = Depends(get_connection_manager),
) -> DeleteNoteResponse:
    return await note_service.delete_note(connection, {"id": note_id})


@router.get(
    "/status/mongodb",
    response_model=ConnectionStatusResponse,
    summary="MongoDB connectivity probe",
    description="Reports whether the store is reachable. Never returns an error status.",
)
async def mongodb_status(
    connection: ConnectionManager = Depends(get_connection_manager),
) -> ConnectionStatusResponse:
    return ConnectionStatusResponse(connected=await connection.check_connection())
