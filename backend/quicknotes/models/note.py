"""
QuickNotes Backend — Persisted Note Document
==============================================

What:  Shape of a note as stored in the MongoDB `notes` collection.
How:   A TypedDict describing the BSON document; Motor hands these back as
       plain dicts, so the type is for readers and type checkers only.
Who:   Built by NoteService on create, read back by the mapper.

Document layout:
    {
        "_id":       ObjectId,   assigned by the driver on insert, never reused
        "title":     str,        1..200 characters
        "content":   str,        0..10000 characters
        "createdAt": datetime,   set once at creation (UTC)
        "updatedAt": datetime,   refreshed on every successful mutation (UTC)
    }

Invariant: createdAt <= updatedAt. The collection itself enforces nothing;
the validation layer and NoteService keep documents in this shape.

Indexes (created by `quicknotes-init-db`, see database.NOTE_INDEXES):
    updatedAt DESC, createdAt DESC, text(title, content)
"""

from datetime import datetime
from typing import TypedDict

from bson import ObjectId


class NewNoteDocument(TypedDict):
    """A note document before insert (no `_id` yet)."""

    title: str
    content: str
    createdAt: datetime
    updatedAt: datetime


class NoteDocument(NewNoteDocument):
    """A note document as read back from the store."""

    _id: ObjectId


def new_note_document(title: str, content: str, now: datetime) -> NewNoteDocument:
    """Build a fresh document; one timestamp is used for both fields."""
    return {
        "title": title,
        "content": content,
        "createdAt": now,
        "updatedAt": now,
    }
