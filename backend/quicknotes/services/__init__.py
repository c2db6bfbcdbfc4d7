# Services package init
"""
QuickNotes Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and MongoDB.
How:   Services accept raw caller input and a ConnectionManager, validate,
       talk to the store and return client-facing schemas.

Service Inventory:
    - validation: untyped input → CreateNoteInput / UpdateNoteInput / DeleteNoteInput
    - NoteService: list, create, update and delete notes
"""
