# Routes package init
"""
QuickNotes Backend — API Routes Package
=========================================

Route Inventory:
    - notes.py:   GET    /api/notes             (list notes)
                  POST   /api/notes             (create note)
                  PATCH  /api/notes/{id}        (update note)
                  DELETE /api/notes/{id}        (delete note)
                  GET    /api/status/mongodb    (connectivity probe)
    - health.py:  GET    /health                (service health check)

Routes stay thin: extract input, call the service, shape the response.
"""
