# Routes package init
"""
NoteBridge Backend - Routes Package
====================================

Route Inventory:
    - notes.py:   GET    /notes                  (notes page with folders)
                  POST   /notes                  (create note)
                  PUT    /notes/{id}             (update note)
                  DELETE /notes/{id}             (delete note)
                  POST   /notes/{id}/files       (upload and attach a file)
    - files.py:   GET    /storage/{path}         (local storage driver only)
    - health.py:  GET    /health                 (service health check)

Routes stay THIN: they read the request, call a service, and turn the outcome
into a page payload, a redirect with a flash message, or upload JSON.
"""
