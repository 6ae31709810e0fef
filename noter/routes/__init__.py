# Routes package init
"""
Noter Backend: API Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - home.py:    GET  /               (welcome message)
    - health.py:  GET  /health         (liveness, always 200)
                  GET  /db/health      (database ping, 200 or 503)
    - notes.py:   POST /notes          (create a note)
                  GET  /notes          (list notes, newest first)
                  GET  /notes/{id}     (get one note)

home and /health are bound when the app is built. The database routes
(health.db_router and notes.router) are bound once the Server holds a
connected Database.

Routes stay thin: parse the request, call the repository, pick a status.
"""
