# Routes package init
"""
Card Service — API Routes Package
===================================

Route Inventory:
    - diagnostics.py: GET    /test              (hardcoded fixture, no store)
    - template.py:    GET    /template/{id}     (HTML detail view)
    - cards.py:       GET    /cards             (list)
                      POST   /cards             (create)
                      GET    /cards/{id}        (fetch one)
                      PUT    /cards/{id}        (overwrite width/height)
                      DELETE /cards/{id}        (delete)

Routes stay thin: read the path id and body, call CardService, return the
result. Errors are raised, not returned; main.py maps them to HTTP.
"""
