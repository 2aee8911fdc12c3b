# Middleware package init
"""
Card Service — Middleware Package
===================================

Middleware Chain:
    Request → [Request ID] → [Access Logging] → Route Handler

The request id is assigned first so the access line can carry it.
"""
