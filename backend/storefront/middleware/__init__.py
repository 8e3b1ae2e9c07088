# Middleware package init
"""
Storefront Backend — Middleware Package
=========================================

What:  Per-request concerns shared by every route.

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    The request ID is assigned first so the access log line and every log
    record emitted while handling the request can carry it. Responses travel
    back through the same chain in reverse, which is where the access log
    measures duration and the X-Request-ID header is attached.
"""
