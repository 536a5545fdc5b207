"""
Memos Backend - Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit: abusive clients are turned away before any work is done
    2. Request ID: correlation ID for the access log and error bodies
    3. Logging:    one access line per request, with status and duration

    Responses travel back through the same chain in reverse, which is where
    X-Request-ID is attached and the duration is measured.
"""
