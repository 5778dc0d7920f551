# Middleware package init
"""
NotaryPro Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Access Log] → [CORS] → Route Handler

    1. Rate Limit first: abusive clients are refused before any work,
       including authentication and database access
    2. Request ID: correlation ID stored in a ContextVar, echoed in the
       X-Request-ID response header and in every error body
    3. Access Log: method, path, status and duration on `notarypro.access`
"""
