# Middleware package init
"""
SPA Images Backend: Middleware Package
=======================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation id for logs and the X-Request-ID header
    2. Logging: access log line with status and duration
    3. CORS: headers on every response, OPTIONS answered with 204 here

Responses travel back in reverse order, so OPTIONS replies are still
logged and carry a request id.
"""
