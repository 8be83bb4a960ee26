# Middleware package init
"""
NoteBridge Backend - Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [Session] → [CORS] → Route Handler

    - Request ID: correlation ID shared by every log line of a request
    - Logging:    method, path, status and duration of each request
    - Session:    Starlette signed-cookie session that carries flash messages
"""
