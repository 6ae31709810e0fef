# Middleware package init
"""
Noter Backend: Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    1. Request ID: assign the correlation ID and echo it in X-Request-ID
    2. Logging:    announce "METHOD path", then log status and duration
"""
