"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in hunter.schemas.schemas; the wire format is camelCase.
"""
