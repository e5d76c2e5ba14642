"""
API layer - FastAPI routes and HTTP concerns for Signflow.

This layer contains:
- FastAPI route definitions
- Request/Response DTOs
- HTTP middleware
- Session cookie authentication

IMPORT RULES:
- CAN import from: application, config
- Reaches infrastructure only through signflow.bootstrap
"""

__all__: list[str] = []
