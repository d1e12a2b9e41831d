"""Outer surfaces of the optical store.

- ``interface.web``: the REST API (FastAPI app factory and uvicorn runner)
- ``interface.client``: cached API client used by front ends and scripts

Data flow::

    front end ──→ ApiClient ──→ REST API ──→ Storage ──→ dict / SQL table
                 (cache)                                      │
    front end ←── invalidation ←── response ←─────────────────┘
"""
from interface.client import ApiClient, ApiError, QueryCache

__all__ = [
    "ApiClient",
    "ApiError",
    "QueryCache",
]
