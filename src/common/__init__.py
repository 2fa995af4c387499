"""
Common building blocks for the secure-notes client.

Modules:
- api: async API client with uniform RequestError failures
- models: pydantic boundary types for every endpoint
- links: share-link construction and deep-link resolution
- config: environment-driven client configuration
- log: structlog setup
"""

__all__ = [
    "api",
    "config",
    "links",
    "log",
    "models",
]
