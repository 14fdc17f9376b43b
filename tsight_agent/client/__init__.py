"""TSight server API client."""

from .server_client import AcquireResult, ServerClient

__all__ = [
    "AcquireResult",
    "ServerClient",
]
