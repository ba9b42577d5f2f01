"""Exception types raised across the chat decoder boundary."""

from __future__ import annotations


class CozeStudioError(Exception):
    """Base exception for cozestudio."""


class TransportError(CozeStudioError):
    """Raised when the network fails during the request or while reading the body."""


class HttpStatusError(CozeStudioError):
    """Raised when the backend answers the initial request with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}".strip()
        super().__init__(f"API request failed: {status}")


class AgentNotFoundError(CozeStudioError):
    """Raised when a chat is dispatched to an agent id nobody knows about."""
