"""Error types and classification for structured error handling.

Nothing raised by the evidence collaborators is fatal to the host:
query failures degrade to "no suggestions" and audit failures are
swallowed. Classification only decides what goes into the log line
(transient outage vs. broken request), so operators can tell a flaky
evidence store from a bad caller.
"""

from __future__ import annotations

import asyncio
from enum import Enum


class EvidenceGateError(Exception):
    """Base class for errors raised by this package."""


class UnknownStorageTierError(EvidenceGateError):
    """Storage tier label has no precision mapping (strict mode only)."""

    def __init__(self, label: str) -> None:
        super().__init__(f"unknown storage tier: {label!r}")
        self.label = label


class InvalidBoundingBoxError(EvidenceGateError):
    """Bounding box or page dimensions cannot be mapped."""


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, connection errors
    SERVER = "server"  # 500, 502, 503
    TIMEOUT = "timeout"  # deadline exceeded
    CLIENT = "client"  # 400, 401, 403, 404
    UNKNOWN = "unknown"


def classify_error(error: BaseException) -> ErrorClass:
    """Classify an error coming back from an evidence collaborator.

    Checks structured attributes first (status_code), then exception
    types, and falls back to string matching for untyped exceptions.
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorClass.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorClass.TRANSIENT

    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "connection" in msg or "unreachable" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("400", "401", "403", "404")):
        return ErrorClass.CLIENT

    return ErrorClass.UNKNOWN
