"""
Error taxonomy for cluster management operations.

Every failed operation ends as exactly one of:

- ManagementTimeoutError: the caller's deadline elapsed (the request may still run server-side)
- TransportError: the cluster could not be reached or answered with a protocol error
- DecodeError: the response could not be turned into the expected shape
- BucketAlreadyExistsError: insert targeted a name that is already taken
- BucketNotFoundError: the operation referenced a bucket that does not exist
"""

import asyncio
import concurrent.futures
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError


class ClusterManagerError(Exception):
    """Base exception for cluster management operations."""

    code = "CLUSTER_MANAGER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        target: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.target = target
        self.details = details or {}

    def annotate(self, operation: str, target: Optional[str] = None) -> "ClusterManagerError":
        """Fill in operation and target if they are not known yet. Returns self."""
        if self.operation is None:
            self.operation = operation
        if self.target is None and target is not None:
            self.target = target
        return self

    def __str__(self) -> str:
        if self.operation and self.target:
            prefix = f"{self.operation} failed for bucket '{self.target}': "
        elif self.operation:
            prefix = f"{self.operation} failed: "
        else:
            prefix = ""
        return f"[{self.code}] {prefix}{self.message}"


class ManagementTimeoutError(ClusterManagerError, TimeoutError):
    """Deadline elapsed before the operation completed."""

    code = "TIMEOUT"

    def __init__(
        self,
        timeout_seconds: float,
        *,
        operation: Optional[str] = None,
        target: Optional[str] = None,
    ):
        super().__init__(
            f"no response within {timeout_seconds:g}s, the operation may still complete on the server",
            operation=operation,
            target=target,
            details={"timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


class TransportError(ClusterManagerError):
    """Connectivity or protocol-level failure talking to the cluster."""

    code = "TRANSPORT_FAILURE"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        operation: Optional[str] = None,
        target: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, operation=operation, target=target, details=details)
        self.status_code = status_code


class DecodeError(ClusterManagerError):
    """Response could not be interpreted into the expected shape."""

    code = "DECODE_FAILURE"


class BucketAlreadyExistsError(ClusterManagerError):
    """Insert targeted a bucket name that is already registered."""

    code = "ALREADY_EXISTS"


class BucketNotFoundError(ClusterManagerError):
    """Referenced bucket does not exist."""

    code = "NOT_FOUND"


def classify_failure(
    error: BaseException,
    operation: str,
    target: Optional[str] = None,
) -> ClusterManagerError:
    """
    Map any failure to exactly one taxonomy member, annotated with operation and target.

    Taxonomy errors pass through unchanged apart from the annotation. Anything
    else is wrapped, with the original kept as ``__cause__``.
    """
    if isinstance(error, ClusterManagerError):
        return error.annotate(operation, target)

    if isinstance(error, httpx.HTTPStatusError):
        classified: ClusterManagerError = TransportError(
            f"server responded with HTTP {error.response.status_code}",
            status_code=error.response.status_code,
            operation=operation,
            target=target,
        )
    elif isinstance(error, (httpx.TransportError, OSError)):
        classified = TransportError(str(error) or type(error).__name__, operation=operation, target=target)
    elif isinstance(error, (ValidationError, ValueError, KeyError, TypeError)):
        classified = DecodeError(
            f"unexpected response shape: {error}",
            operation=operation,
            target=target,
        )
    elif isinstance(error, (asyncio.CancelledError, concurrent.futures.CancelledError)):
        classified = TransportError("request was cancelled", operation=operation, target=target)
    else:
        classified = TransportError(
            f"{type(error).__name__}: {error}",
            operation=operation,
            target=target,
        )

    classified.__cause__ = error
    return classified
