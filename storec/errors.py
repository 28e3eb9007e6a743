"""
Error types for storage operations.
"""

from typing import Optional

import httpx


class StorageError(Exception):
    """Base exception for all storage errors."""

    def __init__(self, message: str, code: str = None, bucket: str = None, key: str = None):
        self.message = message
        self.code = code or "StorageError"
        self.bucket = bucket
        self.key = key
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.code}] {self.message}"
        if self.bucket and self.key:
            msg += f" (bucket={self.bucket}, key={self.key})"
        elif self.bucket:
            msg += f" (bucket={self.bucket})"
        elif self.key:
            msg += f" (key={self.key})"
        return msg


class ConfigurationError(StorageError):
    """Exception raised for invalid arguments, detected before any I/O."""

    def __init__(self, message: str, code: str = None, bucket: str = None, key: str = None):
        super().__init__(message, code=code or "InvalidArgument", bucket=bucket, key=key)


class InvalidBucketName(ConfigurationError):
    def __init__(self, bucket: str):
        super().__init__("Invalid bucket name", code="InvalidBucketName", bucket=bucket)


class InvalidObjectName(ConfigurationError):
    def __init__(self, key: str, reason: str = "Invalid object name"):
        super().__init__(reason, code="InvalidObjectName", key=key)


class InvalidDigest(ConfigurationError):
    def __init__(self, digest: str):
        self.digest = digest
        super().__init__(f"Digest is not valid hex: {digest!r}", code="InvalidDigest")


class InvalidRange(ConfigurationError):
    def __init__(self, offset: int, length: int = None):
        self.offset = offset
        self.length = length
        super().__init__(f"Invalid range offset={offset} length={length}", code="InvalidRange")


class InvalidACL(ConfigurationError):
    def __init__(self, acl: str):
        self.acl = acl
        super().__init__(f"Invalid acl: {acl!r}", code="InvalidACL")


class TransportError(StorageError):
    """Exception raised for network-related errors (DNS, connect, timeout)."""

    def __init__(self, message: str, bucket: str = None, key: str = None):
        super().__init__(message, code="NetworkError", bucket=bucket, key=key)


class RemoteRejectionError(StorageError):
    """
    Exception raised when the server answers with anything other than 200 OK.

    The response is kept for diagnostics; ``body`` is its decoded text.
    """

    def __init__(
        self,
        status: int,
        body: str = "",
        response: Optional[httpx.Response] = None,
        code: str = None,
        message: str = None,
        bucket: str = None,
        key: str = None,
    ):
        self.status = status
        self.body = body
        self.response = response
        super().__init__(
            message or body or f"HTTP {status}",
            code=code or f"HTTP{status}",
            bucket=bucket,
            key=key,
        )


class ClosedPipeError(StorageError):
    """Exception raised when writing to a pipe whose reader has finished."""

    def __init__(self, message: str = "write on closed pipe"):
        super().__init__(message, code="ClosedPipe")


class NotFoundError(StorageError):
    """Exception raised when an object or local path is not found."""

    def __init__(self, message: str, bucket: str = None, key: str = None):
        super().__init__(message, code="NotFound", bucket=bucket, key=key)


class IsDirectoryError(StorageError):
    def __init__(self, path: str):
        super().__init__("Path is a directory", code="IsDirectory", key=path)


class DigestMismatchError(StorageError):
    def __init__(self, expected: str, actual: str, key: str = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Content digest mismatch: expected {expected}, got {actual}",
            code="BadDigest",
            key=key,
        )


class LengthMismatchError(StorageError):
    def __init__(self, expected: int, actual: int, key: str = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Received {actual} bytes, declared {expected}",
            code="IncompleteBody",
            key=key,
        )


class ContractViolation(RuntimeError):
    """
    Programming error: resolving a completion gate twice, writing after close.
    Not a StorageError; callers retrying on StorageError never catch it.
    """
