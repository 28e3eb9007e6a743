"""
Unified client for moving byte streams between an S3-compatible object
store and the local filesystem.

Uploads are streamed: ``put`` returns a write handle whose bytes flow
straight into the HTTP request body, and whose ``close()`` reports whether
the object was stored.
"""

from .client import BlockingWriteCloser, Client, Item, TransferDescriptor
from .config import ClientConfig
from .errors import (
    ClosedPipeError,
    ConfigurationError,
    ContractViolation,
    NotFoundError,
    RemoteRejectionError,
    StorageError,
    TransportError,
)
from .factory import copy, new_client
from .fs import FSClient
from .s3 import S3Client

__all__ = [
    "BlockingWriteCloser",
    "Client",
    "ClientConfig",
    "FSClient",
    "Item",
    "S3Client",
    "TransferDescriptor",
    "copy",
    "new_client",
    "ClosedPipeError",
    "ConfigurationError",
    "ContractViolation",
    "NotFoundError",
    "RemoteRejectionError",
    "StorageError",
    "TransportError",
]
