"""
Client facade shared by the storage backends.
"""

from .base import Client
from .item import Item
from .naming import TransferDescriptor, is_valid_bucket_name, is_valid_object_name
from .writer import BlockingWriteCloser, start_transfer

__all__ = [
    "Client",
    "Item",
    "TransferDescriptor",
    "is_valid_bucket_name",
    "is_valid_object_name",
    "BlockingWriteCloser",
    "start_transfer",
]
