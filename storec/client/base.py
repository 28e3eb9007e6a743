"""
Client Abstract Base Class

Defines the interface shared by the object storage and local filesystem
backends, so callers can move bytes between either without caring which
one they hold.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Tuple

from .item import Item
from .writer import BlockingWriteCloser


class Client(ABC):
    """
    Abstract interface bound to one location (URL or local path).
    """

    @abstractmethod
    def get(self) -> Tuple[BinaryIO, int, str]:
        """
        Open the object for reading

        Returns:
            (body, size, md5 hex or "" when unknown); the body must be closed
        """
        pass

    @abstractmethod
    def get_partial(self, offset: int, length: int) -> Tuple[BinaryIO, int, str]:
        """
        Open ``length`` bytes of the object starting at ``offset``

        Raises:
            InvalidRange: If the range is negative or out of bounds
        """
        pass

    @abstractmethod
    def put(self, md5_hex: str, size: int) -> BlockingWriteCloser:
        """
        Start a streaming upload

        Args:
            md5_hex: Expected MD5 as hex, or "" for no integrity check
            size: Exact number of bytes that will be written

        Returns:
            Write handle; the object is stored once its close() returns

        Raises:
            ConfigurationError: If the destination, size or digest is invalid
        """
        pass

    @abstractmethod
    def stat(self) -> Item:
        pass

    @abstractmethod
    def list(self) -> Iterator[Item]:
        pass

    @abstractmethod
    def put_bucket(self, acl: str = "") -> None:
        """
        Create the bucket (or directory) this client points at

        Args:
            acl: "private", "public-read", "public-read-write" or "" (private)
        """
        pass

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
