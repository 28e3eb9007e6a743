"""
Client factory and cross-backend copy.
"""

import logging
import shutil
from typing import Optional

import httpx

from .client.base import Client
from .config import ClientConfig
from .errors import ConfigurationError
from .fs.client import FSClient
from .s3.client import S3Client

logger = logging.getLogger(__name__)


def new_client(
    url: str,
    config: Optional[ClientConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> Client:
    """
    Create a client for ``url``.

    http:// and https:// URLs get an S3Client; anything else is treated as
    a local path.
    """
    if url is None or url.strip() == "":
        raise ConfigurationError("URL cannot be empty")
    if url.startswith(("http://", "https://")):
        return S3Client(url, config=config, transport=transport)
    return FSClient(url)


def copy(source: Client, target: Client, chunk_size: int = 1024 * 1024) -> int:
    """
    Stream the object at ``source`` into ``target``.

    Returns the number of bytes copied. Raises the target's terminal error
    if the object was not stored.
    """
    body, size, md5 = source.get()
    try:
        with target.put(md5, size) as writer:
            shutil.copyfileobj(body, writer, chunk_size)
    finally:
        body.close()
    logger.debug(f"copied {size} bytes")
    return size
