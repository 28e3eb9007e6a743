"""
Streaming PUT of one object.

The caller writes into a pipe while a background thread streams the
other end as the body of a single signed PUT request, then reports the
outcome back through the write handle's ``close()``.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from ..client.naming import TransferDescriptor
from ..client.writer import BlockingWriteCloser, start_transfer
from ..errors import TransportError
from ..utils import PipeReader
from .response import new_error

logger = logging.getLogger(__name__)


class StreamingUploader:
    """
    Starts streaming uploads against one configured httpx client.

    Holds no per-upload state; every ``begin`` gets its own pipe, gate and
    worker thread, and makes exactly one request. There are no retries.
    """

    def __init__(self, http: httpx.Client, base_url: str, auth: Optional[httpx.Auth] = None):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.auth = auth

    def object_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{quote(key, safe='/~')}"

    def begin(self, descriptor: TransferDescriptor) -> BlockingWriteCloser:
        """
        Validate ``descriptor`` and start the upload.

        Raises ConfigurationError (invalid name, negative size, malformed
        digest) before any pipe or thread is created. Otherwise returns a
        live write handle immediately.
        """
        content_md5 = descriptor.validate()
        name = f"storec-put {descriptor.bucket}/{descriptor.key}"
        logger.debug(f"begin upload {descriptor.bucket}/{descriptor.key} size={descriptor.size}")

        def transfer(reader: PipeReader) -> None:
            self._transfer(descriptor, content_md5, reader)

        return start_transfer(name, transfer)

    def _transfer(self, descriptor: TransferDescriptor, content_md5: Optional[str], reader: PipeReader) -> None:
        headers = {"Content-Length": str(descriptor.size)}
        if content_md5 is not None:
            headers["Content-MD5"] = content_md5
        request = self.http.build_request(
            "PUT",
            self.object_url(descriptor.bucket, descriptor.key),
            content=reader,
            headers=headers,
        )

        try:
            response = self.http.send(request, auth=self.auth)
        except httpx.TransportError as e:
            raise TransportError(str(e) or e.__class__.__name__, bucket=descriptor.bucket, key=descriptor.key) from e

        try:
            if response.status_code != httpx.codes.OK:
                raise new_error(response, bucket=descriptor.bucket, key=descriptor.key)
        finally:
            response.close()
        logger.info(f"uploaded {descriptor.bucket}/{descriptor.key} ({descriptor.size} bytes)")
