"""
S3 backend for the client facade.
"""

import logging
from typing import BinaryIO, Iterator, Optional, Tuple
from urllib.parse import quote, urlsplit

import httpx

from ..client.base import Client
from ..client.item import Item
from ..client.naming import TransferDescriptor, is_valid_bucket_name
from ..client.writer import BlockingWriteCloser
from ..config import ClientConfig
from ..errors import InvalidACL, InvalidBucketName, InvalidRange, TransportError
from ..log import debug_event_hooks
from .response import etag_md5, new_error, parse_list_buckets, parse_list_objects, parse_time
from .sign import SignatureV2Auth
from .upload import StreamingUploader

logger = logging.getLogger(__name__)

CANNED_ACLS = ("private", "public-read", "public-read-write", "authenticated-read")


class _ResponseBody:
    """Streams a response body and releases the connection on close."""

    def __init__(self, response: httpx.Response):
        self._response = response
        self._chunks = response.iter_bytes()
        self._buffer = b""

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            data = self._buffer + b"".join(self._chunks)
            self._buffer = b""
            return data
        while len(self._buffer) < size:
            chunk = next(self._chunks, None)
            if chunk is None:
                break
            self._buffer += chunk
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def close(self) -> None:
        self._response.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class S3Client(Client):
    """
    Client for one ``scheme://host[:port]/bucket/object`` URL.

    Example:
        ```python
        client = S3Client("http://localhost:9000/my-bucket/data/hello.txt")
        with client.put(md5_hex="", size=5) as w:
            w.write(b"hello")
        body, size, md5 = client.get()
        ```
    """

    def __init__(
        self,
        url: str,
        config: ClientConfig = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self.config = config or ClientConfig.from_env()

        parts = urlsplit(url)
        self.base_url = f"{parts.scheme}://{parts.netloc}"
        path = parts.path.lstrip("/")
        self.bucket, _, self.key = path.partition("/")

        self.auth = None
        if self.config.has_credentials:
            self.auth = SignatureV2Auth(self.config.access_key, self.config.secret_key)

        self.http = httpx.Client(
            transport=transport,
            timeout=httpx.Timeout(self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            event_hooks=debug_event_hooks() if self.config.debug else None,
        )
        self.uploader = StreamingUploader(self.http, self.base_url, self.auth)

    def _url(self, bucket: str = "", key: str = "") -> str:
        url = self.base_url + "/"
        if bucket:
            url += bucket
            if key:
                url += "/" + quote(key, safe="/~")
        return url

    def _send(
        self,
        method: str,
        url: str,
        stream: bool = False,
        ok: Tuple[int, ...] = (httpx.codes.OK,),
        **kwargs,
    ) -> httpx.Response:
        request = self.http.build_request(method, url, **kwargs)
        try:
            response = self.http.send(request, auth=self.auth, stream=stream)
        except httpx.TransportError as e:
            raise TransportError(str(e) or e.__class__.__name__, bucket=self.bucket, key=self.key) from e
        if response.status_code not in ok:
            if stream:
                response.read()
                response.close()
            raise new_error(response, bucket=self.bucket, key=self.key)
        return response

    def _require_bucket(self) -> None:
        if not is_valid_bucket_name(self.bucket):
            raise InvalidBucketName(self.bucket)

    def put(self, md5_hex: str, size: int) -> BlockingWriteCloser:
        """Start a streaming upload of ``size`` bytes to this URL's object."""
        return self.uploader.begin(TransferDescriptor(self.bucket, self.key, size, md5_hex))

    def get(self) -> Tuple[BinaryIO, int, str]:
        """
        Download the object.

        Returns (body, size, md5). The body streams from the network and
        must be closed; md5 is taken from the ETag when it is a plain digest,
        nothing is computed locally.
        """
        self._require_bucket()
        response = self._send("GET", self._url(self.bucket, self.key), stream=True)
        size = int(response.headers.get("Content-Length", "0"))
        return _ResponseBody(response), size, etag_md5(response.headers.get("ETag"))

    def get_partial(self, offset: int, length: int) -> Tuple[BinaryIO, int, str]:
        # a zero-length Range header cannot be expressed
        if offset < 0 or length <= 0:
            raise InvalidRange(offset, length)
        self._require_bucket()
        headers = {"Range": f"bytes={offset}-{offset + length - 1}"}
        response = self._send(
            "GET",
            self._url(self.bucket, self.key),
            stream=True,
            ok=(httpx.codes.OK, httpx.codes.PARTIAL_CONTENT),
            headers=headers,
        )
        size = int(response.headers.get("Content-Length", str(length)))
        return _ResponseBody(response), size, ""

    def stat(self) -> Item:
        self._require_bucket()
        response = self._send("HEAD", self._url(self.bucket, self.key))
        if not self.key:
            return Item(name=self.bucket, is_dir=True)
        headers = response.headers
        return Item(
            name=self.key,
            time=parse_time(headers.get("Last-Modified")),
            size=int(headers.get("Content-Length", "0")),
            etag=etag_md5(headers.get("ETag")),
        )

    def list(self) -> Iterator[Item]:
        """List buckets, or the objects of this URL's bucket under its key prefix."""
        if not self.bucket:
            response = self._send("GET", self._url())
            yield from parse_list_buckets(response.content)
            return

        self._require_bucket()
        marker = ""
        while True:
            params = {"prefix": self.key}
            if marker:
                params["marker"] = marker
            response = self._send("GET", self._url(self.bucket), params=params)
            items, truncated, marker = parse_list_objects(response.content)
            yield from items
            if not truncated or not marker:
                return

    def put_bucket(self, acl: str = "") -> None:
        if acl and acl not in CANNED_ACLS:
            raise InvalidACL(acl)
        self._require_bucket()
        headers = {"x-amz-acl": acl or "private"}
        self._send("PUT", self._url(self.bucket), headers=headers)
        logger.info(f"created bucket {self.bucket}")

    def close(self) -> None:
        self.http.close()
