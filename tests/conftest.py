import random
import threading
import time

import httpx
import pytest

from storec import ClientConfig, S3Client


class RecordingTransport(httpx.BaseTransport):
    """
    Stand-in for an S3 server: records each request and its body, then
    answers with a fixed status (or a per-request one from ``status_for``).
    """

    def __init__(self, status=200, body=b"", read_body=True, delay=0.0, jitter=0.0, status_for=None, error=None):
        self.status = status
        self.body = body
        self.read_body = read_body
        self.delay = delay
        self.jitter = jitter
        self.status_for = status_for
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        content = request.read() if self.read_body else b""
        with self._lock:
            self.calls.append((request, content))
        if self.delay or self.jitter:
            time.sleep(self.delay + random.uniform(0, self.jitter))
        if self.error is not None:
            raise self.error
        status = self.status_for(request) if self.status_for else self.status
        body = self.body if status != 200 else b""
        return httpx.Response(status, content=body)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def make_client():
    def make(url="http://storage.local:9000/my-bucket/hello.txt", transport=None, **config):
        return S3Client(url, config=ClientConfig(**config), transport=transport or RecordingTransport())

    return make
