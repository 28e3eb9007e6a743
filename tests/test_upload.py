"""Tests for streaming uploads to the S3 backend."""

import base64
import hashlib
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
from botocore.auth import HmacV1Auth
from botocore.credentials import Credentials

from conftest import RecordingTransport
from storec.errors import (
    ConfigurationError,
    ContractViolation,
    InvalidBucketName,
    InvalidDigest,
    RemoteRejectionError,
    TransportError,
)

HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"


def test_put_hello(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport)

    w = client.put("", 5)
    assert w.write(b"hello") == 5
    assert w.close() is None

    assert len(transport.calls) == 1
    request, content = transport.calls[0]
    assert content == b"hello"
    assert request.method == "PUT"
    assert request.url.path == "/my-bucket/hello.txt"
    assert request.headers["Content-Length"] == "5"
    assert "Transfer-Encoding" not in request.headers
    assert "Content-MD5" not in request.headers
    assert "Authorization" not in request.headers


@pytest.mark.parametrize("size", [0, 1, 1024, 200 * 1024])
def test_put_any_length_succeeds(make_client, size):
    transport = RecordingTransport()
    client = make_client(transport=transport)
    payload = bytes(i % 251 for i in range(size))

    with client.put("", size) as w:
        for i in range(0, size, 7000):
            w.write(payload[i:i + 7000])

    assert transport.calls[0][1] == payload


def test_negative_length_fails_before_transport(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport)

    with pytest.raises(ConfigurationError):
        client.put("", -1)
    assert transport.calls == []


@pytest.mark.parametrize("digest", ["zz", "abc", "5d41402abc4b2a76b9719d911017c59g", "é1"])
def test_malformed_digest_fails_before_transport(make_client, digest):
    transport = RecordingTransport()
    client = make_client(transport=transport)

    with pytest.raises(InvalidDigest):
        client.put(digest, 5)
    assert transport.calls == []


def test_digest_sent_as_base64_content_md5(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport)

    with client.put(HELLO_MD5, 5) as w:
        w.write(b"hello")

    request, _ = transport.calls[0]
    assert request.headers["Content-MD5"] == "XUFAKrxLKna5cZ2REBfFkg=="
    assert request.headers["Content-MD5"] == base64.b64encode(hashlib.md5(b"hello").digest()).decode()


@pytest.mark.parametrize(
    "url",
    [
        "http://storage.local/Bad_Bucket/key",
        "http://storage.local/my.bucket/key",
        "http://storage.local/ab/key",
    ],
)
def test_invalid_bucket_fails_before_transport(make_client, url):
    transport = RecordingTransport()
    client = make_client(url=url, transport=transport)

    with pytest.raises(InvalidBucketName):
        client.put("", 5)
    assert transport.calls == []


def test_remote_rejection_on_close(make_client):
    transport = RecordingTransport(status=403, body=b"Forbidden")
    client = make_client(transport=transport)

    w = client.put("", 5)
    w.write(b"hello")
    with pytest.raises(RemoteRejectionError) as exc:
        w.close()

    assert exc.value.status == 403
    assert exc.value.body == "Forbidden"
    assert exc.value.response.status_code == 403


def test_close_reports_same_outcome_twice(make_client):
    client = make_client(transport=RecordingTransport(status=500, body=b"oops"))

    w = client.put("", 5)
    w.write(b"hello")
    with pytest.raises(RemoteRejectionError) as first:
        w.close()
    with pytest.raises(RemoteRejectionError) as second:
        w.close()
    assert first.value is second.value


@pytest.mark.parametrize("status", [201, 204, 301, 404, 503])
def test_only_200_is_success(make_client, status):
    client = make_client(transport=RecordingTransport(status=status))

    w = client.put("", 5)
    w.write(b"hello")
    with pytest.raises(RemoteRejectionError) as exc:
        w.close()
    assert exc.value.status == status


def test_write_after_failure_returns_same_error(make_client):
    transport = RecordingTransport(status=403, body=b"Forbidden", read_body=False)
    client = make_client(transport=transport)

    w = client.put("", 5)
    err = w.wait(timeout=5)
    assert isinstance(err, RemoteRejectionError)

    with pytest.raises(RemoteRejectionError) as exc:
        w.write(b"hello")
    assert exc.value is err
    with pytest.raises(RemoteRejectionError) as exc:
        w.close()
    assert exc.value is err


def test_blocked_writer_wakes_on_failure(make_client):
    transport = RecordingTransport(status=403, body=b"Forbidden", read_body=False, delay=0.1)
    client = make_client(transport=transport)

    w = client.put("", 5)
    with pytest.raises(RemoteRejectionError) as exc:
        w.write(b"hello")
    assert exc.value.status == 403


def test_transport_error(make_client):
    transport = RecordingTransport(error=httpx.ConnectError("connection refused"), read_body=False)
    client = make_client(transport=transport)

    w = client.put("", 5)
    err = w.wait(timeout=5)
    assert isinstance(err, TransportError)
    assert isinstance(err.__cause__, httpx.ConnectError)
    with pytest.raises(TransportError):
        w.close()


def test_write_after_close(make_client):
    client = make_client()
    w = client.put("", 0)
    w.close()
    with pytest.raises(ContractViolation):
        w.write(b"x")


def test_context_manager_aborts_on_exception(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport)

    with pytest.raises(ValueError):
        with client.put("", 5) as w:
            w.write(b"he")
            raise ValueError("caller gave up")

    assert isinstance(w.wait(timeout=5), ValueError)
    assert w.closed


def test_context_manager_aborts_on_keyboard_interrupt(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport)

    with pytest.raises(KeyboardInterrupt):
        with client.put("", 5) as w:
            w.write(b"he")
            raise KeyboardInterrupt()

    assert isinstance(w.wait(timeout=5), KeyboardInterrupt)
    with pytest.raises(KeyboardInterrupt):
        w.close()


def test_request_is_signed_with_credentials(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport, access_key="AKID", secret_key="SECRET")

    with client.put(HELLO_MD5, 5) as w:
        w.write(b"hello")

    request, _ = transport.calls[0]
    date = request.headers["Date"]
    expected = HmacV1Auth(Credentials("AKID", "SECRET")).sign_string(f"PUT\nXUFAKrxLKna5cZ2REBfFkg==\n\n{date}\n/my-bucket/hello.txt")
    assert request.headers["Authorization"] == f"AWS AKID:{expected}"


def test_partial_credentials_do_not_sign(make_client):
    transport = RecordingTransport()
    client = make_client(transport=transport, access_key="AKID")

    with client.put("", 5) as w:
        w.write(b"hello")
    assert "Authorization" not in transport.calls[0][0].headers


def test_concurrent_uploads_do_not_cross_talk(make_client):
    def status_for(request):
        return 500 if request.url.path.endswith(("3", "7")) else 200

    transport = RecordingTransport(jitter=0.05, status_for=status_for, body=b"fail")
    n = 16

    def upload(i):
        client = make_client(url=f"http://storage.local/my-bucket/obj-{i}", transport=transport)
        payload = f"payload for object {i}".encode() * (i + 1)
        w = client.put("", len(payload))
        for j in range(0, len(payload), 10):
            w.write(payload[j:j + 10])
        try:
            w.close()
        except RemoteRejectionError as e:
            return i, payload, e
        return i, payload, None

    with ThreadPoolExecutor(max_workers=n) as pool:
        results = list(pool.map(upload, range(n)))

    bodies = {request.url.path: content for request, content in transport.calls}
    assert len(bodies) == n
    for i, payload, err in results:
        assert bodies[f"/my-bucket/obj-{i}"] == payload
        if str(i).endswith(("3", "7")):
            assert isinstance(err, RemoteRejectionError)
            assert err.key == f"obj-{i}"
        else:
            assert err is None
