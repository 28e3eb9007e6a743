"""
AWS signature version 2 request signing.
"""

from typing import Generator

import httpx
from botocore.auth import HmacV1Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials


class SignatureV2Auth(httpx.Auth):
    """
    Signs requests with botocore's HMAC-SHA1 (signature v2) signer.

    The signature covers method, Content-MD5, Content-Type, Date, the
    ``x-amz-*`` headers and the resource path, never the body, so streamed
    bodies are left untouched. ``Date`` is always set at signing time.
    """

    def __init__(self, access_key: str, secret_key: str):
        self.access_key = access_key
        self.signer = HmacV1Auth(Credentials(access_key, secret_key))

    def sign(self, request: httpx.Request) -> httpx.Request:
        aws_request = AWSRequest(
            method=request.method,
            url=str(request.url),
            headers={k: v for k, v in request.headers.items() if k.lower() != "authorization"},
        )
        self.signer.add_auth(aws_request)
        request.headers["Date"] = aws_request.headers["Date"]
        request.headers["Authorization"] = aws_request.headers["Authorization"]
        return request

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        yield self.sign(request)
