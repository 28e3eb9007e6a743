"""
Destination naming rules and the immutable description of one upload.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError, InvalidBucketName, InvalidDigest, InvalidObjectName

MAX_OBJECT_NAME = 1024

_BUCKET_RE = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")


def is_valid_bucket_name(bucket: str) -> bool:
    """
    Bucket names are 3 to 63 characters of lowercase letters, digits, dots
    and hyphens, starting and ending with a letter or digit, with no empty
    dot-separated label.
    """
    if not bucket or not _BUCKET_RE.match(bucket):
        return False
    return ".." not in bucket


def is_valid_object_name(key: str) -> bool:
    return bool(key) and len(key.encode("utf-8")) <= MAX_OBJECT_NAME


def digest_header(md5_hex: str) -> Optional[str]:
    """
    Convert a caller-supplied hex digest into a Content-MD5 header value.

    Blank input means no integrity check was requested and yields None.
    """
    if md5_hex is None or md5_hex.strip() == "":
        return None
    try:
        raw = binascii.unhexlify(md5_hex)
    except (binascii.Error, ValueError):
        raise InvalidDigest(md5_hex)
    return base64.b64encode(raw).decode("ascii")


@dataclass(frozen=True)
class TransferDescriptor:
    bucket: str
    key: str
    size: int
    md5_hex: str = ""

    def validate(self) -> Optional[str]:
        """
        Check the descriptor before any I/O happens.

        Returns the Content-MD5 header value (None when no digest was
        supplied). Raises ConfigurationError on the first problem.
        """
        # uploads also reject dotted bucket names
        if not is_valid_bucket_name(self.bucket) or "." in self.bucket:
            raise InvalidBucketName(self.bucket)
        if not is_valid_object_name(self.key):
            raise InvalidObjectName(self.key)
        if self.size is None or self.size < 0:
            raise ConfigurationError(f"Invalid size {self.size}", bucket=self.bucket, key=self.key)
        return digest_header(self.md5_hex)
