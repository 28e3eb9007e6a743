"""
Interpretation of S3 responses: error bodies and listing documents.
"""

import xml.etree.ElementTree as ET
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import List, Optional, Tuple

import httpx

from ..client.item import Item
from ..errors import RemoteRejectionError


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [c for c in elem if _local(c.tag) == name]


def _text(elem: ET.Element, name: str, default: str = "") -> str:
    for c in elem:
        if _local(c.tag) == name:
            return c.text or default
    return default


def new_error(response: httpx.Response, bucket: str = None, key: str = None) -> RemoteRejectionError:
    """
    Build a RemoteRejectionError for a non-OK response.

    The response must already be read. S3 XML error documents contribute
    their ``Code`` and ``Message``; any other body is kept verbatim.
    """
    body = response.text
    code = message = None
    if body.lstrip().startswith("<"):
        try:
            root = ET.fromstring(body)
        except ET.ParseError:
            root = None
        if root is not None and _local(root.tag) == "Error":
            code = _text(root, "Code") or None
            message = _text(root, "Message") or None
    return RemoteRejectionError(
        response.status_code,
        body=body,
        response=response,
        code=code,
        message=message,
        bucket=bucket,
        key=key,
    )


def parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def etag_md5(etag: Optional[str]) -> str:
    """Return the ETag as md5 hex when it is a plain (non-multipart) digest."""
    if not etag:
        return ""
    etag = etag.strip('"')
    if len(etag) == 32 and all(c in "0123456789abcdefABCDEF" for c in etag):
        return etag.lower()
    return ""


def parse_list_objects(body: bytes) -> Tuple[List[Item], bool, str]:
    """
    Parse a ListBucketResult document.

    Returns (items, is_truncated, next_marker).
    """
    root = ET.fromstring(body)
    items = []
    for c in _children(root, "Contents"):
        items.append(
            Item(
                name=_text(c, "Key"),
                time=parse_time(_text(c, "LastModified")),
                size=int(_text(c, "Size", "0")),
                etag=etag_md5(_text(c, "ETag")),
            )
        )
    for p in _children(root, "CommonPrefixes"):
        items.append(Item(name=_text(p, "Prefix"), is_dir=True))
    truncated = _text(root, "IsTruncated").lower() == "true"
    marker = _text(root, "NextMarker")
    if truncated and not marker and items:
        marker = items[-1].name
    return items, truncated, marker


def parse_list_buckets(body: bytes) -> List[Item]:
    root = ET.fromstring(body)
    items = []
    for buckets in _children(root, "Buckets"):
        for b in _children(buckets, "Bucket"):
            items.append(
                Item(
                    name=_text(b, "Name"),
                    time=parse_time(_text(b, "CreationDate")),
                    is_dir=True,
                )
            )
    return items
