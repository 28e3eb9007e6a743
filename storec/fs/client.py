"""
Local filesystem backend for the client facade.
"""

import hashlib
import logging
import os
import stat
import tempfile
from datetime import datetime, timezone
from typing import BinaryIO, Iterator, Tuple

from ..client.base import Client
from ..client.item import Item
from ..client.naming import digest_header
from ..client.writer import BlockingWriteCloser, start_transfer
from ..errors import (
    ConfigurationError,
    DigestMismatchError,
    InvalidACL,
    InvalidRange,
    IsDirectoryError,
    LengthMismatchError,
    NotFoundError,
)
from ..utils import LimitedReader, PipeReader

logger = logging.getLogger(__name__)

ACL_PERMS = {
    "": 0o700,
    "private": 0o700,
    "public-read": 0o500,
    "public-read-write": 0o777,
}


def _item(path: str, st: os.stat_result) -> Item:
    return Item(
        name=path,
        time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        size=st.st_size,
        is_dir=stat.S_ISDIR(st.st_mode),
    )


class FSClient(Client):
    """Client for one local file or directory path."""

    def __init__(self, path: str):
        if path is None or path.strip() == "":
            raise ConfigurationError("Path cannot be empty")
        self.path = path

    def _stat(self) -> os.stat_result:
        try:
            return os.stat(os.path.normpath(self.path))
        except FileNotFoundError:
            raise NotFoundError("File not found", key=self.path)

    def stat(self) -> Item:
        return _item(self.path, self._stat())

    def get(self) -> Tuple[BinaryIO, int, str]:
        """
        Open the file for reading.

        md5 is always returned empty; computing it would mean reading the
        whole file up front.
        """
        item = self.stat()
        if item.is_dir:
            raise IsDirectoryError(self.path)
        return open(self.path, "rb"), item.size, ""

    def get_partial(self, offset: int, length: int) -> Tuple[BinaryIO, int, str]:
        if offset < 0 or length < 0:
            raise InvalidRange(offset, length)
        item = self.stat()
        if item.is_dir:
            raise IsDirectoryError(self.path)
        if offset > item.size or offset + length > item.size:
            raise InvalidRange(offset, length)
        body = open(self.path, "rb")
        body.seek(offset)
        return LimitedReader(body, length), length, ""

    def list(self) -> Iterator[Item]:
        """
        Walk the tree rooted at this path, yielding the root first.

        Entries that cannot be accessed are skipped; any other error stops
        the walk and is raised.
        """
        yield self.stat()

        def onerror(err: OSError):
            if isinstance(err, PermissionError):
                logger.debug(f"skipping inaccessible {err.filename}")
                return
            raise err

        for dirpath, dirnames, filenames in os.walk(self.path, onerror=onerror):
            dirnames.sort()
            for name in sorted(dirnames + filenames):
                path = os.path.join(dirpath, name)
                try:
                    st = os.lstat(path)
                except PermissionError:
                    continue
                yield _item(path, st)

    def put_bucket(self, acl: str = "") -> None:
        if acl not in ACL_PERMS:
            raise InvalidACL(acl)
        mode = ACL_PERMS[acl]
        os.makedirs(self.path, mode=mode, exist_ok=True)
        os.chmod(self.path, mode)

    def put(self, md5_hex: str, size: int) -> BlockingWriteCloser:
        """
        Start writing ``size`` bytes to this path.

        Bytes go to a temporary file beside the target that replaces it only
        after the length (and the digest, when given) has been checked.
        """
        if size is None or size < 0:
            raise ConfigurationError(f"Invalid size {size}", key=self.path)
        expect_md5 = md5_hex.strip().lower() if digest_header(md5_hex) else ""
        target = os.path.abspath(self.path)

        def transfer(reader: PipeReader) -> None:
            parent = os.path.dirname(target)
            os.makedirs(parent, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=parent, prefix=".storec-")
            try:
                md5 = hashlib.md5()
                n = 0
                with os.fdopen(fd, "wb") as f:
                    for chunk in reader:
                        n += len(chunk)
                        if n > size:
                            raise LengthMismatchError(size, n, key=self.path)
                        md5.update(chunk)
                        f.write(chunk)
                if n != size:
                    raise LengthMismatchError(size, n, key=self.path)
                if expect_md5 and md5.hexdigest() != expect_md5:
                    raise DigestMismatchError(expect_md5, md5.hexdigest(), key=self.path)
                os.replace(tmp, target)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
            logger.info(f"wrote {target} ({size} bytes)")

        return start_transfer(f"storec-put {target}", transfer)
