from typing import BinaryIO


class LimitedReader:
    """Reads at most ``limit`` bytes from ``raw``, then reports EOF."""

    def __init__(self, raw: BinaryIO, limit: int):
        self._raw = raw
        self.remaining = limit

    def read(self, size: int = -1) -> bytes:
        if self.remaining <= 0:
            return b""
        if size is None or size < 0 or size > self.remaining:
            size = self.remaining
        data = self._raw.read(size)
        self.remaining -= len(data)
        return data

    def close(self) -> None:
        self._raw.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
