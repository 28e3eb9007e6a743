"""
Synchronous in-process byte pipe.

A write blocks until the reader has consumed every byte of it, so a slow
consumer slows the producer down in lock-step. Either side may close with
an error; the other side observes that error on its next (or pending)
operation.
"""

import threading
from typing import Iterator, Optional, Tuple

from ..errors import ClosedPipeError, ContractViolation


class _Pipe:
    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        # serializes writers so one write is handed off as a unit
        self._wlock = threading.Lock()
        self._data: Optional[memoryview] = None
        self._reader_closed = False
        self._reader_err: Optional[BaseException] = None
        self._writer_closed = False
        self._writer_err: Optional[BaseException] = None

    def write(self, data) -> int:
        view = memoryview(data).cast("B")
        with self._wlock, self._cond:
            if self._writer_closed:
                raise ContractViolation("write after close")
            if self._reader_closed:
                raise self._reader_failure()
            if not len(view):
                return 0

            self._data = view
            self._cond.notify_all()
            while self._data is not None and not self._reader_closed:
                self._cond.wait()

            if self._data is not None:
                # reader went away mid hand-off
                self._data = None
                raise self._reader_failure()
            return len(view)

    def read(self, size: int = -1) -> bytes:
        with self._cond:
            while True:
                if self._reader_closed:
                    raise ClosedPipeError("read on closed pipe")
                if self._data is not None:
                    n = len(self._data) if size is None or size < 0 else size
                    chunk = bytes(self._data[:n])
                    rest = self._data[len(chunk):]
                    self._data = rest if len(rest) else None
                    if self._data is None:
                        self._cond.notify_all()
                    return chunk
                if self._writer_closed:
                    if self._writer_err is not None:
                        raise self._writer_err
                    return b""
                self._cond.wait()

    def close_reader(self, err: Optional[BaseException] = None) -> None:
        with self._cond:
            if not self._reader_closed:
                self._reader_closed = True
                self._reader_err = err
            self._cond.notify_all()

    def close_writer(self, err: Optional[BaseException] = None) -> None:
        with self._cond:
            if not self._writer_closed:
                self._writer_closed = True
                self._writer_err = err
            self._cond.notify_all()

    def _reader_failure(self) -> BaseException:
        if self._reader_err is not None:
            return self._reader_err
        return ClosedPipeError()


class PipeReader:
    """Consumer end. Iterable, and file-like enough for httpx request bodies."""

    CHUNK_SIZE = 64 * 1024

    def __init__(self, pipe: _Pipe):
        self._pipe = pipe

    def read(self, size: int = -1) -> bytes:
        """Return the next available bytes, or b"" once the writer closed."""
        return self._pipe.read(size)

    def close(self) -> None:
        self._pipe.close_reader()

    def close_with_error(self, err: BaseException) -> None:
        """Tear down the pipe; pending and later writes raise ``err``."""
        self._pipe.close_reader(err)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(self.CHUNK_SIZE)
            if not chunk:
                return
            yield chunk


class PipeWriter:
    """Producer end."""

    def __init__(self, pipe: _Pipe):
        self._pipe = pipe

    def write(self, data) -> int:
        return self._pipe.write(data)

    def close(self) -> None:
        """Signal end-of-stream to the reader."""
        self._pipe.close_writer()

    def close_with_error(self, err: BaseException) -> None:
        self._pipe.close_writer(err)


def new_pipe() -> Tuple[PipeReader, PipeWriter]:
    pipe = _Pipe()
    return PipeReader(pipe), PipeWriter(pipe)
