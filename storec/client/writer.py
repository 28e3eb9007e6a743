"""
Caller-facing write handle for streaming uploads.
"""

import logging
import threading
from typing import Callable, Optional

from ..errors import ContractViolation
from ..utils import CompletionGate, PipeReader, PipeWriter, new_pipe

logger = logging.getLogger(__name__)


class BlockingWriteCloser:
    """
    Write end of an upload whose ``close()`` blocks until the background
    transfer has finished.

    A successful ``write()`` only means the bytes were handed to the
    transfer; the object is stored only once ``close()`` returns without
    raising. ``close()`` must always be called (or the handle used as a
    context manager), otherwise the transfer waits on the pipe forever.

    Example:
        ```python
        with client.put(md5_hex="", size=5) as w:
            w.write(b"hello")
        ```
    """

    def __init__(self, writer: PipeWriter, gate: CompletionGate):
        self._writer = writer
        self._gate = gate
        self._err: Optional[BaseException] = None
        self._closed = False

    def write(self, data) -> int:
        """
        Hand ``data`` to the transfer, blocking until it is consumed.

        Raises the transfer's terminal error once it has failed.
        """
        if self._closed:
            raise ContractViolation("write after close")
        try:
            return self._writer.write(data)
        except ContractViolation:
            raise
        except Exception as e:
            self._err = e
            raise

    def writable(self) -> bool:
        return not self._closed

    def close(self) -> None:
        """Signal end of data and wait for the transfer's outcome."""
        if not self._closed:
            self._closed = True
            self._writer.close()
        err = self._outcome()
        if err is not None:
            raise err

    def abort(self, err: BaseException) -> Optional[BaseException]:
        """Close the write side with ``err`` and wait for the transfer to stop."""
        if not self._closed:
            self._closed = True
            self._writer.close_with_error(err)
        return self._gate.wait()

    def wait(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """Block until the transfer finishes; return its error or None."""
        return self._gate.wait(timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    def _outcome(self) -> Optional[BaseException]:
        err = self._gate.wait()
        if err is None:
            err = self._err
        return err

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            self.close()
        else:
            self.abort(exc_val)


def start_transfer(name: str, transfer: Callable[[PipeReader], None]) -> BlockingWriteCloser:
    """
    Run ``transfer`` on a background thread fed by a new pipe.

    The transfer consumes the reader it is given. When it returns, the
    reader is closed and the gate resolved with success; when it raises,
    the reader is closed with that error (waking a blocked writer) and the
    gate resolved with the same error.
    """
    reader, writer = new_pipe()
    gate = CompletionGate()

    def run():
        try:
            transfer(reader)
        except BaseException as e:
            logger.warning(f"{name} failed: {e}")
            reader.close_with_error(e)
            gate.resolve(e)
            return
        reader.close()
        gate.resolve(None)
        logger.debug(f"{name} finished")

    threading.Thread(target=run, name=name, daemon=True).start()
    return BlockingWriteCloser(writer, gate)
