"""
One-shot completion signal carrying a write-once outcome.
"""

import threading
from typing import Optional

from ..errors import ContractViolation


class CompletionGate:
    """
    Lets a background task announce the final outcome of its work.

    ``resolve`` may be called exactly once; a second call raises
    ContractViolation and leaves the stored outcome untouched. ``wait``
    blocks until the gate is resolved and then returns the same outcome to
    every caller: ``None`` for success, or the exception instance the task
    failed with.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._outcome: Optional[BaseException] = None

    def resolve(self, outcome: Optional[BaseException] = None) -> None:
        with self._lock:
            if self._done.is_set():
                raise ContractViolation("completion gate resolved twice")
            self._outcome = outcome
            self._done.set()

    def wait(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        if not self._done.wait(timeout):
            raise TimeoutError(f"completion gate not resolved within {timeout}s")
        return self._outcome

    @property
    def resolved(self) -> bool:
        return self._done.is_set()
