from .gate import CompletionGate
from .limit import LimitedReader
from .pipe import PipeReader, PipeWriter, new_pipe

__all__ = [
    "CompletionGate",
    "LimitedReader",
    "PipeReader",
    "PipeWriter",
    "new_pipe",
]
