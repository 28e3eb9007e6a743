from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Item:
    """Metadata for one object, bucket, file or directory."""

    name: str
    time: Optional[datetime] = None
    size: int = 0
    is_dir: bool = False
    etag: str = ""
