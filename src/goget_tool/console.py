from __future__ import annotations
"""Line-serialized console output shared by concurrent fetch workers."""

import sys
import threading
from typing import TextIO


class Console:
    """Print whole lines under one lock so concurrent workers never interleave."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def line(self, text: str = "") -> None:
        with self._lock:
            print(text, file=self._stream or sys.stdout, flush=True)
