"""User-visible output sinks for streamed text."""

import sys
from typing import List, Optional, TextIO


class ConsoleSink:
    """Writes streamed text straight to a terminal stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def repaint(self, erase_length: int, text: str) -> None:
        """Blank the previously printed fragment and print ``text`` in its place."""
        self.stream.write(f"\r{' ' * erase_length}\r{text}")
        self.stream.flush()


class BufferSink:
    """Collects emissions in memory (one-shot runs and tests)."""

    def __init__(self):
        self.emissions: List[str] = []
        self.repaints: List[tuple] = []

    def write(self, text: str) -> None:
        self.emissions.append(text)

    def repaint(self, erase_length: int, text: str) -> None:
        self.repaints.append((erase_length, text))

    @property
    def text(self) -> str:
        return "".join(self.emissions)
