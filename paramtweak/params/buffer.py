"""
Append-only text buffer used as the diagnostic and query output channel.
"""

import io

from paramtweak.params.codecs import quote


class OutputBuffer:
    """Collects the text a tweak operation reports."""

    def __init__(self):
        self._buf = io.StringIO()

    def write(self, text: str) -> None:
        self._buf.write(text)

    def quote(self, text: str) -> None:
        """Append text in a form the argument splitter reads back verbatim."""
        self._buf.write(quote(text))

    def getvalue(self) -> str:
        return self._buf.getvalue()

    def clear(self) -> None:
        self._buf = io.StringIO()

    def __len__(self) -> int:
        return len(self.getvalue())

    def __str__(self) -> str:
        return self.getvalue()
