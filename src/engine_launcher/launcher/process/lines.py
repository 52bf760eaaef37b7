from __future__ import annotations

import codecs


class LineSplitter:
    """Turn a stream of output chunks into complete lines.

    Chunks may cut lines (and multi-byte characters) anywhere. Lines are split
    on ``\\n`` with a trailing ``\\r`` removed; empty lines are dropped.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._partial = ""

    def feed(self, chunk: bytes) -> list[str]:
        text = self._partial + self._decoder.decode(chunk)
        *complete, self._partial = text.split("\n")
        return [line for line in (_strip_cr(raw) for raw in complete) if line]

    def flush(self) -> str | None:
        """Return the pending partial line, if any, and reset."""
        text = self._partial + self._decoder.decode(b"", final=True)
        self._partial = ""
        line = _strip_cr(text)
        return line or None


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line
