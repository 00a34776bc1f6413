import codecs
from typing import Union

Chunk = Union[bytes, str]


class StreamReader:
    """Accumulates decoded stream chunks into one text buffer.

    Byte chunks go through an incremental UTF-8 decoder so a multi-byte
    character split across two chunks is only decoded once it is whole.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._parts: list[str] = []
        self._text = ""
        self.chunk_count = 0

    @property
    def text(self) -> str:
        if self._parts:
            self._text += "".join(self._parts)
            self._parts.clear()
        return self._text

    def feed(self, chunk: Chunk) -> str:
        """Append one chunk and return the newly decoded text."""
        self.chunk_count += 1
        decoded = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if decoded:
            self._parts.append(decoded)
        return decoded

    def finish(self) -> str:
        """Flush any bytes held back by the decoder at end-of-stream."""
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self._parts.append(tail)
        return tail
