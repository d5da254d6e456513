"""Ordered text fragments and the buffer that assembles them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, TextIO, Union

from .errors import AlreadyFinalized, OutOfOrderCallback, SessionNotFinalized


@dataclass
class Fragment:
    """Append-only sequence of text chunks.

    A chunk is either a string or a nested :class:`Fragment` which is embedded
    verbatim when the fragment is rendered.  Nested fragments may still grow
    after they were embedded; rendering always reflects their current content.
    """

    chunks: List[Union[str, "Fragment"]] = field(default_factory=list)

    def append(self, chunk: Union[str, "Fragment"]) -> None:
        self.chunks.append(chunk)

    def iter_text(self) -> Iterator[str]:
        for chunk in self.chunks:
            if isinstance(chunk, Fragment):
                yield from chunk.iter_text()
            else:
                yield chunk

    def render(self) -> str:
        return "".join(self.iter_text())

    def __bool__(self) -> bool:
        return bool(self.chunks)


class TextBuffer:
    """Committed fragments plus one reusable scratch buffer.

    The scratch buffer follows a clear-before-use contract: :meth:`begin`
    empties it and hands it out, :meth:`commit` moves its content into a new
    fragment.  :meth:`close` adds the final fragment and seals the buffer;
    :meth:`flush` then writes everything to the sink exactly once.
    """

    def __init__(self, sink: Optional[TextIO] = None) -> None:
        self.sink = sink
        self.fragments: List[Fragment] = []
        self._scratch: List[str] = []
        self._closed = False
        self._flushed = False

    def begin(self) -> List[str]:
        self._check_open()
        self._scratch.clear()
        return self._scratch

    def commit(self) -> Optional[Fragment]:
        """Move the scratch content into a new fragment.

        Returns ``None`` without committing anything when the scratch buffer
        is empty.
        """

        self._check_open()
        if not self._scratch:
            return None
        fragment = Fragment()
        fragment.append("".join(self._scratch))
        self._scratch.clear()
        self.fragments.append(fragment)
        return fragment

    def embed(self, nested: Fragment) -> None:
        """Attach ``nested`` to the most recently committed fragment."""

        self._check_open()
        if not self.fragments:
            raise OutOfOrderCallback("no fragment to embed into")
        self.fragments[-1].append(nested)

    def close(self, text: str) -> None:
        self._check_open()
        self.fragments.append(Fragment([text]))
        self._closed = True

    def render(self) -> str:
        return "".join(fragment.render() for fragment in self.fragments)

    def flush(self) -> str:
        """Flatten all fragments, write them to the sink and return the text."""

        if self._flushed:
            raise AlreadyFinalized("text buffer was already flushed")
        if not self._closed:
            raise SessionNotFinalized("text buffer flushed before it was closed")
        text = self.render()
        if self.sink is not None:
            self.sink.write(text)
        # a failed write leaves the buffer flushable
        self._flushed = True
        if self.sink is not None:
            flush = getattr(self.sink, "flush", None)
            if callable(flush):
                flush()
        return text

    def _check_open(self) -> None:
        if self._closed:
            raise AlreadyFinalized("text buffer is closed")


__all__ = ["Fragment", "TextBuffer"]
