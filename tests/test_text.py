"""Tests for fragment assembly and the single flush contract."""

from __future__ import annotations

import io

import pytest

from classtrace.errors import AlreadyFinalized, OutOfOrderCallback, SessionNotFinalized
from classtrace.text import Fragment, TextBuffer


class CountingSink(io.StringIO):
    def __init__(self) -> None:
        super().__init__()
        self.writes = 0
        self.flushes = 0

    def write(self, text: str) -> int:
        self.writes += 1
        return super().write(text)

    def flush(self) -> None:
        self.flushes += 1
        super().flush()


def test_scratch_buffer_is_cleared_before_each_use() -> None:
    buffer = TextBuffer()
    buffer.begin().append("first\n")
    buffer.commit()

    scratch = buffer.begin()
    assert scratch == []
    scratch.append("stale")
    scratch = buffer.begin()
    assert scratch == []
    assert buffer.commit() is None
    assert len(buffer.fragments) == 1


def test_fragments_render_in_commit_order() -> None:
    buffer = TextBuffer()
    for word in ("a", "b", "c"):
        buffer.begin().append(word)
        buffer.commit()
    buffer.close("}\n")
    assert buffer.render() == "abc}\n"


def test_embedded_fragment_reflects_later_content() -> None:
    buffer = TextBuffer()
    buffer.begin().append("header\n")
    buffer.commit()
    body = Fragment()
    buffer.embed(body)
    buffer.begin().append("next\n")
    buffer.commit()
    body.append("  body\n")
    buffer.close("}\n")
    assert buffer.flush() == "header\n  body\nnext\n}\n"


def test_embed_requires_a_committed_fragment() -> None:
    with pytest.raises(OutOfOrderCallback):
        TextBuffer().embed(Fragment())


def test_flush_writes_to_the_sink_exactly_once() -> None:
    sink = CountingSink()
    buffer = TextBuffer(sink)
    buffer.begin().append("line\n")
    buffer.commit()

    with pytest.raises(SessionNotFinalized):
        buffer.flush()
    assert sink.writes == 0

    buffer.close("}\n")
    assert buffer.flush() == "line\n}\n"
    assert sink.getvalue() == "line\n}\n"
    assert (sink.writes, sink.flushes) == (1, 1)

    with pytest.raises(AlreadyFinalized):
        buffer.flush()
    assert sink.writes == 1


class FailingOnceSink(CountingSink):
    def write(self, text: str) -> int:
        if self.writes == 0:
            self.writes += 1
            raise OSError("disk full")
        return super().write(text)


def test_failed_write_can_be_retried() -> None:
    sink = FailingOnceSink()
    buffer = TextBuffer(sink)
    buffer.close("}\n")

    with pytest.raises(OSError):
        buffer.flush()
    assert sink.getvalue() == ""

    assert buffer.flush() == "}\n"
    assert sink.getvalue() == "}\n"
    assert (sink.writes, sink.flushes) == (2, 1)
    with pytest.raises(AlreadyFinalized):
        buffer.flush()


def test_closed_buffer_rejects_new_content() -> None:
    buffer = TextBuffer()
    buffer.close("}\n")
    with pytest.raises(AlreadyFinalized):
        buffer.begin()
    with pytest.raises(AlreadyFinalized):
        buffer.close("}\n")


def test_nested_fragment_rendering() -> None:
    inner = Fragment(["b", "c"])
    outer = Fragment(["a", inner, "d"])
    assert outer.render() == "abcd"
    assert list(outer.iter_text()) == ["a", "b", "c", "d"]
    assert not Fragment()
