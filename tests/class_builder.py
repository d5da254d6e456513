"""Tiny class-file writer used to feed the reader in tests."""

from __future__ import annotations

import struct
from typing import Dict, List, Optional, Sequence, Tuple


def u1(value: int) -> bytes:
    return value.to_bytes(1, "big")


def u2(value: int) -> bytes:
    return value.to_bytes(2, "big")


def u4(value: int) -> bytes:
    return value.to_bytes(4, "big")


class ClassBuilder:
    def __init__(self) -> None:
        self._entries: List[Optional[bytes]] = [None]
        self._index: Dict[Tuple[int, object], int] = {}

    def _add(self, key: Tuple[int, object], payload: bytes, wide: bool = False) -> int:
        if key in self._index:
            return self._index[key]
        index = len(self._entries)
        self._entries.append(u1(key[0]) + payload)
        if wide:
            self._entries.append(None)
        self._index[key] = index
        return index

    def utf8(self, text: str) -> int:
        raw = text.encode("utf-8")
        return self._add((1, text), u2(len(raw)) + raw)

    def integer(self, value: int) -> int:
        return self._add((3, value), struct.pack(">i", value))

    def long(self, value: int) -> int:
        return self._add((5, value), struct.pack(">q", value), wide=True)

    def float32(self, value: float) -> int:
        payload = struct.pack(">f", value)
        return self._add((4, payload), payload)

    def double(self, value: float) -> int:
        return self._add((6, value), struct.pack(">d", value), wide=True)

    def cls(self, name: str) -> int:
        return self._add((7, name), u2(self.utf8(name)))

    def string(self, text: str) -> int:
        return self._add((8, text), u2(self.utf8(text)))

    def name_and_type(self, name: str, desc: str) -> int:
        return self._add((12, (name, desc)), u2(self.utf8(name)) + u2(self.utf8(desc)))

    def attribute(self, name: str, data: bytes = b"") -> bytes:
        return u2(self.utf8(name)) + u4(len(data)) + data

    def member(
        self, access: int, name: str, desc: str, attributes: Sequence[bytes] = ()
    ) -> bytes:
        return (
            u2(access)
            + u2(self.utf8(name))
            + u2(self.utf8(desc))
            + u2(len(attributes))
            + b"".join(attributes)
        )

    def code(self, max_stack: int, max_locals: int, code: bytes = b"\xb1") -> bytes:
        body = u2(max_stack) + u2(max_locals) + u4(len(code)) + code + u2(0) + u2(0)
        return self.attribute("Code", body)

    def build(
        self,
        access: int,
        name: str,
        super_name: Optional[str] = "java/lang/Object",
        interfaces: Sequence[str] = (),
        fields: Sequence[bytes] = (),
        methods: Sequence[bytes] = (),
        attributes: Sequence[bytes] = (),
        *,
        major: int = 49,
        minor: int = 0,
    ) -> bytes:
        this_index = self.cls(name)
        super_index = self.cls(super_name) if super_name else 0
        interface_indices = [self.cls(item) for item in interfaces]
        pool = b"".join(entry for entry in self._entries if entry is not None)
        return (
            u4(0xCAFEBABE)
            + u2(minor)
            + u2(major)
            + u2(len(self._entries))
            + pool
            + u2(access)
            + u2(this_index)
            + u2(super_index)
            + u2(len(interface_indices))
            + b"".join(u2(index) for index in interface_indices)
            + u2(len(fields))
            + b"".join(fields)
            + u2(len(methods))
            + b"".join(methods)
            + u2(len(attributes))
            + b"".join(attributes)
        )


def hello_class(builder: Optional[ClassBuilder] = None) -> bytes:
    """The classic ``Hello`` class with a source attribute and two methods."""

    b = builder or ClassBuilder()
    init = b.member(0x0001, "<init>", "()V", [b.code(1, 1)])
    main = b.member(0x0009, "main", "([Ljava/lang/String;)V", [b.code(2, 1)])
    source = b.attribute("SourceFile", u2(b.utf8("Hello.java")))
    return b.build(0x0021, "Hello", methods=[init, main], attributes=[source])
