"""Minimal ``.class`` reader that replays a class as structural callbacks."""

from __future__ import annotations

import logging
import os
import struct
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO, Tuple

from .annotations import Attribute, CharLiteral, FloatLiteral, TypeLiteral
from .errors import ClassFormatError, ClassNotFound
from .access import AccessFlag
from .renderer import ClassRenderer, RenderOptions

logger = logging.getLogger(__name__)

MAGIC = 0xCAFEBABE

# Constant pool tags.
CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

_SINGLE_INDEX_TAGS = {
    CONSTANT_CLASS,
    CONSTANT_STRING,
    CONSTANT_METHOD_TYPE,
    CONSTANT_MODULE,
    CONSTANT_PACKAGE,
}
_DOUBLE_INDEX_TAGS = {
    CONSTANT_FIELDREF,
    CONSTANT_METHODREF,
    CONSTANT_INTERFACE_METHODREF,
    CONSTANT_NAME_AND_TYPE,
    CONSTANT_DYNAMIC,
    CONSTANT_INVOKE_DYNAMIC,
}

# Attributes interpreted by the reader; everything else is forwarded raw.
_INTERPRETED = frozenset(
    {
        "AnnotationDefault",
        "Code",
        "ConstantValue",
        "Deprecated",
        "EnclosingMethod",
        "Exceptions",
        "InnerClasses",
        "RuntimeInvisibleAnnotations",
        "RuntimeInvisibleParameterAnnotations",
        "RuntimeVisibleAnnotations",
        "RuntimeVisibleParameterAnnotations",
        "Signature",
        "SourceDebugExtension",
        "SourceFile",
        "Synthetic",
    }
)


def decode_modified_utf8(raw: bytes) -> str:
    """Decode the modified UTF-8 used by class-file ``Utf8`` constants."""

    try:
        text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", "surrogatepass")
        # Supplementary characters are stored as surrogate pairs.
        return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeError as exc:
        raise ClassFormatError(f"invalid modified UTF-8 constant: {exc}") from exc


class _Cursor:
    """Big-endian reader over a byte buffer."""

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ClassFormatError(
                f"truncated class data: need {size} byte(s) at offset {self.offset}"
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def u1(self) -> int:
        return self.take(1)[0]

    def u2(self) -> int:
        return int.from_bytes(self.take(2), "big")

    def u4(self) -> int:
        return int.from_bytes(self.take(4), "big")


class ConstantPool:
    """Decoded constant pool; index 0 and the second slot of wide entries are ``None``."""

    def __init__(self, entries: List[Optional[Tuple[int, Any]]]) -> None:
        self._entries = entries

    @classmethod
    def parse(cls, cursor: _Cursor) -> "ConstantPool":
        count = cursor.u2()
        entries: List[Optional[Tuple[int, Any]]] = [None] * max(count, 1)
        index = 1
        while index < count:
            tag = cursor.u1()
            if tag == CONSTANT_UTF8:
                value: Any = decode_modified_utf8(cursor.take(cursor.u2()))
            elif tag == CONSTANT_INTEGER:
                value = int.from_bytes(cursor.take(4), "big", signed=True)
            elif tag == CONSTANT_FLOAT:
                value = FloatLiteral(struct.unpack(">f", cursor.take(4))[0], 32)
            elif tag == CONSTANT_LONG:
                value = int.from_bytes(cursor.take(8), "big", signed=True)
            elif tag == CONSTANT_DOUBLE:
                value = FloatLiteral(struct.unpack(">d", cursor.take(8))[0], 64)
            elif tag in _SINGLE_INDEX_TAGS:
                value = cursor.u2()
            elif tag in _DOUBLE_INDEX_TAGS:
                value = (cursor.u2(), cursor.u2())
            elif tag == CONSTANT_METHOD_HANDLE:
                value = (cursor.u1(), cursor.u2())
            else:
                raise ClassFormatError(f"unknown constant pool tag {tag} at index {index}")
            entries[index] = (tag, value)
            # Long and double constants occupy two slots.
            index += 2 if tag in (CONSTANT_LONG, CONSTANT_DOUBLE) else 1
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _entry(self, index: int, *tags: int) -> Any:
        entry = self._entries[index] if 0 < index < len(self._entries) else None
        if entry is None or entry[0] not in tags:
            raise ClassFormatError(f"bad constant pool reference #{index}")
        return entry[1]

    def utf8(self, index: int) -> str:
        return self._entry(index, CONSTANT_UTF8)

    def class_name(self, index: int) -> str:
        return self.utf8(self._entry(index, CONSTANT_CLASS))

    def optional_class_name(self, index: int) -> Optional[str]:
        return self.class_name(index) if index else None

    def optional_utf8(self, index: int) -> Optional[str]:
        return self.utf8(index) if index else None

    def name_and_type(self, index: int) -> Tuple[str, str]:
        name_index, desc_index = self._entry(index, CONSTANT_NAME_AND_TYPE)
        return self.utf8(name_index), self.utf8(desc_index)

    def value(self, index: int) -> Any:
        """Integer, float, long, double or string constant at ``index``."""

        entry = self._entries[index] if 0 < index < len(self._entries) else None
        if entry is None:
            raise ClassFormatError(f"bad constant pool reference #{index}")
        tag, value = entry
        if tag == CONSTANT_STRING:
            return self.utf8(value)
        if tag in (CONSTANT_INTEGER, CONSTANT_FLOAT, CONSTANT_LONG, CONSTANT_DOUBLE):
            return value
        raise ClassFormatError(f"constant #{index} is not a loadable value")


@dataclass
class _MemberInfo:
    access: int
    name: str
    descriptor: str
    attributes: Dict[str, bytes] = field(default_factory=dict)
    extra: List[Attribute] = field(default_factory=list)


def _read_attributes(
    cursor: _Cursor, pool: ConstantPool
) -> Tuple[Dict[str, bytes], List[Attribute]]:
    known: Dict[str, bytes] = {}
    extra: List[Attribute] = []
    for _ in range(cursor.u2()):
        name = pool.utf8(cursor.u2())
        data = cursor.take(cursor.u4())
        if name in _INTERPRETED:
            known[name] = data
        else:
            extra.append(Attribute(name, data))
    return known, extra


class ClassFileReader:
    """Parse a class-file image and replay it through :meth:`accept`."""

    def __init__(self, data: bytes) -> None:
        cursor = _Cursor(data)
        if cursor.u4() != MAGIC:
            raise ClassFormatError("not a class file (bad magic number)")
        self.minor = cursor.u2()
        self.major = cursor.u2()
        self.pool = ConstantPool.parse(cursor)
        self.access = cursor.u2()
        self.name = self.pool.class_name(cursor.u2())
        self.super_name = self.pool.optional_class_name(cursor.u2())
        self.interfaces = tuple(
            self.pool.class_name(cursor.u2()) for _ in range(cursor.u2())
        )
        self.fields = self._read_members(cursor)
        self.methods = self._read_members(cursor)
        self.attributes, self.extra_attributes = _read_attributes(cursor, self.pool)
        if cursor.offset != len(data):
            raise ClassFormatError(
                f"{len(data) - cursor.offset} trailing byte(s) after class data"
            )

    @classmethod
    def from_path(cls, path: Path) -> "ClassFileReader":
        return cls(Path(path).read_bytes())

    @property
    def version(self) -> int:
        return (self.minor << 16) | self.major

    def _read_members(self, cursor: _Cursor) -> List[_MemberInfo]:
        members = []
        for _ in range(cursor.u2()):
            access = cursor.u2()
            name = self.pool.utf8(cursor.u2())
            descriptor = self.pool.utf8(cursor.u2())
            known, extra = _read_attributes(cursor, self.pool)
            members.append(_MemberInfo(access, name, descriptor, known, extra))
        return members

    # ------------------------------------------------------------------
    # replay
    # ------------------------------------------------------------------
    def accept(self, visitor: ClassRenderer, *, skip_debug: bool = True) -> None:
        attrs = self.attributes
        visitor.visit(
            self.version,
            self._access(self.access, attrs),
            self.name,
            self._signature(attrs),
            self.super_name,
            self.interfaces,
        )

        if not skip_debug:
            source = self._utf8_attribute(attrs, "SourceFile")
            debug = attrs.get("SourceDebugExtension")
            if source is not None or debug is not None:
                visitor.visit_source(
                    source, decode_modified_utf8(debug) if debug is not None else None
                )

        if "EnclosingMethod" in attrs:
            cursor = _Cursor(attrs["EnclosingMethod"])
            owner = self.pool.class_name(cursor.u2())
            method_index = cursor.u2()
            if method_index:
                name, desc = self.pool.name_and_type(method_index)
                visitor.visit_outer_class(owner, name, desc)
            else:
                visitor.visit_outer_class(owner)

        self._replay_annotations(attrs, visitor)
        for attribute in self.extra_attributes:
            visitor.visit_attribute(attribute)

        if "InnerClasses" in attrs:
            cursor = _Cursor(attrs["InnerClasses"])
            for _ in range(cursor.u2()):
                inner = self.pool.class_name(cursor.u2())
                outer = self.pool.optional_class_name(cursor.u2())
                simple = self.pool.optional_utf8(cursor.u2())
                visitor.visit_inner_class(inner, outer, simple, cursor.u2())

        for info in self.fields:
            value = None
            if "ConstantValue" in info.attributes:
                value = self.pool.value(_Cursor(info.attributes["ConstantValue"]).u2())
            renderer = visitor.visit_field(
                self._access(info.access, info.attributes),
                info.name,
                info.descriptor,
                self._signature(info.attributes),
                value,
            )
            self._replay_annotations(info.attributes, renderer)
            for attribute in info.extra:
                renderer.visit_attribute(attribute)
            renderer.finish()

        for info in self.methods:
            exceptions: Tuple[str, ...] = ()
            if "Exceptions" in info.attributes:
                cursor = _Cursor(info.attributes["Exceptions"])
                exceptions = tuple(
                    self.pool.class_name(cursor.u2()) for _ in range(cursor.u2())
                )
            renderer = visitor.visit_method(
                self._access(info.access, info.attributes),
                info.name,
                info.descriptor,
                self._signature(info.attributes),
                exceptions,
            )
            if "AnnotationDefault" in info.attributes:
                default = renderer.visit_annotation_default()
                self._read_element_value(
                    _Cursor(info.attributes["AnnotationDefault"]), default, None
                )
                default.finish()
            self._replay_annotations(info.attributes, renderer)
            for attr_name, visible in (
                ("RuntimeVisibleParameterAnnotations", True),
                ("RuntimeInvisibleParameterAnnotations", False),
            ):
                if attr_name in info.attributes:
                    self._replay_parameter_annotations(
                        info.attributes[attr_name], visible, renderer
                    )
            for attribute in info.extra:
                renderer.visit_attribute(attribute)
            if "Code" in info.attributes:
                cursor = _Cursor(info.attributes["Code"])
                max_stack, max_locals = cursor.u2(), cursor.u2()
                renderer.visit_maxs(max_stack, max_locals)
            renderer.finish()

        visitor.visit_end()

    # ------------------------------------------------------------------
    # attribute helpers
    # ------------------------------------------------------------------
    def _utf8_attribute(self, attrs: Dict[str, bytes], name: str) -> Optional[str]:
        if name not in attrs:
            return None
        return self.pool.utf8(_Cursor(attrs[name]).u2())

    def _signature(self, attrs: Dict[str, bytes]) -> Optional[str]:
        return self._utf8_attribute(attrs, "Signature")

    @staticmethod
    def _access(access: int, attrs: Dict[str, bytes]) -> int:
        if "Deprecated" in attrs:
            access |= AccessFlag.DEPRECATED
        if "Synthetic" in attrs:
            access |= AccessFlag.SYNTHETIC
        return int(access)

    def _replay_annotations(self, attrs: Dict[str, bytes], visitor: Any) -> None:
        for attr_name, visible in (
            ("RuntimeVisibleAnnotations", True),
            ("RuntimeInvisibleAnnotations", False),
        ):
            if attr_name not in attrs:
                continue
            cursor = _Cursor(attrs[attr_name])
            for _ in range(cursor.u2()):
                desc = self.pool.utf8(cursor.u2())
                annotation = visitor.visit_annotation(desc, visible)
                self._read_element_pairs(cursor, annotation)
                annotation.finish()

    def _replay_parameter_annotations(
        self, data: bytes, visible: bool, renderer: Any
    ) -> None:
        cursor = _Cursor(data)
        for parameter in range(cursor.u1()):
            for _ in range(cursor.u2()):
                desc = self.pool.utf8(cursor.u2())
                annotation = renderer.visit_parameter_annotation(parameter, desc, visible)
                self._read_element_pairs(cursor, annotation)
                annotation.finish()

    def _read_element_pairs(self, cursor: _Cursor, visitor: Any) -> None:
        for _ in range(cursor.u2()):
            name = self.pool.utf8(cursor.u2())
            self._read_element_value(cursor, visitor, name)

    def _read_element_value(
        self, cursor: _Cursor, visitor: Any, name: Optional[str]
    ) -> None:
        tag = chr(cursor.u1())
        if tag in "BDFIJS":
            visitor.visit(name, self.pool.value(cursor.u2()))
        elif tag == "Z":
            visitor.visit(name, bool(self.pool.value(cursor.u2())))
        elif tag == "C":
            visitor.visit(name, CharLiteral(chr(self.pool.value(cursor.u2()))))
        elif tag == "s":
            visitor.visit(name, self.pool.utf8(cursor.u2()))
        elif tag == "c":
            visitor.visit(name, TypeLiteral(self.pool.utf8(cursor.u2())))
        elif tag == "e":
            desc = self.pool.utf8(cursor.u2())
            visitor.visit_enum(name, desc, self.pool.utf8(cursor.u2()))
        elif tag == "@":
            nested = visitor.visit_annotation(name, self.pool.utf8(cursor.u2()))
            self._read_element_pairs(cursor, nested)
        elif tag == "[":
            array = visitor.visit_array(name)
            for _ in range(cursor.u2()):
                self._read_element_value(cursor, array, None)
            array.finish()
        else:
            raise ClassFormatError(f"unknown element value tag {tag!r}")


def split_classpath(value: Optional[str]) -> List[str]:
    if not value:
        return ["."]
    return [entry for entry in value.split(os.pathsep) if entry]


def resolve_class(identifier: str, classpath: Iterable[str] = (".",)) -> bytes:
    """Return the bytes of a class given by file path or qualified name."""

    if identifier.endswith(".class"):
        path = Path(identifier)
        if not path.is_file():
            raise ClassNotFound(f"class file not found: {identifier}")
        return path.read_bytes()

    entry = identifier.replace(".", "/") + ".class"
    for root in classpath:
        location = Path(root)
        if location.is_dir():
            candidate = location / entry
            if candidate.is_file():
                logger.debug("resolved %s to %s", identifier, candidate)
                return candidate.read_bytes()
        elif location.is_file() and zipfile.is_zipfile(location):
            with zipfile.ZipFile(location) as archive:
                try:
                    data = archive.read(entry)
                except KeyError:
                    continue
            logger.debug("resolved %s inside %s", identifier, location)
            return data
    raise ClassNotFound(f"class not found on classpath: {identifier}")


def trace_class(
    data: bytes,
    sink: Optional[TextIO] = None,
    *,
    skip_debug: bool = True,
    options: Optional[RenderOptions] = None,
) -> str:
    """Render the class-file image ``data`` and return the listing."""

    renderer = ClassRenderer(sink, options)
    ClassFileReader(data).accept(renderer, skip_debug=skip_debug)
    return renderer.text.render()


__all__ = [
    "ClassFileReader",
    "ConstantPool",
    "MAGIC",
    "decode_modified_utf8",
    "resolve_class",
    "split_classpath",
    "trace_class",
]
