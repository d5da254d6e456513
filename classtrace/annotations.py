"""Default text producers for annotations and raw attributes."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from .errors import OutOfOrderCallback
from .text import Fragment


@dataclass(frozen=True)
class CharLiteral:
    """A ``char`` constant; rendered in single quotes."""

    value: str

    def __str__(self) -> str:
        return f"'{self.value}'"


@dataclass(frozen=True)
class FloatLiteral:
    """A ``float`` (``bits=32``) or ``double`` (``bits=64``) constant."""

    value: float
    bits: int = 64

    def __str__(self) -> str:
        return format_float(self.value, self.bits)


def format_float(value: float, bits: int = 64) -> str:
    """Shortest text that reads back to the same ``float``/``double`` value.

    Uses the Java spellings ``NaN``, ``Infinity`` and ``1.0E10``.
    """

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    text = repr(value)
    if bits == 32:
        packed = struct.pack(">f", value)
        for precision in range(1, 10):
            candidate = f"{value:.{precision}g}"
            try:
                if struct.pack(">f", float(candidate)) == packed:
                    text = candidate
                    break
            except OverflowError:
                continue
    mantissa, _, exponent = text.partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    if exponent:
        return f"{mantissa}E{int(exponent)}"
    return mantissa


@dataclass(frozen=True)
class TypeLiteral:
    """A class literal given by its descriptor."""

    descriptor: str

    def __str__(self) -> str:
        return f"{self.descriptor}.class"


@dataclass(frozen=True)
class Attribute:
    """A non-standard attribute forwarded without interpretation."""

    name: str
    data: bytes = b""


def format_literal(value: Any) -> str:
    """Render a constant the way it would be written in source."""

    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_float(value)
    return str(value)


def render_attribute(attribute: Attribute, indent: str = "") -> str:
    return f"{indent}ATTRIBUTE {attribute.name} : {len(attribute.data)} bytes\n"


_Value = Union[str, "AnnotationRenderer", "ArrayValueRenderer"]


class _ValueCollector:
    """Shared element-value collection for annotations and arrays."""

    def __init__(self) -> None:
        self._values: List[Tuple[Optional[str], _Value]] = []
        self._finished = False

    def _add(self, name: Optional[str], value: _Value) -> None:
        if self._finished:
            raise OutOfOrderCallback("annotation value visited after finish()")
        self._values.append((name, value))

    def visit(self, name: Optional[str], value: Any) -> None:
        self._add(name, format_literal(value))

    def visit_enum(self, name: Optional[str], desc: str, value: str) -> None:
        self._add(name, f"{desc}.{value}")

    def visit_annotation(self, name: Optional[str], desc: str) -> "AnnotationRenderer":
        nested = AnnotationRenderer(desc)
        self._add(name, nested)
        return nested

    def visit_array(self, name: Optional[str]) -> "ArrayValueRenderer":
        nested = ArrayValueRenderer()
        self._add(name, nested)
        return nested

    def _render_values(self) -> List[str]:
        rendered = []
        for name, value in self._values:
            text = value if isinstance(value, str) else value.inline()
            rendered.append(text if name is None else f"{name}={text}")
        return rendered


class ArrayValueRenderer(_ValueCollector):
    """Element values of an array-typed annotation member."""

    def inline(self) -> str:
        return "{" + ", ".join(self._render_values()) + "}"

    def finish(self) -> None:
        self._finished = True


class AnnotationRenderer(_ValueCollector):
    """Collect the element values of one annotation and render it.

    ``@Lpkg/Name;(a=1, b="x")`` is followed by ``// invisible`` for
    annotations retained only in the class file and ``// parameter N`` for
    parameter annotations.
    """

    def __init__(
        self,
        desc: str,
        visible: bool = True,
        *,
        indent: str = "",
        parameter: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.desc = desc
        self.visible = visible
        self.indent = indent
        self.parameter = parameter
        self.fragment = Fragment()

    def inline(self) -> str:
        return f"@{self.desc}({', '.join(self._render_values())})"

    def finish(self) -> Fragment:
        if not self._finished:
            line = self.indent + self.inline()
            if self.parameter is not None:
                line += f" // parameter {self.parameter}"
            if not self.visible:
                line += " // invisible"
            self.fragment.append(line + "\n")
            self._finished = True
        return self.fragment


class DefaultValueRenderer(AnnotationRenderer):
    """The default value of an annotation interface method."""

    def __init__(self, *, indent: str = "") -> None:
        super().__init__("", indent=indent)

    def inline(self) -> str:
        values = self._render_values()
        return values[0] if values else ""

    def finish(self) -> Fragment:
        if not self._finished:
            self.fragment.append(f"{self.indent}default={self.inline()}\n")
            self._finished = True
        return self.fragment


__all__ = [
    "Attribute",
    "AnnotationRenderer",
    "ArrayValueRenderer",
    "CharLiteral",
    "DefaultValueRenderer",
    "TypeLiteral",
    "format_literal",
    "render_attribute",
]
