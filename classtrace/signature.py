"""Recursive-descent decoder for JVM generic signatures.

Three entry grammars are supported: class signatures (formal type parameters,
superclass, interfaces), field signatures (one reference type) and method
signatures (formal type parameters, parameter types, return type and ``^``
throws markers).  Decoding returns a :class:`SignatureNode` with Java-like
text, e.g. ``<T extends java.lang.Number>(java.util.List<T>)`` for a method.

Every decode call is all-or-nothing: the parser only produces strings and the
caller receives either a complete node or :class:`MalformedSignature`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import MalformedSignature
from .access import ROOT_TYPE, AccessFlag

BASE_TYPES = {
    "B": "byte",
    "C": "char",
    "D": "double",
    "F": "float",
    "I": "int",
    "J": "long",
    "S": "short",
    "Z": "boolean",
}

_ROOT_TYPE_NAME = ROOT_TYPE.replace("/", ".")
_IDENTIFIER_STOP = frozenset(".;[/<>:")


@dataclass(frozen=True)
class SignatureNode:
    """Result of decoding one signature string."""

    declaration: str
    return_type: Optional[str] = None
    exceptions: Tuple[str, ...] = ()


class _SignatureParser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    # ------------------------------------------------------------------
    # cursor helpers
    # ------------------------------------------------------------------
    def peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def fail(self, reason: str) -> MalformedSignature:
        return MalformedSignature(self.text, self.pos, reason)

    def expect(self, char: str) -> None:
        if self.peek() != char:
            found = repr(self.peek()) if self.peek() else "end of input"
            raise self.fail(f"expected {char!r}, found {found}")
        self.pos += 1

    def finish(self) -> None:
        if not self.at_end():
            raise self.fail("unexpected trailing characters")

    def identifier(self) -> str:
        start = self.pos
        while not self.at_end() and self.text[self.pos] not in _IDENTIFIER_STOP:
            self.pos += 1
        if self.pos == start:
            raise self.fail("expected identifier")
        return self.text[start : self.pos]

    # ------------------------------------------------------------------
    # grammar productions
    # ------------------------------------------------------------------
    def formal_type_parameters(self) -> List[str]:
        if self.peek() != "<":
            return []
        self.pos += 1
        params = [self.type_parameter()]
        while self.peek() != ">":
            if self.at_end():
                raise self.fail("unterminated type parameter list")
            params.append(self.type_parameter())
        self.pos += 1
        return params

    def type_parameter(self) -> str:
        name = self.identifier()
        self.expect(":")
        bounds: List[str] = []
        if self.peek() in ("L", "T", "["):
            bound = self.reference_type()
            # An Object class bound is the implicit default.
            if bound != _ROOT_TYPE_NAME:
                bounds.append(bound)
        while self.peek() == ":":
            self.pos += 1
            bounds.append(self.reference_type())
        if bounds:
            return f"{name} extends {' & '.join(bounds)}"
        return name

    def java_type(self) -> str:
        char = self.peek()
        if char in BASE_TYPES:
            self.pos += 1
            return BASE_TYPES[char]
        return self.reference_type()

    def reference_type(self) -> str:
        char = self.peek()
        if char == "L":
            return self.class_type()
        if char == "T":
            return self.type_variable()
        if char == "[":
            self.pos += 1
            return f"{self.java_type()}[]"
        found = repr(char) if char else "end of input"
        raise self.fail(f"expected reference type, found {found}")

    def type_variable(self) -> str:
        self.expect("T")
        name = self.identifier()
        self.expect(";")
        return name

    def class_type(self) -> str:
        self.expect("L")
        parts = [self.identifier()]
        while self.peek() == "/":
            self.pos += 1
            parts.append(self.identifier())
        text = ".".join(parts)
        if self.peek() == "<":
            text += self.type_arguments()
        while self.peek() == ".":
            self.pos += 1
            text += "." + self.identifier()
            if self.peek() == "<":
                text += self.type_arguments()
        self.expect(";")
        return text

    def type_arguments(self) -> str:
        self.expect("<")
        args = [self.type_argument()]
        while self.peek() != ">":
            if self.at_end():
                raise self.fail("unterminated type argument list")
            args.append(self.type_argument())
        self.pos += 1
        return f"<{', '.join(args)}>"

    def type_argument(self) -> str:
        char = self.peek()
        if char == "*":
            self.pos += 1
            return "?"
        if char == "+":
            self.pos += 1
            return f"? extends {self.reference_type()}"
        if char == "-":
            self.pos += 1
            return f"? super {self.reference_type()}"
        return self.reference_type()

    def return_type(self) -> str:
        if self.peek() == "V":
            self.pos += 1
            return "void"
        return self.java_type()

    def throws_types(self) -> List[str]:
        thrown: List[str] = []
        while self.peek() == "^":
            self.pos += 1
            if self.peek() == "T":
                thrown.append(self.type_variable())
            else:
                thrown.append(self.class_type())
        return thrown


def _formals_text(params: List[str]) -> str:
    if not params:
        return ""
    return f"<{', '.join(params)}>"


def decode_class_signature(signature: str, access: int = 0) -> SignatureNode:
    """Decode a class signature into ``<formals> extends S implements I``."""

    parser = _SignatureParser(signature)
    formals = parser.formal_type_parameters()
    superclass = parser.class_type()
    interfaces: List[str] = []
    while not parser.at_end():
        interfaces.append(parser.class_type())

    declaration = _formals_text(formals)
    if superclass != _ROOT_TYPE_NAME:
        declaration += f" extends {superclass}"
    if interfaces:
        keyword = "extends" if access & AccessFlag.INTERFACE else "implements"
        declaration += f" {keyword} {', '.join(interfaces)}"
    return SignatureNode(declaration)


def decode_field_signature(signature: str) -> SignatureNode:
    """Decode a field signature into its Java type."""

    parser = _SignatureParser(signature)
    declaration = parser.reference_type()
    parser.finish()
    return SignatureNode(declaration)


def decode_method_signature(signature: str) -> SignatureNode:
    """Decode a method signature.

    The declaration holds the formal type parameters and the parenthesised
    parameter list; the return type and thrown types are reported separately.
    """

    parser = _SignatureParser(signature)
    formals = parser.formal_type_parameters()
    parser.expect("(")
    params: List[str] = []
    while parser.peek() != ")":
        if parser.at_end():
            raise parser.fail("unterminated parameter list")
        params.append(parser.java_type())
    parser.pos += 1
    return_type = parser.return_type()
    thrown = parser.throws_types()
    parser.finish()

    declaration = f"{_formals_text(formals)}({', '.join(params)})"
    return SignatureNode(declaration, return_type, tuple(thrown))


__all__ = [
    "BASE_TYPES",
    "SignatureNode",
    "decode_class_signature",
    "decode_field_signature",
    "decode_method_signature",
]
