"""Class-level trace renderer driven by structural callbacks.

:class:`ClassRenderer` receives the description of one compiled class as an
ordered stream of callbacks and produces a listing such as::

    // class version 49.0 (49)
    // access flags 33
    public class Hello {

      // compiled from: Hello.java

      // access flags 9
      public static main ([Ljava/lang/String;)V
        MAXSTACK = 2
        MAXLOCALS = 1
    }

The callbacks must arrive in the order ``visit`` (header), ``visit_source``,
``visit_outer_class``, then any mix of annotations, attributes, inner
classes, fields and methods, and finally ``visit_end``.  Optional steps may be
skipped.  Field and method steps return a member renderer that receives the
member's body events; it is finished explicitly or, at the latest, when the
next class-level callback arrives.

A renderer instance is a single-owner object: it is neither thread-safe nor
reentrant and renders exactly one class.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Sequence, TextIO, Tuple, Union

from .annotations import AnnotationRenderer, Attribute, format_literal, render_attribute
from .errors import MalformedSignature, OutOfOrderCallback
from .flags import access_prefix
from .members import FieldRenderer, MemberDescriptor, MemberRenderer, MethodRenderer
from .access import ROOT_TYPE, AccessFlag, DeclarationKind
from .signature import (
    SignatureNode,
    decode_class_signature,
    decode_field_signature,
    decode_method_signature,
)
from .text import Fragment, TextBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassDescriptor:
    """Header data of the class being rendered."""

    version: int
    access: int
    name: str
    signature: Optional[str] = None
    super_name: Optional[str] = None
    interfaces: Tuple[str, ...] = ()

    @property
    def major(self) -> int:
        return self.version & 0xFFFF

    @property
    def minor(self) -> int:
        return self.version >> 16


@dataclass
class RenderOptions:
    """Layout knobs for :class:`ClassRenderer`."""

    tab: str = "  "
    root_type: str = ROOT_TYPE


class _State(Enum):
    STARTED = auto()
    HEADER = auto()
    SOURCE = auto()
    OUTER_CLASS = auto()
    BODY = auto()
    ENDED = auto()
    FAILED = auto()


_RANK = {
    _State.STARTED: 0,
    _State.HEADER: 1,
    _State.SOURCE: 2,
    _State.OUTER_CLASS: 3,
    _State.BODY: 4,
}

_Child = Union[MemberRenderer, AnnotationRenderer]


class ClassRenderer:
    """Render one class from its structural callbacks into ``sink``."""

    def __init__(
        self,
        sink: Optional[TextIO] = None,
        options: Optional[RenderOptions] = None,
    ) -> None:
        self.options = options or RenderOptions()
        self.tab = self.options.tab
        self.text = TextBuffer(sink)
        self.descriptor: Optional[ClassDescriptor] = None
        self._state = _State.STARTED
        self._open: Optional[_Child] = None

    @property
    def fragments(self) -> Sequence[Fragment]:
        return self.text.fragments

    @property
    def ended(self) -> bool:
        return self._state is _State.ENDED

    # ------------------------------------------------------------------
    # structural callbacks
    # ------------------------------------------------------------------
    def visit(
        self,
        version: int,
        access: int,
        name: str,
        signature: Optional[str] = None,
        super_name: Optional[str] = None,
        interfaces: Sequence[str] = (),
    ) -> None:
        self._advance(_State.HEADER, "class header")
        descriptor = ClassDescriptor(
            version, access, name, signature, super_name, tuple(interfaces or ())
        )
        self.descriptor = descriptor

        if signature is not None:
            tail = self._decode(decode_class_signature, signature, access).declaration
        else:
            tail = ""
            if super_name is not None and super_name != self.options.root_type:
                tail += f" extends {super_name}"
            if descriptor.interfaces:
                tail += f" implements {', '.join(descriptor.interfaces)}"

        buf = self.text.begin()
        buf.append(
            f"// class version {descriptor.major}.{descriptor.minor} ({version})\n"
        )
        if access & AccessFlag.DEPRECATED:
            buf.append("// DEPRECATED\n")
        buf.append(f"// access flags {int(access)}\n")
        keywords = access_prefix(access & ~int(AccessFlag.SUPER), DeclarationKind.CLASS)
        buf.append(f"{keywords}{_class_keyword(access)} {name}{tail} {{\n\n")
        self.text.commit()

    def visit_source(self, file: Optional[str], debug: Optional[str]) -> None:
        self._advance(_State.SOURCE, "source")
        buf = self.text.begin()
        if file is not None:
            buf.append(f"{self.tab}// compiled from: {file}\n")
        if debug is not None:
            buf.append(f"{self.tab}// debug info: {debug}\n")
        self.text.commit()

    def visit_outer_class(
        self, owner: str, name: Optional[str] = None, desc: Optional[str] = None
    ) -> None:
        self._advance(_State.OUTER_CLASS, "outer class")
        parts = [owner] + [part for part in (name, desc) if part is not None]
        buf = self.text.begin()
        buf.append(f"{self.tab}OUTERCLASS {' '.join(parts)}\n")
        self.text.commit()

    def visit_annotation(self, desc: str, visible: bool) -> AnnotationRenderer:
        self._advance(_State.BODY, "annotation")
        annotation = AnnotationRenderer(desc, visible, indent=self.tab)
        self.text.begin().append("\n")
        self.text.commit()
        self.text.embed(annotation.fragment)
        self._open = annotation
        return annotation

    def visit_attribute(self, attribute: Attribute) -> None:
        self._advance(_State.BODY, "attribute")
        buf = self.text.begin()
        buf.append("\n")
        buf.append(render_attribute(attribute, self.tab))
        self.text.commit()

    def visit_inner_class(
        self,
        name: str,
        outer_name: Optional[str],
        inner_name: Optional[str],
        access: int,
    ) -> None:
        self._advance(_State.BODY, "inner class")
        line = (
            f"{self.tab}INNERCLASS {name} {_or_null(outer_name)} {_or_null(inner_name)}"
            f" {int(access) & ~int(AccessFlag.SUPER)}"
        )
        if access & AccessFlag.ENUM:
            line += " enum"
        buf = self.text.begin()
        buf.append(line + "\n")
        self.text.commit()

    def visit_field(
        self,
        access: int,
        name: str,
        desc: str,
        signature: Optional[str] = None,
        value: object = None,
    ) -> FieldRenderer:
        self._advance(_State.BODY, f"field {name}")
        member = MemberDescriptor(access, name, desc, signature, value)
        if signature is not None:
            type_text = self._decode(decode_field_signature, signature).declaration
        else:
            type_text = desc

        buf = self._begin_member(access)
        line = f"{self.tab}{access_prefix(access, DeclarationKind.FIELD)}"
        if access & AccessFlag.ENUM:
            line += "enum "
        line += f"{type_text} {name}"
        if value is not None:
            line += f" = {format_literal(value)}"
        buf.append(line + "\n")
        self.text.commit()

        renderer = FieldRenderer(member, tab=self.tab)
        self.text.embed(renderer.fragment)
        self._open = renderer
        return renderer

    def visit_method(
        self,
        access: int,
        name: str,
        desc: str,
        signature: Optional[str] = None,
        exceptions: Sequence[str] = (),
    ) -> MethodRenderer:
        self._advance(_State.BODY, f"method {name}")
        member = MemberDescriptor(
            access, name, desc, signature, exceptions=tuple(exceptions or ())
        )
        decoded = (
            self._decode(decode_method_signature, signature)
            if signature is not None
            else None
        )

        buf = self._begin_member(access)
        line = f"{self.tab}{access_prefix(access, DeclarationKind.METHOD)}"
        if access & AccessFlag.NATIVE:
            line += "native "
        if access & AccessFlag.VARARGS:
            line += "varargs "
        if access & AccessFlag.BRIDGE:
            line += "bridge "
        if decoded is not None:
            line += f"{name}{decoded.declaration} : {decoded.return_type}"
        else:
            line += f"{name} {desc}"
        if member.exceptions:
            line += f" throws {', '.join(member.exceptions)}"
        buf.append(line + "\n")
        self.text.commit()

        renderer = MethodRenderer(member, tab=self.tab)
        self.text.embed(renderer.fragment)
        self._open = renderer
        return renderer

    def visit_end(self) -> str:
        """Close the listing, write it to the sink once and return it."""

        self._check_live("end")
        if self._state is _State.STARTED:
            raise OutOfOrderCallback("end visited before the class header")
        self._close_child()
        self._state = _State.ENDED
        self.text.close("}\n")
        logger.debug(
            "rendered %s in %d fragments",
            self.descriptor.name if self.descriptor else "?",
            len(self.text.fragments),
        )
        return self.text.flush()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _begin_member(self, access: int):
        buf = self.text.begin()
        buf.append("\n")
        if access & AccessFlag.DEPRECATED:
            buf.append(f"{self.tab}// DEPRECATED\n")
        buf.append(f"{self.tab}// access flags {int(access)}\n")
        return buf

    def _decode(
        self, decoder: Callable[..., SignatureNode], signature: str, *args: int
    ) -> SignatureNode:
        try:
            return decoder(signature, *args)
        except MalformedSignature:
            self._state = _State.FAILED
            raise

    def _advance(self, target: _State, step: str) -> None:
        self._check_live(step)
        current = self._state
        if target is _State.HEADER:
            if current is not _State.STARTED:
                raise OutOfOrderCallback("class header visited twice")
        elif current is _State.STARTED:
            raise OutOfOrderCallback(f"{step} visited before the class header")
        elif target is not _State.BODY and _RANK[target] <= _RANK[current]:
            raise OutOfOrderCallback(
                f"{step} visited after {current.name.lower().replace('_', ' ')}"
            )
        self._close_child()
        if target is not current:
            logger.debug("renderer state %s -> %s", current.name, target.name)
        self._state = target

    def _check_live(self, step: str) -> None:
        if self._state is _State.ENDED:
            raise OutOfOrderCallback(f"{step} visited after the end of the class")
        if self._state is _State.FAILED:
            raise OutOfOrderCallback(f"{step} visited after the session was aborted")

    def _close_child(self) -> None:
        if self._open is not None:
            self._open.finish()
            self._open = None


def _class_keyword(access: int) -> str:
    if access & AccessFlag.ANNOTATION:
        return "@interface"
    if access & AccessFlag.INTERFACE:
        return "interface"
    if access & AccessFlag.ENUM:
        return "enum"
    return "class"


def _or_null(value: Optional[str]) -> str:
    return "null" if value is None else value


__all__ = ["ClassDescriptor", "ClassRenderer", "RenderOptions"]
