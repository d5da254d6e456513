"""Per-member renderers producing the body fragment of a field or method."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .annotations import AnnotationRenderer, Attribute, DefaultValueRenderer, render_attribute
from .errors import OutOfOrderCallback
from .text import Fragment


@dataclass(frozen=True)
class MemberDescriptor:
    """One visited field or method.

    ``value`` is only meaningful for fields (the constant initialiser) and
    ``exceptions`` only for methods (declared checked throwables).
    """

    access: int
    name: str
    descriptor: str
    signature: Optional[str] = None
    value: Any = None
    exceptions: Tuple[str, ...] = ()


class MemberRenderer:
    """Collect the body of one member into an independent fragment.

    The renderer is created by the class renderer's field or method step,
    receives the member's body events and is closed with :meth:`finish`.
    Its fragment is already embedded in the class listing, so lines appended
    before :meth:`finish` show up in place.
    """

    def __init__(self, descriptor: MemberDescriptor, *, tab: str = "  ") -> None:
        self.descriptor = descriptor
        self.tab = tab
        self.body_indent = tab * 2
        self.fragment = Fragment()
        self._open: Optional[AnnotationRenderer] = None
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def visit_annotation(self, desc: str, visible: bool) -> AnnotationRenderer:
        return self._start(AnnotationRenderer(desc, visible, indent=self.body_indent))

    def visit_attribute(self, attribute: Attribute) -> None:
        self.append_line(render_attribute(attribute).rstrip("\n"))

    def append_line(self, text: str) -> None:
        """Add one body line; instruction-level renderers hook in here."""

        self._check_open()
        self._close_child()
        self.fragment.append(f"{self.body_indent}{text}\n")

    def finish(self) -> Fragment:
        if not self._finished:
            self._close_child()
            self._finished = True
        return self.fragment

    def _start(self, child: AnnotationRenderer) -> AnnotationRenderer:
        self._check_open()
        self._close_child()
        self.fragment.append(child.fragment)
        self._open = child
        return child

    def _close_child(self) -> None:
        if self._open is not None:
            self._open.finish()
            self._open = None

    def _check_open(self) -> None:
        if self._finished:
            raise OutOfOrderCallback(
                f"member {self.descriptor.name!r} received an event after finish()"
            )


class FieldRenderer(MemberRenderer):
    """Body of a field: its annotations and attributes."""


class MethodRenderer(MemberRenderer):
    """Body of a method: annotations, default value and code summary."""

    def visit_parameter_annotation(
        self, parameter: int, desc: str, visible: bool
    ) -> AnnotationRenderer:
        return self._start(
            AnnotationRenderer(
                desc, visible, indent=self.body_indent, parameter=parameter
            )
        )

    def visit_annotation_default(self) -> AnnotationRenderer:
        return self._start(DefaultValueRenderer(indent=self.body_indent))

    def visit_maxs(self, max_stack: int, max_locals: int) -> None:
        self.append_line(f"MAXSTACK = {max_stack}")
        self.append_line(f"MAXLOCALS = {max_locals}")


__all__ = ["MemberDescriptor", "MemberRenderer", "FieldRenderer", "MethodRenderer"]
