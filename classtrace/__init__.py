"""Public package exports for the class trace renderer."""

from .annotations import AnnotationRenderer, Attribute
from .classfile import ClassFileReader, resolve_class, trace_class
from .errors import (
    AlreadyFinalized,
    ClassFormatError,
    ClassNotFound,
    MalformedSignature,
    OutOfOrderCallback,
    SessionNotFinalized,
    TraceError,
)
from .flags import render_access
from .members import FieldRenderer, MemberDescriptor, MethodRenderer
from .access import AccessFlag, DeclarationKind
from .renderer import ClassDescriptor, ClassRenderer, RenderOptions
from .signature import (
    SignatureNode,
    decode_class_signature,
    decode_field_signature,
    decode_method_signature,
)
from .text import Fragment, TextBuffer

__all__ = [
    "AccessFlag",
    "AlreadyFinalized",
    "AnnotationRenderer",
    "Attribute",
    "ClassDescriptor",
    "ClassFileReader",
    "ClassFormatError",
    "ClassNotFound",
    "ClassRenderer",
    "DeclarationKind",
    "FieldRenderer",
    "Fragment",
    "MalformedSignature",
    "MemberDescriptor",
    "MethodRenderer",
    "OutOfOrderCallback",
    "RenderOptions",
    "SessionNotFinalized",
    "SignatureNode",
    "TextBuffer",
    "TraceError",
    "decode_class_signature",
    "decode_field_signature",
    "decode_method_signature",
    "render_access",
    "resolve_class",
    "trace_class",
]
