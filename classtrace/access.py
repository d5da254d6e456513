"""Access-flag bits and declaration kinds used throughout the renderer."""

from __future__ import annotations

from enum import Enum, IntFlag, auto


class AccessFlag(IntFlag):
    """Access bits as stored in class, field and method structures.

    Several bits are shared between declaration kinds: ``SUPER`` and
    ``SYNCHRONIZED`` are both ``0x20``, ``VOLATILE`` doubles as ``BRIDGE`` and
    ``TRANSIENT`` as ``VARARGS``.  ``DEPRECATED`` is not part of the binary
    format; the reader sets it when a ``Deprecated`` attribute is present.
    """

    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SUPER = 0x0020
    SYNCHRONIZED = 0x0020
    VOLATILE = 0x0040
    BRIDGE = 0x0040
    TRANSIENT = 0x0080
    VARARGS = 0x0080
    NATIVE = 0x0100
    INTERFACE = 0x0200
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000
    ANNOTATION = 0x2000
    ENUM = 0x4000
    DEPRECATED = 0x20000


class DeclarationKind(Enum):
    """Which declaration an access bitmask belongs to."""

    CLASS = auto()
    FIELD = auto()
    METHOD = auto()


# The universal root type; a supertype equal to it is implicit in listings.
ROOT_TYPE = "java/lang/Object"


__all__ = ["AccessFlag", "DeclarationKind", "ROOT_TYPE"]
