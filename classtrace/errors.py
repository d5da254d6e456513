"""Exception hierarchy shared by the trace renderer and the class reader."""

from __future__ import annotations


class TraceError(Exception):
    """Base class for every error raised while producing a trace."""


class OutOfOrderCallback(TraceError):
    """A structural callback arrived before its prerequisite or after the end."""


class MalformedSignature(TraceError, ValueError):
    """A generic signature does not follow the signature grammar."""

    def __init__(self, signature: str, position: int, reason: str) -> None:
        super().__init__(f"{reason} at offset {position} in signature {signature!r}")
        self.signature = signature
        self.position = position
        self.reason = reason


class SessionNotFinalized(TraceError):
    """The text buffer was flushed before the closing fragment was added."""


class AlreadyFinalized(TraceError):
    """The text buffer was flushed or sealed a second time."""


class ClassFormatError(TraceError, ValueError):
    """The class-file image cannot be decoded."""


class ClassNotFound(TraceError, LookupError):
    """A class identifier could not be resolved on the classpath."""


__all__ = [
    "TraceError",
    "OutOfOrderCallback",
    "MalformedSignature",
    "SessionNotFinalized",
    "AlreadyFinalized",
    "ClassFormatError",
    "ClassNotFound",
]
