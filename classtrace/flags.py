"""Render access bitmasks into ordered modifier keywords."""

from __future__ import annotations

import logging
from typing import List, Tuple

from .access import AccessFlag, DeclarationKind

logger = logging.getLogger(__name__)

# Emission order is fixed and the same for every declaration kind.
MODIFIER_ORDER: Tuple[Tuple[AccessFlag, str], ...] = (
    (AccessFlag.PUBLIC, "public"),
    (AccessFlag.PRIVATE, "private"),
    (AccessFlag.PROTECTED, "protected"),
    (AccessFlag.FINAL, "final"),
    (AccessFlag.STATIC, "static"),
    (AccessFlag.SYNCHRONIZED, "synchronized"),
    (AccessFlag.VOLATILE, "volatile"),
    (AccessFlag.TRANSIENT, "transient"),
    (AccessFlag.ABSTRACT, "abstract"),
    (AccessFlag.STRICT, "strictfp"),
)

_VISIBILITY = AccessFlag.PUBLIC | AccessFlag.PRIVATE | AccessFlag.PROTECTED


def render_access(access: int, kind: DeclarationKind) -> List[str]:
    """Return the modifier keywords set in ``access``.

    Keywords follow :data:`MODIFIER_ORDER` regardless of which bits are set
    and every set bit yields its keyword; ``kind`` does not filter them, the
    caller adds the kind-specific words (``native``, ``bridge``, ``enum``).
    Combinations are not validated: a mask carrying both ``public`` and
    ``private`` yields both keywords.
    """

    if bin(access & _VISIBILITY).count("1") > 1:
        logger.warning("conflicting visibility bits in access mask 0x%04X", access)
    return [
        keyword
        for flag, keyword in MODIFIER_ORDER
        if access & flag
    ]


def access_prefix(access: int, kind: DeclarationKind) -> str:
    """Keywords joined for direct use in a declaration line."""

    return "".join(f"{keyword} " for keyword in render_access(access, kind))


__all__ = ["MODIFIER_ORDER", "render_access", "access_prefix"]
