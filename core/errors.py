"""Domain errors raised while composing policy documents.

Every error is terminal for a composition call: the computation is local and
deterministic, so nothing is retried and the message is surfaced verbatim.
"""

from __future__ import annotations

from typing import Any


class PolicyDocumentError(Exception):
    """Base class for all composition errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ParseError(PolicyDocumentError):
    """A base or override document is not valid policy JSON."""


class DuplicateSidError(PolicyDocumentError):
    """Two locally declared statements share the same non-empty Sid."""

    def __init__(self, sid: str) -> None:
        super().__init__(
            f"found duplicate sid ({sid}), either remove the sid or ensure the sid is unique across all statements",
            {"sid": sid},
        )
        self.sid = sid


class UnsupportedVariableError(PolicyDocumentError):
    """A policy variable is used under a document version that forbids it."""

    def __init__(self, value: str, version: str) -> None:
        super().__init__(
            f"found &{{ sequence in ({value}), which is not supported in document version {version}",
            {"value": value, "version": version},
        )


class ConditionValueError(PolicyDocumentError):
    """Condition values could not be resolved."""


class ConflictingFieldsError(PolicyDocumentError):
    """Mutually exclusive statement fields were both set."""


class DeclarationError(PolicyDocumentError):
    """A statement declaration failed validation."""


class UnsupportedACLError(PolicyDocumentError):
    """No canned policy exists for the requested ACL."""


__all__ = [
    "PolicyDocumentError",
    "ParseError",
    "DuplicateSidError",
    "UnsupportedVariableError",
    "ConditionValueError",
    "ConflictingFieldsError",
    "DeclarationError",
    "UnsupportedACLError",
]
