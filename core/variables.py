"""Policy-variable delimiter rewriting.

Statement declarations write policy variables as ``&{aws:username}`` so that
configuration layers which interpolate ``${...}`` themselves leave them alone.
The rewrite to ``${aws:username}`` is textual only; nothing is evaluated.
"""

from __future__ import annotations

from typing import overload

from core.errors import UnsupportedVariableError
from core.models import ListValue, PolicyVersion, ScalarValue

DECLARED_DELIMITER = "&{"
RUNTIME_DELIMITER = "${"


def substitute_text(text: str, version: PolicyVersion | str) -> str:
    version = PolicyVersion(version)
    if DECLARED_DELIMITER not in text:
        return text
    # Policy variables only exist from the 2012-10-17 language onwards.
    if version is PolicyVersion.V2008_10_17:
        raise UnsupportedVariableError(text, version.value)
    return text.replace(DECLARED_DELIMITER, RUNTIME_DELIMITER)


@overload
def substitute(value: ScalarValue, version: PolicyVersion | str) -> ScalarValue: ...


@overload
def substitute(value: ListValue, version: PolicyVersion | str) -> ListValue: ...


@overload
def substitute(value: None, version: PolicyVersion | str) -> None: ...


def substitute(value, version):
    """Rewrite every item of ``value``, keeping its scalar or list shape."""
    if value is None:
        return None
    if isinstance(value, ScalarValue):
        return ScalarValue(value=substitute_text(value.value, version))
    if isinstance(value, ListValue):
        return ListValue(values=[substitute_text(item, version) for item in value.values])
    raise TypeError(f"cannot substitute variables in {type(value).__name__}")


__all__ = ["DECLARED_DELIMITER", "RUNTIME_DELIMITER", "substitute", "substitute_text"]
