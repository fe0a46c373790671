"""Set algebra over policy condition values.

A statement's ``Condition`` block is a two-level mapping::

    {"StringLike": {"s3:prefix": {"home/", "public/"}}}

The outer level (``ConditionMap``) is keyed by condition test, the inner level
(``ConditionKeyMap``) by condition variable. Values are unordered sets.
Combining two blocks always unions the value sets; no operation here hands
out a reference to a caller's set.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from core.errors import ParseError


class ConditionKeyMap(dict[str, set[str]]):
    """Map of condition variable to the set of accepted values."""

    def add(self, key: str, values: Iterable[str]) -> None:
        """Union ``values`` into ``key``, inserting a fresh set if absent.

        A plain string counts as a single value.
        """
        if isinstance(values, str):
            values = {values}
        if key in self:
            self[key] = self[key] | set(values)
        else:
            self[key] = set(values)

    def remove(self, key: str, values: Iterable[str] | None) -> None:
        """Remove ``values`` from ``key``; drop the key once its set is empty."""
        if key not in self:
            return
        if isinstance(values, str):
            values = {values}
        if values is not None:
            self[key] = self[key] - set(values)
        if not self[key]:
            del self[key]

    def remove_key(self, key: str) -> None:
        self.pop(key, None)

    def copy(self) -> "ConditionKeyMap":  # type: ignore[override]
        return ConditionKeyMap({key: set(values) for key, values in self.items()})

    @classmethod
    def merge(cls, first: Mapping[str, set[str]], second: Mapping[str, set[str]]) -> "ConditionKeyMap":
        out = cls()
        for key, values in first.items():
            out.add(key, values)
        for key, values in second.items():
            out.add(key, values)
        return out

    def to_json(self) -> dict[str, list[str]]:
        return {key: sorted(self[key]) for key in sorted(self)}


class ConditionMap(dict[str, ConditionKeyMap]):
    """Map of condition test (``StringLike``, ``IpAddress``...) to its variables."""

    def add(self, test: str, key_map: Mapping[str, set[str]]) -> None:
        if test in self:
            self[test] = ConditionKeyMap.merge(self[test], key_map)
        else:
            self[test] = ConditionKeyMap.merge({}, key_map)

    def remove(self, test: str) -> None:
        self.pop(test, None)

    def copy(self) -> "ConditionMap":  # type: ignore[override]
        return ConditionMap({test: key_map.copy() for test, key_map in self.items()})

    @classmethod
    def merge(cls, first: Mapping[str, Mapping[str, set[str]]], second: Mapping[str, Mapping[str, set[str]]]) -> "ConditionMap":
        out = cls()
        for test, key_map in first.items():
            out[test] = ConditionKeyMap.merge({}, key_map)
        for test, key_map in second.items():
            out.add(test, key_map)
        return out

    @classmethod
    def from_json(cls, raw: Any) -> "ConditionMap":
        """Parse a ``Condition`` object read from a policy document."""
        if raw is None:
            return cls()
        if isinstance(raw, ConditionMap):
            return raw.copy()
        if not isinstance(raw, Mapping):
            raise ParseError("Condition must be an object of condition tests")

        out = cls()
        for test, variables in raw.items():
            if not isinstance(variables, Mapping):
                raise ParseError(f"Condition test {test} must map variables to values")
            key_map = ConditionKeyMap()
            for variable, values in variables.items():
                key_map.add(str(variable), _coerce_values(test, variable, values))
            out.add(str(test), key_map)
        return out

    def to_json(self) -> dict[str, dict[str, list[str]]]:
        return {test: self[test].to_json() for test in sorted(self)}

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.from_json,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda value: value.to_json()),
        )


def _coerce_values(test: str, variable: str, values: Any) -> set[str]:
    if isinstance(values, (str, bool, int, float)):
        return {_stringify(values)}
    if isinstance(values, (list, tuple, set)):
        out: set[str] = set()
        for value in values:
            if not isinstance(value, (str, bool, int, float)):
                raise ParseError(f"Condition {test}/{variable} contains a non-scalar value")
            out.add(_stringify(value))
        return out
    raise ParseError(f"Condition {test}/{variable} values must be a string or a list of strings")


def _stringify(value: str | bool | int | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = ["ConditionKeyMap", "ConditionMap"]
