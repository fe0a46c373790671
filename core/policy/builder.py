"""Build normalized policy statements from caller declarations."""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError

from core.conditions import ConditionKeyMap, ConditionMap
from core.errors import ConditionValueError, ConflictingFieldsError, DeclarationError, DuplicateSidError, UnsupportedVariableError
from core.models import (
    ConditionDeclaration,
    ListValue,
    PolicyDocument,
    PolicyVersion,
    ScalarValue,
    Statement,
    StatementDeclaration,
)
from core.variables import substitute

logger = logging.getLogger(__name__)


def decode_string_list(values: Iterable[str]) -> ScalarValue | ListValue | None:
    """Collapse a declared string set into its document form.

    One value becomes a scalar. Two or more become a list in *reverse*
    lexicographic order. That ordering is inherited from the platform's
    existing documents and kept for output compatibility: changing it would
    change the canonical JSON, and with it every stored fingerprint.
    """
    unique = set(values)
    if not unique:
        return None
    if len(unique) == 1:
        return ScalarValue(value=next(iter(unique)))
    return ListValue(values=sorted(unique, reverse=True))


class StatementBuilder:
    """Turn a batch of statement declarations into document statements."""

    def __init__(self, version: PolicyVersion | str = PolicyVersion.V2012_10_17) -> None:
        self.version = PolicyVersion(version)

    def build(self, declarations: Iterable[StatementDeclaration | dict]) -> list[Statement]:
        seen_sids: set[str] = set()
        statements: list[Statement] = []

        for raw in declarations:
            declaration = self._coerce(raw)
            # Only this batch is checked; sids inherited from a base document may be replaced by a merge.
            if declaration.sid:
                if declaration.sid in seen_sids:
                    raise DuplicateSidError(declaration.sid)
                seen_sids.add(declaration.sid)
            statements.append(self._build_statement(declaration))

        logger.debug("built %d statement(s) for version %s", len(statements), self.version.value)
        return statements

    def build_document(self, declarations: Iterable[StatementDeclaration | dict], policy_id: str = "") -> PolicyDocument:
        return PolicyDocument(version=self.version, id=policy_id or "", statements=self.build(declarations))

    # ------------------------------------------------------------------
    @staticmethod
    def _coerce(raw: StatementDeclaration | dict) -> StatementDeclaration:
        if isinstance(raw, StatementDeclaration):
            return raw
        try:
            return StatementDeclaration.model_validate(raw)
        except ValidationError as exc:
            raise DeclarationError(f"invalid statement declaration: {exc}") from exc

    def _build_statement(self, declaration: StatementDeclaration) -> Statement:
        resources = substitute(decode_string_list(declaration.resources), self.version)
        not_resources = substitute(decode_string_list(declaration.not_resources), self.version)

        if resources is not None and not_resources is not None:
            raise ConflictingFieldsError(
                "cannot set both resources and not_resources in the same statement",
                {"sid": declaration.sid},
            )
        if declaration.principal and declaration.not_principal:
            raise ConflictingFieldsError(
                "cannot set both principal and not_principal in the same statement",
                {"sid": declaration.sid},
            )

        return Statement(
            sid=declaration.sid,
            effect=declaration.effect,
            actions=decode_string_list(declaration.actions),
            resources=resources,
            not_resources=not_resources,
            principal=declaration.principal,
            not_principal=declaration.not_principal,
            conditions=self._build_conditions(declaration.conditions),
        )

    def _build_conditions(self, declarations: list[ConditionDeclaration]) -> ConditionMap:
        conditions = ConditionMap()
        for declaration in declarations:
            decoded = decode_string_list(declaration.values)
            if decoded is None:
                raise ConditionValueError(
                    f"condition {declaration.test} on {declaration.variable} has no values",
                    {"test": declaration.test, "variable": declaration.variable},
                )
            try:
                values = substitute(decoded, self.version)
            except UnsupportedVariableError as exc:
                raise ConditionValueError(f"error reading condition values: {exc.message}", exc.details) from exc

            key_map = ConditionKeyMap()
            key_map.add(declaration.variable, values.items())
            conditions.add(declaration.test, key_map)
        return conditions


__all__ = ["StatementBuilder", "decode_string_list"]
