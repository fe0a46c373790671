"""Data models shared across the composition pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from core.conditions import ConditionMap
from core.errors import ParseError


class PolicyVersion(str, Enum):
    """Supported policy language versions, oldest first."""

    V2008_10_17 = "2008-10-17"
    V2012_10_17 = "2012-10-17"

    def is_newer_than(self, other: "PolicyVersion | None") -> bool:
        # ISO dates order lexicographically.
        return other is None or self.value > other.value


class Effect(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


class ScalarValue(BaseModel):
    """A policy field holding exactly one string, e.g. ``"Action": "s3:*"``."""

    kind: Literal["scalar"] = "scalar"
    value: str

    def items(self) -> list[str]:
        return [self.value]

    def to_json(self) -> str:
        return self.value


class ListValue(BaseModel):
    """A policy field holding an ordered list of strings."""

    kind: Literal["list"] = "list"
    values: list[str] = Field(default_factory=list)

    def items(self) -> list[str]:
        return list(self.values)

    def to_json(self) -> list[str]:
        return list(self.values)


PolicyValue = Annotated[Union[ScalarValue, ListValue], Field(discriminator="kind")]


def policy_value_from_json(raw: Any) -> ScalarValue | ListValue | None:
    """Convert an ``Action``/``Resource`` value read from a document, keeping its order."""
    if raw is None or isinstance(raw, (ScalarValue, ListValue)):
        return raw
    if isinstance(raw, dict) and "kind" in raw:
        return ListValue.model_validate(raw) if raw["kind"] == "list" else ScalarValue.model_validate(raw)
    if isinstance(raw, str):
        return ScalarValue(value=raw) if raw else None
    if isinstance(raw, (list, tuple)):
        if not all(isinstance(item, str) for item in raw):
            raise ParseError("policy values must be strings")
        return ListValue(values=list(raw)) if raw else None
    raise ParseError(f"expected a string or a list of strings, got {type(raw).__name__}")


class Statement(BaseModel):
    """One authorization rule of a policy document."""

    sid: str = Field(default="", alias="Sid")
    effect: Effect = Field(default=Effect.ALLOW, alias="Effect")
    actions: Optional[PolicyValue] = Field(default=None, alias="Action")
    resources: Optional[PolicyValue] = Field(default=None, alias="Resource")
    not_resources: Optional[PolicyValue] = Field(default=None, alias="NotResource")
    principal: str = Field(default="", alias="Principal")
    not_principal: str = Field(default="", alias="NotPrincipal")
    conditions: ConditionMap = Field(default_factory=ConditionMap, alias="Condition")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("actions", "resources", "not_resources", mode="before")
    @classmethod
    def _coerce_policy_value(cls, value: Any) -> Any:
        return policy_value_from_json(value)

    @field_validator("sid", "principal", "not_principal", mode="before")
    @classmethod
    def _coerce_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class PolicyDocument(BaseModel):
    """A policy document: version, optional id and an ordered statement list.

    ``version`` is ``None`` only for documents parsed without a ``Version``
    field; any merge with a versioned document adopts that version.
    """

    version: Optional[PolicyVersion] = Field(default=None, alias="Version")
    id: str = Field(default="", alias="Id")
    statements: list[Statement] = Field(default_factory=list, alias="Statement")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("statements", mode="before")
    @classmethod
    def _coerce_statements(cls, value: Any) -> Any:
        if value is None:
            return []
        # A single statement object is accepted in place of a list.
        if isinstance(value, dict):
            return [value]
        return value

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return "" if value is None else value

    def sids(self) -> list[str]:
        return [statement.sid for statement in self.statements if statement.sid]


class ConditionDeclaration(BaseModel):
    """A ``test``/``variable``/``values`` triple as declared by the caller."""

    test: str
    variable: str
    values: list[str] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        if isinstance(value, (set, frozenset)):
            return sorted(value)
        return value


class StatementDeclaration(BaseModel):
    """Raw statement input from the configuration layer, before normalization."""

    sid: str = ""
    effect: Effect = Effect.ALLOW
    actions: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    not_resources: list[str] = Field(default_factory=list)
    principal: str = ""
    not_principal: str = ""
    conditions: list[ConditionDeclaration] = Field(default_factory=list, alias="condition")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("actions", "resources", "not_resources", mode="before")
    @classmethod
    def _coerce_string_set(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, (set, frozenset)):
            return sorted(value)
        return value

    @field_validator("sid", "principal", "not_principal", mode="before")
    @classmethod
    def _coerce_blank(cls, value: Any) -> Any:
        if value is None:
            return ""
        # YAML reads `sid: 1` as an integer.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class CompositionRequest(BaseModel):
    """Everything needed for one composition: base, local statements, override."""

    source_json: Optional[str] = None
    override_json: Optional[str] = None
    version: PolicyVersion = PolicyVersion.V2012_10_17
    policy_id: str = ""
    statements: list[StatementDeclaration] = Field(default_factory=list)

    @field_validator("policy_id", mode="before")
    @classmethod
    def _coerce_policy_id(cls, value: Any) -> Any:
        return "" if value is None else value


@dataclass(slots=True)
class ComposedPolicy:
    """Result of a composition: the merged document, its canonical JSON and fingerprint."""

    document: PolicyDocument
    json: str
    fingerprint: int

    @property
    def id(self) -> str:
        return str(self.fingerprint)

    def as_dict(self) -> dict[str, Any]:
        return {"json": self.json, "id": self.id, "fingerprint": self.fingerprint}


__all__ = [
    "PolicyVersion",
    "Effect",
    "ScalarValue",
    "ListValue",
    "PolicyValue",
    "policy_value_from_json",
    "Statement",
    "PolicyDocument",
    "ConditionDeclaration",
    "StatementDeclaration",
    "CompositionRequest",
    "ComposedPolicy",
]
