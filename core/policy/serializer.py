"""Canonical JSON rendering, parsing and fingerprinting of policy documents."""

from __future__ import annotations

import json
import zlib
from typing import Any

from pydantic import ValidationError

from core.errors import ParseError
from core.models import PolicyDocument, Statement

INDENT = 2

_INT32_MIN = -(2**31)


def canonical_statement(statement: Statement) -> dict[str, Any]:
    """Render one statement with fixed field order, dropping empty fields."""
    payload: dict[str, Any] = {}
    if statement.sid:
        payload["Sid"] = statement.sid
    payload["Effect"] = statement.effect.value
    if statement.actions is not None:
        payload["Action"] = statement.actions.to_json()
    if statement.resources is not None:
        payload["Resource"] = statement.resources.to_json()
    if statement.not_resources is not None:
        payload["NotResource"] = statement.not_resources.to_json()
    if statement.principal:
        payload["Principal"] = statement.principal
    if statement.not_principal:
        payload["NotPrincipal"] = statement.not_principal
    if statement.conditions:
        payload["Condition"] = statement.conditions.to_json()
    return payload


def canonical_dict(document: PolicyDocument) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if document.version is not None:
        payload["Version"] = document.version.value
    if document.id:
        payload["Id"] = document.id
    payload["Statement"] = [canonical_statement(statement) for statement in document.statements]
    return payload


def to_canonical_json(document: PolicyDocument) -> str:
    return json.dumps(canonical_dict(document), indent=INDENT, ensure_ascii=False)


def fingerprint(text: str) -> int:
    """Non-negative checksum of ``text`` used to detect output changes.

    CRC-32 of the UTF-8 bytes read as a signed 32-bit integer, then made
    non-negative. The one value whose negation does not fit (``-2**31``)
    maps to ``0``. Not a cryptographic hash.
    """
    checksum = zlib.crc32(text.encode("utf-8")) & 0xFFFFFFFF
    signed = checksum - 2**32 if checksum >= 2**31 else checksum
    if signed >= 0:
        return signed
    if signed != _INT32_MIN:
        return -signed
    return 0


def parse_document(text: str | None) -> PolicyDocument:
    """Parse base or override JSON; blank input is an empty document."""
    if text is None or not text.strip():
        return PolicyDocument()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid policy JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("policy document must be a JSON object")
    # Escapes such as "\ud800" decode to lone surrogates that cannot be rendered as UTF-8.
    try:
        json.dumps(data, ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ParseError(f"invalid policy JSON: {exc}") from exc
    try:
        return PolicyDocument.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"invalid policy document: {exc}") from exc


__all__ = ["canonical_dict", "canonical_statement", "fingerprint", "parse_document", "to_canonical_json"]
