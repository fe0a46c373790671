"""Compose a canonical policy document from base, local and override inputs."""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError

from core.errors import DeclarationError
from core.models import ComposedPolicy, CompositionRequest, PolicyVersion, StatementDeclaration
from core.policy.builder import StatementBuilder
from core.policy.merge import merge_documents
from core.policy.serializer import fingerprint, parse_document, to_canonical_json

logger = logging.getLogger(__name__)


class PolicyComposer:
    """Run one composition: base -> local -> override, then serialize.

    Each call parses its own documents, so a composer instance can be shared;
    errors abort the call and no partial document is returned.
    """

    def compose(self, request: CompositionRequest) -> ComposedPolicy:
        base = parse_document(request.source_json)
        local = StatementBuilder(request.version).build_document(request.statements, policy_id=request.policy_id)

        merged = merge_documents(base, local)
        if request.override_json is not None and request.override_json.strip():
            merged = merge_documents(merged, parse_document(request.override_json))

        rendered = to_canonical_json(merged)
        checksum = fingerprint(rendered)
        logger.debug(
            "composed policy with %d statement(s), version %s, fingerprint %d",
            len(merged.statements),
            merged.version.value if merged.version else "-",
            checksum,
        )
        return ComposedPolicy(document=merged, json=rendered, fingerprint=checksum)


def compose_policy(
    statements: Iterable[StatementDeclaration | dict] = (),
    *,
    source_json: str | None = None,
    override_json: str | None = None,
    version: PolicyVersion | str = PolicyVersion.V2012_10_17,
    policy_id: str = "",
) -> ComposedPolicy:
    try:
        request = CompositionRequest(
            source_json=source_json,
            override_json=override_json,
            version=version,
            policy_id=policy_id,
            statements=list(statements),
        )
    except ValidationError as exc:
        raise DeclarationError(f"invalid composition input: {exc}") from exc
    return PolicyComposer().compose(request)


__all__ = ["PolicyComposer", "compose_policy"]
