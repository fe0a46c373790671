"""API route for composing policy documents."""

from __future__ import annotations

import json
from typing import Any

from core.models import CompositionRequest
from core.policy.composer import PolicyComposer


def read_body(event: dict[str, Any]) -> dict[str, Any]:
    payload = event.get("body")
    if isinstance(payload, str):
        data = json.loads(payload or "{}")
    else:
        data = payload or {}
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _coerce_document(value: Any) -> str | None:
    # Base and override documents may arrive as JSON text or as an embedded object.
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def handle(event: dict[str, Any]) -> dict[str, Any]:
    data = read_body(event)
    request = CompositionRequest(
        source_json=_coerce_document(data.get("sourceJson")),
        override_json=_coerce_document(data.get("overrideJson")),
        version=data.get("version") or "2012-10-17",
        policy_id=data.get("policyId") or "",
        statements=data.get("statements") or [],
    )
    result = PolicyComposer().compose(request)
    return {
        "statusCode": 200,
        "body": result.as_dict(),
    }
