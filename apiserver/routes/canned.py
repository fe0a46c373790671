"""API route for canned bucket policies."""

from __future__ import annotations

from typing import Any

from apiserver.routes.compose import read_body
from core.policy.templates import canned_policy


def handle(event: dict[str, Any]) -> dict[str, Any]:
    data = read_body(event)
    result = canned_policy(str(data.get("acl", "")), str(data.get("bucket", "")))
    body = result.as_dict()
    body["acl"] = data.get("acl")
    return {
        "statusCode": 200,
        "body": body,
    }
