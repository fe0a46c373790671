"""Entrypoint compatible with AWS Lambda + API Gateway."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict

from pydantic import ValidationError

from apiserver.routes import canned, compose
from core.errors import PolicyDocumentError

logger = logging.getLogger(__name__)

RouteHandler = Callable[[dict[str, Any]], dict[str, Any]]


ROUTES: Dict[str, RouteHandler] = {
    "POST /compose": compose,
    "POST /canned": canned,
}


def _error(status: int, message: str, error: str) -> dict[str, Any]:
    return {"statusCode": status, "body": {"message": message, "error": error}}


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    method = event.get("httpMethod", "GET")
    path = event.get("resource") or event.get("path", "/")
    key = f"{method.upper()} {path}"
    handler = ROUTES.get(key)

    if not handler:
        return {
            "statusCode": 404,
            "headers": {"Content-Type": "application/json"},
            "body": json.dumps({"message": "Route not found"}),
        }

    try:
        response = handler(event)
    except PolicyDocumentError as exc:
        logger.info("%s rejected: %s", key, exc.message)
        response = _error(400, exc.message, type(exc).__name__)
    except ValidationError as exc:
        response = _error(400, str(exc), "ValidationError")
    except json.JSONDecodeError as exc:
        response = _error(400, f"Request body is not valid JSON: {exc}", "ParseError")
    except ValueError as exc:
        response = _error(400, str(exc), "ValueError")

    response.setdefault("headers", {"Content-Type": "application/json"})
    if "body" in response and not isinstance(response["body"], str):
        response["body"] = json.dumps(response["body"])
    return response
