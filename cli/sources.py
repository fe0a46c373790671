"""Read policy documents and statement files from disk or S3."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import boto3
import yaml


def make_s3_client(endpoint_url: str | None = None, region: str | None = None) -> Any:
    kwargs: dict[str, Any] = {}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    if region:
        kwargs["region_name"] = region
    return boto3.client("s3", **kwargs)


def parse_s3_url(url: str) -> tuple[str, str]:
    _, _, rest = url.partition("s3://")
    bucket, _, key = rest.partition("/")
    if not bucket or not key:
        raise ValueError("S3 URL must include a bucket name and an object key.")
    return bucket, key


def load_document_text(ref: str | Path, s3_client: Any | None = None) -> str:
    """Return the text behind ``ref``: a local path or an ``s3://bucket/key`` URL."""
    source = str(ref)
    if source.startswith("s3://"):
        bucket, key = parse_s3_url(source)
        client = s3_client or make_s3_client()
        body = client.get_object(Bucket=bucket, Key=key)["Body"].read()
        return body.decode("utf-8")

    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(path)
    return path.read_text(encoding="utf-8")


def load_statement_file(ref: str | Path, s3_client: Any | None = None) -> dict[str, Any]:
    """Load statement declarations from YAML or JSON.

    The file holds either a list of statements or a mapping with a
    ``statements`` list and optional ``version`` / ``policy_id`` keys.
    """
    text = load_document_text(ref, s3_client=s3_client)
    if str(ref).endswith(".json"):
        data = json.loads(text) if text.strip() else []
    else:
        data = yaml.safe_load(text) or []

    if isinstance(data, list):
        return {"statements": data}
    if isinstance(data, dict):
        statements = data.get("statements") or data.get("statement") or []
        if not isinstance(statements, list):
            raise ValueError("statements must be a list of statement declarations")
        return {**data, "statements": statements}
    raise ValueError("Statement file must contain a list or a mapping with 'statements'.")


__all__ = ["load_document_text", "load_statement_file", "make_s3_client", "parse_s3_url"]
