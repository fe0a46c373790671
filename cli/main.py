"""Command line interface for composing bucket and IAM policy documents."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from botocore.exceptions import ClientError

from cli import config, output
from cli.sources import load_document_text, load_statement_file, make_s3_client
from core.errors import PolicyDocumentError
from core.models import ComposedPolicy, CompositionRequest, PolicyVersion
from core.policy.composer import PolicyComposer
from core.policy.diff import PolicyDiff
from core.policy.serializer import fingerprint, parse_document, to_canonical_json
from core.policy.templates import CANNED_ACLS, POLICY_NAMES, canned_policy, resolve_acl

logger = logging.getLogger(__name__)

FORMATS = list(config.FORMATS)
VERSIONS = [version.value for version in PolicyVersion]
ACL_CHOICES = [*sorted(CANNED_ACLS), *POLICY_NAMES]


class CLIError(Exception):
    def __init__(self, message: str, exit_code: int = 2) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bpc", description="Bucket and IAM policy document composer")
    parser.add_argument("--config", type=Path, default=Path("bpc.yml"), help="Path to CLI configuration file")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # compose ---------------------------------------------------------------
    compose_cmd = subparsers.add_parser("compose", help="Compose a policy from base, statements and override")
    compose_cmd.add_argument("--statements", help="YAML/JSON file of statement declarations (path or s3:// URL)")
    compose_cmd.add_argument("--source-json", help="Base document (path or s3:// URL)")
    compose_cmd.add_argument("--override-json", help="Override document (path or s3:// URL)")
    compose_cmd.add_argument("--version", choices=VERSIONS, help="Policy language version of the statements")
    compose_cmd.add_argument("--policy-id")
    compose_cmd.add_argument("--raw", action="store_true", help="Write only the canonical document")
    compose_cmd.add_argument("--output", type=Path)
    compose_cmd.add_argument("--format", choices=FORMATS, help="Output format override")

    # canned ----------------------------------------------------------------
    canned_cmd = subparsers.add_parser("canned", help="Render the canned policy for a bucket ACL")
    canned_cmd.add_argument("--acl", required=True, choices=ACL_CHOICES, help="Bucket ACL or platform policy name")
    canned_cmd.add_argument("--bucket", required=True)
    canned_cmd.add_argument("--raw", action="store_true", help="Write only the canonical document")
    canned_cmd.add_argument("--output", type=Path)
    canned_cmd.add_argument("--format", choices=FORMATS, help="Output format override")

    # diff ------------------------------------------------------------------
    diff_cmd = subparsers.add_parser("diff", help="Report drift between two policy documents")
    diff_cmd.add_argument("--before", required=True)
    diff_cmd.add_argument("--after", required=True)
    diff_cmd.add_argument("--output", type=Path)
    diff_cmd.add_argument("--format", choices=FORMATS, help="Output format override")

    # fingerprint -----------------------------------------------------------
    fp_cmd = subparsers.add_parser("fingerprint", help="Fingerprint a canonical policy document")
    fp_cmd.add_argument("--input", required=True)
    fp_cmd.add_argument("--canonicalize", action="store_true", help="Re-render the document before hashing")
    fp_cmd.add_argument("--output", type=Path)
    fp_cmd.add_argument("--format", choices=FORMATS, help="Output format override")

    # attach ----------------------------------------------------------------
    attach_cmd = subparsers.add_parser("attach", help="Set a bucket policy on the storage backend")
    attach_cmd.add_argument("--bucket", required=True)
    policy_source = attach_cmd.add_mutually_exclusive_group(required=True)
    policy_source.add_argument("--document", help="Policy document (path or s3:// URL)")
    policy_source.add_argument("--acl", choices=ACL_CHOICES, help="Bucket ACL or platform policy name")

    return parser


def app(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = config.load_settings(args.config)
        format_override = getattr(args, "format", None)
        settings = settings.merge_cli(format_override=format_override, log_level=args.log_level)
        _configure_logging(settings.log_level)

        if args.command == "compose":
            return _cmd_compose(args, settings)
        if args.command == "canned":
            return _cmd_canned(args, settings)
        if args.command == "diff":
            return _cmd_diff(args, settings)
        if args.command == "fingerprint":
            return _cmd_fingerprint(args, settings)
        if args.command == "attach":
            return _cmd_attach(args, settings)
    except CLIError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    except PolicyDocumentError as exc:
        print(exc.message, file=sys.stderr)
        return 2
    except ValueError as exc:  # includes pydantic ValidationError
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError as exc:
        print(f"File not found: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover - unexpected errors bubble up
        logger.debug("unexpected failure", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Command implementations


def _cmd_compose(args: argparse.Namespace, settings: config.Settings) -> int:
    declared: dict[str, Any] = {"statements": []}
    if args.statements:
        declared = load_statement_file(args.statements, s3_client=_s3_client_for(args.statements, settings))

    request = CompositionRequest(
        source_json=_read_optional(args.source_json, settings),
        override_json=_read_optional(args.override_json, settings),
        # YAML reads an unquoted 2012-10-17 as a date.
        version=args.version or str(declared.get("version") or settings.default_version),
        policy_id=str(args.policy_id or declared.get("policy_id") or ""),
        statements=declared["statements"],
    )
    result = PolicyComposer().compose(request)
    _emit_composed(result, args, settings)
    return 0


def _cmd_canned(args: argparse.Namespace, settings: config.Settings) -> int:
    result = canned_policy(resolve_acl(args.acl), args.bucket)
    _emit_composed(result, args, settings)
    return 0


def _cmd_diff(args: argparse.Namespace, settings: config.Settings) -> int:
    before = parse_document(_read(args.before, settings))
    after = parse_document(_read(args.after, settings))
    diff = PolicyDiff(before, after)

    if settings.default_format == "md":
        output.write_text(diff.as_markdown(), args.output)
    else:
        output.emit(diff.as_json(), settings.default_format, output_path=args.output)
    return 1 if diff.has_drift() else 0


def _cmd_fingerprint(args: argparse.Namespace, settings: config.Settings) -> int:
    # Files written by this tool end with a newline that is not part of the canonical text.
    text = _read(args.input, settings).rstrip("\n")
    if args.canonicalize:
        text = to_canonical_json(parse_document(text))
    value = fingerprint(text)
    output.emit({"id": str(value), "fingerprint": value}, settings.default_format, output_path=args.output)
    return 0


def _cmd_attach(args: argparse.Namespace, settings: config.Settings) -> int:
    client = make_s3_client(settings.endpoint_url, settings.region)

    acl = resolve_acl(args.acl) if args.acl else None
    if acl == "private":
        try:
            client.delete_bucket_policy(Bucket=args.bucket)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "NoSuchBucketPolicy":
                raise CLIError(f"unable to remove bucket policy from {args.bucket}: {exc}", exit_code=1) from exc
        logger.info("removed bucket policy from %s", args.bucket)
        return 0

    if acl:
        policy_json = canned_policy(acl, args.bucket).json
    else:
        policy_json = to_canonical_json(parse_document(_read(args.document, settings)))

    try:
        client.put_bucket_policy(Bucket=args.bucket, Policy=policy_json)
    except ClientError as exc:
        raise CLIError(f"unable to set bucket policy on {args.bucket}: {exc}", exit_code=1) from exc
    logger.info("attached policy (%d) to bucket %s", fingerprint(policy_json), args.bucket)
    return 0


# ---------------------------------------------------------------------------
# Helpers


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _emit_composed(result: ComposedPolicy, args: argparse.Namespace, settings: config.Settings) -> None:
    if args.raw:
        output.write_text(result.json, args.output)
        return
    output.emit(result.as_dict(), settings.default_format, output_path=args.output)


def _s3_client_for(ref: str, settings: config.Settings) -> Any | None:
    if ref.startswith("s3://"):
        return make_s3_client(settings.endpoint_url, settings.region)
    return None


def _read(ref: str, settings: config.Settings) -> str:
    return load_document_text(ref, s3_client=_s3_client_for(ref, settings))


def _read_optional(ref: str | None, settings: config.Settings) -> str | None:
    if not ref:
        return None
    return _read(ref, settings)


def main() -> None:
    raise SystemExit(app())


if __name__ == "__main__":
    main()
