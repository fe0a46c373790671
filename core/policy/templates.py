"""Canned bucket policies keyed by ACL name."""

from __future__ import annotations

from typing import Callable

from core.errors import UnsupportedACLError
from core.models import ComposedPolicy, StatementDeclaration
from core.policy.composer import compose_policy

RESOURCE_PREFIX = "arn:aws:s3:::"

ALL_BUCKET_ACTIONS = frozenset(
    {
        "s3:AbortMultipartUpload",
        "s3:CreateBucket",
        "s3:DeleteBucket",
        "s3:DeleteBucketPolicy",
        "s3:DeleteObject",
        "s3:GetBucketLocation",
        "s3:GetBucketNotification",
        "s3:GetBucketPolicy",
        "s3:GetObject",
        "s3:HeadBucket",
        "s3:ListAllMyBuckets",
        "s3:ListBucket",
        "s3:ListBucketMultipartUploads",
        "s3:ListMultipartUploadParts",
        "s3:ListenBucketNotification",
        "s3:PutBucketNotification",
        "s3:PutBucketPolicy",
        "s3:PutObject",
    }
)
READ_ONLY_BUCKET_ACTIONS = frozenset({"s3:ListBucket"})
READ_ONLY_ALL_BUCKETS_ACTIONS = frozenset({"s3:ListBucket", "s3:ListAllMyBuckets"})
READ_ONLY_OBJECT_ACTIONS = frozenset({"s3:GetObject"})
UPLOAD_OBJECT_ACTIONS = frozenset({"s3:PutObject"})
WRITE_ONLY_OBJECT_ACTIONS = frozenset(
    {"s3:AbortMultipartUpload", "s3:DeleteObject", "s3:ListMultipartUploadParts", "s3:PutObject"}
)
READ_LIST_OBJECT_ACTIONS = READ_ONLY_BUCKET_ACTIONS | READ_ONLY_OBJECT_ACTIONS

# Platform canned-policy names as reported by the storage backend.
_POLICY_NAME_TO_ACL = {
    "readonly": "public-read",
    "writeonly": "public-write",
    "readwrite": "public-read-write",
    "none": "private",
    "": "private",
}


def bucket_arn(bucket: str) -> str:
    return f"{RESOURCE_PREFIX}{bucket}"


def _statement(sid: str, actions: frozenset[str], resources: list[str]) -> StatementDeclaration:
    return StatementDeclaration(sid=sid, actions=sorted(actions), resources=resources, principal="*")


def private_statements(bucket: str) -> list[StatementDeclaration]:
    return []


def public_read_statements(bucket: str) -> list[StatementDeclaration]:
    return [
        _statement("ListAllBucket", READ_ONLY_ALL_BUCKETS_ACTIONS, [f"{RESOURCE_PREFIX}*"]),
        _statement("AllObjectActionsMyBuckets", READ_LIST_OBJECT_ACTIONS, [bucket_arn(bucket), f"{bucket_arn(bucket)}/*"]),
    ]


def public_write_statements(bucket: str) -> list[StatementDeclaration]:
    return [
        _statement("ListBucketAction", READ_ONLY_BUCKET_ACTIONS, [bucket_arn(bucket)]),
        _statement("AllObjectActionsMyBuckets", WRITE_ONLY_OBJECT_ACTIONS, [f"{bucket_arn(bucket)}/*"]),
    ]


def public_read_write_statements(bucket: str) -> list[StatementDeclaration]:
    return [
        _statement("ListObjectsInBucket", READ_ONLY_BUCKET_ACTIONS, [bucket_arn(bucket)]),
        _statement("UploadObjectActions", UPLOAD_OBJECT_ACTIONS, [f"{bucket_arn(bucket)}/*"]),
    ]


def public_statements(bucket: str) -> list[StatementDeclaration]:
    return [
        _statement("AllowAllS3Actions", ALL_BUCKET_ACTIONS, [bucket_arn(bucket), f"{bucket_arn(bucket)}/*"]),
    ]


CANNED_ACLS: dict[str, Callable[[str], list[StatementDeclaration]]] = {
    "private": private_statements,
    "public-write": public_write_statements,
    "public-read": public_read_statements,
    "public-read-write": public_read_write_statements,
    "public": public_statements,
}


def canned_statements(acl: str, bucket: str) -> list[StatementDeclaration]:
    factory = CANNED_ACLS.get(acl)
    if factory is None:
        raise UnsupportedACLError(
            f"unsupported ACL {acl} (valid acl: {', '.join(CANNED_ACLS)})",
            {"acl": acl},
        )
    if not bucket:
        raise UnsupportedACLError("a bucket name is required for canned policies", {"acl": acl})
    return factory(bucket)


def canned_policy(acl: str, bucket: str) -> ComposedPolicy:
    """Compose the canned policy for ``acl``; ``private`` yields an empty statement list."""
    return compose_policy(canned_statements(acl, bucket))


def acl_for_policy_name(policy_name: str) -> str:
    return _POLICY_NAME_TO_ACL.get(policy_name, "custom")


POLICY_NAMES = tuple(name for name in _POLICY_NAME_TO_ACL if name)


def resolve_acl(name: str) -> str:
    """Map an ACL or a platform policy name (``readonly``, ``none``...) to an ACL."""
    if name in CANNED_ACLS:
        return name
    return acl_for_policy_name(name)


__all__ = [
    "CANNED_ACLS",
    "POLICY_NAMES",
    "acl_for_policy_name",
    "bucket_arn",
    "canned_policy",
    "canned_statements",
    "resolve_acl",
]
