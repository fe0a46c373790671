"""Bucket policy composer.

Convenience import surface over the ``core`` package::

    from bpc import compose_policy

    result = compose_policy([{"sid": "Read", "actions": ["s3:GetObject"], "resources": ["arn:aws:s3:::b/*"]}])
    print(result.json, result.fingerprint)
"""

from core.errors import PolicyDocumentError
from core.models import ComposedPolicy, CompositionRequest, PolicyDocument, PolicyVersion, StatementDeclaration
from core.policy import PolicyComposer, PolicyDiff, canned_policy, compose_policy, fingerprint, parse_document

__all__ = [
    "ComposedPolicy",
    "CompositionRequest",
    "PolicyComposer",
    "PolicyDiff",
    "PolicyDocument",
    "PolicyDocumentError",
    "PolicyVersion",
    "StatementDeclaration",
    "canned_policy",
    "compose_policy",
    "fingerprint",
    "parse_document",
]

__version__ = "0.1.0"
