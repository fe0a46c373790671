"""Policy composition: statement building, merging, serialization."""

from .builder import StatementBuilder, decode_string_list
from .composer import PolicyComposer, compose_policy
from .diff import PolicyDiff
from .merge import fold_documents, merge_documents
from .serializer import fingerprint, parse_document, to_canonical_json
from .templates import canned_policy

__all__ = [
    "PolicyComposer",
    "PolicyDiff",
    "StatementBuilder",
    "canned_policy",
    "compose_policy",
    "decode_string_list",
    "fingerprint",
    "fold_documents",
    "merge_documents",
    "parse_document",
    "to_canonical_json",
]
