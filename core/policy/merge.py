"""Fold policy documents into one using Sid-keyed replace-or-append."""

from __future__ import annotations

import logging

from core.models import PolicyDocument

logger = logging.getLogger(__name__)


def merge_documents(target: PolicyDocument, incoming: PolicyDocument) -> PolicyDocument:
    """Return a new document with ``incoming`` layered over ``target``.

    - ``Id``: taken from ``incoming`` when it is non-empty.
    - ``Version``: the newer of the two.
    - Statements: an incoming statement with a Sid replaces the target
      statement with the same Sid at that statement's index; otherwise, and
      always for statements without a Sid, it is appended.

    Neither argument is modified and the result shares no statements or
    condition sets with them.
    """
    statements = [statement.model_copy(deep=True) for statement in target.statements]

    for statement in incoming.statements:
        statement = statement.model_copy(deep=True)
        if not statement.sid:
            statements.append(statement)
            continue
        for index, existing in enumerate(statements):
            if existing.sid == statement.sid:
                logger.debug("statement %r replaced at index %d", statement.sid, index)
                statements[index] = statement
                break
        else:
            statements.append(statement)

    version = target.version
    if incoming.version is not None and incoming.version.is_newer_than(version):
        version = incoming.version

    return PolicyDocument(
        version=version,
        id=incoming.id or target.id,
        statements=statements,
    )


def fold_documents(*documents: PolicyDocument | None) -> PolicyDocument:
    """Merge documents left to right (base, local, override); ``None`` entries are skipped."""
    merged = PolicyDocument()
    for document in documents:
        if document is None:
            continue
        merged = merge_documents(merged, document)
    return merged


__all__ = ["merge_documents", "fold_documents"]
