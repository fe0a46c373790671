"""Core domain models and services for the bucket policy composer."""

from .models import ComposedPolicy, PolicyDocument, Statement, StatementDeclaration

__all__ = ["ComposedPolicy", "PolicyDocument", "Statement", "StatementDeclaration"]
