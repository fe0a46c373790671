"""API routes."""

from .canned import handle as canned
from .compose import handle as compose

__all__ = ["canned", "compose"]
