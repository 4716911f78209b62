# Store package for TOSID / KMAC
"""
In-memory semantic store.

Holds statements, enforces referential integrity and answers
classification and participant queries.
"""

from .semantic_store import SemanticStore

__all__ = ["SemanticStore"]
