# Integration package for TOSID / KMAC
"""
Bridges between TOSID codes and KMAC statements.

Turns batches of classification codes into entity and part-of statements.
"""

from .converter import (
    HierarchyConversion,
    default_label,
    extract_semantic_info,
    generate_from_hierarchy,
)

__all__ = [
    "HierarchyConversion",
    "default_label",
    "extract_semantic_info",
    "generate_from_hierarchy",
]
