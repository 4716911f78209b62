# CLI package for TOSID / KMAC
"""
Read-only CLI for inspecting TOSID codes and KMAC statements.

Commands:
    tosid parse      — Parse a code
    tosid info       — Semantic info for a code
    tosid match      — Pattern matching over codes
    tosid hierarchy  — Entity and PART_OF statements for codes
    tosid demo       — Disassemble the sample knowledge graph
"""
