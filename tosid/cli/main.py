"""
TOSID CLI — Inspect codes and statements from the command line.

Commands:
    tosid parse CODE                      — Fields, classification, hierarchy
    tosid info CODE                       — Semantic info map
    tosid match PATTERN CODE...           — Codes covered by a pattern
    tosid hierarchy CODE... [--label C=L] — Entity and PART_OF statements
    tosid demo                            — Disassemble the sample store

Every command is read-only. Invalid input is reported with its cause and a
non-zero exit code; nothing is guessed or repaired.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .. import taxonomy
from ..errors import GrammarError, TosidError, ValidationError
from ..identifier import Identifier, validate_pattern
from ..integration import extract_semantic_info, generate_from_hierarchy
from ..parser import parse
from ..statements import serialize_all
from .demo import build_demo_store
from .disassembler import disassemble, format_entity_detail


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_identifier(identifier: Identifier) -> str:
    """Format the parsed fields of a code."""
    lines = []

    lines.append(f"Code: {identifier.canonical()}")
    lines.append("=" * 50)
    lines.append(f"  taxonomy_code:     {identifier.taxonomy_code}")
    lines.append(f"  netmask_indicator: {identifier.netmask_indicator}")
    lines.append(f"  identifier_body:   {identifier.identifier_body}")
    lines.append(f"  categories:        {', '.join(identifier.categories)}")
    if identifier.specific_suffix is not None:
        lines.append(f"  specific_suffix:   {identifier.specific_suffix}")
    lines.append("")
    lines.append(f"CLASSIFICATION: {identifier.classification()}")
    lines.append("")
    lines.append("HIERARCHY:")
    for depth, level in enumerate(identifier.hierarchy()):
        lines.append(f"  {'  ' * depth}{level}")

    warnings = taxonomy.semantic_warnings(identifier)
    if warnings:
        lines.append("")
        lines.append("WARNINGS:")
        for warning in warnings:
            lines.append(f"  • {warning}")

    return "\n".join(lines)


def format_grammar_error(error: GrammarError) -> str:
    return f"Invalid code: {error.code!r}\nReason: {error}"


def _parse_labels(pairs: list[str]) -> dict[str, str]:
    labels = {}
    for pair in pairs:
        code, sep, label = pair.partition("=")
        if not sep or not code or not label:
            raise ValidationError(f"label must be CODE=LABEL, got {pair!r}")
        labels[code] = label
    return labels


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_parse(args: argparse.Namespace) -> int:
    """Parse one code and show everything derived from it."""
    try:
        identifier = parse(args.code)
    except GrammarError as e:
        print(format_grammar_error(e))
        return 1

    print(format_identifier(identifier))
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Show the semantic info map for a code."""
    try:
        info = extract_semantic_info(args.code)
    except GrammarError as e:
        print(format_grammar_error(e))
        return 1

    for key, value in info.items():
        print(f"{key}: {value}")
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    """Print the codes that a pattern covers."""
    try:
        validate_pattern(args.pattern)
    except ValidationError as e:
        print(f"Invalid pattern: {args.pattern!r}", file=sys.stderr)
        print(f"Reason: {e}", file=sys.stderr)
        return 1

    matched = 0
    failed = False

    for code in args.codes:
        try:
            identifier = parse(code)
        except GrammarError as e:
            print(format_grammar_error(e), file=sys.stderr)
            failed = True
            continue
        if identifier.matches_pattern(args.pattern):
            print(code)
            matched += 1

    print(f"{matched} of {len(args.codes)} codes match {args.pattern!r}", file=sys.stderr)
    return 1 if failed else 0


def cmd_hierarchy(args: argparse.Namespace) -> int:
    """Convert codes into entity and PART_OF statement lines."""
    try:
        labels = _parse_labels(args.label or [])
        conversion = generate_from_hierarchy(args.codes, labels=labels)
    except TosidError as e:
        print("ERROR: Conversion failed")
        print(f"Reason: {e}")
        return 1

    for line in serialize_all(conversion.statements):
        print(line)
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    """Build the sample store and disassemble it."""
    print("TOSID / KMAC Demo")
    print("=" * 50)
    print()

    store = build_demo_store()
    print(disassemble(store))

    if args.entity:
        print()
        try:
            print(format_entity_detail(store, args.entity))
        except TosidError as e:
            print(f"ERROR: {e}")
            return 1

    if args.lines:
        print()
        print("STATEMENTS:")
        for line in store.to_lines():
            print(line)

    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tosid",
        description="TOSID classification codes and KMAC statements",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse a code and show its fields and hierarchy",
    )
    parse_parser.add_argument("code", help="TOSID code")
    parse_parser.set_defaults(func=cmd_parse)

    # Info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show semantic info for a code",
    )
    info_parser.add_argument("code", help="TOSID code")
    info_parser.set_defaults(func=cmd_info)

    # Match command
    match_parser = subparsers.add_parser(
        "match",
        help="Show which codes a pattern covers",
    )
    match_parser.add_argument("pattern", help="Pattern, optionally ending in '*'")
    match_parser.add_argument("codes", nargs="+", help="Codes to test")
    match_parser.set_defaults(func=cmd_match)

    # Hierarchy command
    hierarchy_parser = subparsers.add_parser(
        "hierarchy",
        help="Generate entity and PART_OF statements for codes",
    )
    hierarchy_parser.add_argument("codes", nargs="+", help="Codes to convert")
    hierarchy_parser.add_argument(
        "--label",
        action="append",
        metavar="CODE=LABEL",
        help="Label for a code (repeatable)",
    )
    hierarchy_parser.set_defaults(func=cmd_hierarchy)

    # Demo command
    demo_parser = subparsers.add_parser(
        "demo",
        help="Disassemble the sample knowledge graph",
    )
    demo_parser.add_argument(
        "--entity",
        help="Also show the detail of one entity ID",
    )
    demo_parser.add_argument(
        "--lines",
        action="store_true",
        help="Also print the canonical statement lines",
    )
    demo_parser.set_defaults(func=cmd_demo)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
