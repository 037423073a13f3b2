"""
Command line interface.

    skillregistry validate ROOT [--json]
    skillregistry query ROOT "context text" [--version 19] [--limit 5]
    skillregistry show ROOT NAME

Exit codes: 0 success, 1 invalid documents / duplicate names / unknown
skill, 2 unreadable root or bad arguments.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import RegistryConfig
from .errors import CorpusReadError, DuplicateNameError
from .registry import SkillRegistry, validate
from .report import EXIT_INVALID, EXIT_OK, EXIT_UNREADABLE


def _load_config(path: Optional[str]) -> RegistryConfig:
    return RegistryConfig.load(Path(path) if path else None)


def cmd_validate(args: argparse.Namespace) -> int:
    report = validate(Path(args.root), _load_config(args.config))
    if args.json:
        print(report.to_json())
    else:
        print(report.summary())
    return report.exit_code


def cmd_query(args: argparse.Namespace) -> int:
    registry = SkillRegistry(Path(args.root), _load_config(args.config))
    try:
        registry.build()
    except DuplicateNameError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID

    try:
        results = registry.query(
            args.context,
            version=args.version,
            limit=args.limit,
            include_mismatches=args.include_mismatches,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return EXIT_OK

    if not results:
        print("No matching skills.")
        return EXIT_OK
    for rank, result in enumerate(results, 1):
        verdict = f"  [{result.version_verdict.value}]" if result.version_verdict else ""
        print(f"{rank:>3}. {result.name}  ({result.category})  score={result.score}{verdict}")
    return EXIT_OK


def cmd_show(args: argparse.Namespace) -> int:
    registry = SkillRegistry(Path(args.root), _load_config(args.config))
    try:
        registry.build()
    except DuplicateNameError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID

    record = registry.by_name(args.name)
    if not record:
        print(f"Skill not found: {args.name}", file=sys.stderr)
        return EXIT_INVALID

    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
    else:
        print(f"{record.name}  ({record.category})")
        print(f"  Source: {record.source_path}")
        print(f"  Versions: {record.version_range.min} - {record.version_range.max} "
              f"(supported: {', '.join(record.version_range.supported_versions)})")
        print(f"  Triggers: {', '.join(record.triggers)}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillregistry",
        description="Validate, index and match skill documents",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="Path to a registry configuration YAML file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate every skill document under ROOT")
    validate_parser.add_argument("root", help="Registry root directory")
    validate_parser.add_argument("--json", action="store_true", help="Output as JSON")
    validate_parser.set_defaults(func=cmd_validate)

    query_parser = subparsers.add_parser("query", help="Rank skills for a work context")
    query_parser.add_argument("root", help="Registry root directory")
    query_parser.add_argument("context", help="Free-text description of the work")
    query_parser.add_argument("--version", help="Target framework version, e.g. 19 or 19.2.1")
    query_parser.add_argument("--limit", type=int, help="Maximum number of results")
    query_parser.add_argument(
        "--include-mismatches",
        action="store_true",
        help="Keep skills whose version range does not admit --version",
    )
    query_parser.add_argument("--json", action="store_true", help="Output as JSON")
    query_parser.set_defaults(func=cmd_query)

    show_parser = subparsers.add_parser("show", help="Show one skill by name")
    show_parser.add_argument("root", help="Registry root directory")
    show_parser.add_argument("name", help="Skill name")
    show_parser.add_argument("--json", action="store_true", help="Output as JSON")
    show_parser.set_defaults(func=cmd_show)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except CorpusReadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNREADABLE
    except (OSError, ValueError) as e:
        # Unreadable or invalid --config file
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNREADABLE


if __name__ == "__main__":
    sys.exit(main())
