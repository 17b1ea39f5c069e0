"""Command line entry point for subclass and parent-class queries."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from .config import FinderConfig
from .exceptions import AmbiguousClassName, ClassNotFound, ConfigError, SourceIOError
from .finder import Finder
from .logging_config import setup_logging
from .models import SearchMode
from .output import FORMATS, render_dot, render_json, render_text

EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="classintel",
        description=(
            "Recursively finds all subclasses (direct and transitive) of a Python class "
            "within a codebase. Handles imports, re-exports, and ambiguous class names."
        ),
    )
    parser.add_argument("class_name", help="Name of the class to query")
    parser.add_argument(
        "-m",
        "--module",
        default=None,
        help="Dotted module path where the class is defined or re-exported (e.g. 'foo.bar')",
    )
    parser.add_argument(
        "-d",
        "--directory",
        default=".",
        help="Root directory to search for Python files",
    )
    parser.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=[],
        help="Directory to leave out, relative to the root or absolute (repeatable)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SearchMode],
        default=SearchMode.ALL.value,
        help="Direct relations only, or the full transitive closure",
    )
    parser.add_argument(
        "--parents",
        action="store_true",
        help="Report parent classes instead of subclasses",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default="text",
        help="Output format",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable the parse cache (always parse all files)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Number of parser threads",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        config = FinderConfig.from_env(
            Path(args.directory),
            exclude=args.exclude,
            use_cache=False if args.no_cache else None,
            max_workers=args.jobs,
        )
        finder = Finder.from_config(config)
    except (SourceIOError, ConfigError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT

    mode = SearchMode(args.mode)
    try:
        if args.parents:
            references = finder.find_parent_classes(args.class_name, args.module, mode)
        else:
            references = finder.find_subclasses(args.class_name, args.module, mode)
    except AmbiguousClassName as exc:
        candidates = "\n".join(f"  - {candidate}" for candidate in exc.candidates)
        print(
            f"Error: Class '{exc.name}' found in multiple modules:\n{candidates}\n\n"
            "Please specify --module to disambiguate.",
            file=sys.stderr,
        )
        return EXIT_LOOKUP_FAILED
    except ClassNotFound as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_LOOKUP_FAILED

    logger.debug(f"{len(references)} result(s) for '{args.class_name}'")

    if args.format == "json":
        print(render_json(args.class_name, args.module, references, parents=args.parents))
    elif args.format == "dot":
        target = finder.resolve_class_reference(args.class_name, args.module)
        print(render_dot(finder, target, references))
    else:
        print(render_text(args.class_name, references, parents=args.parents))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
