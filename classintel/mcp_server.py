"""MCP server exposing class hierarchy tools."""

from __future__ import annotations

import argparse

from mcp.server.fastmcp import FastMCP

from .exceptions import ConfigError, SourceIOError
from .finder import Finder
from .logging_config import setup_logging
from .service import HierarchyService


def create_server(finder: Finder) -> FastMCP:
    service = HierarchyService(finder)
    mcp = FastMCP(
        name="ClassIntel Hierarchy",
        instructions=(
            "Query the class hierarchy of the indexed codebase. Use find_subclasses() "
            "or find_parent_classes(); pass module when a name is ambiguous."
        ),
        json_response=True,
    )

    @mcp.tool()
    def metadata() -> dict:
        """Return counts for the indexed tree and any files that failed to parse."""
        return service.metadata()

    @mcp.tool()
    def find_subclasses(name: str, module: str | None = None, mode: str = "all") -> dict:
        """List subclasses of a class; mode is 'direct' or 'all'."""
        return service.subclasses(name, module, mode)

    @mcp.tool()
    def find_parent_classes(name: str, module: str | None = None, mode: str = "all") -> dict:
        """List parent classes of a class; mode is 'direct' or 'all'."""
        return service.parents(name, module, mode)

    @mcp.tool()
    def resolve_class(name: str, module: str | None = None) -> dict:
        """Resolve a (possibly re-exported) class name to where it is defined."""
        return service.resolve(name, module)

    return mcp


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run MCP server for class hierarchy queries")
    parser.add_argument("--root", default=".", help="Root directory of the codebase")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Directory to leave out (repeatable)",
    )
    parser.add_argument("--no-cache", action="store_true", help="Disable the parse cache")
    parser.add_argument(
        "--transport",
        default="stdio",
        choices=["stdio", "sse", "streamable-http"],
        help="Transport type",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host for HTTP transports")
    parser.add_argument("--port", type=int, default=8001, help="Port for HTTP transports")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Index the tree, print metadata, and exit",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    # stdio transport owns stdout; logs stay on stderr.
    setup_logging()

    try:
        finder = Finder(args.root, exclude=args.exclude, use_cache=not args.no_cache)
    except (SourceIOError, ConfigError) as exc:
        raise SystemExit(f"Cannot index {args.root}: {exc}") from exc

    if args.validate:
        print(HierarchyService(finder).metadata())
        return 0

    mcp = create_server(finder)
    mcp.settings.host = args.host
    mcp.settings.port = args.port
    mcp.run(transport=args.transport)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
