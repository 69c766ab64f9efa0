"""CLI entrypoints for embedgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config
from .constants import CACHE_DIRNAME, CACHE_FILENAME, CONFIG_FILENAME
from .diagnostics import DiagnosticBag
from .emit import emit_sources, write_sources
from .errors import ConfigError
from .graph import IncrementalGraph
from .logging import configure_logging
from .sources import discover_inputs
from .stores import ArtifactStore


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_project_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Project configuration file (defaults to <path>/{CONFIG_FILENAME}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embedgen",
        description="Compile static assets into embeddable C# constants and route handlers.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Generate sources for every configured asset.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_project_options(build_parser)
    build_parser.add_argument(
        "--out",
        default="Generated",
        help="Directory (relative to the project root) receiving generated sources.",
    )
    build_parser.add_argument(
        "--cache",
        default=None,
        help=f"Artifact cache file (defaults to <path>/{CACHE_DIRNAME}/{CACHE_FILENAME}).",
    )
    build_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Recompute every artifact and do not persist the cache.",
    )
    build_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads used to process files.",
    )

    routes_parser = subparsers.add_parser(
        "routes",
        help="Print the ordered route table without writing sources.",
    )
    _add_verbose_option(routes_parser, suppress_default=True)
    _add_project_options(routes_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for embedgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=log_file)

    root = Path(args.path).expanduser().resolve()
    if not root.is_dir():
        parser.exit(1, f"Project path is not a directory: {args.path}\n")
    config_path = Path(args.config).expanduser() if args.config else root

    try:
        project = load_config(config_path)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    if args.config:
        project.root = root

    files, build_config = discover_inputs(project)

    if args.command == "build":
        store = None
        if not args.no_cache:
            cache_path = Path(args.cache) if args.cache else root / CACHE_DIRNAME / CACHE_FILENAME
            store = ArtifactStore(cache_path)
        graph = IncrementalGraph(store=store, max_workers=args.workers)
        bag = DiagnosticBag()
        result = graph.run(files, build_config, bag)
        sources = emit_sources(
            result.artifacts,
            result.routes,
            result.route_table,
            result.global_options,
            bag,
        )
        out_dir = root / args.out
        written, removed = write_sources(sources, out_dir)
        print(
            f"Generated {len(sources)} sources in {_relativize(out_dir)} "
            f"({written} written, {removed} removed, {len(bag)} warnings)"
        )
    elif args.command == "routes":
        graph = IncrementalGraph()
        result = graph.run(files, build_config)
        if result.route_table is None:
            print("No routes (routing disabled or no routed files)")
            return
        for route in result.route_table:
            print(f"/{route.route_name}\t{route.mime.content_type}\t{route.relative_path}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
