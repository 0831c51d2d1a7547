"""CLI entrypoints for docsmith commands."""

from __future__ import annotations

import argparse
import sys
import webbrowser
from pathlib import Path

import uvicorn

from .errors import BuildAborted
from .logging import configure_logging
from .orchestrator import Orchestrator
from .service import create_app


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


def _add_server_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--port", type=int, default=None, help="Port of the documentation server.")
    parser.add_argument("--host", default=None, help="Interface the documentation server binds to.")
    parser.add_argument(
        "-o",
        "--open",
        action="store_true",
        default=None,
        help="Open the served documentation in the default browser.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsmith",
        description="Generate a static documentation site from an extracted entity graph.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Generate the documentation site.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    build_parser.add_argument("-d", "--output", default=None, help="Output folder for the site.")
    build_parser.add_argument("-n", "--title", default=None, help="Title of the documentation.")
    build_parser.add_argument("--theme", default=None, help="Theme name recorded on every page.")
    build_parser.add_argument("--graph-file", default=None, help="Dependency graph read by the json extractor.")
    build_parser.add_argument("--extractor", default=None, help="Extractor name or entry point.")
    build_parser.add_argument("--includes", default=None, help="Folder holding summary.json and extra pages.")
    build_parser.add_argument("--includes-name", dest="includes_folder", default=None,
                              help="Output folder name for the additional pages.")
    build_parser.add_argument("--assets-folder", default=None, help="Folder copied into the output.")
    build_parser.add_argument("--ext-theme", default=None, help="External stylesheet or stylesheet folder.")
    build_parser.add_argument("--disable-coverage", action="store_true", default=None,
                              help="Do not generate the coverage report.")
    build_parser.add_argument("--disable-graph", action="store_true", default=None,
                              help="Do not render dependency graphs.")
    build_parser.add_argument("-w", "--watch", action="store_true", default=None,
                              help="Rebuild when source files change.")
    build_parser.add_argument("-s", "--serve", action="store_true", default=None,
                              help="Serve the generated documentation.")
    _add_server_options(build_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve an already generated documentation folder.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument(
        "output",
        nargs="?",
        default="documentation",
        help="Documentation folder to serve (defaults to ./documentation).",
    )
    _add_server_options(serve_parser)

    return parser


_OVERRIDE_KEYS = (
    "output",
    "title",
    "theme",
    "graph_file",
    "extractor",
    "includes",
    "includes_folder",
    "assets_folder",
    "ext_theme",
    "disable_coverage",
    "disable_graph",
    "watch",
    "serve",
    "port",
    "host",
    "open",
)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsmith commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "build":
        overrides = {key: getattr(args, key, None) for key in _OVERRIDE_KEYS}
        try:
            orchestrator = Orchestrator.from_path(Path(args.path), **overrides)
            result = orchestrator.run()
        except BuildAborted as exc:
            parser.exit(1, f"docsmith build failed: {exc}\nRun with --verbose for more details.\n")
        except ValueError as exc:
            parser.exit(1, f"{exc}\n")
        except KeyboardInterrupt:
            parser.exit(130, "Interrupted\n")
        print(f"Documentation written to {_relativize(result.output)}")
    elif args.command == "serve":
        folder = Path(args.output).expanduser().resolve()
        if not folder.is_dir():
            parser.exit(1, f"{folder} does not exist; run `docsmith build` first.\n")
        host = args.host or "127.0.0.1"
        port = args.port or 8080
        if args.open:
            webbrowser.open(f"http://{host}:{port}")
        uvicorn.run(create_app(folder), host=host, port=port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
