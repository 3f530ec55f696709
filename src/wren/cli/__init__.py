"""Wren CLI — serve a site and inspect its route table.

Entry point registered as ``wren`` in ``pyproject.toml``::

    [project.scripts]
    wren = "wren.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wren`` command."""
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren — a small static asset server with first-segment routing.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wren serve -------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Start the server")
    serve_parser.add_argument(
        "--app",
        default=None,
        help="Import string of a custom app (e.g. mysite:app); default is the built-in site",
    )
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument("--root", default=None, help="Site root directory")
    serve_parser.add_argument("--entry", default=None, help="Entry document, relative to the root")
    serve_parser.add_argument("--assets", default=None, help="Assets directory, relative to the root")
    serve_parser.add_argument("--database", default=None, help="SQLite file for registered users")
    serve_parser.add_argument("--log-level", default=None, help="debug, info, warning, error")
    serve_parser.add_argument(
        "--trace",
        action="store_true",
        default=None,
        help="Log a trace line before and after every dispatch",
    )

    # -- wren routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument(
        "--app",
        default=None,
        help="Import string of a custom app (e.g. mysite:app); default is the built-in site",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from wren.cli._serve import serve

        serve(args)
    elif args.command == "routes":
        from wren.cli._routes import run_routes

        run_routes(args)
