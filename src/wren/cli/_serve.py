"""``wren serve`` — start the server."""

import argparse
import sys

from wren.cli._resolve import build_app
from wren.errors import ConfigurationError


def serve(args: argparse.Namespace) -> None:
    """Build the app and serve it until interrupted.

    Logging is set up by ``App.run`` from the app's own config.
    """
    try:
        app = build_app(args)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run(host=args.host, port=args.port)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
