"""App resolution — builds the App a CLI command works on.

Either resolves a ``"module:attribute"`` import string, or builds the
default site from ``WREN_*`` environment variables plus CLI overrides.
"""

import argparse
import importlib
import os

from wren.app import App, create_app
from wren.config import ServerConfig


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a wren App instance.

    Accepts ``"module:attribute"``; the attribute defaults to ``app``.
    A callable that is not an App is treated as a factory and called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a wren ``App``.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a wren.App instance"
        raise TypeError(msg)

    return obj


def build_app(args: argparse.Namespace) -> App:
    """Return the app named by ``--app``, or the default site."""
    if args.app:
        return resolve_app(args.app)

    config = ServerConfig.from_env(
        os.environ,
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        site_root=getattr(args, "root", None),
        entry_document=getattr(args, "entry", None),
        assets_dir=getattr(args, "assets", None),
        database=getattr(args, "database", None),
        log_level=getattr(args, "log_level", None),
        trace=getattr(args, "trace", None),
    )
    return create_app(config)
