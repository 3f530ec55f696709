"""Server configuration.

ServerConfig is a frozen dataclass — immutable after creation, passed to
the App at construction instead of living in module-level globals.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path

from wren.errors import ConfigurationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})
_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have defaults matching the class-project site layout.
    Override what you need::

        config = ServerConfig(port=3000, trace=True, site_root="site")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 5008

    # Diagnostic trace lines around every dispatch
    trace: bool = False

    # Site layout (relative paths resolve against site_root)
    site_root: str | Path = "."
    entry_document: str | Path = "public/index.html"
    assets_dir: str | Path = "src"

    # User store: None keeps registrations in memory
    database: str | Path | None = None

    # Logging
    log_level: str = "info"

    # Limits
    max_body_size: int = 1024 * 1024  # 1 MiB

    @property
    def root_path(self) -> Path:
        """The site root as an absolute path."""
        return Path(self.site_root).resolve()

    @property
    def entry_path(self) -> Path:
        """Absolute path of the document served at ``/``."""
        return self.root_path / self.entry_document

    @property
    def assets_path(self) -> Path:
        """Absolute path of the directory served under ``/public``."""
        return (self.root_path / self.assets_dir).resolve()

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str],
        **overrides: object,
    ) -> "ServerConfig":
        """Build a config from ``WREN_*`` environment variables.

        Unset variables keep their defaults. Keyword *overrides* win over
        the environment (the CLI passes its flags this way); ``None``
        overrides are ignored.

        Raises ``ConfigurationError`` for values that cannot be parsed.
        """
        values: dict[str, object] = {}
        for f in fields(cls):
            raw = environ.get(f"WREN_{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _parse_field(f.name, raw)
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)  # type: ignore[arg-type]
        config.validate()
        return config

    def validate(self) -> None:
        """Check field ranges. Raises ``ConfigurationError``."""
        if not 0 <= self.port <= 65535:
            msg = f"port must be between 0 and 65535, got {self.port}"
            raise ConfigurationError(msg)
        if self.log_level.lower() not in _LOG_LEVELS:
            msg = f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}"
            raise ConfigurationError(msg)
        if self.max_body_size <= 0:
            msg = f"max_body_size must be positive, got {self.max_body_size}"
            raise ConfigurationError(msg)


def _parse_field(name: str, raw: str) -> object:
    """Convert a raw environment string to the field's type."""
    if name in ("port", "max_body_size"):
        try:
            return int(raw)
        except ValueError:
            msg = f"WREN_{name.upper()} must be an integer, got {raw!r}"
            raise ConfigurationError(msg) from None
    if name == "trace":
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        msg = f"WREN_TRACE must be a boolean, got {raw!r}"
        raise ConfigurationError(msg)
    if name == "database":
        return raw or None
    return raw
