"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All settings live in one dataclass, loaded once at startup and never
changed afterwards.

=============================================================================
SOURCES
=============================================================================

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ Source               │ Example                                      │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ Code                 │ ServerConfig(root_directory="/srv/www")      │
    │ JSON file            │ ServerConfig.from_json_file("config.json")   │
    │ Environment          │ FILESERVER_ROOT=/srv/www → from_env()        │
    │ Command line         │ fileserver --root /srv/www --port 8080       │
    └──────────────────────┴──────────────────────────────────────────────┘

The JSON file uses the same field names as the dataclass. Only
``root_directory`` is required:

    {
        "root_directory": "/srv/www",
        "redirect_map": {
            "/old": "/new",
            "/blog": "https://blog.example.com/"
        }
    }

=============================================================================
"""

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")

# Accepted JSON types per scalar field. bool is rejected where a number is
# expected even though it subclasses int.
FIELD_TYPES = {
    "root_directory": (str,),
    "strict_paths": (bool,),
    "host": (str,),
    "port": (int,),
    "buffer_size": (int,),
    "read_timeout": (int, float, type(None)),
    "max_connections": (int, type(None)),
    "log_level": (str,),
    "log_format": (str,),
}


class ConfigError(ValueError):
    """Raised for missing, malformed or invalid configuration."""


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    GROUPS
    =========================================================================

    CONTENT      root_directory, redirect_map, strict_paths
    NETWORK      host, port, buffer_size, read_timeout, max_connections
    LOGGING      log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_directory: str = "."
    """Absolute path of the document root. Request paths are appended to it."""

    redirect_map: Dict[str, str] = field(default_factory=dict)
    """Exact request path → Location target, answered with 308."""

    strict_paths: bool = False
    """
    Also reject paths whose canonical location is outside the root
    (symlinks pointing out of it). The textual ".." check always runs.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    port: int = 3000

    buffer_size: int = 8192
    """Maximum bytes read from a connection for its request line."""

    read_timeout: Optional[float] = None
    """Seconds to wait for request bytes. None waits indefinitely."""

    max_connections: Optional[int] = None
    """
    Maximum connections handled at once. None means unbounded; extra
    connections wait for a free slot instead of being refused.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: "text" (Apache-like) or "json"."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        """
        Build a config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: If ``data`` is not a JSON object or a field has
                the wrong shape.
        """
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a JSON object")

        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}

        redirect_map = values.get("redirect_map", {})
        if redirect_map is None:
            redirect_map = {}
        if not isinstance(redirect_map, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in redirect_map.items()
        ):
            raise ConfigError("redirect_map must map strings to strings")
        values["redirect_map"] = dict(redirect_map)

        config = cls(**values)
        config.check_types()
        return config

    @classmethod
    def from_json_file(cls, path: "str | Path") -> "ServerConfig":
        """
        Load configuration from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read config file {path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESERVER_ROOT             Document root (default: .)
        FILESERVER_HOST             Bind host (default: 127.0.0.1)
        FILESERVER_PORT             Bind port (default: 3000)
        FILESERVER_REDIRECTS        Redirect map as a JSON object
        FILESERVER_STRICT_PATHS     "1"/"true" enables canonical checks
        FILESERVER_MAX_CONNECTIONS  In-flight connection limit
        FILESERVER_LOG_LEVEL        Logging level (default: INFO)

        =====================================================================
        """
        redirects_raw = os.getenv("FILESERVER_REDIRECTS")
        try:
            redirect_map = json.loads(redirects_raw) if redirects_raw else {}
            port = int(os.getenv("FILESERVER_PORT", "3000"))
            max_raw = os.getenv("FILESERVER_MAX_CONNECTIONS")
            max_connections = int(max_raw) if max_raw else None
        except ValueError as e:
            raise ConfigError(f"invalid environment configuration: {e}") from e

        return cls.from_dict({
            "root_directory": os.getenv("FILESERVER_ROOT", "."),
            "host": os.getenv("FILESERVER_HOST", "127.0.0.1"),
            "port": port,
            "redirect_map": redirect_map,
            "strict_paths": os.getenv("FILESERVER_STRICT_PATHS", "").lower() in ("1", "true", "yes"),
            "max_connections": max_connections,
            "log_level": os.getenv("FILESERVER_LOG_LEVEL", "INFO"),
        })

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def check_types(self) -> None:
        """
        Check every scalar field against the JSON types it accepts.

        Raises:
            ConfigError: For the first field holding a value of the wrong type.
        """
        for name, accepted in FIELD_TYPES.items():
            value = getattr(self, name)
            wrong_bool = isinstance(value, bool) and bool not in accepted
            if wrong_bool or not isinstance(value, accepted):
                expected = " or ".join(
                    "null" if t is type(None) else t.__name__ for t in accepted
                )
                raise ConfigError(
                    f"{name} must be {expected}, got {type(value).__name__}: {value!r}"
                )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so that a bad root directory or port fails
        before the server accepts its first connection.

        Raises:
            ConfigError: On the first invalid value found.
        """
        self.check_types()

        if not self.root_directory:
            raise ConfigError("root_directory is required")

        if not os.path.isabs(self.root_directory):
            raise ConfigError(
                f"root_directory must be an absolute path: {self.root_directory}"
            )

        if not os.path.isdir(self.root_directory):
            raise ConfigError(f"root_directory does not exist: {self.root_directory}")

        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 64:
            raise ConfigError("buffer_size must be >= 64")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ConfigError("read_timeout must be > 0")

        if self.max_connections is not None and self.max_connections < 1:
            raise ConfigError("max_connections must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
