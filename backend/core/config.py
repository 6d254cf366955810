import json
import logging
import os
import pathlib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from dotenv import load_dotenv
from psycopg.conninfo import make_conninfo

from core.errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = ("http://localhost:3000", "http://localhost:3001")

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class DatabaseConfig:
    host: str = ""
    port: int = 5432
    name: str = "customers"
    user: str = "customers"
    password: str = ""
    encrypt: bool = True
    trust_server_certificate: bool = True
    sslrootcert: str | None = None
    connect_timeout: int = 10
    statement_timeout: int = 30
    pool_min_size: int = 1
    pool_max_size: int = 10
    procedure: str = "GetSampleData"

    @property
    def configured(self) -> bool:
        return bool(self.host)

    @property
    def sslmode(self) -> str:
        if not self.encrypt:
            return "prefer"
        if self.trust_server_certificate:
            # encrypted, but the server certificate is not verified
            return "require"
        return "verify-full"

    @property
    def conninfo(self) -> str:
        params: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": self.name,
            "user": self.user,
            "password": self.password,
            "sslmode": self.sslmode,
            "connect_timeout": self.connect_timeout,
            "options": f"-c statement_timeout={self.statement_timeout * 1000}",
        }
        if self.sslrootcert:
            params["sslrootcert"] = self.sslrootcert
        return make_conninfo(**params)


@dataclass(frozen=True)
class CorsConfig:
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    allow_all: bool = False


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


# environment key -> (section, field)
ENV_KEYS: dict[str, tuple[str, str]] = {
    "DB_USER": ("database", "user"),
    "DB_PASSWORD": ("database", "password"),
    "DB_SERVER": ("database", "host"),
    "DB_DATABASE": ("database", "name"),
    "DB_PORT": ("database", "port"),
    "DB_ENCRYPT": ("database", "encrypt"),
    "DB_TRUST_SERVER_CERTIFICATE": ("database", "trust_server_certificate"),
    "DB_SSLROOTCERT": ("database", "sslrootcert"),
    "DB_CONNECT_TIMEOUT": ("database", "connect_timeout"),
    "DB_STATEMENT_TIMEOUT": ("database", "statement_timeout"),
    "DB_POOL_MIN_SIZE": ("database", "pool_min_size"),
    "DB_POOL_MAX_SIZE": ("database", "pool_max_size"),
    "DB_PROCEDURE": ("database", "procedure"),
    "ALLOWED_ORIGINS": ("cors", "allowed_origins"),
    "ALLOW_ALL_ORIGINS": ("cors", "allow_all"),
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "LOG_LEVEL": ("server", "log_level"),
}

BLANK_ALLOWED = {"DB_PASSWORD", "ALLOWED_ORIGINS"}


def parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None


def parse_origins(value: Any, key: str = "cors.allowed_origins") -> tuple[str, ...]:
    """Split a comma-separated allow-list, dropping blank entries."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        items = list(value)
    else:
        raise ConfigError(f"{key} must be a string or a list of strings, got {value!r}")
    return tuple(item.strip() for item in items if item and item.strip())


def _coerce(section: type, key: str, name: str, value: Any) -> Any:
    """Convert a raw value to the type declared on the dataclass field."""
    declared = {f.name: f.type for f in fields(section)}[name]
    if name == "allowed_origins":
        return parse_origins(value, key)
    if declared in (bool, "bool"):
        return parse_bool(key, value)
    if declared in (int, "int"):
        return parse_int(key, value)
    if value is None:
        return None
    return str(value).strip()


def _build_section(section: type, data: Mapping[str, Any], prefix: str) -> Any:
    known = {f.name for f in fields(section)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown {prefix} settings: {', '.join(sorted(unknown))}")
    kwargs = {
        name: _coerce(section, f"{prefix}.{name}", name, value)
        for name, value in data.items()
    }
    return section(**kwargs)


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    cors: CorsConfig = field(default_factory=CorsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppConfig":
        return cls(
            database=_build_section(DatabaseConfig, data.get("database", {}), "database"),
            cors=_build_section(CorsConfig, data.get("cors", {}), "cors"),
            server=_build_section(ServerConfig, data.get("server", {}), "server"),
        )

    def with_environ(self, environ: Mapping[str, str]) -> "AppConfig":
        """Return a copy with every recognised environment key applied."""
        sections = {
            "database": self.database,
            "cors": self.cors,
            "server": self.server,
        }
        updates: dict[str, dict[str, Any]] = {name: {} for name in sections}
        for key, (section, name) in ENV_KEYS.items():
            if key not in environ:
                continue
            # blank means unset, except where an empty value is meaningful
            if environ[key] == "" and key not in BLANK_ALLOWED:
                continue
            updates[section][name] = _coerce(
                type(sections[section]), key, name, environ[key]
            )
        return replace(
            self,
            **{
                name: replace(sections[name], **changes)
                for name, changes in updates.items()
                if changes
            },
        )

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build the process configuration.

        A .env file is loaded first (existing variables win), then the
        optional JSON file named by CONFIG_FILE, then environment overrides.
        """
        if environ is None:
            load_dotenv(override=False)
            environ = os.environ

        config_path = environ.get("CONFIG_FILE", "/run/secrets/config.json")
        path = pathlib.Path(config_path)

        if path.exists():
            with open(path) as f:
                data = json.load(f)
            config = cls.from_dict(data)
            logger.info("Config loaded from %s", config_path)
        else:
            config = cls()

        return config.with_environ(environ)
