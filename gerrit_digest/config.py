"""Configuration utilities for the Gerrit digest CLI."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

try:
    import tomllib as tomli  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - older runtimes use the tomli backport
    import tomli  # type: ignore[no-redef]
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from tomli_w import dump as toml_dump

from .constants import (
    API_DEFAULTS,
    DEFAULT_DAYS_TO_LOOK_BACK,
    DEFAULT_OUTPUT_FILENAME,
    DEFAULT_SERVER_URL,
)
from .exceptions import ConfigurationError
from .utils import validate_url

CONFIG_DIR = Path.home() / ".config" / "gerrit_digest"
CONFIG_FILE = CONFIG_DIR / "config.toml"
CONFIG_VERSION = "1.0.0"


class ServerConfig(BaseModel):
    """Gerrit server connection details."""

    model_config = ConfigDict(frozen=True)

    url: str = DEFAULT_SERVER_URL

    @field_validator("url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Require an http(s) URL with a hostname and drop any trailing slash."""
        validate_url(v, "server.url")
        return v.strip().rstrip("/")


class QueryConfig(BaseModel):
    """Which changes to collect."""

    model_config = ConfigDict(frozen=True)

    owner: str = ""
    days_to_look_back: int = DEFAULT_DAYS_TO_LOOK_BACK
    page_size: int = API_DEFAULTS['page_size']

    @field_validator("days_to_look_back", "page_size")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        """Validate that numeric fields are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("owner")
    @classmethod
    def strip_owner(cls, v: str) -> str:
        return v.strip()


class OutputConfig(BaseModel):
    """Where the digest is written."""

    model_config = ConfigDict(frozen=True)

    filename: str = DEFAULT_OUTPUT_FILENAME

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("filename cannot be empty")
        return v.strip()


class APIConfig(BaseModel):
    """Configuration for API requests."""

    model_config = ConfigDict(frozen=True)

    timeout: int = API_DEFAULTS['timeout']

    @field_validator("timeout")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        """Validate that numeric fields are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v


_SECTIONS = ("server", "query", "output", "api")


@dataclass(frozen=True, slots=True)
class Config:
    """Top-level configuration container, built once per run."""

    version: str = CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    api: APIConfig = field(default_factory=APIConfig)

    @classmethod
    def load(cls, path: Path = CONFIG_FILE) -> "Config":
        """Load configuration data from disk.

        Args:
            path: Optional override for the configuration file path.

        Returns:
            Config: The loaded configuration object, or defaults when the
            file does not exist.

        Raises:
            ConfigurationError: If configuration file is corrupted or invalid.
        """

        if not path.exists():
            return cls()

        try:
            with path.open("rb") as handle:
                raw: Dict[str, Any] = tomli.load(handle)
        except (OSError, tomli.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to parse configuration file {path}: {exc}") from exc

        try:
            return cls(
                version=raw.get("version", CONFIG_VERSION),
                server=ServerConfig(**raw.get("server", {})),
                query=QueryConfig(**raw.get("query", {})),
                output=OutputConfig(**raw.get("output", {})),
                api=APIConfig(**raw.get("api", {})),
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc

    def dump(self, path: Path = CONFIG_FILE, backup: bool = True) -> None:
        """Persist the configuration to disk.

        Args:
            path: Path to save the configuration file.
            backup: If True and config file exists, create a backup before overwriting.
        """

        path.parent.mkdir(parents=True, exist_ok=True)

        if backup and path.exists():
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            backup_path = path.parent / f"{path.stem}.{timestamp}.bak"
            shutil.copy2(path, backup_path)

        payload: Dict[str, Any] = {"version": self.version}
        for section in _SECTIONS:
            payload[section] = getattr(self, section).model_dump()

        with path.open("wb") as handle:
            toml_dump(payload, handle)

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with dotted-key overrides applied.

        Keys use ``section__field`` form (e.g. ``query__owner``) so they can be
        passed as keyword arguments. ``None`` values are ignored.

        Raises:
            ConfigurationError: If a key is unknown or a value fails validation.
        """
        updates: Dict[str, Dict[str, Any]] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            section, _, name = key.partition("__")
            if section not in _SECTIONS:
                raise ConfigurationError(f"Invalid section '{section}'. Valid sections: {', '.join(_SECTIONS)}")
            model_cls = type(getattr(self, section))
            if name not in model_cls.model_fields:
                valid_fields = ", ".join(model_cls.model_fields.keys())
                raise ConfigurationError(
                    f"Invalid field '{name}' for section '{section}'. Valid fields: {valid_fields}"
                )
            updates.setdefault(section, {})[name] = value

        if not updates:
            return self

        sections: Dict[str, BaseModel] = {}
        for section, values in updates.items():
            current = getattr(self, section)
            try:
                sections[section] = type(current).model_validate(current.model_dump() | values)
            except ValidationError as exc:
                error_msg = "; ".join(
                    f"{section}.{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in exc.errors()
                )
                raise ConfigurationError(f"Validation error: {error_msg}") from exc

        return replace(self, **sections)

    def validate_required_fields(self) -> None:
        """Validate that all required configuration fields are set.

        Raises:
            ConfigurationError: If any required field is missing.
        """
        errors = []

        if not self.query.owner:
            errors.append("Change owner (query.owner) is not set. Run 'gerrit-digest init' or pass --owner.")

        if errors:
            raise ConfigurationError("Configuration is incomplete:\n  - " + "\n  - ".join(errors))

    def to_display_dict(self) -> Dict[str, Any]:
        """Return a serialisable representation for display purposes."""

        return {section: getattr(self, section).model_dump() for section in _SECTIONS}
