# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.settings",
#   "purpose": "Pydantic v2 settings for Stardoc ingestion, rendering, and site builds.",
#   "sections": [
#     {"id": "logformat", "name": "LogFormat", "anchor": "class-logformat", "kind": "class"},
#     {"id": "loggingcfg", "name": "LoggingCfg", "anchor": "class-loggingcfg", "kind": "class"},
#     {"id": "httpcfg", "name": "HttpCfg", "anchor": "class-httpcfg", "kind": "class"},
#     {"id": "archivecfg", "name": "ArchiveCfg", "anchor": "class-archivecfg", "kind": "class"},
#     {"id": "rendercfg", "name": "RenderCfg", "anchor": "class-rendercfg", "kind": "class"},
#     {"id": "buildcfg", "name": "BuildCfg", "anchor": "class-buildcfg", "kind": "class"},
#     {"id": "stardocsettings", "name": "StardocSettings", "anchor": "class-stardocsettings", "kind": "class"},
#     {"id": "load-raw-yaml", "name": "load_raw_yaml", "anchor": "function-load-raw-yaml", "kind": "function"},
#     {"id": "load-settings", "name": "load_settings", "anchor": "function-load-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Unified Pydantic v2 settings for the Stardoc documentation browser.

Settings are layered as CLI overrides > ``REGISTRYDOCS_`` environment
variables > YAML configuration file > defaults. Nested groups use ``__`` as
the environment delimiter, for example ``REGISTRYDOCS_HTTP__READ_TIMEOUT_S=10``.

NAVMAP:
- LoggingCfg: log level, console/json format, optional JSONL log directory
- HttpCfg: archive transport timeouts and size limits
- ArchiveCfg: descriptor suffix and per-member size guard
- RenderCfg: highlighting style and client-side navigation timings
- BuildCfg: output directory and per-version concurrency
- StardocSettings: root aggregation
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import UserConfigError

__all__ = [
    "LogFormat",
    "LoggingCfg",
    "HttpCfg",
    "ArchiveCfg",
    "RenderCfg",
    "BuildCfg",
    "StardocSettings",
    "load_raw_yaml",
    "load_settings",
]

DEFAULT_USER_AGENT = "registrydocs-stardoc/0.1"
STARDOC_INSTRUCTIONS_URL = (
    "https://github.com/bazelbuild/bazel-central-registry/blob/main/docs/stardoc.md"
)


class LogFormat(str, Enum):
    """Supported log output formats."""

    CONSOLE = "console"
    JSON = "json"


class LoggingCfg(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Root logging level")
    format: LogFormat = Field(LogFormat.CONSOLE, description="Pretty console or structured JSON")
    log_dir: Optional[Path] = Field(None, description="Directory for rotating JSONL logs")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalise and validate the level name."""
        normalized = str(v).upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return normalized

    @field_validator("log_dir", mode="before")
    @classmethod
    def expand_log_dir(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return Path(v).expanduser()


class HttpCfg(BaseModel):
    """Transport configuration for documentation archive downloads."""

    connect_timeout_s: float = Field(5.0, gt=0, description="TCP connect timeout")
    read_timeout_s: float = Field(30.0, gt=0, description="Read/write timeout")
    http2: bool = Field(False, description="Negotiate HTTP/2 when the server supports it")
    follow_redirects: bool = Field(True, description="Follow redirects (release assets redirect)")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header")
    max_archive_bytes: int = Field(
        64 * 1024 * 1024, ge=1, description="Abort downloads larger than this many bytes"
    )


class ArchiveCfg(BaseModel):
    """Archive decoding configuration."""

    descriptor_suffix: str = Field(".binaryproto", description="Entry suffix of descriptor files")
    max_member_bytes: Optional[int] = Field(
        16 * 1024 * 1024, ge=1, description="Skip archive members larger than this (None = off)"
    )


class RenderCfg(BaseModel):
    """Rendering and client-side navigation configuration."""

    pygments_style: str = Field("monokai", description="Pygments style for code blocks")
    header_offset_px: int = Field(100, ge=0, description="Sticky header offset for scroll sync")
    settle_delay_ms: int = Field(1000, ge=0, description="Scroll-sync suppression after clicks")
    hash_settle_delay_ms: int = Field(100, ge=0, description="Delay before fragment scrolling")
    copy_feedback_ms: int = Field(2000, ge=0, description="Copy-link success indicator duration")
    instructions_url: str = Field(
        STARDOC_INSTRUCTIONS_URL, description="Shown when a module publishes no docs"
    )


class BuildCfg(BaseModel):
    """Site build configuration."""

    output_dir: Path = Field(Path("site"), description="Root directory for generated pages")
    workers: int = Field(4, ge=1, description="Versions ingested in parallel")

    @field_validator("output_dir", mode="before")
    @classmethod
    def expand_output_dir(cls, v: Any) -> Any:
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v


class StardocSettings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="REGISTRYDOCS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingCfg = Field(default_factory=LoggingCfg)
    http: HttpCfg = Field(default_factory=HttpCfg)
    archive: ArchiveCfg = Field(default_factory=ArchiveCfg)
    render: RenderCfg = Field(default_factory=RenderCfg)
    build: BuildCfg = Field(default_factory=BuildCfg)

    def model_dump_redacted(self) -> dict[str, Any]:
        """Return a JSON-friendly dump with credential-like values masked."""

        def redact(value: Any, key: str = "") -> Any:
            if isinstance(value, dict):
                return {k: redact(v, k) for k, v in value.items()}
            if any(marker in key.lower() for marker in ("token", "secret", "password")):
                return "***masked***"
            return value

        return redact(self.model_dump(mode="json"))


def load_raw_yaml(config_path: Path) -> Mapping[str, object]:
    """Read a YAML configuration file and return its top-level mapping."""

    path = Path(config_path).expanduser()
    if not path.exists():
        raise UserConfigError(f"Configuration file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise UserConfigError(f"Configuration file '{path}' contains invalid YAML") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise UserConfigError("Configuration file must contain a mapping at the root")
    return data


def _merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping):
            current = merged.get(key)
            merged[key] = _merge(dict(current) if isinstance(current, Mapping) else {}, value)
        elif value is not None:
            merged[key] = value
    return merged


def load_settings(
    config_path: Optional[Path] = None, **overrides: Mapping[str, Any]
) -> StardocSettings:
    """Build settings from defaults, YAML, environment, and explicit overrides.

    Args:
        config_path: Optional YAML file whose mapping supplies file-level values.
        **overrides: Group-keyed overrides (``logging={"level": "DEBUG"}``) that
            win over every other source; ``None`` leaves are ignored.

    Returns:
        Validated :class:`StardocSettings`.

    Raises:
        UserConfigError: If the YAML file is missing or invalid, or values fail
            validation.
    """

    try:
        env_layer = StardocSettings()
        file_layer: Mapping[str, Any] = load_raw_yaml(config_path) if config_path else {}
        # Environment values beat file values; only explicitly set env fields are layered.
        env_values = env_layer.model_dump(exclude_unset=True)
        merged = _merge(_merge(dict(file_layer), env_values), overrides)
        return StardocSettings.model_validate(merged)
    except ValidationError as exc:
        raise UserConfigError(f"Invalid configuration: {exc}") from exc
