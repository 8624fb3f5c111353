"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from adornot.domain.entities.probing import Category

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class ProbeConfig(BaseModel):
    """Per-probe transport settings shared by every probe of a run."""

    request_timeout_seconds: float = Field(
        default=6.0,
        description="httpx timeout (connect/read/write/pool) per probe.",
    )
    resource_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a whole probe, connect to last byte.",
    )
    max_concurrency: int = Field(
        default=8,
        description="Chunk size: probes launched together before the next chunk.",
    )
    user_agent: str = Field(
        default="AdOrNot/0.1.0",
        description="User-Agent sent with HEAD probes.",
    )

    @field_validator("request_timeout_seconds", "resource_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be >= 1")
        return v


class PiholeConfig(BaseModel):
    """Pi-hole v6 list-management API access."""

    host: Optional[str] = Field(
        default=None,
        description="Pi-hole address, e.g. 'pi.hole' or 'http://192.168.1.2'.",
    )
    password: Optional[SecretStr] = Field(
        default=None,
        description="Pi-hole web password (prefer ADORNOT_PIHOLE_PASSWORD).",
    )
    sample_size: Optional[int] = Field(
        default=None,
        description="Explicit number of blocklist domains to test (default: log scaled).",
    )
    request_timeout_seconds: float = Field(default=15.0)
    resource_timeout_seconds: float = Field(default=30.0)
    download_concurrency: int = Field(
        default=4,
        description="Max parallel blocklist downloads.",
    )

    @field_validator("sample_size")
    @classmethod
    def _validate_sample_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("sample_size must be >= 0")
        return v

    @field_validator("request_timeout_seconds", "resource_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("download_concurrency")
    @classmethod
    def _validate_download_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("download_concurrency must be >= 1")
        return v


class DomainsConfig(BaseModel):
    registry_path: Optional[Path] = Field(
        default=None,
        description="YAML domain registry (default: bundled list).",
    )
    categories: Optional[list[Category]] = Field(
        default=None,
        description="Curated categories to test (default: all).",
    )

    @field_validator("registry_path", mode="before")
    @classmethod
    def _validate_path(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    @field_validator("categories", mode="before")
    @classmethod
    def _split_categories(cls, v: Any) -> Any:
        """Accept ``"ads, OEMs"`` (env style) next to a YAML list.

        Names and values match case-insensitively; anything else is left
        for the enum check to reject.
        """
        if isinstance(v, str):
            v = [token.strip() for token in v.split(",") if token.strip()]
        if not isinstance(v, list):
            return v
        lookup = {c.value.lower(): c for c in Category}
        lookup.update({c.name.lower(): c for c in Category})
        return [
            lookup.get(item.lower(), item) if isinstance(item, str) else item
            for item in v
        ]


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (probe/pihole/domains/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    app_name: str = Field(default="adornot", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    pihole: PiholeConfig = Field(default_factory=PiholeConfig)
    domains: DomainsConfig = Field(default_factory=DomainsConfig)

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        The Pi-hole password is never included.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "probe": self.probe.model_dump(),
            "pihole": self.pihole.model_dump(exclude={"password"}),
            "domains": {
                "registry_path": (
                    str(self.domains.registry_path)
                    if self.domains.registry_path
                    else None
                ),
                "categories": (
                    [c.value for c in self.domains.categories]
                    if self.domains.categories is not None
                    else None
                ),
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read ADORNOT_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Every field is ``ADORNOT_`` plus the flat key load.py understands,
    e.g. ADORNOT_PROBE_MAX_CONCURRENCY, ADORNOT_PIHOLE_DOWNLOAD_CONCURRENCY,
    ADORNOT_DOMAINS_CATEGORIES (comma separated) or ADORNOT_LOG_LEVEL.
    """

    model_config = SettingsConfigDict(
        env_prefix="ADORNOT_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    probe_request_timeout_seconds: Optional[float] = None
    probe_resource_timeout_seconds: Optional[float] = None
    probe_max_concurrency: Optional[int] = None
    probe_user_agent: Optional[str] = None

    pihole_host: Optional[str] = None
    pihole_password: Optional[str] = None
    pihole_sample_size: Optional[int] = None
    pihole_request_timeout_seconds: Optional[float] = None
    pihole_resource_timeout_seconds: Optional[float] = None
    pihole_download_concurrency: Optional[int] = None

    domains_registry_path: Optional[Path] = None
    domains_categories: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    @field_validator("domains_registry_path", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
