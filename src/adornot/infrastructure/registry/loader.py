"""Curated domain registry loaded from YAML.

The bundled ``domains.yaml`` is the default; a different file can be
injected via configuration.
"""

from __future__ import annotations

from collections.abc import Iterable
from importlib import resources
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from adornot.domain.entities.blocklist import DomainRegistryError
from adornot.domain.entities.probing import Category, Domain, is_valid_hostname

log = structlog.get_logger(__name__)

BUNDLED_REGISTRY = "domains.yaml"


class ProviderEntry(BaseModel):
    name: str = Field(min_length=1)
    category: Category
    hosts: list[str] = Field(min_length=1)

    @field_validator("hosts")
    @classmethod
    def _validate_hosts(cls, v: list[str]) -> list[str]:
        normalized = [h.strip().lower() for h in v]
        invalid = [h for h in normalized if not is_valid_hostname(h)]
        if invalid:
            raise ValueError(f"invalid hostnames: {', '.join(invalid)}")
        return normalized


class RegistryFile(BaseModel):
    providers: list[ProviderEntry] = Field(default_factory=list)


def _read_registry_text(path: Path | None) -> str:
    if path is None:
        return (
            resources.files("adornot.infrastructure.registry")
            .joinpath(BUNDLED_REGISTRY)
            .read_text(encoding="utf-8")
        )
    if not path.exists():
        raise FileNotFoundError(path)
    return path.read_text(encoding="utf-8")


def load_domain_registry(path: Path | None = None) -> list[Domain]:
    """Load curated domains in file order, unique by hostname.

    Raises:
        FileNotFoundError: *path* does not exist.
        DomainRegistryError: The document is not a valid registry.
    """
    raw = _read_registry_text(path)
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise DomainRegistryError(f"Registry is not valid YAML: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise DomainRegistryError(
            f"Registry YAML must be a mapping, got: {type(parsed)!r}"
        )

    try:
        registry = RegistryFile.model_validate(parsed)
    except ValidationError as exc:
        raise DomainRegistryError(f"Invalid domain registry: {exc}") from exc

    domains: dict[str, Domain] = {}
    for provider in registry.providers:
        for host in provider.hosts:
            domains.setdefault(
                host,
                Domain(hostname=host, provider=provider.name, category=provider.category),
            )

    log.debug(
        "domain_registry_loaded",
        source=str(path) if path else BUNDLED_REGISTRY,
        domains=len(domains),
    )
    return list(domains.values())


def select_categories(
    domains: Iterable[Domain],
    categories: Iterable[Category] | None,
) -> list[Domain]:
    """Keep domains in *categories* (all of them when None)."""
    if categories is None:
        return list(domains)
    wanted = set(categories)
    return [d for d in domains if d.category in wanted]
