"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "adornot",
    "environment": "dev",
    "probe": {
        "request_timeout_seconds": 6.0,
        "resource_timeout_seconds": 10.0,
        "max_concurrency": 8,
        "user_agent": "AdOrNot/0.1.0",
    },
    "pihole": {
        "host": None,
        "password": None,
        "sample_size": None,
        "request_timeout_seconds": 15.0,
        "resource_timeout_seconds": 30.0,
        "download_concurrency": 4,
    },
    "domains": {
        "registry_path": None,  # None = bundled domains.yaml
        "categories": None,  # None = all standard categories
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
