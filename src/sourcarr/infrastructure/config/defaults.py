"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "sourcarr",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": None,  # None -> browser UA from providers.constants
    },
    "playwright": {
        "headless": True,
        "navigation_timeout_ms": 30_000,
        "settle_ms": 3_000,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "resolver": {
        "policy": "parallel",
        "providers": ["Cuevana", "PelisPlus", "RePelis", "FlixHQ"],
        "rendered_providers": [],
        "provider_timeout_seconds": 35.0,
        "request_deadline_seconds": 60.0,
        "consumet_base_url": "https://api-consumet-org-wg40.onrender.com",
        "cache_enabled": False,
        "cache_ttl_seconds": 600,
        "cache_directory": None,  # None -> temporary directory
    },
}
