"""
Registered application lookup used when naming new security groups.

The registry is a JSON file holding either a list of application names or an
object with an "applications" list. Lookups are case-insensitive.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from sg_toolkit.config import APPLICATION_REGISTRY_ENV


class ApplicationRegistryError(ValueError):
    """Raised when the registry file cannot be read or has the wrong shape."""


class StaticApplicationRegistry:
    """Application directory backed by a fixed set of names."""

    def __init__(self, app_names: Iterable[str] = ()):
        self._names = frozenset(name.lower() for name in app_names if name)

    def is_registered(self, scope, app_name: Optional[str]) -> bool:
        del scope
        return bool(app_name) and app_name.lower() in self._names

    @property
    def names(self) -> list[str]:
        return sorted(self._names)


def load_application_registry(path) -> StaticApplicationRegistry:
    """
    Load a registry from a JSON file.

    Raises:
        ApplicationRegistryError: If the file is missing, not JSON, or not a list of names
    """
    registry_path = Path(path).expanduser()
    try:
        payload = json.loads(registry_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ApplicationRegistryError(f"Cannot read application registry {registry_path}") from exc

    if isinstance(payload, dict):
        payload = payload.get("applications")
    if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
        raise ApplicationRegistryError(
            f"Application registry {registry_path} must be a list of application names"
        )

    logging.info("Loaded %d applications from %s", len(payload), registry_path)
    return StaticApplicationRegistry(payload)


def registry_from_env(path: Optional[str] = None) -> Optional[StaticApplicationRegistry]:
    """Load the registry named by path or the registry env variable; None when neither is set."""
    resolved = path or os.environ.get(APPLICATION_REGISTRY_ENV)
    if not resolved:
        return None
    return load_application_registry(resolved)
