"""
Mapping between flat override keys and AppConfig fields.

File sections use the nested names (``sync.adapter_timeout``); CLI
overrides, environment variables and ``.env`` entries use the flat keys
below.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from clientsync.core.ports.config_provider import AppConfig


def _optional_float(value: Any) -> float | None:
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "off")):
        return None
    return float(value)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


# flat key -> (section, field, converter)
FLAT_KEYS: dict[str, tuple[str, str, Callable[[Any], Any]]] = {
    "drift_tolerance_ms": ("sync", "drift_tolerance_ms", int),
    "adapter_timeout": ("sync", "adapter_timeout", _optional_float),
    "actor_id": ("sync", "actor_id", str),
    "actor_name": ("sync", "actor_name", str),
    "tracker_base_url": ("sync", "tracker_base_url", str),
    "audit_log": ("audit", "log_path", _optional_str),
    "log_level": ("logging", "level", lambda v: str(v).upper()),
    "log_format": ("logging", "format", lambda v: str(v).lower()),
    "log_file": ("logging", "file", _optional_str),
}

SECTIONS = ("sync", "audit", "logging")


def section_fields(section: str) -> dict[str, Callable[[Any], Any]]:
    """Nested field names accepted in a config file section."""
    return {f: conv for s, f, conv in FLAT_KEYS.values() if s == section}


def apply_sections(config: AppConfig, data: Mapping[str, Any], source: str) -> list[str]:
    """
    Apply nested file data to config.

    Returns:
        Problems found (unknown keys, bad values); valid keys are applied.
    """
    errors: list[str] = []
    for section, values in data.items():
        if section not in SECTIONS:
            errors.append(f"{source}: unknown section '{section}'")
            continue
        if not isinstance(values, Mapping):
            errors.append(f"{source}: section '{section}' must be a table")
            continue
        accepted = section_fields(section)
        target = getattr(config, section)
        for key, value in values.items():
            if key not in accepted:
                errors.append(f"{source}: unknown key '{section}.{key}'")
                continue
            try:
                setattr(target, key, accepted[key](value))
            except (TypeError, ValueError) as e:
                errors.append(f"{source}: invalid value for '{section}.{key}': {e}")
    return errors


def apply_flat(config: AppConfig, values: Mapping[str, Any], source: str) -> list[str]:
    """Apply flat override keys (CLI, environment) to config."""
    errors: list[str] = []
    for key, value in values.items():
        if value is None or key not in FLAT_KEYS:
            continue
        section, field_name, convert = FLAT_KEYS[key]
        try:
            setattr(getattr(config, section), field_name, convert(value))
        except (TypeError, ValueError) as e:
            errors.append(f"{source}: invalid value for '{key}': {e}")
    return errors


def get_dotted(config: AppConfig, key: str, default: Any = None) -> Any:
    target: Any = config
    for part in key.split("."):
        if not hasattr(target, part):
            return default
        target = getattr(target, part)
    return target


def set_dotted(config: AppConfig, key: str, value: Any) -> None:
    *path, last = key.split(".")
    target: Any = config
    for part in path:
        target = getattr(target, part)
    if not hasattr(target, last):
        raise KeyError(key)
    setattr(target, last, value)
