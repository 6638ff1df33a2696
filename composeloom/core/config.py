"""Migration settings.

Settings come from three layers, later layers winning:
defaults -> ``composeloom.yaml`` -> environment (``.env`` is loaded first).
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .constants import DEFAULT_ADVISORY_TAG

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "composeloom.yaml"
CONFIG_ENV_VAR = "COMPOSELOOM_CONFIG"

_ENV_OVERRIDES = {
    "COMPOSELOOM_MODE": "mode",
    "COMPOSELOOM_ADVISORY_TAG": "advisory_tag",
    "COMPOSELOOM_HOOK_PREFIX": "hook_prefix",
}

VALID_MODES = ("composable", "sfc")


@dataclass(frozen=True)
class MigrationSettings:
    """Knobs for one migration run."""

    mode: str = "composable"  # "composable" | "sfc"
    advisory_tag: str = DEFAULT_ADVISORY_TAG
    placeholder_type: str = "any"
    annotate_params: bool = True
    hook_prefix: str = "use"
    output_suffix: str = ".ts"

    def __post_init__(self):
        if self.mode not in VALID_MODES:
            raise ValueError(f"Unsupported mode: {self.mode}. Supported: {list(VALID_MODES)}")


def _coerce(value: Any, template: Any) -> Any:
    """Coerce a string override to the type of the default."""
    if isinstance(template, bool) and isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return value


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    # Accept both a flat file and one nested under "composeloom:"
    return data.get("composeloom", data)


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> MigrationSettings:
    """Build MigrationSettings from YAML, environment and explicit overrides.

    Args:
        config_path: Explicit YAML path. Falls back to $COMPOSELOOM_CONFIG,
            then ./composeloom.yaml when it exists.
        **overrides: Field values that win over every other layer
            (``None`` values are ignored).

    Returns:
        Frozen MigrationSettings

    Raises:
        ValueError: On unknown keys or an unsupported mode
    """
    load_dotenv()

    settings = MigrationSettings()
    known = {f.name: getattr(settings, f.name) for f in fields(settings)}
    values: Dict[str, Any] = {}

    path_str = config_path or os.getenv(CONFIG_ENV_VAR)
    path = Path(path_str) if path_str else Path.cwd() / CONFIG_FILENAME
    if path.exists():
        file_values = _read_yaml(path)
        unknown = set(file_values) - set(known)
        if unknown:
            raise ValueError(f"Unknown settings in {path}: {sorted(unknown)}")
        values.update(file_values)
        logger.debug(f"Loaded settings from {path}")
    elif path_str:
        logger.warning(f"Config file not found at {path}, using defaults")

    for env_var, field_name in _ENV_OVERRIDES.items():
        env_value = os.getenv(env_var)
        if env_value:
            values[field_name] = env_value

    values.update({k: v for k, v in overrides.items() if v is not None})
    values = {k: _coerce(v, known[k]) for k, v in values.items()}

    return replace(settings, **values)
