"""Configuration loading for godotsetup.

Settings are layered, lowest precedence first:

1. Built-in defaults (the ``SetupConfig`` field defaults)
2. A YAML file (``godotsetup.yaml`` in the project root, or ``--config``)
3. GitHub Actions style ``INPUT_<NAME>`` environment variables
4. Explicit command-line flags

Example ``godotsetup.yaml``::

    version: 4.2.1
    use-dotnet: true
    include-templates: true
    cache: true
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import yaml

from godotsetup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "godotsetup.yaml"

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}
_URL_SCHEMES = {"releases", "legacy", "auto"}


@dataclass
class SetupConfig:
    """Complete godotsetup configuration."""

    version: str = ""
    path: str = "godot"  # Installation directory, relative to home
    downloads_path: str = "godot_downloads"
    bin_path: str = "godot_bin"
    custom_url: str = ""
    use_dotnet: bool = False
    godot_sharp_release: bool = False
    include_templates: bool = False
    cache: bool = True
    cache_dir: Optional[str] = None  # Defaults to ~/.godotsetup/cache
    url_scheme: str = "releases"  # 'releases', 'legacy', 'auto'
    legacy_url_before: Optional[str] = None  # Boundary for url_scheme 'auto'

    def resolve_dir(self, relative: str, home: Path) -> Path:
        """Resolve a configured directory against the user home directory."""
        path = Path(relative).expanduser()
        if path.is_absolute():
            return path
        return home / path

    @property
    def uses_custom_build(self) -> bool:
        """True if a custom download URL replaces version resolution."""
        return bool(self.custom_url)


_FIELD_TYPES = {f.name: f.type for f in fields(SetupConfig)}
_BOOL_FIELDS = {
    name for name, field_type in _FIELD_TYPES.items() if field_type in (bool, "bool")
}


def input_name(field_name: str) -> str:
    """Action input name for a config field ('downloads_path' -> 'downloads-path')."""
    return field_name.replace("_", "-")


def parse_bool(value: Any, name: str) -> bool:
    """
    Parse a boolean input.

    Args:
        value: Raw value (bool or string)
        name: Input name for error messages

    Returns:
        Parsed boolean

    Raises:
        ConfigError: If the value is not a recognized boolean
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(
        f"Input '{input_name(name)}' must be a boolean (true/false), got: {value!r}"
    )


def _normalize_value(name: str, value: Any) -> Any:
    """Convert a raw input to the field type, stripping all whitespace from strings."""
    if name in _BOOL_FIELDS:
        return parse_bool(value, name)
    if value is None:
        return None
    text = "".join(str(value).split())
    if name in ("cache_dir", "legacy_url_before") and not text:
        return None
    return text


def _apply(config: SetupConfig, values: Mapping[str, Any], source: str) -> None:
    for key, value in values.items():
        name = key.replace("-", "_").lower()
        if name not in _FIELD_TYPES:
            raise ConfigError(f"Unknown configuration key in {source}: {key}")
        setattr(config, name, _normalize_value(name, value))
        logger.debug(f"Config {name} set from {source}")


def load_yaml_file(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration mapping (empty if file doesn't exist and not required)

    Raises:
        ConfigError: If the file is required but missing, or not valid YAML
    """
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {config_file}")
    return data


def inputs_from_environment(environ: Mapping[str, str]) -> Dict[str, str]:
    """
    Collect action inputs from ``INPUT_<NAME>`` environment variables.

    Empty values are ignored, matching how CI runners pass unset inputs.

    Args:
        environ: Environment mapping

    Returns:
        Mapping of field name to raw value
    """
    values = {}
    for name in _FIELD_TYPES:
        for env_name in (
            f"INPUT_{input_name(name).upper()}",
            f"INPUT_{name.upper()}",
        ):
            raw = environ.get(env_name)
            if raw is not None and raw.strip() != "":
                values[name] = raw
                break
    return values


def validate_config(config: SetupConfig) -> SetupConfig:
    """
    Validate a fully layered configuration.

    Raises:
        ConfigError: If required values are missing or inconsistent
    """
    if not config.version and not config.custom_url:
        raise ConfigError("Missing required input: version (or custom-url)")
    if config.url_scheme.lower() not in _URL_SCHEMES:
        raise ConfigError(
            f"Invalid url-scheme: {config.url_scheme!r} "
            f"(expected one of: {', '.join(sorted(_URL_SCHEMES))})"
        )
    for name in ("path", "downloads_path", "bin_path"):
        if not getattr(config, name):
            raise ConfigError(f"Input '{input_name(name)}' cannot be empty")
    return config


def load_config(
    config_file: Optional[Path] = None,
    project_root: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> SetupConfig:
    """
    Build the layered configuration.

    Args:
        config_file: Explicit YAML file (must exist when given)
        project_root: Directory searched for godotsetup.yaml
        environ: Environment mapping for INPUT_* variables
        overrides: Values from command-line flags (None values are skipped)

    Returns:
        Validated SetupConfig

    Raises:
        ConfigError: If any layer is invalid
    """
    config = SetupConfig()

    if config_file is not None:
        values = load_yaml_file(Path(config_file), required=True)
        _apply(config, values, str(config_file))
    elif project_root is not None:
        default_file = Path(project_root) / DEFAULT_CONFIG_FILENAME
        _apply(config, load_yaml_file(default_file), str(default_file))

    if environ is not None:
        _apply(config, inputs_from_environment(environ), "environment")

    if overrides:
        explicit = {k: v for k, v in overrides.items() if v is not None}
        _apply(config, explicit, "command line")

    return validate_config(config)
