"""
Configuration file loading.

Loads ``bucketpush.yaml`` (or an explicit path) with ``${VAR}`` environment
substitution, and maps it onto push and provider options.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from bucketpush.config.resolver import resolve_config
from bucketpush.core.encoding import EncodingOptions
from bucketpush.exceptions import ConfigurationError

DEFAULT_CONFIG_FILENAME = "bucketpush.yaml"

# Top-level keys and the types they accept
KNOWN_KEYS: dict[str, tuple[type, ...]] = {
    "source": (str, list),
    "destination": (str,),
    "prefix": (str,),
    "cwd": (str,),
    "concurrency": (int,),
    "only_upload_changes": (bool,),
    "delete_extra_files": (bool,),
    "upload_new_files_first": (bool,),
    "list_include_metadata": (bool,),
    "cache_control": (str,),
    "make_public": (bool,),
    "metadata": (dict,),
    "tags": (dict,),
    "mime_types": (dict,),
    "encoding": (dict,),
    "provider": (dict,),
    "logging": (dict,),
}


class Config:
    """bucketpush configuration container with dict-like access."""

    def __init__(self, data: dict[str, Any], path: Path | None = None):
        self.data = data
        self.path = path

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split(".")
        value = self.data
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def __getitem__(self, key: str) -> Any:
        if key in self.data:
            return self.data[key]
        raise KeyError(f"Config key '{key}' not found")

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def validate(self) -> None:
        """Validate configuration structure and value types."""
        errors = []

        for key, value in self.data.items():
            expected = KNOWN_KEYS.get(key)
            if expected is None:
                errors.append(f"Unknown configuration key '{key}'")
                continue
            # bool is an int subclass; keep "concurrency: true" out
            if isinstance(value, bool) and bool not in expected:
                errors.append(f"Configuration '{key}' must be {_type_names(expected)}, got bool")
            elif not isinstance(value, expected):
                errors.append(f"Configuration '{key}' must be {_type_names(expected)}, got {type(value).__name__}")

        concurrency = self.data.get("concurrency")
        if isinstance(concurrency, int) and not isinstance(concurrency, bool) and concurrency < 1:
            errors.append(f"Configuration 'concurrency' must be >= 1, got {concurrency}")

        encoding = self.data.get("encoding")
        if isinstance(encoding, dict):
            try:
                EncodingOptions.from_dict(encoding)
            except ConfigurationError as e:
                errors.append(f"Configuration 'encoding': {e}")

        if errors:
            raise ConfigurationError("\n".join(errors), details={"path": str(self.path) if self.path else None})

    def push_options(self) -> dict[str, Any]:
        """Keyword arguments for ``push()`` (everything except files/provider)."""
        mapping = {
            "prefix": "dest_path_prefix",
            "cwd": "current_working_directory",
            "concurrency": "concurrency",
            "only_upload_changes": "only_upload_changes",
            "delete_extra_files": "should_delete_extra_files",
            "upload_new_files_first": "upload_new_files_first",
            "list_include_metadata": "list_include_metadata",
            "cache_control": "cache_control",
            "make_public": "make_public",
            "metadata": "metadata",
            "tags": "tags",
            "mime_types": "mime_types",
        }
        options = {option: self.data[key] for key, option in mapping.items() if key in self.data}
        if "encoding" in self.data:
            options["encoding"] = EncodingOptions.from_dict(self.data["encoding"])
        return options

    def provider_options(self) -> dict[str, Any]:
        return dict(self.data.get("provider") or {})


def _type_names(types: tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in types)


def load_config(path: str | Path | None = None, *, required: bool = False) -> Config:
    """
    Load bucketpush configuration.

    Args:
        path: Config file path (default: ``bucketpush.yaml`` in the current
            directory, optional)
        required: Raise if the file does not exist

    Returns:
        Validated Config (empty when no file was found and none was required)

    Raises:
        ConfigurationError: Unreadable, unparseable or invalid config
    """
    if path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    else:
        config_path = Path(path)
        required = True

    if not config_path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {config_path}")
        return Config({})

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration must be a dictionary/mapping, got {type(data).__name__}", details={"path": str(config_path)}
        )

    config = Config(resolve_config(data), path=config_path)
    config.validate()
    return config
