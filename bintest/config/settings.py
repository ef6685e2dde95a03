"""Build configuration value and its YAML loading.

A BuildConfig is the complete set of options a registry is built with.
It is immutable and compared by value: every caller in a process must
agree on one BuildConfig.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from bintest.utils.result import ConfigError, Err, Ok, Result

# Follows the optimization level of the running interpreter (python -O)
RELEASE_BUILD: bool = not __debug__

DEFAULT_CONFIG_FILE = "bintest.yaml"

_BOOL_KEYS = ("workspace", "quiet", "release", "offline", "all_targets")
_STR_KEYS = ("features", "profile", "manifest_path")
_LIST_KEYS = ("binaries", "examples")


@dataclass(frozen=True)
class BuildConfig:
    """Options for the 'cargo build' run that discovers executables."""

    build_workspace: bool = False
    quiet: bool = False
    release: bool = RELEASE_BUILD
    offline: bool = False
    all_targets: bool = False
    features: Optional[str] = None
    profile: Optional[str] = None
    binaries: Optional[tuple[str, ...]] = None
    examples: Optional[tuple[str, ...]] = None
    manifest_path: Optional[str] = None

    def diff(self, other: "BuildConfig") -> list[str]:
        """Names of the fields whose values differ from other."""
        return [
            f.name
            for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name)
        ]

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        for name in ("features", "profile", "manifest_path"):
            value = getattr(self, name)
            if value is not None and not value.strip():
                return Err(ConfigError(field=name, message="Must not be empty"))

        for name in ("binaries", "examples"):
            values = getattr(self, name)
            if values is None:
                continue
            if not values:
                return Err(ConfigError(field=name, message="Must name at least one target"))
            for value in values:
                if not value.strip():
                    return Err(ConfigError(
                        field=name,
                        message="Target names must not be empty",
                    ))

        return Ok(None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["BuildConfig", ConfigError]:
        """
        Create a configuration from a dictionary.

        Keys mirror the builder options: workspace, quiet, release, offline,
        all_targets, features, profile, binaries, examples, manifest_path.

        Args:
            data: Configuration dictionary

        Returns:
            Result with the config or error
        """
        if not isinstance(data, dict):
            return Err(ConfigError(
                field="root",
                message=f"Expected a mapping, got {type(data).__name__}",
            ))

        known = set(_BOOL_KEYS) | set(_STR_KEYS) | set(_LIST_KEYS)
        unknown = sorted(set(data) - known)
        if unknown:
            return Err(ConfigError(
                field=unknown[0],
                message=f"Unknown option (expected one of {', '.join(sorted(known))})",
            ))

        for key in _BOOL_KEYS:
            if key in data and not isinstance(data[key], bool):
                return Err(ConfigError(
                    field=key,
                    message=f"Must be true or false, got {data[key]!r}",
                ))

        features = data.get("features")
        if isinstance(features, list):
            if not all(isinstance(f, str) for f in features):
                return Err(ConfigError(field="features", message="List entries must be strings"))
            features = ",".join(features)
        elif features is not None and not isinstance(features, str):
            return Err(ConfigError(
                field="features",
                message=f"Must be a string or list of strings, got {features!r}",
            ))

        for key in ("profile", "manifest_path"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                return Err(ConfigError(field=key, message=f"Must be a string, got {value!r}"))

        lists: dict[str, Optional[tuple[str, ...]]] = {}
        for key in _LIST_KEYS:
            value = data.get(key)
            if value is None:
                lists[key] = None
            elif isinstance(value, list) and all(isinstance(v, str) for v in value):
                lists[key] = tuple(value)
            else:
                return Err(ConfigError(
                    field=key,
                    message=f"Must be a list of strings, got {value!r}",
                ))

        config = cls(
            build_workspace=data.get("workspace", False),
            quiet=data.get("quiet", False),
            release=data.get("release", RELEASE_BUILD),
            offline=data.get("offline", False),
            all_targets=data.get("all_targets", False),
            features=features,
            profile=data.get("profile"),
            binaries=lists["binaries"],
            examples=lists["examples"],
            manifest_path=data.get("manifest_path"),
        )

        return config.validate().map(lambda _: config)

    @classmethod
    def from_yaml(cls, path: Path) -> Result["BuildConfig", ConfigError]:
        """
        Load a configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with the config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        return cls.from_dict(data)


def load_config(path: Optional[Path] = None) -> Result[BuildConfig, ConfigError]:
    """
    Load the build configuration from the standard location.

    Without a path, ./bintest.yaml is used when present and the defaults
    otherwise. An explicitly given path must exist.

    Args:
        path: Configuration file

    Returns:
        Result with loaded config or error
    """
    if path is None:
        default_path = Path(DEFAULT_CONFIG_FILE)
        if not default_path.exists():
            return Ok(BuildConfig())
        path = default_path

    return BuildConfig.from_yaml(Path(path))
