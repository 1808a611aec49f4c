"""Configuration loading for doclets (.doclets.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

CONFIG_FILENAME = ".doclets.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TagsConfig:
    """Tag grammar selection."""

    allow_unknown_tags: Union[bool, List[str]] = False
    dictionaries: List[str] = field(default_factory=lambda: ["jsdoc", "closure"])

    @property
    def allow_unknown(self) -> Union[bool, frozenset]:
        if isinstance(self.allow_unknown_tags, bool):
            return self.allow_unknown_tags
        return frozenset(self.allow_unknown_tags)


@dataclass
class PruneConfig:
    """Which doclets survive pruning."""

    access: Optional[List[str]] = None
    private: bool = False
    include_undocumented: bool = False


@dataclass
class DocletsConfig:
    """Represents the high-level settings defined in .doclets.yml."""

    root: Path
    tags: TagsConfig = field(default_factory=TagsConfig)
    prune: PruneConfig = field(default_factory=PruneConfig)
    plugins: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> DocletsConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocletsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    tags = TagsConfig()
    tags_data = _as_dict(data.get("tags"))
    if tags_data:
        allow = tags_data.get("allow_unknown_tags", tags_data.get("allowUnknownTags"))
        if allow is not None:
            if isinstance(allow, bool):
                tags.allow_unknown_tags = allow
            elif isinstance(allow, (list, str)):
                tags.allow_unknown_tags = _as_str_list(allow)
            else:
                raise ConfigError("tags.allow_unknown_tags must be a boolean or a list of tag names")
        dictionaries = _as_str_list(tags_data.get("dictionaries"))
        if dictionaries:
            tags.dictionaries = dictionaries

    prune = PruneConfig()
    prune_data = _as_dict(data.get("prune"))
    if prune_data:
        if prune_data.get("access") is not None:
            prune.access = _as_str_list(prune_data.get("access"))
        prune.private = _as_bool(prune_data.get("private")) or False
        prune.include_undocumented = _as_bool(prune_data.get("include_undocumented")) or False

    plugins = _as_str_list(data.get("plugins"))

    return DocletsConfig(root=root, tags=tags, prune=prune, plugins=plugins)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DocletsConfig",
    "PruneConfig",
    "TagsConfig",
    "load_config",
]
