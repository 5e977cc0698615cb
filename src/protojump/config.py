"""Project configuration from ``.protojump/config.yml``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = ".protojump"
CONFIG_FILE = "config.yml"
CACHE_FILE = "proto-index-cache.json"

_DEFAULT_PROTO_DIRS = ("proto", "api", "pb")
_DEFAULT_SUFFIXES = (
    ".pb.go",  # user.pb.go
    "_grpc.pb.go",  # user_grpc.pb.go
    ".proto.go",
    ".pb.gw.go",  # grpc-gateway
)


@dataclass(frozen=True)
class ProtoJumpConfig:
    """Resolved settings for one project root."""

    proto_dirs: list[str] = field(default_factory=lambda: list(_DEFAULT_PROTO_DIRS))
    file_suffixes: list[str] = field(default_factory=lambda: list(_DEFAULT_SUFFIXES))
    extension: str = ".proto"
    enable_cache: bool = True
    cache_version: str = "1.0"
    cache_dir: str = CONFIG_DIR
    debounce_ms: int = 500

    def search_roots(self, project_root: Path) -> list[Path]:
        """Absolute schema directories; missing ones are kept and skipped at build time."""
        return [project_root / d for d in self.proto_dirs]

    def cache_path(self, project_root: Path) -> Path:
        return project_root / self.cache_dir / CACHE_FILE


def _str_list(value: Any) -> list[str] | None:
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return list(value)
    return None


def load_config(project_root: Path) -> ProtoJumpConfig:
    """Read ``<project_root>/.protojump/config.yml``; defaults when absent.

    Keys with a value of the wrong type fall back to their default.
    """
    config_path = project_root / CONFIG_DIR / CONFIG_FILE
    if not config_path.exists():
        return ProtoJumpConfig()

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        logger.warning("Could not read %s, using defaults", config_path, exc_info=True)
        return ProtoJumpConfig()
    if not isinstance(raw, dict):
        logger.warning("%s is not a mapping, using defaults", config_path)
        return ProtoJumpConfig()

    defaults = ProtoJumpConfig()
    kwargs: dict[str, Any] = {}

    for key in ("proto_dirs", "file_suffixes"):
        values = _str_list(raw.get(key))
        if values is not None:
            kwargs[key] = values

    for key in ("extension", "cache_dir"):
        value = raw.get(key)
        if isinstance(value, str) and value:
            kwargs[key] = value

    # YAML reads an unquoted 1.0 as a float.
    version = raw.get("cache_version")
    if isinstance(version, (str, int, float)) and not isinstance(version, bool):
        kwargs["cache_version"] = str(version)

    enable = raw.get("enable_cache")
    if isinstance(enable, bool):
        kwargs["enable_cache"] = enable

    debounce = raw.get("debounce_ms")
    if isinstance(debounce, int) and not isinstance(debounce, bool) and debounce >= 0:
        kwargs["debounce_ms"] = debounce

    if not kwargs.get("extension", defaults.extension).startswith("."):
        kwargs["extension"] = "." + kwargs["extension"]

    return ProtoJumpConfig(**kwargs)
