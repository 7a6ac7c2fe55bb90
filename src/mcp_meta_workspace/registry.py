# File: src/mcp_meta_workspace/registry.py
"""
Workspace manifest lookup and loading.

A manifest is `.meta` (JSON) or `.meta.yaml` / `.meta.yml`:

    {"projects": {"api": "git@host:org/api.git",
                  "web": {"repo": "...", "path": "apps/web",
                          "tags": ["frontend"], "depends_on": ["api"]}}}
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigError
from .logging import get_logger
from .models.project import ProjectDescriptor

log = get_logger("mcp.meta.registry")

CONFIG_NAMES = (".meta", ".meta.yaml", ".meta.yml")


def find_meta_config(start: Path) -> Optional[Tuple[Path, str]]:
    """
    Walk up from `start` and return (config_path, format) for the first
    manifest found, format being "json" or "yaml".
    """
    for d in [start, *start.parents]:
        for n in CONFIG_NAMES:
            p = d / n
            if p.is_file():
                return p, ("json" if n == ".meta" else "yaml")
    return None


def _parse(config_path: Path, fmt: str) -> Dict[str, Any]:
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read meta config {config_path}: {e}")
    try:
        data = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse meta config {config_path}: {e}")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Meta config {config_path} must be a mapping")
    return data


def _as_list(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    return [str(x) for x in v]


def load_projects(config_path: Path, fmt: str = "json") -> List[ProjectDescriptor]:
    data = _parse(config_path, fmt)
    raw = data.get("projects") or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'projects' in {config_path} must be a mapping of name to repo")

    projects: List[ProjectDescriptor] = []
    for name, entry in raw.items():
        if isinstance(entry, str) or entry is None:
            entry = {"repo": entry}
        if not isinstance(entry, dict):
            raise ConfigError(f"Project '{name}' has an invalid entry", data={"project": name})
        try:
            projects.append(
                ProjectDescriptor(
                    name=str(name),
                    path=str(entry.get("path") or name),
                    repo=entry.get("repo"),
                    tags=_as_list(entry.get("tags")),
                    provides=_as_list(entry.get("provides")),
                    depends_on=_as_list(entry.get("depends_on")),
                )
            )
        except PydanticValidationError as e:
            raise ConfigError(f"Project '{name}' is invalid: {e}", data={"project": name})

    log.debug("registry.loaded", config=str(config_path), projects=len(projects))
    return projects
