"""Shared fixtures: real git repositories laid out as a meta workspace under tmp_path."""
import json
from pathlib import Path

import pytest
from git import Repo

from mcp_meta_workspace.engine.workspace import Workspace
from mcp_meta_workspace.settings import Settings


def init_repo(path: Path, files: dict | None = None) -> Repo:
    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(path, initial_branch="main")
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")
    files = files or {"README.md": "hello\n"}
    for rel, content in files.items():
        (path / rel).write_text(content)
    repo.index.add(list(files))
    repo.index.commit("initial commit")
    return repo


def write_manifest(root: Path, projects: dict) -> Path:
    path = root / ".meta"
    path.write_text(json.dumps({"projects": projects}, indent=2))
    return path


@pytest.fixture
def make_repo():
    return init_repo


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """
    p1 (backend) <- p2 (backend) <- p3 (frontend); p2 carries a committed
    FAIL marker so commands can fail on it deterministically.
    """
    root = tmp_path / "ws"
    root.mkdir()
    init_repo(root / "p1")
    init_repo(root / "p2", {"README.md": "two\n", "FAIL": "x\n"})
    init_repo(root / "p3")
    write_manifest(root, {
        "p1": {"repo": "git@example.com:org/p1.git", "tags": ["backend"]},
        "p2": {"repo": "git@example.com:org/p2.git", "tags": ["backend"], "depends_on": ["p1"]},
        "p3": {"repo": "git@example.com:org/p3.git", "tags": ["frontend"], "depends_on": ["p2"]},
    })
    return root


@pytest.fixture
def settings(workspace_root: Path) -> Settings:
    return Settings(WORKSPACE_ROOT=str(workspace_root), WORKERS=2, GIT_TIMEOUT=30)


@pytest.fixture
def workspace(settings: Settings) -> Workspace:
    return Workspace.open(settings)


def head(path: Path) -> str:
    return Repo(path).head.commit.hexsha
