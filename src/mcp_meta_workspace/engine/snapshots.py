# File: src/mcp_meta_workspace/engine/snapshots.py
"""
Point-in-time records of every working copy (branch, HEAD commit, dirty
flag), one pretty-printed JSON file per snapshot, and best-effort restore.

Restore is per project: a failure on one project never undoes the projects
restored before it, since there is no cross-repository transaction.
"""
from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional

from git import GitCommandError
from pydantic import ValidationError as PydanticValidationError

from .. import git_utils
from ..errors import (
    GitError,
    InvalidSnapshotError,
    SnapshotCollisionError,
    SnapshotNotFoundError,
    ValidationError,
)
from ..logging import get_logger
from ..models.project import ProjectDescriptor
from ..models.snapshot import (
    RestoreFailure,
    RestoreResult,
    Snapshot,
    SnapshotCreated,
    SnapshotProject,
    SnapshotSummary,
)

log = get_logger("mcp.meta.snapshots")

STASH_MESSAGE = "meta-restore-backup"
_UNSAFE = ("/", "\\", " ")


def sanitize_name(name: str) -> str:
    for ch in _UNSAFE:
        name = name.replace(ch, "_")
    return name


def write_json(path: Path, obj: Any) -> None:
    # write-then-rename so readers never see a half-written snapshot
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class SnapshotStore:
    def __init__(self, root: Path, directory: Optional[Path] = None, git_timeout: Optional[float] = None):
        self.root = Path(root)
        self.directory = Path(directory) if directory else self.root / ".meta-snapshots"
        self.git_timeout = git_timeout

    def path_for(self, name: str) -> Path:
        return self.directory / f"{sanitize_name(name)}.json"

    # ---------- create ----------

    def _capture(self, project: ProjectDescriptor) -> Optional[SnapshotProject]:
        path = self.root / project.path
        if not path.exists() or not git_utils.is_git_repo(path):
            return None

        branch, commit, dirty = "unknown", "unknown", False
        try:
            with git_utils.open_repo(path) as repo:
                branch = git_utils.current_branch(repo, self.git_timeout)
                commit = git_utils.head_commit(repo, self.git_timeout) or "unknown"
                try:
                    dirty = git_utils.is_dirty(repo, self.git_timeout)
                except GitCommandError:
                    dirty = False
        except GitError as e:
            log.warning("snapshot.capture.degraded", project=project.name, error=e.message)

        return SnapshotProject(
            name=project.name,
            path=project.path,
            branch=branch,
            commit=commit,
            is_dirty=dirty,
        )

    def create(
        self,
        name: str,
        projects: Iterable[ProjectDescriptor],
        description: Optional[str] = None,
    ) -> SnapshotCreated:
        """
        Raises:
            ValidationError: empty name
            SnapshotCollisionError: another snapshot already uses the sanitized filename
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Snapshot name must not be empty")

        target = self.path_for(name)
        if target.exists():
            existing = self._stored_name(target)
            if existing is not None and existing != name:
                raise SnapshotCollisionError(name, existing, target.name)
            log.warning("snapshot.overwrite", name=name, path=str(target))

        captured: List[SnapshotProject] = []
        for p in projects:
            entry = self._capture(p)
            if entry is not None:
                captured.append(entry)

        snapshot = Snapshot(
            name=name,
            created_at=datetime.now(timezone.utc),
            description=description,
            meta_dir=str(self.root),
            projects=captured,
        )
        write_json(target, snapshot.model_dump(mode="json"))
        log.info("snapshot.created", name=name, path=str(target), projects=len(captured))

        return SnapshotCreated(name=name, path=str(target), projects_count=len(captured))

    def _stored_name(self, path: Path) -> Optional[str]:
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError):
            return None
        stored = data.get("name") if isinstance(data, dict) else None
        return stored if isinstance(stored, str) else None

    # ---------- read ----------

    def load(self, name: str) -> Snapshot:
        name = (name or "").strip()
        path = self.path_for(name)
        if not path.exists():
            raise SnapshotNotFoundError(name)
        try:
            snapshot = Snapshot.model_validate(read_json(path))
        except json.JSONDecodeError as e:
            raise InvalidSnapshotError(name, f"not valid JSON ({e})")
        except PydanticValidationError as e:
            raise InvalidSnapshotError(name, str(e))
        # "a b" and "a/b" share a file; only the name that wrote it owns it
        if snapshot.name != name:
            log.info("snapshot.load.name_mismatch", requested=name, stored=snapshot.name, path=str(path))
            raise SnapshotNotFoundError(name)
        return snapshot

    def list(self) -> List[SnapshotSummary]:
        """Lightweight index: name, creation time, description, project count."""
        if not self.directory.is_dir():
            return []

        out: List[SnapshotSummary] = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                data = read_json(path)
                out.append(
                    SnapshotSummary(
                        name=data.get("name") or path.stem,
                        created_at=data.get("created_at"),
                        description=data.get("description"),
                        projects_count=len(data.get("projects") or []),
                    )
                )
            except (OSError, json.JSONDecodeError, AttributeError, TypeError, PydanticValidationError) as e:
                log.warning("snapshot.list.unreadable", path=str(path), error=str(e))

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        out.sort(key=lambda s: (s.created_at or epoch, s.name))
        return out

    # ---------- restore ----------

    def restore(self, name: str, force: bool = False) -> RestoreResult:
        """
        Per project, in snapshot order: skip missing paths, refuse dirty
        trees unless forced (then stash first), checkout the recorded
        branch, hard-reset to the recorded commit.

        Raises:
            SnapshotNotFoundError / InvalidSnapshotError
        """
        snapshot = self.load(name)
        restored: List[str] = []
        failed: List[RestoreFailure] = []

        for entry in snapshot.projects:
            error = self._restore_project(entry, force)
            if error is None:
                restored.append(entry.name)
            else:
                failed.append(RestoreFailure(project=entry.name, error=error))
                log.warning("snapshot.restore.project_failed", snapshot=name, project=entry.name, error=error)

        result = RestoreResult.build(snapshot.name, restored, failed)
        log.info("snapshot.restored", name=name, status=result.status,
                 restored=result.restored_count, failed=result.failed_count)
        return result

    def _restore_project(self, entry: SnapshotProject, force: bool) -> Optional[str]:
        path = self.root / entry.path
        if not path.exists():
            return "Path does not exist"

        try:
            with git_utils.open_repo(path) as repo:
                dirty = git_utils.is_dirty(repo, self.git_timeout)
        except (GitError, GitCommandError):
            dirty = False

        if dirty and not force:
            return "Has uncommitted changes (use force=true to override)"

        if dirty:
            try:
                git_utils.run_git(path, "stash", "push", "-m", STASH_MESSAGE, timeout=self.git_timeout)
            except GitError as e:
                log.warning("snapshot.restore.stash_failed", project=entry.name, error=e.message)

        try:
            git_utils.run_git(path, "checkout", entry.branch, timeout=self.git_timeout)
        except GitError as e:
            return f"Failed to checkout: {e.message}"

        try:
            git_utils.run_git(path, "reset", "--hard", entry.commit, timeout=self.git_timeout)
        except GitError as e:
            return f"Failed to reset: {e.message}"

        return None
