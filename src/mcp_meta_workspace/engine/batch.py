# File: src/mcp_meta_workspace/engine/batch.py
from __future__ import annotations

import time
from pathlib import Path
from typing import List, Optional, Sequence

from .. import git_utils
from ..errors import BatchError, SnapshotError
from ..logging import get_logger, preview
from ..models.batch import BatchResult, ProjectRunResult, RollbackOutcome
from ..models.project import ProjectDescriptor
from ..settings import make_batch_snapshot_name
from .snapshots import SnapshotStore

log = get_logger("mcp.meta.batch")

BATCH_SNAPSHOT_DESCRIPTION = "Automatic snapshot before atomic batch execution"


class BatchExecutor:
    """
    Runs one shell command across a filtered project set.

    Atomic runs take a safety snapshot of that set first, stop at the first
    failing project and restore the snapshot with force=True. Non-atomic runs
    always visit every project and never roll back.
    """

    def __init__(
        self,
        root: Path,
        projects: Sequence[ProjectDescriptor],
        store: SnapshotStore,
        command_timeout: Optional[float] = None,
        require_snapshot: bool = False,
    ):
        self.root = Path(root)
        self.projects = list(projects)
        self.store = store
        self.command_timeout = command_timeout
        self.require_snapshot = require_snapshot

    def _select(self, tag_filter: Optional[str]) -> List[ProjectDescriptor]:
        return [p for p in self.projects if p.has_tag(tag_filter)]

    def _run_one(self, project: ProjectDescriptor, command: str) -> ProjectRunResult:
        path = self.root / project.path
        if not path.exists():
            return ProjectRunResult(project=project.name, success=False, error="Path does not exist")

        t0 = time.time()
        outcome = git_utils.run_shell(command, path, timeout=self.command_timeout)
        log.info(
            "batch.project.done" if outcome.success else "batch.project.failed",
            project=project.name,
            exit_code=outcome.exit_code,
            took_ms=int((time.time() - t0) * 1000),
            stderr_preview=preview(outcome.stderr, 200) if not outcome.success else None,
        )
        return ProjectRunResult(
            project=project.name,
            success=outcome.success,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
            exit_code=outcome.exit_code,
            error=outcome.error,
        )

    def execute(
        self,
        command: str,
        tag_filter: Optional[str] = None,
        atomic: bool = False,
        require_snapshot: Optional[bool] = None,
    ) -> BatchResult:
        """
        Raises:
            BatchError: atomic run whose safety snapshot could not be taken
                while a snapshot is required
        """
        if require_snapshot is None:
            require_snapshot = self.require_snapshot

        selected = self._select(tag_filter)
        result = BatchResult(command=command, tag_filter=tag_filter, atomic=atomic)
        log.info("batch.start", command=preview(command, 120), tag=tag_filter,
                 atomic=atomic, projects=len(selected))

        if atomic:
            name = make_batch_snapshot_name()
            try:
                self.store.create(name, selected, description=BATCH_SNAPSHOT_DESCRIPTION)
                result.snapshot = name
            except (SnapshotError, OSError) as e:
                msg = getattr(e, "message", None) or str(e)
                if require_snapshot:
                    raise BatchError(f"Could not create safety snapshot: {msg}", data={"snapshot": name})
                result.snapshot_error = msg
                log.warning("batch.snapshot.failed", snapshot=name, error=msg)

        for project in selected:
            run = self._run_one(project, command)
            result.results.append(run)
            if not run.success:
                result.has_failure = True
                if atomic:
                    break

        if atomic and result.has_failure:
            result.rollback = self._rollback(result.snapshot)
            result.rolled_back = result.rollback.result is not None

        log.info("batch.done", has_failure=result.has_failure, ran=len(result.results),
                 rolled_back=result.rolled_back, rollback=result.rollback.status)
        return result

    def _rollback(self, snapshot: Optional[str]) -> RollbackOutcome:
        if snapshot is None:
            return RollbackOutcome(status="unavailable", error="No safety snapshot was created")
        try:
            restore = self.store.restore(snapshot, force=True)
        except (SnapshotError, OSError) as e:
            msg = getattr(e, "message", None) or str(e)
            log.error("batch.rollback.failed", snapshot=snapshot, error=msg)
            return RollbackOutcome(status="failed", snapshot=snapshot, error=msg)
        status = "restored" if restore.status == "success" else "partial"
        return RollbackOutcome(status=status, snapshot=snapshot, result=restore)
