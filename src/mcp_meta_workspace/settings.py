# File: src/mcp_meta_workspace/settings.py
from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SNAPSHOT_DIR = ".meta-snapshots"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="META_", extra="ignore")

    # workspace discovery; None means "search upwards from the cwd"
    WORKSPACE_ROOT: Optional[str] = Field(default=None)
    SNAPSHOT_DIR: str = Field(default=DEFAULT_SNAPSHOT_DIR)

    # fact collection / fetch pool
    WORKERS: int = Field(default=8, ge=1)

    # seconds; git calls are always bounded, batch commands only when set
    GIT_TIMEOUT: float = Field(default=30.0, gt=0)
    COMMAND_TIMEOUT: Optional[float] = Field(default=None, gt=0)

    STRICT_CYCLES: bool = Field(default=True)
    ATOMIC_REQUIRE_SNAPSHOT: bool = Field(default=False)

    LOG_LEVEL: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    LOG_STRUCTURED: bool = Field(default=True)

    def start_dir(self) -> Path:
        return Path(self.WORKSPACE_ROOT or os.getcwd()).expanduser().resolve()

    def snapshot_dir(self, root: Path) -> Path:
        p = Path(self.SNAPSHOT_DIR).expanduser()
        return p if p.is_absolute() else root / p

    def describe(self) -> dict:
        return {
            "workspace_root": self.WORKSPACE_ROOT,
            "snapshot_dir": self.SNAPSHOT_DIR,
            "workers": self.WORKERS,
            "git_timeout": self.GIT_TIMEOUT,
            "command_timeout": self.COMMAND_TIMEOUT,
            "strict_cycles": self.STRICT_CYCLES,
            "atomic_require_snapshot": self.ATOMIC_REQUIRE_SNAPSHOT,
        }


def make_batch_snapshot_name() -> str:
    # timestamp-only name, unique per microsecond
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return f"atomic-batch-{ts}"
