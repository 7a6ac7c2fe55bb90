"""Error taxonomy for the meta workspace server."""

from typing import Any, Dict, List, Optional


class MCPError(Exception):
    """Base exception for errors surfaced to MCP callers."""

    def __init__(
        self,
        message: str,
        code: int = -32603,
        data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data or {}

    def to_error_payload(self) -> Dict[str, Any]:
        """Render the error as a structured tool payload."""
        payload: Dict[str, Any] = {
            "error": self.message,
            "code": self.code,
            "kind": type(self).__name__,
        }
        if self.data:
            payload["data"] = self.data
        return payload


class ValidationError(MCPError):
    """Error for input validation failures."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32602, data=data)


class ConfigError(MCPError):
    """Missing or unparseable workspace manifest.

    Fatal to the whole request.
    """

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32010, data=data)


class NotFoundError(MCPError):
    """Error for missing projects or resources."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32003, data=data)


class GitError(MCPError):
    """A git invocation failed."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32011, data=data)


class CollectionError(MCPError):
    """Repository facts could not be collected for one project.

    Callers treat this as "skip the project", never as fatal.
    """

    def __init__(self, project: str, message: str):
        super().__init__(message, code=-32012, data={"project": project})
        self.project = project


class SnapshotError(MCPError):
    """Base error for snapshot operations."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32020, data=data)


class SnapshotNotFoundError(SnapshotError):
    def __init__(self, name: str):
        super().__init__(f"Snapshot '{name}' not found", data={"name": name})
        self.name = name


class InvalidSnapshotError(SnapshotError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid snapshot format for '{name}': {reason}", data={"name": name})
        self.name = name


class SnapshotCollisionError(SnapshotError):
    """Two distinct snapshot names sanitize to the same file."""

    def __init__(self, name: str, existing: str, filename: str):
        super().__init__(
            f"Snapshot name '{name}' collides with existing snapshot '{existing}' ({filename})",
            data={"name": name, "existing": existing, "filename": filename},
        )


class CycleError(MCPError):
    """Dependency cycle prevents a complete execution order."""

    def __init__(self, projects: List[str]):
        super().__init__(
            f"Dependency cycle detected among: {', '.join(projects)}",
            code=-32030,
            data={"projects": projects},
        )
        self.projects = projects


class BatchError(MCPError):
    """A batch run could not be started."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32040, data=data)
