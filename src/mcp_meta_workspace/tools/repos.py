# File: src/mcp_meta_workspace/tools/repos.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..models.batch import CommitRequest
from ..models.git import GitCommandResult
from ..settings import Settings
from .common import open_workspace, run_tool


def query_repos(query: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return open_workspace(settings).query_repos(query).model_dump()


def workspace_state(settings: Optional[Settings] = None) -> Dict[str, Any]:
    return open_workspace(settings).workspace_state().model_dump()


def branch_status(tag: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    branches = open_workspace(settings).branch_status(tag)
    return {"count": len(branches), "projects": [b.model_dump() for b in branches]}


def git_diff(
    project: Optional[str] = None,
    tag: Optional[str] = None,
    staged: bool = False,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    diffs = open_workspace(settings).diff(project=project, tag=tag, staged=staged)
    return {"count": len(diffs), "diffs": [d.model_dump() for d in diffs]}


def _summarize(results: List[GitCommandResult]) -> Dict[str, Any]:
    return {
        "results": [r.model_dump() for r in results],
        "succeeded": sum(1 for r in results if r.success),
        "failed": sum(1 for r in results if not r.success),
    }


def git_fetch(tag: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return _summarize(open_workspace(settings).fetch(tag))


def git_pull(tag: Optional[str] = None, rebase: bool = False, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return _summarize(open_workspace(settings).pull(tag, rebase=rebase))


def git_push(tag: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return _summarize(open_workspace(settings).push(tag))


def git_add(files: str = ".", tag: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return _summarize(open_workspace(settings).add(files, tag=tag))


def git_commit(message: str, tag: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    return _summarize(open_workspace(settings).commit(message, tag=tag))


def git_checkout(
    branch: str,
    create: bool = False,
    tag: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    return _summarize(open_workspace(settings).checkout(branch, create=create, tag=tag))


def multi_commit(commits: List[Dict[str, Any]], settings: Optional[Settings] = None) -> Dict[str, Any]:
    if not commits:
        raise ValidationError("Missing 'commits' argument")
    try:
        requests = [CommitRequest.model_validate(c) for c in commits]
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid commit entry: {e}", data={"errors": e.errors(include_url=False)})
    return open_workspace(settings).multi_commit(requests).model_dump()


def register_repo_tools(mcp: FastMCP) -> None:
    @mcp.tool(name="meta.repos.query", title="Query Repositories")
    async def meta_repos_query(query: str) -> Dict[str, Any]:
        """
        Select repositories by live git state, e.g. 'dirty:true',
        'tag:backend', 'dirty:true AND branch:main', 'ahead:true'.
        Conditions are ANDed; unknown fields always match.
        """
        return await run_tool("meta.repos.query", query_repos, query=query)

    @mcp.tool(name="meta.workspace.state", title="Workspace State Summary")
    async def meta_workspace_state() -> Dict[str, Any]:
        """Dirty/clean counts, branches and tags across the workspace."""
        return await run_tool("meta.workspace.state", workspace_state)

    @mcp.tool(name="meta.git.branches", title="Branch Tracking Status")
    async def meta_git_branches(tag: Optional[str] = None) -> Dict[str, Any]:
        """Current branch, upstream and ahead/behind counts per project."""
        return await run_tool("meta.git.branches", branch_status, tag=tag)

    @mcp.tool(name="meta.git.diff", title="Diff Across Projects")
    async def meta_git_diff(
        project: Optional[str] = None,
        tag: Optional[str] = None,
        staged: bool = False,
    ) -> Dict[str, Any]:
        return await run_tool("meta.git.diff", git_diff, project=project, tag=tag, staged=staged)

    @mcp.tool(name="meta.git.fetch", title="Fetch All Projects")
    async def meta_git_fetch(tag: Optional[str] = None) -> Dict[str, Any]:
        return await run_tool("meta.git.fetch", git_fetch, tag=tag)

    @mcp.tool(name="meta.git.pull", title="Pull All Projects")
    async def meta_git_pull(tag: Optional[str] = None, rebase: bool = False) -> Dict[str, Any]:
        return await run_tool("meta.git.pull", git_pull, tag=tag, rebase=rebase)

    @mcp.tool(name="meta.git.push", title="Push All Projects")
    async def meta_git_push(tag: Optional[str] = None) -> Dict[str, Any]:
        return await run_tool("meta.git.push", git_push, tag=tag)

    @mcp.tool(name="meta.git.add", title="Stage Files In All Projects")
    async def meta_git_add(files: str = ".", tag: Optional[str] = None) -> Dict[str, Any]:
        """Stage a pathspec (default '.') in every (tag-filtered) project."""
        return await run_tool("meta.git.add", git_add, files=files, tag=tag)

    @mcp.tool(name="meta.git.commit", title="Commit In All Projects")
    async def meta_git_commit(message: str, tag: Optional[str] = None) -> Dict[str, Any]:
        """
        Commit what is staged, with one message for every project. Projects
        with nothing staged are reported as failed.
        """
        return await run_tool("meta.git.commit", git_commit, message=message, tag=tag)

    @mcp.tool(name="meta.git.checkout", title="Checkout Branch Everywhere")
    async def meta_git_checkout(branch: str, create: bool = False, tag: Optional[str] = None) -> Dict[str, Any]:
        return await run_tool("meta.git.checkout", git_checkout, branch=branch, create=create, tag=tag)

    @mcp.tool(name="meta.git.multi_commit", title="Commit With Per-Project Messages")
    async def meta_git_multi_commit(commits: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        commits: [{"project": "<relative path or '.'>", "message": "..."}]
        Commits what is already staged in each project.
        """
        return await run_tool("meta.git.multi_commit", multi_commit, commits=commits)
