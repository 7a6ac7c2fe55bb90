import asyncio
import json

import pytest
from git import Repo
from mcp.server.fastmcp.exceptions import ToolError

from mcp_meta_workspace.errors import ConfigError, ValidationError
from mcp_meta_workspace.settings import Settings
from mcp_meta_workspace.tools.batch import batch_execute
from mcp_meta_workspace.tools.common import run_tool
from mcp_meta_workspace.tools.graph import analyze_impact, execution_order
from mcp_meta_workspace.tools.projects import get_project_path, list_projects
from mcp_meta_workspace.tools.repos import (
    branch_status,
    git_add,
    git_checkout,
    git_commit,
    git_diff,
    git_fetch,
    git_pull,
    git_push,
    multi_commit,
    query_repos,
    workspace_state,
)
from mcp_meta_workspace.tools.snapshots import snapshot_create, snapshot_list, snapshot_restore


def test_list_projects_and_path(settings, workspace_root):
    out = list_projects(tag="backend", settings=settings)
    assert out["count"] == 2
    assert [p["name"] for p in out["projects"]] == ["p1", "p2"]

    path = get_project_path("p3", settings=settings)
    assert path == {"project": "p3", "path": str(workspace_root.resolve() / "p3"), "exists": True}


def test_query_and_workspace_state(settings, workspace_root):
    (workspace_root / "p3" / "scratch.txt").write_text("x")

    out = query_repos("dirty:true", settings=settings)
    assert out["matches"] == 1
    assert out["projects"][0]["name"] == "p3"

    out = query_repos("dirty:false AND tag:backend", settings=settings)
    assert [p["name"] for p in out["projects"]] == ["p1", "p2"]

    state = workspace_state(settings=settings)
    assert state["total_repos"] == 3
    assert state["dirty_count"] == 1
    assert state["branches"] == {"main": ["p1", "p2", "p3"]}
    assert state["tags"]["backend"] == ["p1", "p2"]


def test_graph_tools(settings):
    impact = analyze_impact("p1", settings=settings)
    assert impact["direct_dependents"] == ["p2"]
    assert impact["transitive_dependents"] == ["p3"]
    assert impact["total_affected"] == 2

    order = execution_order(settings=settings)
    assert order["execution_order"] == ["p1", "p2", "p3"]
    assert execution_order(tag="frontend", settings=settings)["execution_order"] == ["p3"]


def test_snapshot_tools_round_trip(settings):
    created = snapshot_create("nightly", description="auto", settings=settings)
    assert created["projects_count"] == 3

    listed = snapshot_list(settings=settings)
    assert listed["count"] == 1
    assert listed["snapshots"][0]["name"] == "nightly"
    assert "projects" not in listed["snapshots"][0]

    restored = snapshot_restore("nightly", settings=settings)
    assert restored["status"] == "success"
    assert restored["restored_count"] == 3


def test_batch_tool_returns_plain_dict(settings):
    out = batch_execute("exit 3", tag="frontend", atomic=True, settings=settings)
    assert out["has_failure"] is True
    assert out["rolled_back"] is True
    assert out["results"][0]["exit_code"] == 3
    assert out["rollback"]["status"] == "restored"


def test_multi_commit(settings, workspace_root):
    (workspace_root / "p1" / "new.txt").write_text("n")
    Repo(workspace_root / "p1").index.add(["new.txt"])

    out = multi_commit(
        [{"project": "p1", "message": "add new"}, {"project": "missing", "message": "nope"}],
        settings=settings,
    )
    assert out["total"] == 2
    assert out["succeeded"] == 1
    assert out["results"][1]["error"].startswith("Project path does not exist")
    assert Repo(workspace_root / "p1").head.commit.message.strip() == "add new"


def test_missing_manifest_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        list_projects(settings=Settings(WORKSPACE_ROOT=str(tmp_path)))


def test_run_tool_turns_engine_errors_into_tool_errors(settings):
    with pytest.raises(ToolError) as exc:
        asyncio.run(run_tool("meta.snapshot.restore", snapshot_restore, name="nope", settings=settings))
    payload = json.loads(str(exc.value))
    assert payload["kind"] == "SnapshotNotFoundError"
    assert payload["data"] == {"name": "nope"}


def test_server_registers_all_tools():
    from mcp_meta_workspace.server import mcp

    names = {t.name for t in asyncio.run(mcp.list_tools())}
    assert {
        "meta.projects.list", "meta.project.path", "meta.config.get",
        "meta.repos.query", "meta.workspace.state", "meta.git.branches",
        "meta.git.diff", "meta.git.fetch", "meta.git.multi_commit",
        "meta.git.pull", "meta.git.push", "meta.git.add", "meta.git.commit", "meta.git.checkout",
        "meta.graph.impact", "meta.graph.execution_order",
        "meta.snapshot.create", "meta.snapshot.list", "meta.snapshot.restore",
        "meta.batch.execute",
    } <= names


def test_health_endpoint_reports_workspace(monkeypatch, workspace_root):
    from starlette.testclient import TestClient

    from mcp_meta_workspace.transports.app import app

    monkeypatch.setenv("META_WORKSPACE_ROOT", str(workspace_root))
    body = TestClient(app).get("/health").json()
    assert body["status"] == "ok"
    assert body["workspace"]["projects"] == 3


def test_branch_status_diff_and_fetch(settings, workspace_root):
    (workspace_root / "p1" / "README.md").write_text("edited\n")

    branches = branch_status(tag="backend", settings=settings)
    assert branches["count"] == 2
    assert branches["projects"][0] == {
        "project": "p1", "branch": "main", "tracking": None, "ahead": 0, "behind": 0,
    }

    diffs = git_diff(settings=settings)
    assert [d["project"] for d in diffs["diffs"]] == ["p1"]
    assert "+edited" in diffs["diffs"][0]["diff"]
    assert git_diff(project="p1", staged=True, settings=settings)["count"] == 0

    fetched = git_fetch(settings=settings)
    assert fetched["succeeded"] == 3
    assert fetched["failed"] == 0


def test_add_commit_and_checkout_across_projects(settings, workspace_root):
    for n in ("p1", "p2"):
        (workspace_root / n / "new.txt").write_text(n)

    added = git_add(files="new.txt", tag="backend", settings=settings)
    assert (added["succeeded"], added["failed"]) == (2, 0)

    committed = git_commit("add new", tag="backend", settings=settings)
    assert committed["succeeded"] == 2
    assert Repo(workspace_root / "p2").head.commit.message.strip() == "add new"

    # nothing staged in p3
    empty = git_commit("noop", tag="frontend", settings=settings)
    assert empty["failed"] == 1
    assert empty["results"][0]["project"] == "p3"

    with pytest.raises(ValidationError):
        git_commit("  ", settings=settings)

    created = git_checkout("feature", create=True, settings=settings)
    assert created["succeeded"] == 3
    assert {Repo(workspace_root / n).active_branch.name for n in ("p1", "p2", "p3")} == {"feature"}
    assert git_checkout("main", tag="frontend", settings=settings)["succeeded"] == 1
    assert Repo(workspace_root / "p3").active_branch.name == "main"


def test_push_and_pull_against_upstream(tmp_path, settings, workspace_root):
    remote = tmp_path / "remote.git"
    Repo.init(remote, bare=True)
    p1 = Repo(workspace_root / "p1")
    p1.create_remote("origin", str(remote))
    p1.git.push("-u", "origin", "main")

    (workspace_root / "p1" / "README.md").write_text("local\n")
    p1.index.add(["README.md"])
    p1.index.commit("local change")

    pushed = git_push(tag="backend", settings=settings)
    assert [r["project"] for r in pushed["results"]] == ["p1", "p2"]
    assert [r["success"] for r in pushed["results"]] == [True, False]
    assert Repo(remote).heads.main.commit.hexsha == p1.head.commit.hexsha

    other = Repo.clone_from(str(remote), tmp_path / "other", branch="main")
    with other.config_writer() as cw:
        cw.set_value("user", "name", "Other")
        cw.set_value("user", "email", "other@example.com")
    (tmp_path / "other" / "README.md").write_text("upstream\n")
    other.index.add(["README.md"])
    other.index.commit("upstream change")
    other.git.push("origin", "main")

    pulled = git_pull(tag="backend", settings=settings)
    assert pulled["results"][0]["project"] == "p1"
    assert pulled["results"][0]["success"] is True
    assert p1.head.commit.hexsha == other.head.commit.hexsha
