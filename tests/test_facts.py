import pytest
from git import Repo

from mcp_meta_workspace.engine.facts import collect_all, collect_repo_state
from mcp_meta_workspace.errors import CollectionError
from mcp_meta_workspace.models.project import ProjectDescriptor


def desc(name, tags=("backend",)):
    return ProjectDescriptor(name=name, path=name, tags=list(tags))


def test_clean_repo_without_upstream(tmp_path, make_repo):
    make_repo(tmp_path / "api")
    s = collect_repo_state(desc("api"), tmp_path)
    assert s.branch == "main"
    assert s.is_dirty is False
    assert (s.ahead, s.behind) == (0, 0)
    assert s.tracking is None
    assert s.last_commit.endswith("initial commit")
    assert s.tags == ["backend"]


def test_untracked_file_makes_repo_dirty(tmp_path, make_repo):
    make_repo(tmp_path / "api")
    (tmp_path / "api" / "new.txt").write_text("x")
    assert collect_repo_state(desc("api"), tmp_path).is_dirty is True


def test_ahead_of_upstream(tmp_path, make_repo):
    remote = tmp_path / "remote.git"
    Repo.init(remote, bare=True)
    repo = make_repo(tmp_path / "api")
    repo.create_remote("origin", str(remote))
    repo.git.push("-u", "origin", "main")
    (tmp_path / "api" / "README.md").write_text("changed\n")
    repo.index.add(["README.md"])
    repo.index.commit("local work")

    s = collect_repo_state(desc("api"), tmp_path)
    assert s.tracking == "origin/main"
    assert (s.ahead, s.behind) == (1, 0)


def test_detached_head_reports_head(tmp_path, make_repo):
    repo = make_repo(tmp_path / "api")
    repo.git.checkout("--detach")
    assert collect_repo_state(desc("api"), tmp_path).branch == "HEAD"


def test_missing_and_non_git_paths_raise_collection_error(tmp_path):
    with pytest.raises(CollectionError):
        collect_repo_state(desc("ghost"), tmp_path)
    (tmp_path / "plain").mkdir()
    with pytest.raises(CollectionError) as exc:
        collect_repo_state(desc("plain"), tmp_path)
    assert exc.value.project == "plain"


def test_collect_all_keeps_input_order_and_skips_failures(tmp_path, make_repo):
    for n in ("c", "a", "b"):
        make_repo(tmp_path / n)
    projects = [desc("c"), desc("missing"), desc("a"), desc("b")]
    states, skipped = collect_all(projects, tmp_path, workers=3)
    assert [s.name for s in states] == ["c", "a", "b"]
    assert [s.project for s in skipped] == ["missing"]
