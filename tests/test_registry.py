import pytest

from mcp_meta_workspace.errors import ConfigError
from mcp_meta_workspace.registry import find_meta_config, load_projects


def test_json_manifest_short_and_long_forms(tmp_path):
    cfg = tmp_path / ".meta"
    cfg.write_text(
        '{"projects": {"api": "git@h:o/api.git",'
        ' "web": {"repo": "git@h:o/web.git", "path": "apps/web", "tags": ["frontend", "frontend"],'
        ' "depends_on": "api"}}}'
    )
    projects = load_projects(cfg, "json")
    assert [p.name for p in projects] == ["api", "web"]
    api, web = projects
    assert api.path == "api" and api.repo == "git@h:o/api.git"
    assert web.path == "apps/web"
    assert web.tags == ["frontend"]
    assert web.depends_on == ["api"]


def test_yaml_manifest(tmp_path):
    cfg = tmp_path / ".meta.yaml"
    cfg.write_text(
        "projects:\n"
        "  core:\n"
        "    repo: git@h:o/core.git\n"
        "    provides: [logging]\n"
        "  svc:\n"
        "    tags: [backend]\n"
        "    depends_on: [logging]\n"
    )
    found = find_meta_config(tmp_path)
    assert found == (cfg, "yaml")
    projects = load_projects(*found)
    assert projects[0].provides == ["logging"]
    assert projects[1].depends_on == ["logging"]


def test_find_meta_config_walks_up(tmp_path):
    (tmp_path / ".meta").write_text('{"projects": {}}')
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_meta_config(nested) == (tmp_path / ".meta", "json")


def test_unparseable_manifest_is_config_error(tmp_path):
    cfg = tmp_path / ".meta"
    cfg.write_text("{not json")
    with pytest.raises(ConfigError):
        load_projects(cfg, "json")


def test_projects_must_be_mapping(tmp_path):
    cfg = tmp_path / ".meta"
    cfg.write_text('{"projects": ["api"]}')
    with pytest.raises(ConfigError):
        load_projects(cfg, "json")
