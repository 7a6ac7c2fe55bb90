from mcp_meta_workspace.engine.query import KNOWN_FIELDS, Query
from mcp_meta_workspace.models.repo_state import RepoState


def state(name="api", dirty=False, tags=("backend",), branch="main", ahead=0, behind=0, tracking="origin/main"):
    return RepoState(
        name=name, path=name, tags=list(tags), branch=branch, is_dirty=dirty,
        ahead=ahead, behind=behind, last_commit="abc1234 init", tracking=tracking,
    )


def test_parse_splits_on_and_case_insensitively():
    q = Query.parse("dirty:true and tag:backend AND  branch : main ")
    assert [(c.field, c.value) for c in q.conditions] == [
        ("dirty", "true"), ("tag", "backend"), ("branch", "main"),
    ]


def test_parse_splits_on_first_colon_only():
    q = Query.parse("branch:feature:x")
    assert q.conditions[0].value == "feature:x"


def test_malformed_conjuncts_are_dropped():
    q = Query.parse("dirty:true AND nonsense AND tag:web")
    assert [c.field for c in q.conditions] == ["dirty", "tag"]


def test_and_semantics_dirty_and_tag():
    q = Query.parse("dirty:true AND tag:backend")
    assert q.matches(state(dirty=True))
    assert not q.matches(state(dirty=False))
    assert not q.matches(state(dirty=True, tags=("frontend",)))


def test_branch_is_exact_match():
    q = Query.parse("branch:main")
    assert q.matches(state(branch="main"))
    assert not q.matches(state(branch="main-2"))


def test_ahead_and_behind_are_booleans():
    assert Query.parse("ahead:true").matches(state(ahead=2))
    assert not Query.parse("ahead:true").matches(state(ahead=0))
    assert Query.parse("behind:false").matches(state(behind=0))
    assert not Query.parse("behind:false").matches(state(behind=1))


def test_no_upstream_forces_zero_divergence():
    s = state(ahead=3, behind=1, tracking=None)
    assert (s.ahead, s.behind) == (0, 0)
    assert not Query.parse("ahead:true").matches(s)


def test_unknown_fields_match_but_are_reported():
    q = Query.parse("modified_in:24h AND dirty:false")
    assert q.matches(state())
    assert q.unknown_fields() == ["modified_in"]


def test_empty_query_matches_everything():
    assert Query.parse("").matches(state())


def test_every_known_field_is_evaluated():
    assert set(KNOWN_FIELDS) == {"dirty", "branch", "tag", "ahead", "behind"}
    q = Query.parse(" AND ".join(f"{f}:x" for f in KNOWN_FIELDS))
    assert q.unknown_fields() == []
