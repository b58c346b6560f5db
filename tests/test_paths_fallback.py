from pathlib import Path

from knucklebones.paths import data_dir, get_git_is_dirty, repo_root


def test_repo_root_prefers_cwd_when_no_git(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("KNUCKLEBONES_DATA_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    import knucklebones.paths as P

    monkeypatch.setattr(P, "__file__", str(tmp_path / "pkg" / "paths.py"))
    assert repo_root() == tmp_path
    assert data_dir() == tmp_path / "data"


def test_data_dir_env_override(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("KNUCKLEBONES_DATA_DIR", str(tmp_path / "elsewhere"))
    assert data_dir() == tmp_path / "elsewhere"


def test_git_helpers_return_none_without_git(monkeypatch):
    import knucklebones.paths as P

    monkeypatch.setattr(P, "_git", lambda *args: None)
    assert P.get_git_commit() is None
    assert get_git_is_dirty() is None
