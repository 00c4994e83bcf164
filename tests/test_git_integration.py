"""Tests for the git working-tree check."""
import pytest


@pytest.fixture
def po_file(tmp_path):
    path = tmp_path / "en.po"
    path.write_text('msgid "a"\nmsgstr ""\n')
    return path


def _fake_git(monkeypatch, porcelain="", is_repo=True, status_ok=True):
    from poextract.services import git_integration
    calls = []

    def run(args, cwd):
        calls.append(args)
        if args[0] == "rev-parse":
            return is_repo, "true" if is_repo else "fatal: not a git repository"
        return status_ok, porcelain

    monkeypatch.setattr(git_integration, "_run_git", run)
    return calls


class TestGetStatus:
    def test_parse_porcelain(self, monkeypatch, po_file):
        from poextract.services.git_integration import get_status
        _fake_git(monkeypatch, " M en.po\n?? new.po")
        status = get_status(po_file)
        assert status.is_repo
        assert status.modified_files == ["en.po"]
        assert status.untracked_files == ["new.po"]

    def test_not_a_repo(self, monkeypatch, po_file):
        from poextract.services.git_integration import get_status
        calls = _fake_git(monkeypatch, is_repo=False)
        assert not get_status(po_file).is_repo
        assert len(calls) == 1


class TestCheckClean:
    def test_clean(self, monkeypatch, po_file):
        from poextract.services.git_integration import check_clean
        calls = _fake_git(monkeypatch, "")
        check_clean(po_file)
        assert calls[1][:3] == ["status", "--porcelain", "--"]

    def test_dirty(self, monkeypatch, po_file):
        from poextract.errors import UnsavedChangesError
        from poextract.services.git_integration import check_clean
        _fake_git(monkeypatch, " M en.po")
        with pytest.raises(UnsavedChangesError) as info:
            check_clean(po_file, rel="locale/en.po")
        assert "Dirty" in str(info.value)
        assert info.value.file == "locale/en.po"

    def test_staged_counts_as_dirty(self, monkeypatch, po_file):
        from poextract.errors import UnsavedChangesError
        from poextract.services.git_integration import check_clean
        _fake_git(monkeypatch, "M  en.po")
        with pytest.raises(UnsavedChangesError):
            check_clean(po_file)

    def test_untracked(self, monkeypatch, po_file):
        from poextract.errors import UnsavedChangesError
        from poextract.services.git_integration import check_clean
        _fake_git(monkeypatch, "?? en.po")
        with pytest.raises(UnsavedChangesError) as info:
            check_clean(po_file)
        assert "Untracked" in str(info.value)

    def test_untracked_allowed_when_tracked_only(self, monkeypatch, po_file):
        from poextract.services.git_integration import TRACKED_ONLY, check_clean
        _fake_git(monkeypatch, "?? en.po")
        check_clean(po_file, TRACKED_ONLY)

    def test_dirty_fails_when_tracked_only(self, monkeypatch, po_file):
        from poextract.errors import UnsavedChangesError
        from poextract.services.git_integration import TRACKED_ONLY, check_clean
        _fake_git(monkeypatch, " M en.po")
        with pytest.raises(UnsavedChangesError):
            check_clean(po_file, TRACKED_ONLY)

    def test_outside_repo_passes(self, monkeypatch, po_file):
        from poextract.services.git_integration import check_clean
        _fake_git(monkeypatch, is_repo=False)
        check_clean(po_file)

    def test_disabled(self, monkeypatch, po_file):
        from poextract.services.git_integration import check_clean
        calls = _fake_git(monkeypatch, " M en.po")
        check_clean(po_file, False)
        assert calls == []

    def test_missing_file_passes(self, monkeypatch, tmp_path):
        from poextract.services.git_integration import check_clean
        calls = _fake_git(monkeypatch, " M x.po")
        check_clean(tmp_path / "x.po")
        assert calls == []

    def test_status_failure(self, monkeypatch, po_file):
        from poextract.errors import GitExecError
        from poextract.services.git_integration import check_clean
        _fake_git(monkeypatch, "error", status_ok=False)
        with pytest.raises(GitExecError):
            check_clean(po_file)


class TestRunGit:
    def test_git_missing(self, monkeypatch, tmp_path):
        import subprocess
        from poextract.errors import GitExecError
        from poextract.services import git_integration

        def missing(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(subprocess, "run", missing)
        with pytest.raises(GitExecError):
            git_integration._run_git(["status"], tmp_path)

    def test_outside_repo_real_git(self, tmp_path):
        import shutil
        from poextract.services.git_integration import get_status
        if shutil.which("git") is None:
            pytest.skip("git not installed")
        (tmp_path / "x.po").write_text("")
        # tmp_path is not inside a work tree on CI machines
        status = get_status(tmp_path / "x.po")
        if status.is_repo:
            pytest.skip("tmp_path is inside a git work tree")
        assert not status.is_repo
