"""Tests for PoMerger (file-level merging)."""
import pytest


def _messages(base_dir):
    from poextract.services.extractor import Extractor
    return Extractor(base_dir=str(base_dir)).extract("src/comments.js")


def _merger(base_dir, **overrides):
    from poextract.services.po_merge import PoMerger
    overrides.setdefault("git_check", False)
    return PoMerger(base_dir=str(base_dir), **overrides)


class TestPoMerger:
    def test_get_merge_result_writes_nothing(self, workdir):
        po = workdir / "locale" / "en.po"
        before = po.read_text("utf-8")
        result = _merger(workdir).get_merge_result("locale/en.po", _messages(workdir))
        assert po.read_text("utf-8") == before
        assert result.file == "locale/en.po"
        assert result.source_content == before
        assert result.is_change
        assert set(result.merge.track_added) == {"block", "declared.key", "plain"}
        assert 'msgid "plain"' in result.content
        assert 'msgid "old.key"' in result.content

    def test_replace_mode(self, workdir):
        result = _merger(workdir, replace=True).get_merge_result("locale/en.po", _messages(workdir))
        assert 'msgid "old.key"' not in result.content
        assert result.catalog is result.merge.replace_catalog

    def test_merge_po_writes(self, workdir):
        from poextract.parsers.po_parser import parse_po
        result = _merger(workdir).merge_po("locale/en.po", _messages(workdir))
        assert result.written
        catalog = parse_po(workdir / "locale" / "en.po")
        assert catalog.bucket("")["hello"].msgstr == ["Hello"]
        assert catalog.bucket("")["block"].comments.extracted == "Block comment\nover two lines"

    def test_second_run_not_written(self, workdir):
        messages = _messages(workdir)
        merger = _merger(workdir, replace=True)
        merger.merge_po("locale/en.po", messages)
        saved = []
        merger.before_save = lambda path, content: saved.append(path)
        result = merger.merge_po("locale/en.po", messages)
        assert not result.is_change
        assert not result.written
        assert saved == []

    def test_force_save(self, workdir):
        messages = _messages(workdir)
        _merger(workdir, replace=True).merge_po("locale/en.po", messages)
        result = _merger(workdir, replace=True, force_save=True).merge_po("locale/en.po", messages)
        assert not result.is_change
        assert result.written

    def test_dry_run(self, workdir):
        po = workdir / "locale" / "en.po"
        before = po.read_text("utf-8")
        result = _merger(workdir, dry_run=True).merge_po("locale/en.po", _messages(workdir))
        assert result.is_change
        assert not result.written
        assert po.read_text("utf-8") == before

    def test_merge_pos(self, workdir):
        results = _merger(workdir).merge_pos("locale/*.po", _messages(workdir))
        assert [r.file for r in results] == ["locale/blank.po", "locale/context.po", "locale/en.po"]
        assert all(r.written for r in results)

    def test_merge_po_to(self, workdir):
        source = workdir / "locale" / "en.po"
        before = source.read_text("utf-8")
        result = _merger(workdir).merge_po_to("locale/en.po", "out/en.po", _messages(workdir))
        assert source.read_text("utf-8") == before
        assert (workdir / "out" / "en.po").read_text("utf-8") == result.content
        assert result.file == "out/en.po"
        assert result.source_file == "locale/en.po"

    def test_merge_pos_to(self, workdir):
        results = _merger(workdir).merge_pos_to("locale/*.po", "build", _messages(workdir))
        assert sorted(r.file for r in results) == ["build/blank.po", "build/context.po", "build/en.po"]
        assert (workdir / "build" / "blank.po").is_file()

    def test_events_passed_through(self, workdir):
        from poextract.services.po_merge import PoMerger
        events = []
        merger = PoMerger(base_dir=str(workdir), git_check=False, on_event=events.append)
        merger.get_merge_result("locale/en.po", _messages(workdir))
        assert {"added", "found", "missing"} <= {e.kind for e in events}

    def test_git_check_runs_before_write(self, workdir, monkeypatch):
        from poextract.errors import UnsavedChangesError
        from poextract.services import po_merge

        def dirty(path, mode, rel=None):
            raise UnsavedChangesError(f"Dirty path detected at {rel}", rel)

        monkeypatch.setattr(po_merge, "check_clean", dirty)
        po = workdir / "locale" / "en.po"
        before = po.read_text("utf-8")
        with pytest.raises(UnsavedChangesError):
            _merger(workdir, git_check=True).merge_po("locale/en.po", _messages(workdir))
        assert po.read_text("utf-8") == before

    def test_missing_context(self, workdir):
        from poextract.errors import MissingContextError
        with pytest.raises(MissingContextError):
            _merger(workdir, context="nope").merge_po("locale/en.po", _messages(workdir))
