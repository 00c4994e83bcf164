"""Tests for comment association and key collection."""
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


def _span(line, col=0, end_line=None, end_col=None):
    from poextract.parsers.syntax import Span
    end_line = line if end_line is None else end_line
    return Span.of(line, col, end_line, col + 10 if end_col is None else end_col)


def _lit(value, line=1):
    from poextract.parsers.syntax import StringLiteral
    return StringLiteral(value, _span(line))


def _dyn(line=1, kind="identifier"):
    from poextract.parsers.syntax import Dynamic
    return Dynamic(kind, _span(line))


def _call(line, *args, name="__"):
    from poextract.parsers.syntax import CALLEE_IDENTIFIER, CallSite
    return CallSite(CALLEE_IDENTIFIER, name, None, tuple(args), _span(line))


def _comment(value, line, end_line=None):
    from poextract.parsers.syntax import SourceComment
    return SourceComment(value, _span(line, 0, end_line))


def _collect_file(name, **kwargs):
    from poextract.parsers import get_parser
    from poextract.services.collector import KeyCollector
    source = (FIXTURES / "src" / name).read_text("utf-8")
    tree = get_parser("auto")(source, name)
    collector = KeyCollector(**kwargs)
    return collector, collector.collect(tree, name)


# ── Comment index ────────────────────────────────────────────────

class TestCommentIndex:
    def test_same_and_previous_line(self):
        from poextract.services.comments import CommentIndex
        above, trailing, far = _comment("above", 4), _comment("trailing", 5), _comment("far", 2)
        index = CommentIndex([above, trailing, far])
        assert index.for_line(5) == [above, trailing]
        assert index.for_line(3) == [far]

    def test_keyed_by_end_line(self):
        from poextract.services.comments import CommentIndex
        block = _comment("block", 1, end_line=3)
        index = CommentIndex([block])
        assert index.for_line(4) == [block]
        assert index.for_line(2) == []

    def test_consume(self):
        from poextract.services.comments import CommentIndex
        c = _comment("once", 1)
        index = CommentIndex([c])
        assert len(index) == 1
        index.consume(index.for_line(2))
        assert index.for_line(2) == []
        assert len(index) == 0

    def test_duplicate_span_kept_once(self):
        from poextract.services.comments import CommentIndex
        index = CommentIndex([_comment("x", 1), _comment("x", 1)])
        assert len(index) == 1


# ── Resolution table ─────────────────────────────────────────────

class TestResolve:
    @pytest.fixture
    def collector(self):
        from poextract.services.collector import KeyCollector
        return KeyCollector()

    def test_literal(self, collector):
        assert collector.resolve(_lit("a")) == ["a"]

    def test_concat(self, collector):
        from poextract.parsers.syntax import Concat
        assert collector.resolve(Concat(_lit("a."), _dyn(), _span(1))) == ["a.*"]

    def test_template(self, collector):
        from poextract.parsers.syntax import Template
        assert collector.resolve(Template(("a.", ".b"), _span(1))) == ["a.*.b"]
        assert collector.resolve(Template(("plain",), _span(1))) == ["plain"]

    def test_conditional(self, collector):
        from poextract.parsers.syntax import Conditional
        expr = Conditional(_lit("yes"), _lit("no"), _span(1))
        assert collector.resolve(expr) == ["yes", "no"]

    def test_conditional_same_branches(self, collector):
        from poextract.parsers.syntax import Conditional
        expr = Conditional(_lit("x"), _lit("x"), _span(1))
        assert collector.resolve(expr) == ["x"]

    def test_logical_and_takes_right(self, collector):
        from poextract.parsers.syntax import LogicalAnd
        assert collector.resolve(LogicalAnd(_dyn(), _lit("m"), _span(1))) == ["m"]

    def test_logical_or_union(self, collector):
        from poextract.parsers.syntax import LogicalOr
        assert collector.resolve(LogicalOr(_dyn(), _lit("m"), _span(1))) == ["*", "m"]

    def test_dynamic(self, collector):
        assert collector.resolve(_dyn(kind="call")) == ["*"]

    def test_unsupported(self, collector):
        from poextract.parsers.syntax import Unsupported
        assert collector.resolve(Unsupported("UnaryExpression", _span(3))) == [None]
        assert collector.diagnostics.warning_count == 1
        assert collector.diagnostics.items[0].line == 3

    def test_concat_multi_key_uses_first(self, collector):
        from poextract.parsers.syntax import Concat, Conditional
        left = Conditional(_lit("a"), _lit("b"), _span(1))
        assert collector.resolve(Concat(left, _lit(".x"), _span(1))) == ["a.x"]
        assert "multiple keys" in collector.diagnostics.items[0].message

    def test_concat_with_unresolved(self, collector):
        from poextract.parsers.syntax import Concat, Unsupported
        expr = Concat(_lit("a"), Unsupported("ArrayExpression", _span(1)), _span(1))
        assert collector.resolve(expr) == [None]


# ── Collection ───────────────────────────────────────────────────

class TestKeyCollector:
    def test_expressions_fixture(self):
        collector, instances = _collect_file("expressions.js")
        keys = {i.key for i in instances}
        expected = {"m1", "m2", "m3", "m4", "m5", "m6", "m7", "m8", "k0.*", "k0.*.k1", "*.k1", "*"}
        assert keys == expected
        assert "mNot" not in keys
        assert collector.diagnostics.warning_count >= 1

    def test_instances_in_source_order(self):
        collector, instances = _collect_file("expressions.js")
        spans = [i.span for i in instances]
        assert spans == sorted(spans)

    def test_comments_fixture(self):
        collector, instances = _collect_file("comments.js")
        found = {i.key: (i.span.start.line, i.comment) for i in instances}
        assert found == {
            "hello": (2, "Greeting shown on the home page"),
            "bye": (4, "Trailing note"),
            "block": (10, "Block comment\nover two lines"),
            "declared.key": (12, None),
            "plain": (20, None),
        }

    def test_directive_above_its_own_call(self):
        from poextract.parsers import get_parser
        from poextract.services.collator import MessageCollator
        from poextract.services.collector import KeyCollector
        name = "directive.js"
        source = (FIXTURES / "scenarios" / name).read_text("utf-8")
        instances = KeyCollector().collect(get_parser("auto")(source, name), name)
        collator = MessageCollator()
        collator.add(instances, name)
        messages = collator.messages()
        assert len(messages) == 1
        assert messages[0].key == "greeting"
        assert messages[0].references == ("directive.js:2", "directive.js:3")
        assert messages[0].comments == ("Free text note",)

    def test_comments_not_extracted(self):
        collector, instances = _collect_file("comments.js", extract_comments=False)
        assert all(i.comment is None for i in instances)
        assert "declared.key" in {i.key for i in instances}

    def test_regexes_disabled(self):
        collector, instances = _collect_file("comments.js", key_regex=None, ignore_regex=None)
        keys = [i.key for i in instances]
        assert "declared.key" not in keys
        assert "skipped" in keys

    def test_members(self):
        _, without = _collect_file("members.js")
        assert [i.key for i in without] == ["plain"]
        _, with_members = _collect_file("members.js", members=True)
        assert [i.key for i in with_members] == ["plain", "member", "self", "computed"]

    def test_arg_pos(self):
        _, first = _collect_file("position.js")
        assert [i.key for i in first] == ["a0", "b0", "c0"]
        collector, second = _collect_file("position.js", arg_pos=1)
        assert [i.key for i in second] == ["a1", "b1"]
        assert collector.diagnostics.warning_count == 1
        _, last = _collect_file("position.js", arg_pos=-1)
        assert [i.key for i in last] == ["a2", "b1", "c0"]

    def test_custom_markers(self):
        from poextract.parsers.syntax import SourceTree
        from poextract.services.collector import KeyCollector
        tree = SourceTree(calls=[_call(1, _lit("a"), name="t"), _call(2, _lit("b"))])
        assert [i.key for i in KeyCollector(markers=["t"]).collect(tree)] == ["a"]
        assert [i.key for i in KeyCollector(markers="t").collect(tree)] == ["a"]

    def test_comment_claimed_once(self):
        from poextract.parsers.syntax import SourceTree
        from poextract.services.collector import KeyCollector
        tree = SourceTree(
            comments=[_comment("shared", 1)],
            calls=[_call(2, _lit("a")), _call(2, _lit("b"))],
        )
        instances = KeyCollector().collect(tree)
        assert [i.comment for i in instances] == ["shared", None]

    def test_python_source(self):
        _, instances = _collect_file("sample.py", markers=["_"])
        found = [(i.key, i.comment) for i in instances]
        assert found == [
            ("Welcome back", "Shown on the login screen"),
            ("greeting.*", None),
            ("Yes", None),
            ("No", None),
            ("prefix.*", None),
        ]

    def test_from_settings(self):
        from poextract.services.collector import KeyCollector
        from poextract.services.settings import Settings
        settings = Settings(markers=["t", "tr"], arg_pos=1, members=True, comments=False)
        collector = KeyCollector.from_settings(settings)
        assert collector.markers == {"t", "tr"}
        assert collector.arg_pos == 1
        assert collector.members
        assert not collector.extract_comments


class TestKeyCollectorConfig:
    @pytest.mark.parametrize("kwargs", [
        {"markers": []},
        {"markers": [""]},
        {"markers": [1]},
        {"arg_pos": "0"},
        {"arg_pos": True},
        {"key_regex": "("},
        {"key_regex": "no group"},
        {"ignore_regex": "["},
    ])
    def test_invalid(self, kwargs):
        from poextract.errors import ConfigError
        from poextract.services.collector import KeyCollector
        with pytest.raises(ConfigError):
            KeyCollector(**kwargs)
