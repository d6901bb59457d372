"""Tests for turning a Tree back into source text."""

import pytest

from jsfile.errors import GenerateFailure
from jsfile.tree.model import Comment, Node, RegExp, Tree
from jsfile.tree.parser import parse
from jsfile.tree.query import query
from jsfile.tree.serializer import generate, prepare, rebuild_regexes, serialize


ROUND_TRIP_SOURCES = [
    "",
    "var a = 1;\n",
    "var oldName; function oldName () { }",
    "// { \"name\": \"file\" }\nvar a = require('./a');\n",
    "/* block\n   comment */\nfunction f(a, b) {\n    return a / b / 2; // divide\n}\n",
    "var r = /ab+c/gi, s = /[/]\\//;\nif (r.test('abc')) { s = null }\n",
    "var t = `hello ${name} /not a regex/`;\n",
    "#!/usr/bin/env node\n'use strict';\r\nvar x = { a: 1, 'b': [1, 2,\t3] };\r\n",
    "var unicode = 'héllo wörld';   // trailing spaces   \n\n\n",
    "class A extends B {\n  constructor() { super(); this.x = () => 1; }\n}\n",
]


class TestRoundTrip:
    """Tests that serializing a parsed tree gives back the source."""

    @pytest.mark.parametrize("source", ROUND_TRIP_SOURCES)
    def test_round_trip_is_exact(self, source):
        """Test serialize(parse(source)) == source."""
        assert serialize(parse(source)) == source

    def test_round_trip_reparses_to_same_shape(self):
        """Test the regenerated text parses to an equal tree."""
        source = "var a = [1, 2]; function f() { return a.length; }"
        first = parse(source)
        second = parse(serialize(first))
        assert first.root.to_dict() == second.root.to_dict()


class TestPrepare:
    """Tests for the pre-generation steps."""

    def test_comments_become_leading_comments(self):
        """Test comments are copied to leading_comments."""
        tree = parse("// comment\nvar a;")
        prepare(tree)
        assert tree.leading_comments == tree.comments
        assert tree.leading_comments is not tree.comments

    def test_leading_comments_set_when_empty(self):
        """Test an explicit empty list is set when there are no comments."""
        tree = parse("var a;")
        assert tree.leading_comments is None
        serialize(tree)
        assert tree.leading_comments == []

    def test_rebuild_regexes(self):
        """Test regex values are rebuilt from raw text."""
        regex = Node(kind="regex", raw="/regex/")
        tree = Tree(root=Node(kind="program", children=[regex]), comments=[])

        text = serialize(tree)

        assert regex.value == RegExp("regex", "")
        assert tree.leading_comments == []
        assert text == "/regex/"

    def test_rebuild_regexes_counts_nested(self):
        """Test regexes nested anywhere in the tree are rebuilt."""
        tree = parse("function f() { return [/a/, /b/m]; }")
        for regex in query(tree, "regex"):
            regex.value = None
        assert rebuild_regexes(tree.root) == 2
        assert serialize(tree) == "function f() { return [/a/, /b/m]; }"


class TestGenerate:
    """Tests for generation from edited trees."""

    def test_renamed_identifier_is_written(self):
        """Test renames show up in the generated text."""
        tree = parse("var oldName = 1; // keep\n")
        [identifier] = query(tree, "identifier")
        identifier.name = "aMuchLongerName"
        assert serialize(tree) == "var aMuchLongerName = 1; // keep\n"

    def test_edited_comment_is_written(self):
        """Test comment edits show up in place."""
        tree = parse("// old\nvar a;")
        tree.comments[0].value = " new"
        assert serialize(tree) == "// new\nvar a;"

    def test_hand_built_comments_come_first(self):
        """Test comments without positions are emitted before the body."""
        tree = Tree(
            root=Node(kind="program", children=[Node(kind="identifier", raw="a")]),
            comments=[Comment(kind="Line", value=" meta", prefix="")],
        )
        tree.root.children[0].prefix = "\n"
        assert serialize(tree) == "// meta\na"

    def test_missing_raw_raises(self):
        """Test a token without text can't be generated."""
        tree = Tree(root=Node(kind="program", children=[Node(kind="identifier")]))
        with pytest.raises(GenerateFailure):
            serialize(tree)

    def test_regex_without_value_raises_in_generate(self):
        """Test generate() needs the RegExp value that prepare() rebuilds."""
        tree = parse("var r = /a/;")
        [regex] = query(tree, "regex")
        regex.value = None
        with pytest.raises(GenerateFailure):
            generate(tree)

    def test_malformed_tree_raises(self):
        """Test objects that aren't trees raise GenerateFailure."""
        with pytest.raises(GenerateFailure):
            serialize(object())

    def test_hand_built_literal_gets_regex_value(self):
        """Test any leaf whose raw is a regex literal is rebuilt, whatever its kind."""
        literal = Node(kind="Literal", raw="/regex/")
        tree = Tree(root=Node(kind="program", children=[literal]), comments=[])

        assert serialize(tree) == "/regex/"
        assert literal.value == RegExp("regex", "")

    def test_non_regex_leaves_untouched(self):
        """Test division and strings keep their values."""
        tree = parse("var a = b / c / d, s = '/x/';")
        [string] = query(tree, "string")
        assert rebuild_regexes(tree.root) == 0
        assert string.value == "/x/"
