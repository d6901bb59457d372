"""Tests for parsing JavaScript into a Tree."""

import pytest

from jsfile.errors import ErrorKind, ParseFailure
from jsfile.tree.model import Comment, RegExp, Tree
from jsfile.tree.parser import number_value, parse, string_value
from jsfile.tree.query import query


class TestParse:
    """Tests for parse()."""

    def test_returns_program_tree(self):
        """Test parsing a simple script."""
        tree = parse("var a = 1;")
        assert isinstance(tree, Tree)
        assert tree.root.kind == "program"
        assert tree.source_type == "script"
        assert tree.comments == []

    def test_empty_source(self):
        """Test parsing an empty file."""
        tree = parse("")
        assert tree.root.kind == "program"
        assert tree.root.children == []
        assert tree.trailing == ""

    def test_identifiers_have_names(self):
        """Test identifier leaves carry their name."""
        tree = parse("var oldName; function oldName () { }")
        names = [node.name for node in query(tree, "identifier")]
        assert names == ["oldName", "oldName"]

    def test_field_names_are_kept(self):
        """Test child nodes remember their field in the parent."""
        tree = parse("var a = b;")
        [declarator] = query(tree, "variable_declarator")
        assert declarator.child("name").name == "a"
        assert declarator.child("value").name == "b"

    def test_anonymous_tokens_are_not_named(self):
        """Test punctuation and keywords are marked anonymous."""
        tree = parse("var a;")
        [declaration] = query(tree, "variable_declaration")
        assert [child.named for child in declaration.children] == [False, True, False]


class TestComments:
    """Tests for comment detachment."""

    def test_comments_are_detached(self):
        """Test comments move from the body to Tree.comments."""
        tree = parse("// line\nvar a; /* block */")
        assert [c.kind for c in tree.comments] == ["Line", "Block"]
        assert [c.value for c in tree.comments] == [" line", " block "]
        assert all(
            node.kind != "comment" for node, _ in tree.root.walk()
        )

    def test_comment_positions(self):
        """Test comments keep their byte range."""
        tree = parse("var a; // tail")
        [comment] = tree.comments
        assert (comment.start, comment.end) == (7, 14)
        assert comment.prefix == " "

    def test_nested_comments_are_detached(self):
        """Test comments inside functions are detached too."""
        tree = parse("function f() {\n  // inside\n  return 1;\n}")
        assert [c.value for c in tree.comments] == [" inside"]

    def test_metadata_comment_value(self):
        """Test a JSON comment's value is the bare JSON text."""
        tree = parse('// { "name": "old name" }')
        assert tree.comments[0].value == ' { "name": "old name" }'

    def test_comment_text_round_trip(self):
        """Test Comment.text restores delimiters."""
        assert Comment.from_text("/* a */").text == "/* a */"
        assert Comment.from_text("// a").text == "// a"


class TestLiterals:
    """Tests for literal values."""

    def test_regex_literal(self):
        """Test regex literals keep raw text and get a RegExp value."""
        tree = parse("var r = /ab+c/gi;")
        [regex] = query(tree, "regex")
        assert regex.raw == "/ab+c/gi"
        assert regex.value == RegExp("ab+c", "gi")
        assert regex.is_leaf

    def test_regex_with_slash_in_class(self):
        """Test a slash inside a character class stays in the pattern."""
        tree = parse(r"var r = /[/]\//;")
        [regex] = query(tree, "regex")
        assert regex.value == RegExp(r"[/]\/", "")

    def test_string_literal(self):
        """Test string literals decode escapes."""
        tree = parse("var s = 'a\\nb';")
        [string] = query(tree, "string")
        assert string.raw == "'a\\nb'"
        assert string.value == "a\nb"

    def test_number_literal(self):
        """Test numeric literals decode to Python numbers."""
        tree = parse("var n = 0x1F + 2.5;")
        assert [node.value for node in query(tree, "number")] == [31, 2.5]

    def test_string_value_escapes(self):
        """Test JavaScript escape sequences."""
        assert string_value(r'"A\x42\u{43}"') == "ABC"
        assert string_value(r"'it\'s'") == "it's"
        assert string_value('"a\\\nb"') == "ab"

    def test_number_value_forms(self):
        """Test the numeric literal forms."""
        assert number_value("10") == 10
        assert number_value("1_000") == 1000
        assert number_value("1e3") == 1000.0
        assert number_value("0b101") == 5
        assert number_value("017") == 15
        assert number_value("10n") == 10


class TestParseFailure:
    """Tests for malformed input."""

    def test_syntax_error_raises(self):
        """Test malformed source raises ParseFailure."""
        with pytest.raises(ParseFailure) as exc_info:
            parse("var a = ;")
        assert exc_info.value.kind == ErrorKind.PARSE
        assert "line 1" in str(exc_info.value)

    def test_unclosed_block_raises(self):
        """Test a missing closing brace raises ParseFailure."""
        with pytest.raises(ParseFailure):
            parse("function f() {\n  return 1;\n")

    def test_module_syntax_rejected(self):
        """Test import statements are rejected in scripts."""
        with pytest.raises(ParseFailure, match="import_statement"):
            parse("import x from './x';")

    @pytest.mark.parametrize(
        "source",
        [
            "return 1;",
            "if (a) {\n  return;\n}",
            "var u = import.meta.url;",
            "export var a = 1;",
        ],
    )
    def test_script_only_constructs(self, source):
        """Test constructs a script can't contain raise ParseFailure."""
        with pytest.raises(ParseFailure):
            parse(source)

    def test_return_error_position(self):
        """Test the position of an illegal return is reported."""
        with pytest.raises(ParseFailure, match="line 2, column 2"):
            parse("if (a) {\n  return;\n}")

    @pytest.mark.parametrize(
        "source",
        [
            "function f() { if (a) { return 1; } }",
            "var f = () => { return 1; };",
            "var g = function* () { return 1; };",
            "class A { m() { return 1; } }",
            "var o = { m() { return 1; } };",
            "var m = import('./m');",
        ],
    )
    def test_returns_inside_functions_parse(self, source):
        """Test returns inside functions and dynamic imports are fine."""
        assert parse(source).root.kind == "program"
