"""Parse JavaScript source text into a Tree using tree-sitter."""

import re
from typing import Any, Optional

import structlog
import tree_sitter_javascript
from tree_sitter import Language, Node as TSNode, Parser, TreeCursor

from jsfile.errors import ParseFailure
from jsfile.tree.model import (
    ATOMIC_KINDS,
    IDENTIFIER_KINDS,
    Comment,
    Node,
    RegExp,
    Tree,
)

log = structlog.get_logger()

JAVASCRIPT = Language(tree_sitter_javascript.language())

# Statements only valid when parsing a module, not a script
MODULE_KINDS = {"import_statement", "export_statement"}

# Constructs a `return` may appear in
FUNCTION_KINDS = {
    "function_declaration",
    "function_expression",
    "function",
    "generator_function_declaration",
    "generator_function",
    "arrow_function",
    "method_definition",
}

_ESCAPE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def _unescape(match: "re.Match[str]") -> str:
    escape = match.group(1)
    if escape.startswith("u{"):
        return chr(int(escape[2:-1], 16))
    if escape[0] in "ux" and len(escape) > 1:
        return chr(int(escape[1:], 16))
    if escape in ("\n", "\r", "\r\n", "\u2028", "\u2029"):
        # Line continuation
        return ""
    return _SIMPLE_ESCAPES.get(escape, escape)


def string_value(raw: str) -> str:
    """Decode a quoted JavaScript string literal."""
    return _ESCAPE.sub(_unescape, raw[1:-1])


def number_value(raw: str) -> Optional[int | float]:
    """Decode a JavaScript numeric literal, None if it has no Python equivalent."""
    text = raw.replace("_", "").lower()
    if text.endswith("n"):
        text = text[:-1]
    try:
        if text.startswith(("0x", "0o", "0b")):
            return int(text, 0)
        if text.isdigit():
            # Legacy octal literals such as 017
            if len(text) > 1 and text.startswith("0") and set(text) <= set("01234567"):
                return int(text, 8)
            return int(text)
        return float(text)
    except ValueError:
        return None


def literal_value(kind: str, raw: str) -> Any:
    """Semantic value of a leaf token."""
    if kind in IDENTIFIER_KINDS:
        return raw
    if kind == "string":
        return string_value(raw)
    if kind == "number":
        return number_value(raw)
    if kind == "regex":
        return RegExp.from_raw(raw)
    if kind in ("true", "false"):
        return kind == "true"
    return None


def _first_error(node: TSNode) -> Optional[TSNode]:
    """Find the first ERROR or MISSING node in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


class _TreeBuilder:
    """Copy a tree-sitter tree into mutable Nodes, detaching comments."""

    def __init__(self, source: bytes):
        self.source = source
        self.offset = 0
        self.comments: list[Comment] = []

    def _slice(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def _prefix(self, start: int, end: int) -> str:
        prefix = self._slice(self.offset, start)
        self.offset = end
        return prefix

    def build(self, cursor: TreeCursor) -> Node:
        ts_node = cursor.node
        node = Node(
            kind=ts_node.type,
            field_name=cursor.field_name,
            named=ts_node.is_named,
            start=ts_node.start_byte,
            end=ts_node.end_byte,
        )

        if ts_node.child_count == 0 or ts_node.type in ATOMIC_KINDS:
            node.prefix = self._prefix(ts_node.start_byte, ts_node.end_byte)
            node.raw = self._slice(ts_node.start_byte, ts_node.end_byte)
            node.value = literal_value(node.kind, node.raw)
            return node

        self.build_children(cursor, node)
        return node

    def build_children(self, cursor: TreeCursor, node: Node):
        if not cursor.goto_first_child():
            return
        while True:
            child = cursor.node
            if child.type == "comment":
                prefix = self._prefix(child.start_byte, child.end_byte)
                self.comments.append(
                    Comment.from_text(
                        self._slice(child.start_byte, child.end_byte),
                        start=child.start_byte,
                        end=child.end_byte,
                        prefix=prefix,
                    )
                )
            else:
                node.children.append(self.build(cursor))
            if not cursor.goto_next_sibling():
                break
        cursor.goto_parent()


def _is_import_meta(node: Node) -> bool:
    if node.kind == "meta_property":
        return bool(node.children) and node.children[0].raw == "import"
    if node.kind == "member_expression":
        target = node.child("object")
        return target is not None and target.kind == "import"
    return False


def _script_error(node: Node, ancestors: tuple[Node, ...]) -> Optional[str]:
    """Why ``node`` can't appear in a script, None if it can."""
    if node.kind in MODULE_KINDS:
        return f"{node.kind} is not allowed in a script"
    if _is_import_meta(node):
        return "import.meta is not allowed in a script"
    if node.kind == "return_statement" and not any(
        a.kind in FUNCTION_KINDS for a in ancestors
    ):
        return "return_statement outside of a function"
    return None


def _check_script(root: Node, source: bytes):
    for node, ancestors in root.walk():
        message = _script_error(node, ancestors)
        if message is not None:
            line = source.count(b"\n", 0, node.start) + 1
            column = node.start - (source.rfind(b"\n", 0, node.start) + 1)
            raise ParseFailure(f"{message} (line {line}, column {column})")


def parse(text: str) -> Tree:
    """Parse JavaScript source as a script.

    Args:
        text: Source text

    Returns:
        Tree with comments detached into ``Tree.comments``

    Raises:
        ParseFailure: If the source has syntax errors or uses constructs only
            valid in modules or functions (`import`, `export`, `import.meta`,
            top-level `return`)
    """
    source = text.encode("utf-8")
    ts_tree = Parser(JAVASCRIPT).parse(source)
    ts_root = ts_tree.root_node

    if ts_root.has_error:
        error = _first_error(ts_root)
        line, column = error.start_point if error else ts_root.start_point
        raise ParseFailure(f"Unexpected token at line {line + 1}, column {column}")

    builder = _TreeBuilder(source)
    cursor = ts_tree.walk()
    root = Node(kind=ts_root.type, start=ts_root.start_byte, end=ts_root.end_byte)
    builder.build_children(cursor, root)
    _check_script(root, source)

    tree = Tree(
        root=root,
        comments=builder.comments,
        trailing=source[builder.offset :].decode("utf-8"),
        source_type="script",
    )
    log.debug("source_parsed", size=len(source), comments=len(tree.comments))
    return tree
