"""Tree model for parsed JavaScript source.

A ``Tree`` owns a ``program`` root ``Node`` and the comments that were
detached from it while parsing. Leaf tokens keep their exact source text
(``raw``) and the text that preceded them (``prefix``), so a tree can be
turned back into the original source byte for byte.

Nodes are mutated in place. A node belongs to exactly one tree; trees never
share nodes, so a rename in one tree cannot leak into another.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

# Node kinds that hold an identifier name. Labels and `undefined` are
# identifiers too, tree-sitter just gives them their own kinds.
IDENTIFIER_KINDS = {
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
    "statement_identifier",
    "undefined",
}

# Tokens kept whole even though the grammar gives them children
ATOMIC_KINDS = {"string", "number", "regex"}

# /pattern/flags, with escapes and character classes allowed to contain "/"
REGEX_LITERAL = re.compile(
    r"^/((?:\\.|\[(?:\\.|[^\]\\\n])*\]|[^/\\\[\n])+)/([A-Za-z]*)$"
)


@dataclass(frozen=True)
class RegExp:
    """A regular expression literal value (``/source/flags``)."""

    source: str
    flags: str = ""

    @classmethod
    def from_raw(cls, raw: str) -> Optional["RegExp"]:
        """Build a RegExp from literal source text, or None if it isn't one."""
        match = REGEX_LITERAL.match(raw)
        if not match:
            return None
        return cls(source=match.group(1), flags=match.group(2))

    def __str__(self) -> str:
        return f"/{self.source}/{self.flags}"


@dataclass(eq=False)
class Node:
    """A syntax tree node.

    Attributes:
        kind: tree-sitter node type (``identifier``, ``call_expression``, ...)
        children: Child nodes in source order
        field_name: Field name of this node within its parent, if any
        named: False for anonymous tokens such as punctuation and keywords
        start: Start byte offset in the parsed source
        end: End byte offset in the parsed source
        raw: Exact source text (leaf tokens only)
        prefix: Source text between the previous token and this one
        value: Semantic value of a leaf token
    """

    kind: str
    children: list["Node"] = field(default_factory=list)
    field_name: Optional[str] = None
    named: bool = True
    start: int = 0
    end: int = 0
    raw: Optional[str] = None
    prefix: str = ""
    value: Any = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def name(self) -> Optional[str]:
        """Identifier name, None for anything that isn't an identifier."""
        if self.kind in IDENTIFIER_KINDS:
            return self.raw
        return None

    @name.setter
    def name(self, new_name: str):
        if self.kind not in IDENTIFIER_KINDS:
            raise AttributeError(f"{self.kind} node has no name")
        self.raw = new_name
        self.value = new_name

    def child(self, field_name: str) -> Optional["Node"]:
        """First child stored under ``field_name``."""
        for child in self.children:
            if child.field_name == field_name:
                return child
        return None

    @property
    def named_children(self) -> list["Node"]:
        return [child for child in self.children if child.named]

    def walk(self) -> Iterator[tuple["Node", tuple["Node", ...]]]:
        """Yield ``(node, ancestors)`` pairs in document order (pre-order)."""
        stack: list[tuple[Node, tuple[Node, ...]]] = [(self, ())]
        while stack:
            node, ancestors = stack.pop()
            yield node, ancestors
            path = ancestors + (node,)
            stack.extend((child, path) for child in reversed(node.children))

    def leaves(self) -> Iterator["Node"]:
        """Leaf tokens below this node, in source order."""
        for node, _ in self.walk():
            if node.is_leaf and node is not self:
                yield node

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation of this node and its subtree."""
        result: dict[str, Any] = {"type": self.kind}
        if self.field_name:
            result["field"] = self.field_name
        if self.is_leaf:
            result["raw"] = self.raw
            if self.value is not None:
                result["value"] = (
                    str(self.value) if isinstance(self.value, RegExp) else self.value
                )
        result["range"] = [self.start, self.end]
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass(eq=False)
class Comment:
    """A comment detached from the tree body.

    ``value`` is the comment text without its delimiters, so for
    ``// {"name": "a"}`` it is `` {"name": "a"}``.
    """

    kind: str  # "Line" or "Block"
    value: str
    start: int = 0
    end: int = 0
    prefix: str = ""

    @property
    def text(self) -> str:
        if self.kind == "Block":
            return f"/*{self.value}*/"
        return f"//{self.value}"

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> "Comment":
        if text.startswith("/*"):
            return cls(kind="Block", value=text[2:-2], **kwargs)
        return cls(kind="Line", value=text[2:], **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "value": self.value, "range": [self.start, self.end]}


@dataclass(eq=False)
class Tree:
    """A parsed source file: program root plus detached comments."""

    root: Node
    comments: list[Comment] = field(default_factory=list)
    leading_comments: Optional[list[Comment]] = None
    trailing: str = ""
    source_type: str = "script"

    @classmethod
    def empty(cls) -> "Tree":
        return cls(root=Node(kind="program"))

    def to_dict(self) -> dict[str, Any]:
        result = self.root.to_dict()
        result["sourceType"] = self.source_type
        result["comments"] = [comment.to_dict() for comment in self.comments]
        return result
