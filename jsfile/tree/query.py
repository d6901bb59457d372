"""Selector-based structural queries over a Tree.

Supports a subset of esquery syntax:

- ``Identifier`` / ``identifier`` - nodes of a kind (ESTree or tree-sitter names)
- ``*`` - any node
- ``[name="x"]``, ``[name!="x"]``, ``[value]`` - attribute tests, with dotted
  paths through child fields: ``call_expression[function.name="require"]``
- ``A B`` - B with an ancestor matching A
- ``A > B`` - B whose parent matches A
- ``A, B`` - either selector
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Optional, Union

from jsfile.errors import SelectorError
from jsfile.tree.model import IDENTIFIER_KINDS, Node, Tree

# ESTree names whose tree-sitter kinds don't follow from CamelCase -> snake_case
KIND_ALIASES: dict[str, frozenset[str]] = {
    "Identifier": frozenset(IDENTIFIER_KINDS),
    "Literal": frozenset({"string", "number", "regex", "true", "false", "null"}),
    "Property": frozenset({"pair", "shorthand_property_identifier"}),
    "FunctionExpression": frozenset({"function_expression", "function"}),
    "ArrowFunctionExpression": frozenset({"arrow_function"}),
    "VariableDeclaration": frozenset({"variable_declaration", "lexical_declaration"}),
    "BlockStatement": frozenset({"statement_block"}),
    "ObjectExpression": frozenset({"object"}),
    "ArrayExpression": frozenset({"array"}),
    "TemplateLiteral": frozenset({"template_string"}),
    "ThisExpression": frozenset({"this"}),
    "ClassExpression": frozenset({"class"}),
    "ConditionalExpression": frozenset({"ternary_expression"}),
    # tree-sitter has no separate kind for && || ??
    "LogicalExpression": frozenset({"binary_expression"}),
    "DoWhileStatement": frozenset({"do_statement"}),
    "RestElement": frozenset({"rest_pattern"}),
    # for-in and for-of share one kind
    "ForOfStatement": frozenset({"for_in_statement"}),
    "SwitchCase": frozenset({"switch_case", "switch_default"}),
    "PropertyDefinition": frozenset({"field_definition"}),
    "StaticBlock": frozenset({"class_static_block"}),
}

# ESTree field names mapped onto tree-sitter field names
FIELD_ALIASES = {"callee": "function", "id": "name", "init": "value"}

_TOKEN = re.compile(
    r"""
    (?P<space>\s*>\s*|\s*,\s*|\s+)
    | (?P<kind>\*|[A-Za-z_][\w-]*)
    | (?P<attr>\[\s*(?P<path>[\w.-]+)\s*
        (?:(?P<op>!?=)\s*(?P<value>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^\]\s]+)\s*)?
      \])
    """,
    re.VERBOSE,
)
_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _kinds_for(name: str) -> Optional[frozenset[str]]:
    """Node kinds matched by a kind name in a selector, None for ``*``."""
    if name == "*":
        return None
    if name in KIND_ALIASES:
        return KIND_ALIASES[name]
    if name[0].isupper():
        return frozenset({_CAMEL.sub("_", name).lower()})
    return frozenset({name})


@dataclass(frozen=True)
class Attribute:
    path: tuple[str, ...]
    op: Optional[str] = None
    value: Optional[str] = None
    quoted: bool = False

    def matches(self, node: Node) -> bool:
        actual = _resolve(node, self.path)
        if self.op is None:
            return actual is not None
        if self.quoted:
            equal = actual == self.value
        else:
            equal = actual is not None and str(actual) == self.value
        return equal if self.op == "=" else not equal


@dataclass(frozen=True)
class Compound:
    kinds: Optional[frozenset[str]] = None
    attributes: tuple[Attribute, ...] = ()

    def matches(self, node: Node) -> bool:
        # Keyword tokens such as `class` share their kind with a construct
        if self.kinds is not None and (not node.named or node.kind not in self.kinds):
            return False
        return all(attribute.matches(node) for attribute in self.attributes)


@dataclass(frozen=True)
class Complex:
    """A chain of compounds joined by combinators, read left to right."""

    compounds: tuple[Compound, ...]
    combinators: tuple[str, ...] = field(default=())

    def matches(self, node: Node, ancestors: tuple[Node, ...]) -> bool:
        return self._match(len(self.compounds) - 1, node, ancestors)

    def _match(self, index: int, node: Node, ancestors: tuple[Node, ...]) -> bool:
        if not self.compounds[index].matches(node):
            return False
        if index == 0:
            return True
        if not ancestors:
            return False
        if self.combinators[index - 1] == ">":
            return self._match(index - 1, ancestors[-1], ancestors[:-1])
        return any(
            self._match(index - 1, ancestors[i], ancestors[:i])
            for i in range(len(ancestors) - 1, -1, -1)
        )


def _resolve(node: Node, path: tuple[str, ...]) -> Any:
    current: Any = node
    for part in path:
        if not isinstance(current, Node):
            return None
        part = FIELD_ALIASES.get(part, part)
        child = current.child(part)
        if child is not None:
            current = child
        elif part in ("name", "raw", "value", "kind", "type", "prefix"):
            current = current.kind if part == "type" else getattr(current, part)
        else:
            return None
    if isinstance(current, Node):
        if current.name is not None:
            return current.name
        return current.raw if current.is_leaf else current
    return current


def _unquote(value: str) -> tuple[str, bool]:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return re.sub(r"\\(.)", r"\1", value[1:-1]), True
    return value, False


@lru_cache(maxsize=256)
def compile_selector(selector: str) -> tuple[Complex, ...]:
    """Parse a selector string.

    Raises:
        SelectorError: If the selector has invalid syntax
    """
    selector = selector.strip()
    if not selector:
        raise SelectorError("Empty selector")

    alternatives: list[Complex] = []
    compounds: list[Compound] = []
    combinators: list[str] = []
    kinds: Optional[frozenset[str]] = None
    attributes: list[Attribute] = []
    pending = False  # a compound has been started

    def finish_compound():
        nonlocal kinds, attributes, pending
        if not pending:
            raise SelectorError(f"Missing node selector in {selector!r}")
        compounds.append(Compound(kinds=kinds, attributes=tuple(attributes)))
        kinds, attributes, pending = None, [], False

    def finish_complex():
        nonlocal compounds, combinators
        finish_compound()
        alternatives.append(Complex(tuple(compounds), tuple(combinators)))
        compounds, combinators = [], []

    position = 0
    while position < len(selector):
        match = _TOKEN.match(selector, position)
        if not match or match.end() == position:
            raise SelectorError(
                f"Unexpected {selector[position]!r} at {position} in {selector!r}"
            )
        position = match.end()

        if match.group("space") is not None:
            separator = match.group("space").strip()
            if separator == ",":
                finish_complex()
            else:
                finish_compound()
                combinators.append(separator or " ")
        elif match.group("kind") is not None:
            if pending:
                raise SelectorError(f"Unexpected {match.group('kind')!r} in {selector!r}")
            kinds = _kinds_for(match.group("kind"))
            pending = True
        else:
            value, quoted = None, False
            if match.group("value") is not None:
                value, quoted = _unquote(match.group("value"))
            attributes.append(
                Attribute(
                    path=tuple(match.group("path").split(".")),
                    op=match.group("op"),
                    value=value,
                    quoted=quoted,
                )
            )
            pending = True

    finish_complex()
    return tuple(alternatives)


def matches(node: Node, ancestors: tuple[Node, ...], selector: str) -> bool:
    """Check whether ``node`` (with the given ancestor chain) matches ``selector``."""
    return any(c.matches(node, ancestors) for c in compile_selector(selector))


def query(target: Union[Tree, Node], selector: str) -> list[Node]:
    """Find every node matching ``selector``, in document order.

    Args:
        target: Tree or subtree root to search
        selector: Selector string

    Returns:
        Matching nodes; empty when nothing matches
    """
    root = target.root if isinstance(target, Tree) else target
    compiled = compile_selector(selector)
    return [
        node
        for node, ancestors in root.walk()
        if any(c.matches(node, ancestors) for c in compiled)
    ]
