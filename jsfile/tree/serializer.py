"""Turn a Tree back into JavaScript source text."""

import heapq
from typing import Iterator, Union

import structlog

from jsfile.errors import GenerateFailure
from jsfile.tree.model import Comment, Node, RegExp, Tree

log = structlog.get_logger()

Token = Union[Node, Comment]


def rebuild_regexes(root: Node) -> int:
    """Rebuild the RegExp value of every regex literal below ``root``.

    Any leaf whose ``raw`` reads as ``/source/flags`` counts, whatever its
    kind, so hand-built ``Literal`` nodes get a value too. The value of a regex
    token can be lost when a tree is copied around or built by hand; ``raw``
    is the source of truth.

    Returns:
        Number of regex literals rebuilt
    """
    rebuilt = 0
    for node, _ in root.walk():
        if not node.is_leaf or not isinstance(node.raw, str):
            continue
        # JSX text is free-form, never a literal
        if node.kind.startswith("jsx"):
            continue
        value = RegExp.from_raw(node.raw)
        if value is not None:
            node.value = value
            rebuilt += 1
    return rebuilt


def prepare(tree: Tree) -> Tree:
    """Reattach comments and rebuild regex literals ahead of generating."""
    tree.leading_comments = list(tree.comments)
    rebuild_regexes(tree.root)
    return tree


def _token_text(token: Token) -> str:
    if isinstance(token, Comment):
        return token.text
    if token.kind == "regex":
        if not isinstance(token.value, RegExp):
            raise GenerateFailure(f"Regex literal {token.raw!r} has no RegExp value")
        return str(token.value)
    if token.raw is None:
        raise GenerateFailure(f"{token.kind} node has no source text")
    return token.raw


def _tokens(tree: Tree) -> Iterator[Token]:
    # Comments go first on ties so hand-built trees get them ahead of the body
    comments = sorted(tree.leading_comments or [], key=lambda c: c.start)
    return heapq.merge(comments, tree.root.leaves(), key=lambda t: t.start)


def generate(tree: Tree) -> str:
    """Emit source text for a prepared tree.

    Raises:
        GenerateFailure: If a token cannot be written out
    """
    parts: list[str] = []
    for token in _tokens(tree):
        parts.append(token.prefix)
        parts.append(_token_text(token))
    parts.append(tree.trailing)
    return "".join(parts)


def serialize(tree: Tree) -> str:
    """Prepare and generate ``tree``, returning the source text.

    Raises:
        GenerateFailure: If the tree cannot be turned into source text
    """
    try:
        text = generate(prepare(tree))
    except GenerateFailure:
        raise
    except (AttributeError, TypeError) as e:
        raise GenerateFailure(f"Malformed tree: {e}") from e
    log.debug("source_generated", size=len(text), comments=len(tree.leading_comments))
    return text
