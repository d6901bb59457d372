"""Rename identifiers in a Tree, optionally scoped by an enclosing node kind."""

from typing import Optional
import structlog

from jsfile.tree.model import Tree
from jsfile.tree.query import query

log = structlog.get_logger()


def rename_identifier(
    tree: Tree,
    old_name: str,
    new_name: str,
    scope_kind: Optional[str] = None,
) -> int:
    """Rename every identifier called ``old_name`` to ``new_name``.

    Args:
        tree: Tree to mutate in place
        old_name: Current identifier name
        new_name: Replacement name
        scope_kind: If given, only identifiers with an ancestor of this kind
            (e.g. ``FunctionDeclaration``) are renamed

    Returns:
        Number of identifiers renamed
    """
    selector = "Identifier" if scope_kind is None else f"{scope_kind} Identifier"
    renamed = 0
    for identifier in query(tree, selector):
        if identifier.name == old_name:
            identifier.name = new_name
            renamed += 1

    log.debug(
        "identifiers_renamed",
        old_name=old_name,
        new_name=new_name,
        scope=scope_kind,
        count=renamed,
    )
    return renamed
