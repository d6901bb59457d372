"""Reference graph between JavaScript files.

A file references another when it loads it with ``require``::

    var header = require('./header');
    module.exports = { footer: require('./footer') };

Edges are stored on both ends: the referencing file holds the target in
``references`` and the target holds the referencing file in ``referenced_by``.
"""

import os
from pathlib import Path
from typing import Optional, Union
import structlog

from jsfile.base import SourceFile
from jsfile.tree.model import Tree
from jsfile.tree.query import query

log = structlog.get_logger()

# Constructs whose value can be initialised from an import call
IMPORT_PARENTS = ("variable_declarator", "pair", "assignment_expression")


def find_imports(tree: Tree, import_function: str = "require") -> list[str]:
    """Find the module paths loaded by import calls, in document order.

    Only calls with a single string literal argument that initialise a
    variable, a property or an assignment target count.
    """
    selector = ", ".join(
        f'{parent} > call_expression[function.name="{import_function}"]'
        for parent in IMPORT_PARENTS
    )
    imports: list[str] = []
    for call in query(tree, selector):
        arguments = call.child("arguments")
        if arguments is None:
            continue
        literals = arguments.named_children
        if len(literals) == 1 and literals[0].kind == "string":
            imports.append(literals[0].value)
    return imports


def _key(path: Union[str, Path]) -> str:
    return os.path.normpath(os.path.abspath(path))


class ReferenceManager:
    """In-memory registry of files and the edges between them."""

    def __init__(self):
        self._files: dict[str, SourceFile] = {}

    def register(self, file: SourceFile):
        self._files[_key(file.path)] = file

    def resolve(self, path: Union[str, Path]) -> Optional[SourceFile]:
        """Registered file at ``path``, or None."""
        return self._files.get(_key(path))

    def add_reference(self, source: SourceFile, target: SourceFile):
        """Record that ``source`` references ``target``."""
        source.references[_key(target.path)] = target
        target.referenced_by[_key(source.path)] = source
        log.debug("reference_added", source=str(source.path), target=str(target.path))

    def clear_references(self, source: SourceFile):
        """Drop every outgoing edge of ``source`` along with its mirror."""
        source_key = _key(source.path)
        for target in source.references.values():
            target.referenced_by.pop(source_key, None)
        source.references.clear()
        log.debug("references_cleared", source=str(source.path))

    def remove(self, file: SourceFile):
        """Unregister ``file`` and drop every edge touching it."""
        self.clear_references(file)
        file_key = _key(file.path)
        for source in file.referenced_by.values():
            source.references.pop(file_key, None)
        file.referenced_by.clear()
        self._files.pop(file_key, None)
        log.debug("file_unregistered", path=str(file.path))
