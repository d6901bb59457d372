"""JavaScript file facade.

Ties the parser, serializer, rewriters and reference graph to one file on
storage. The file owns its tree; rewrites mutate it in place.
"""

import os
from pathlib import Path
from typing import Any, Optional, Union
import structlog

from jsfile.base import FileStorage, ReferenceResolver, SourceFile
from jsfile.config import JSFileConfig
from jsfile.errors import file_error
from jsfile.references import find_imports
from jsfile.refactor.actions import ActionRegistry, RefactorAction
from jsfile.refactor.identifiers import rename_identifier
from jsfile.refactor.metadata import parse_metadata, update_metadata
from jsfile.tree.model import Tree
from jsfile.tree.parser import parse
from jsfile.tree.serializer import serialize

log = structlog.get_logger()


class JavaScriptFile:
    """A JavaScript source file with a parsed, editable tree."""

    extension = ".js"

    def __init__(
        self,
        path: Union[str, Path],
        storage: FileStorage,
        references: ReferenceResolver,
        config: Optional[JSFileConfig] = None,
        actions: Optional[ActionRegistry] = None,
    ):
        """Create a file with an empty tree.

        Args:
            path: Absolute path of the file
            storage: Reads and writes the file's text
            references: Resolves referenced files and records edges
            config: Configuration, defaults to JSFileConfig()
            actions: Refactor actions available to ``refactor``
        """
        self.path = Path(os.path.abspath(path))
        self.storage = storage
        self.reference_manager = references
        self.config = config or JSFileConfig()
        self.actions = actions or ActionRegistry.default()

        self.tree = Tree.empty()
        self.references: dict[str, SourceFile] = {}
        self.referenced_by: dict[str, SourceFile] = {}
        self._read_count = 0

    def __repr__(self) -> str:
        return f"JavaScriptFile({str(self.path)!r})"

    @property
    def ast(self) -> Tree:
        return self.tree

    @ast.setter
    def ast(self, tree: Tree):
        self.tree = tree

    @property
    def basename(self) -> str:
        return self.path.stem

    @property
    def loaded(self) -> bool:
        return self._read_count > 0

    async def read(self) -> Tree:
        """Read the file, parse it and rebuild its outgoing references.

        Returns:
            The freshly parsed tree

        Raises:
            FileError: ``Parsing "<path>" failed.`` if reading or parsing fails
        """
        try:
            text = await self.storage.read_text(self.path)
            tree = parse(text)
        except Exception as e:
            raise file_error(e, str(self.path), "Parsing") from e

        self.tree = tree
        self._update_references()
        self._read_count += 1

        log.info(
            "file_loaded",
            path=str(self.path),
            references=len(self.references),
            comments=len(tree.comments),
        )
        return tree

    def _update_references(self):
        # Nothing has been recorded before the first read, so the clear is skipped
        if self._read_count > 0:
            self.reference_manager.clear_references(self)

        directory = self.path.parent
        for module_path in find_imports(self.tree, self.config.import_function):
            target = self._resolve(directory / module_path)
            if target is None:
                log.debug("reference_unresolved", path=str(self.path), module=module_path)
                continue
            self.reference_manager.add_reference(self, target)

    def _resolve(self, path: Path) -> Optional[SourceFile]:
        target = self.reference_manager.resolve(path)
        if target is None and path.suffix != self.extension:
            target = self.reference_manager.resolve(f"{path}{self.extension}")
        return target

    async def save(self, data: Union[Tree, str]) -> str:
        """Serialize and persist a tree or raw source text.

        Text is parsed first so what is written always comes from a tree.
        The written text becomes the input of the next ``read``.

        Returns:
            The text that was written

        Raises:
            FileError: ``Saving "<path>" failed.`` if parsing, generating or
                writing fails
        """
        try:
            tree = parse(data) if isinstance(data, str) else data
            text = serialize(tree)
            await self.storage.write_text(self.path, text)
        except Exception as e:
            raise file_error(e, str(self.path), "Saving") from e

        log.info("file_saved", path=str(self.path), size=len(text))
        return text

    async def refactor(
        self, action: Union[str, RefactorAction], data: Optional[dict[str, Any]] = None
    ) -> str:
        """Apply a named refactor action to the tree, then save it.

        Unknown action names leave the tree untouched but still save.

        Returns:
            The text that was written

        Raises:
            FileError: ``Saving "<path>" failed.`` if the action rejects its
                data or the save fails; nothing is written in the first case
        """
        handler = self.actions.get(action)
        try:
            handler(self.tree, data or {})
        except Exception as e:
            raise file_error(e, str(self.path), "Saving") from e
        return await self.save(self.tree)

    def transform_identifiers(
        self, old_name: str, new_name: str, scope: Optional[str] = None
    ) -> int:
        """Rename identifiers in the tree, optionally within ``scope`` nodes."""
        return rename_identifier(self.tree, old_name, new_name, scope)

    def transform_metadata(
        self,
        old_name: Optional[str] = None,
        new_name: Optional[str] = None,
        collection: Optional[str] = None,
    ) -> bool:
        """Rename a name in the metadata comment."""
        return update_metadata(self.tree, old_name, new_name, collection)

    def to_json(self) -> dict[str, Any]:
        """JSON projection: file details, tree and parsed metadata."""
        return {
            "path": str(self.path),
            "basename": self.basename,
            "extension": self.path.suffix,
            "ast": self.tree.to_dict(),
            "meta": parse_metadata(self.tree),
        }

    def serialise(self) -> dict[str, Any]:
        """Full serialisation, including the reference graph edges."""
        json_data = self.to_json()
        json_data["references"] = sorted(self.references)
        json_data["referenced_by"] = sorted(self.referenced_by)
        return json_data
