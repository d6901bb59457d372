"""Interfaces between a file and the collaborators it delegates to."""

from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable

from jsfile.tree.model import Tree


@runtime_checkable
class FileStorage(Protocol):
    """Reads and writes file contents."""

    async def read_text(self, path: Path) -> str:
        ...

    async def write_text(self, path: Path, text: str) -> None:
        ...


@runtime_checkable
class SourceFile(Protocol):
    """Lifecycle hooks every file type implements."""

    path: Path
    references: dict[str, "SourceFile"]
    referenced_by: dict[str, "SourceFile"]

    async def read(self) -> Tree:
        ...

    async def save(self, data: Union[Tree, str]) -> str:
        ...

    def serialise(self) -> dict[str, Any]:
        ...

    def to_json(self) -> dict[str, Any]:
        ...


@runtime_checkable
class ReferenceResolver(Protocol):
    """Resolves paths to files and records edges between them."""

    def resolve(self, path: Union[str, Path]) -> Optional[SourceFile]:
        ...

    def add_reference(self, source: SourceFile, target: SourceFile) -> None:
        ...

    def clear_references(self, source: SourceFile) -> None:
        ...
