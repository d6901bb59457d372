"""A directory of JavaScript files sharing one reference graph."""

import os
from pathlib import Path
from typing import Optional, Union
import structlog

from jsfile.base import FileStorage
from jsfile.config import JSFileConfig
from jsfile.file import JavaScriptFile
from jsfile.references import ReferenceManager
from jsfile.storage import DiskStorage

log = structlog.get_logger()

# Directories to skip
SKIP_DIRS = {
    "node_modules",
    ".git",
    ".svn",
    ".hg",
    "dist",
    "build",
    "coverage",
    ".cache",
}


class FileStructure:
    """Owns the JavaScriptFile instances under a root directory."""

    def __init__(
        self,
        root: Union[str, Path],
        storage: Optional[FileStorage] = None,
        config: Optional[JSFileConfig] = None,
    ):
        self.config = config or JSFileConfig()
        self.root = Path(root).expanduser().resolve()
        self.storage = storage or DiskStorage(encoding=self.config.encoding)
        self.references = ReferenceManager()
        self.files: dict[str, JavaScriptFile] = {}

    def _key(self, path: Union[str, Path]) -> str:
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        return os.path.normpath(path)

    def add_file(self, path: Union[str, Path]) -> JavaScriptFile:
        """Create and register the file at ``path`` (relative to root or absolute)."""
        key = self._key(path)
        existing = self.files.get(key)
        if existing is not None:
            return existing

        file = JavaScriptFile(key, self.storage, self.references, self.config)
        self.files[key] = file
        self.references.register(file)
        log.debug("file_added", path=key)
        return file

    def get_file(self, path: Union[str, Path]) -> Optional[JavaScriptFile]:
        return self.files.get(self._key(path))

    def remove_file(self, path: Union[str, Path]) -> Optional[JavaScriptFile]:
        """Forget a file and drop every reference edge touching it."""
        file = self.files.pop(self._key(path), None)
        if file is not None:
            self.references.remove(file)
            log.debug("file_removed", path=str(file.path))
        return file

    def discover(self) -> list[JavaScriptFile]:
        """Register every file under root with a configured extension."""
        discovered = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for filename in sorted(filenames):
                if Path(filename).suffix.lower() in self.config.extensions:
                    discovered.append(self.add_file(Path(dirpath) / filename))

        log.info("files_discovered", root=str(self.root), count=len(discovered))
        return discovered

    async def load(self) -> list[JavaScriptFile]:
        """Discover and read every file.

        All files are registered before any is read so references between
        them resolve regardless of order.

        Raises:
            FileError: If any file fails to read
        """
        files = self.discover()
        for file in files:
            await file.read()
        log.info("files_loaded", root=str(self.root), count=len(files))
        return files
