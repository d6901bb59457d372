"""Disk storage for file contents."""

from pathlib import Path

import aiofiles
import structlog

from jsfile.errors import StorageFailure

log = structlog.get_logger()


class DiskStorage:
    """Read and write files on the local filesystem."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def read_text(self, path: Path) -> str:
        """Read a file's contents.

        Raises:
            StorageFailure: If the file can't be read
        """
        try:
            async with aiofiles.open(path, "r", encoding=self.encoding, newline="") as f:
                content = await f.read()
        except (OSError, UnicodeDecodeError) as e:
            log.error("file_read_error", path=str(path), error=str(e))
            raise StorageFailure(f"Failed to read {path}: {e}") from e

        log.debug("file_read", path=str(path), size=len(content))
        return content

    async def write_text(self, path: Path, text: str) -> None:
        """Write ``text`` to a file, creating parent directories if needed.

        Raises:
            StorageFailure: If the file can't be written
        """
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding=self.encoding, newline="") as f:
                await f.write(text)
        except (OSError, UnicodeEncodeError) as e:
            log.error("file_write_error", path=str(path), error=str(e))
            raise StorageFailure(f"Failed to write {path}: {e}") from e

        log.debug("file_written", path=str(path), size=len(text))
