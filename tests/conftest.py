"""Shared test fixtures."""

import pytest
from pathlib import Path
from unittest.mock import AsyncMock, Mock

from jsfile.base import FileStorage


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory holding a small JavaScript project."""
    (tmp_path / "directory").mkdir()
    return tmp_path


@pytest.fixture
def file_path(temp_dir) -> Path:
    """Path of a JavaScript file inside the temporary project."""
    return temp_dir / "directory" / "file.js"


@pytest.fixture
def storage():
    """Storage stub; reads return an empty file and writes succeed."""
    mock = Mock(spec=FileStorage)
    mock.read_text = AsyncMock(return_value="")
    mock.write_text = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def reference_manager():
    """Empty in-memory reference manager."""
    from jsfile.references import ReferenceManager

    return ReferenceManager()


@pytest.fixture
def js_file(file_path, storage, reference_manager):
    """JavaScriptFile backed by the storage stub."""
    from jsfile.file import JavaScriptFile

    file = JavaScriptFile(file_path, storage, reference_manager)
    reference_manager.register(file)
    return file


@pytest.fixture
def structure(temp_dir):
    """FileStructure rooted at the temporary project."""
    from jsfile.file_structure import FileStructure

    return FileStructure(temp_dir)
