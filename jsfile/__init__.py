"""jsfile - parse, refactor and regenerate JavaScript source files.

Parses JavaScript with tree-sitter into an editable tree, tracks `require`
references between files, renames identifiers and metadata names, and
writes the tree back out with comments and literals intact.
"""

__version__ = "0.1.0"

from jsfile.config import JSFileConfig
from jsfile.errors import FileError, REQUEST_ERROR
from jsfile.file import JavaScriptFile
from jsfile.file_structure import FileStructure
from jsfile.references import ReferenceManager
from jsfile.storage import DiskStorage

__all__ = [
    "__version__",
    "DiskStorage",
    "FileError",
    "FileStructure",
    "JSFileConfig",
    "JavaScriptFile",
    "REQUEST_ERROR",
    "ReferenceManager",
]
