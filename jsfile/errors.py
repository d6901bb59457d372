"""Error types for jsfile.

Internal failures (parsing, generating, storage) are raised as subclasses of
``JSFileError``. The file facade converts them into a single ``FileError``
envelope before they reach callers.
"""

from enum import Enum
from typing import Optional
import structlog

log = structlog.get_logger()

# Status code for failures caused by the request (bad source, bad tree, bad path)
REQUEST_ERROR = 400


class ErrorKind(Enum):
    """Categories of internal failures."""

    PARSE = "parse"
    GENERATE = "generate"
    STORAGE = "storage"
    REFACTOR = "refactor"


class JSFileError(Exception):
    """Base class for internal jsfile failures."""

    kind = ErrorKind.STORAGE


class ParseFailure(JSFileError):
    """Source text could not be parsed."""

    kind = ErrorKind.PARSE


class GenerateFailure(JSFileError):
    """A tree could not be turned back into source text."""

    kind = ErrorKind.GENERATE


class StorageFailure(JSFileError):
    """Reading or writing the underlying file failed."""

    kind = ErrorKind.STORAGE


class RefactorFailure(JSFileError):
    """A refactor action was given data it can't use."""

    kind = ErrorKind.REFACTOR


class SelectorError(ValueError):
    """A structural query selector could not be parsed."""


class FileError(Exception):
    """User-facing error envelope for a failed file operation.

    Attributes:
        message: Human readable message, e.g. ``Parsing "/a/b.js" failed.``
        status: Numeric status classifying the failure
        kind: Category of the underlying failure
        path: Path of the file the operation ran on
    """

    def __init__(
        self,
        message: str,
        status: int = REQUEST_ERROR,
        kind: ErrorKind = ErrorKind.STORAGE,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.kind = kind
        self.path = path

    def to_dict(self) -> dict:
        """Envelope representation for external consumers."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status": self.status,
        }


def classify_failure(error: BaseException) -> ErrorKind:
    """Work out which kind of failure an exception represents."""
    if isinstance(error, JSFileError):
        return error.kind
    if isinstance(error, SelectorError):
        return ErrorKind.PARSE
    # OSError and anything raised by a storage collaborator
    return ErrorKind.STORAGE


def file_error(error: BaseException, path: str, operation: str) -> FileError:
    """Build the structured error for a failed file operation.

    Args:
        error: The underlying cause
        path: Absolute path of the file
        operation: Operation label, "Parsing" or "Saving"

    Returns:
        FileError with the message ``<operation> "<path>" failed.``
    """
    kind = classify_failure(error)
    log.error(
        "file_operation_failed",
        operation=operation,
        path=path,
        kind=kind.value,
        error=str(error),
        error_type=type(error).__name__,
    )
    return FileError(
        f'{operation} "{path}" failed.',
        status=REQUEST_ERROR,
        kind=kind,
        path=path,
    )
