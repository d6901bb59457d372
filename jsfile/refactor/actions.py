"""Named refactor actions that can be applied to a file's tree."""

from enum import Enum
from typing import Any, Callable, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import structlog

from jsfile.errors import RefactorFailure
from jsfile.refactor.identifiers import rename_identifier
from jsfile.refactor.metadata import update_metadata
from jsfile.tree.model import Tree

log = structlog.get_logger()

RefactorHandler = Callable[[Tree, dict[str, Any]], None]


class RefactorAction(str, Enum):
    """Built-in refactor actions."""

    RENAME_IDENTIFIER = "rename_identifier"
    UPDATE_METADATA = "update_metadata"


class RenameData(BaseModel):
    """Arguments for a rename. camelCase keys are accepted for JSON callers."""

    model_config = ConfigDict(populate_by_name=True)

    old_name: str = Field(alias="oldName")
    new_name: str = Field(alias="newName")

    @field_validator("old_name", "new_name")
    @classmethod
    def name_not_empty(cls, v):
        if not v:
            raise ValueError("Names cannot be empty")
        return v


class IdentifierChange(RenameData):
    scope: Optional[str] = Field(default=None, alias="context")


class MetadataChange(RenameData):
    collection: Optional[str] = Field(default=None, alias="collectionKey")


def _validate(model: type[RenameData], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RefactorFailure(f"Invalid {model.__name__} data: {e}") from e


def _rename_identifier(tree: Tree, data: dict[str, Any]):
    change = _validate(IdentifierChange, data)
    rename_identifier(tree, change.old_name, change.new_name, change.scope)


def _update_metadata(tree: Tree, data: dict[str, Any]):
    change = _validate(MetadataChange, data)
    update_metadata(tree, change.old_name, change.new_name, change.collection)


def _key(name: "str | RefactorAction") -> str:
    return name.value if isinstance(name, Enum) else name


def noop(tree: Tree, data: dict[str, Any]):
    """Handler for unknown actions: leaves the tree untouched."""


class ActionRegistry:
    """Maps action names to handlers."""

    def __init__(self):
        self._handlers: dict[str, RefactorHandler] = {}

    def register(self, name: str, handler: RefactorHandler):
        """Register a handler under ``name``, replacing any existing one."""
        self._handlers[_key(name)] = handler
        log.debug("refactor_action_registered", name=name)

    def get(self, name: str) -> RefactorHandler:
        """Handler for ``name``; unknown names get the no-op handler."""
        handler = self._handlers.get(_key(name))
        if handler is None:
            log.info("refactor_action_unknown", name=name)
            return noop
        return handler

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    @classmethod
    def default(cls) -> "ActionRegistry":
        """Registry with the built-in actions."""
        registry = cls()
        registry.register(RefactorAction.RENAME_IDENTIFIER, _rename_identifier)
        registry.register(RefactorAction.UPDATE_METADATA, _update_metadata)
        return registry
