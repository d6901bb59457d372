"""Structural edits on JavaScript trees."""

from jsfile.refactor.actions import ActionRegistry, RefactorAction
from jsfile.refactor.identifiers import rename_identifier
from jsfile.refactor.metadata import parse_metadata, update_metadata

__all__ = [
    "ActionRegistry",
    "RefactorAction",
    "rename_identifier",
    "parse_metadata",
    "update_metadata",
]
