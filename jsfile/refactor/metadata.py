"""Read and rewrite the JSON metadata held in a file's first comment.

A file may start with a comment such as::

    // {"name": "login page", "page-objects": [{"name": "header"}]}

The comment text is the file's metadata. Anything that isn't a JSON object
means the file has no metadata; none of these helpers raise for it.
"""

import json
import re
from typing import Any, Optional
import structlog

from jsfile.tree.model import Comment, Tree

log = structlog.get_logger()

_PADDING = re.compile(r"^(\s*)(.*?)(\s*)$", re.DOTALL)


def _metadata_comment(tree: Tree) -> Optional[Comment]:
    comments = getattr(tree, "comments", None)
    if not comments:
        return None
    return comments[0]


def parse_metadata(tree: Tree) -> Optional[dict[str, Any]]:
    """Parse the metadata object out of the first comment.

    Returns:
        The metadata dict, or None if there is no comment or it isn't a JSON object
    """
    comment = _metadata_comment(tree)
    if comment is None:
        return None
    try:
        metadata = json.loads(comment.value)
    except (json.JSONDecodeError, TypeError):
        return None
    return metadata if isinstance(metadata, dict) else None


def _write_metadata(comment: Comment, metadata: dict[str, Any]):
    text = json.dumps(metadata, separators=(",", ":"), ensure_ascii=False)
    if comment.kind == "Block":
        text = text.replace("*/", "*\\/")
    # Keep whatever whitespace surrounded the old JSON
    leading, _, trailing = _PADDING.match(comment.value).groups()
    comment.value = f"{leading}{text}{trailing}"


def update_metadata(
    tree: Tree,
    old_name: Optional[str] = None,
    new_name: Optional[str] = None,
    collection_key: Optional[str] = None,
) -> bool:
    """Replace a name inside the metadata comment.

    Args:
        tree: Tree whose first comment holds the metadata
        old_name: Name to look for
        new_name: Replacement name
        collection_key: If given, rename inside the list of objects stored
            under this key instead of the top-level ``name``

    Returns:
        True if the comment was rewritten
    """
    metadata = parse_metadata(tree)
    if metadata is None or old_name is None:
        return False

    changed = 0
    if collection_key is None:
        if metadata.get("name") == old_name:
            metadata["name"] = new_name
            changed = 1
    else:
        items = metadata.get(collection_key)
        if isinstance(items, list):
            for item in items:
                if isinstance(item, dict) and item.get("name") == old_name:
                    item["name"] = new_name
                    changed += 1

    if changed:
        _write_metadata(_metadata_comment(tree), metadata)

    log.debug(
        "metadata_updated",
        old_name=old_name,
        new_name=new_name,
        collection=collection_key,
        count=changed,
    )
    return bool(changed)
