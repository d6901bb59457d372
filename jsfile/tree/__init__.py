"""Parse, query and regenerate JavaScript syntax trees."""

from jsfile.tree.model import Comment, Node, RegExp, Tree
from jsfile.tree.parser import parse
from jsfile.tree.query import query
from jsfile.tree.serializer import serialize

__all__ = ["Comment", "Node", "RegExp", "Tree", "parse", "query", "serialize"]
