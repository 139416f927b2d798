"""Domain models."""

from .ast import Branch, Node, TaggedBranch

__all__ = ["Branch", "Node", "TaggedBranch"]
