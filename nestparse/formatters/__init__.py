"""Output formatters for parse results."""

from nestparse.formatters.json import format_as_json
from nestparse.formatters.tree import build_tree

__all__ = ["build_tree", "format_as_json"]
