"""JSON formatter for parse results."""

import json
from typing import Any, Sequence

from nestparse.models.ast import Node, to_data


def format_as_json(nodes: Sequence[Node], *, pretty: bool = True) -> str:
    """Format parsed nodes as JSON.

    Literal text runs become strings; branches become objects with "name",
    "children" and, for tagged branches, "option". Options that are not
    JSON-serializable are rendered with str().

    Args:
        nodes: The top-level nodes returned by parse
        pretty: If True, format with indentation for readability

    Returns:
        JSON-formatted string
    """
    data: list[Any] = [to_data(node) for node in nodes]

    if pretty:
        return json.dumps(data, indent=2, default=str)
    return json.dumps(data, default=str)
