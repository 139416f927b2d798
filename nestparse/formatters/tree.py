"""Rich tree rendering of parse results."""

from typing import Sequence

from rich.markup import escape
from rich.tree import Tree

from nestparse.models.ast import Branch, Node, TaggedBranch


def _label(node: Node) -> str:
    if isinstance(node, TaggedBranch):
        return f"[bold cyan]{escape(node.name)}[/bold cyan] [dim]{escape(repr(node.option))}[/dim]"
    if isinstance(node, Branch):
        return f"[bold cyan]{escape(node.name)}[/bold cyan]"
    return f"[green]{escape(repr(node))}[/green]"


def build_tree(nodes: Sequence[Node], title: str = "parse") -> Tree:
    """Build a rich Tree showing branches and literal text runs."""
    tree = Tree(f"[bold]{escape(title)}[/bold]")
    pending = [(tree, node) for node in reversed(nodes)]
    while pending:
        parent, node = pending.pop()
        child = parent.add(_label(node))
        if isinstance(node, Branch):
            pending.extend((child, grandchild) for grandchild in reversed(node.children))
    return tree
