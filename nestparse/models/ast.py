"""AST domain models."""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class Branch(BaseModel):
    """A named node produced by a matched rule."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Name of the rule that produced the node")
    children: tuple[Union[str, "Branch"], ...] = Field(
        default=(), description="Literal text runs and nested branches, in input order"
    )

    def __init__(self, name: str, children: Any = (), **data: Any):
        super().__init__(name=name, children=children, **data)

    def to_tuple(self) -> tuple:
        """Convert to nested plain tuples, literal runs left as strings."""
        return (self.name, [to_tuple(child) for child in self.children])

    def to_data(self) -> dict[str, Any]:
        """Convert to JSON-friendly dictionaries."""
        return {"name": self.name, "children": [to_data(child) for child in self.children]}


class TaggedBranch(Branch):
    """A named node carrying the option value of its rule."""

    option: Any = Field(default=None, description="Option attached by the rule")

    def __init__(self, name: str, children: Any = (), option: Any = None, **data: Any):
        super().__init__(name, children, option=option, **data)

    def to_tuple(self) -> tuple:
        return (self.name, [to_tuple(child) for child in self.children], self.option)

    def to_data(self) -> dict[str, Any]:
        data = super().to_data()
        data["option"] = self.option
        return data


Node = Union[str, Branch]


def to_tuple(node: Node) -> Union[str, tuple]:
    if isinstance(node, Branch):
        return node.to_tuple()
    return node


def to_data(node: Node) -> Union[str, dict[str, Any]]:
    if isinstance(node, Branch):
        return node.to_data()
    return node
