"""
Attribute condition normalization.

``if_attribute`` accepts bare values, nested mappings and explicit operator
leaves. Everything is brought into one shape before it is stored on a rule:
nested mappings stay mappings, every other value becomes an
``AttributeCondition``.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict

from shared.errors import DSLError

from .models import AttributeCondition, ConditionOperator


class Literal:
    """Deferred computation returning a fixed value."""

    def __init__(self, value: Any):
        self.value = value

    def __call__(self, user: Any = None) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


class UserAttribute:
    """Deferred computation resolving an attribute path on the user.

    ``UserAttribute("branch.company")`` returns ``user.branch.company``.
    Mapping segments are looked up by key.
    """

    def __init__(self, path: str = ""):
        self.path = path
        self.segments = [segment for segment in path.split(".") if segment]

    @classmethod
    def from_expression(cls, expression: str) -> "UserAttribute":
        """Build from a ``user.<path>`` expression."""
        root, _, path = str(expression).strip().partition(".")
        if root != "user":
            raise ValueError(f"attribute expression must start with 'user': {expression!r}")
        return cls(path)

    def __call__(self, user: Any = None) -> Any:
        value = user
        for segment in self.segments:
            if isinstance(value, Mapping):
                value = value[segment]
            else:
                value = getattr(value, segment)
        return value

    def __repr__(self) -> str:
        return f"UserAttribute({self.path!r})"


def parse_attribute_conditions(conditions: Mapping) -> Dict[Any, Any]:
    """Normalize a raw condition mapping into a condition tree."""
    if not isinstance(conditions, Mapping):
        raise DSLError(
            "if_attribute expects a mapping of attribute conditions",
            {"got": type(conditions).__name__}
        )

    tree = {}
    for key, value in conditions.items():
        if isinstance(value, Mapping):
            tree[key] = parse_attribute_conditions(value)
        elif isinstance(value, AttributeCondition):
            tree[key] = value
        else:
            tree[key] = AttributeCondition(ConditionOperator.IS, Literal(value))
    return tree


def freeze_conditions(tree: Mapping) -> Mapping:
    """Read-only copy of a condition tree."""
    return MappingProxyType({
        key: freeze_conditions(value) if isinstance(value, Mapping) else value
        for key, value in tree.items()
    })
