"""
Data models produced by the authorization DSL reader.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union


class ConditionOperator(str, Enum):
    """Attribute condition operators."""
    IS = "is"
    CONTAINS = "contains"


@dataclass(frozen=True)
class AttributeCondition:
    """Operator-tagged deferred computation.

    ``compute`` is invoked by the decision engine with the current user;
    its result is compared against the object's attribute using
    ``operator``.
    """
    operator: ConditionOperator
    compute: Callable[..., Any]


# attribute name -> nested tree or tagged leaf
ConditionTree = Mapping[str, Union["ConditionTree", AttributeCondition]]

Context = Union[str, List[str], Tuple[str, ...]]


class PrivilegeEdge(NamedTuple):
    """Lower privilege implied by a privilege, optionally limited to a context."""
    privilege: str
    context: Optional[str] = None


@dataclass
class AuthorizationRule:
    """Privileges granted to a role on a context.

    Multiple entries in ``attributes`` are OR'ed by the decision engine.
    """
    role: str
    privileges: List[str] = field(default_factory=list)
    context: Optional[Context] = None
    attributes: List[ConditionTree] = field(default_factory=list)

    def append_privileges(self, privileges: List[str]) -> None:
        self.privileges.extend(privileges)

    def append_attribute(self, attribute: ConditionTree) -> None:
        self.attributes.append(attribute)


@dataclass(frozen=True)
class CompiledRule:
    """Read-only copy of an AuthorizationRule held by the compiled model."""
    role: str
    privileges: Tuple[str, ...] = ()
    context: Optional[Context] = None
    attributes: Tuple[ConditionTree, ...] = ()


@dataclass(frozen=True)
class AuthorizationModel:
    """Compiled authorization model handed to the decision engine."""
    privileges: Tuple[str, ...] = ()
    privilege_hierarchy: Mapping[str, Tuple[PrivilegeEdge, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    roles: Tuple[str, ...] = ()
    role_hierarchy: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    role_titles: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    role_descriptions: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    auth_rules: Tuple[CompiledRule, ...] = ()

    def rules_for_role(self, role: str) -> List[CompiledRule]:
        """Rules granted directly to ``role``, in declaration order."""
        return [rule for rule in self.auth_rules if rule.role == role]

    def summary(self) -> Dict[str, Any]:
        """Counts and per-role grants, for reporting."""
        return {
            "privileges": len(self.privileges),
            "roles": len(self.roles),
            "rules": len(self.auth_rules),
            "grants": {
                role: [
                    {
                        "context": rule.context if isinstance(rule.context, str) or rule.context is None
                        else list(rule.context),
                        "privileges": list(rule.privileges),
                        "conditions": len(rule.attributes),
                    }
                    for rule in self.rules_for_role(role)
                ]
                for role in self.roles
            },
        }
