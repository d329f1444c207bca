"""
Authorization DSL reader package.

Reads policy documents and builds the data model used by the decision
engine: privilege hierarchy, roles, role hierarchy and authorization rules
with their attribute conditions.

Modules of interest:
- dsl: Top-level reader and the YAML statement walker.
- privileges: Privilege hierarchy reader.
- rules: Roles, grants and attribute conditions.
- conditions: Attribute condition normalization.
- models: Data classes for rules, edges and the compiled model.
"""

from .conditions import Literal, UserAttribute, parse_attribute_conditions
from .dsl import DSLReader, compile_policy
from .models import (
    AttributeCondition, AuthorizationModel, AuthorizationRule,
    CompiledRule, ConditionOperator, PrivilegeEdge
)
from .privileges import PrivilegesReader
from .rules import AuthorizationRulesReader

__all__ = [
    "AttributeCondition",
    "AuthorizationModel",
    "AuthorizationRule",
    "AuthorizationRulesReader",
    "CompiledRule",
    "ConditionOperator",
    "DSLReader",
    "Literal",
    "PrivilegeEdge",
    "PrivilegesReader",
    "UserAttribute",
    "compile_policy",
    "parse_attribute_conditions",
]
