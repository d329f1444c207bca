"""
Authorization rules reader.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from shared.errors import DSLError
from shared.logging import get_logger

from .conditions import parse_attribute_conditions
from .models import AttributeCondition, AuthorizationRule, ConditionOperator, Context
from .privileges import flatten


Body = Callable[["AuthorizationRulesReader"], Any]


class AuthorizationRulesReader:
    """Handles the ``authorization`` block: roles, role hierarchy and grants.

        def branch_admin(auth):
            auth.title("Branch administrator")
            auth.includes("user")

            def same_branch(auth):
                auth.to("create", "read", "update", "delete")
                auth.if_attribute(branch=auth.is_(lambda user: user.branch))

            auth.has_permission_on("employees", body=same_branch)

        reader.role("branch_admin", body=branch_admin)

    Multiple ``has_permission_on`` statements are OR'ed when permissions are
    evaluated, and so are multiple ``if_attribute`` statements in one grant.
    """

    def __init__(self):
        self.logger = get_logger("policy.rules_reader")
        self._current_role: Optional[str] = None
        self._current_rule: Optional[AuthorizationRule] = None
        self.roles: List[str] = []
        # higher_role => [lower_roles]
        self.role_hierarchy: Dict[str, List[str]] = {}
        self.role_titles: Dict[str, str] = {}
        self.role_descriptions: Dict[str, str] = {}
        self.auth_rules: List[AuthorizationRule] = []

    def append_role(self, role: str, title: Optional[str] = None, description: Optional[str] = None) -> None:
        if role not in self.roles:
            self.roles.append(role)
        if title is not None:
            self.role_titles[role] = title
        if description is not None:
            self.role_descriptions[role] = description

    def role(self, role: str, body: Optional[Body] = None,
             title: Optional[str] = None, description: Optional[str] = None) -> None:
        """Define the authorization rules for ``role`` in ``body``."""
        self.append_role(role, title, description)
        self._current_role = role
        try:
            self.logger.debug("Role declared", role=role)
            if body is not None:
                body(self)
        finally:
            self._current_role = None

    def includes(self, *roles: str) -> None:
        """Make ``roles`` subroles of the current role; it inherits their rights."""
        if self._current_role is None:
            raise DSLError("includes only in role blocks", {"roles": list(roles)})
        self.role_hierarchy.setdefault(self._current_role, []).extend(flatten(roles))

    def has_permission_on(self, context: Context, to: Any = None, body: Optional[Body] = None) -> AuthorizationRule:
        """Grant privileges on ``context`` to the current role.

        Privileges come from ``to`` (a name or a list of names) and from
        ``to`` calls inside ``body``. ``if_attribute`` calls inside ``body``
        restrict the grant.
        """
        if self._current_role is None:
            raise DSLError("has_permission_on only allowed in role blocks", {"context": context})

        privs = to if to is not None else []
        if not isinstance(privs, list):
            privs = list(privs) if isinstance(privs, tuple) else [privs]
        if body is None and not privs:
            raise DSLError(
                "has_permission_on either needs a block or to option",
                {"role": self._current_role, "context": context}
            )

        rule = AuthorizationRule(self._current_role, list(privs), context)
        self.auth_rules.append(rule)
        self.logger.debug(
            "Permission granted",
            role=rule.role,
            context=context,
            privileges=rule.privileges
        )
        if body is not None:
            self._current_rule = rule
            body(self)
            # Cleared only when the body completes
            self._current_rule = None
        return rule

    def description(self, text: str) -> None:
        """Set a description for the current role."""
        if self._current_role is None:
            raise DSLError("description only allowed in role blocks")
        self.role_descriptions[self._current_role] = text

    def title(self, text: str) -> None:
        """Set a human-readable title for the current role."""
        if self._current_role is None:
            raise DSLError("title only allowed in role blocks")
        self.role_titles[self._current_role] = text

    def to(self, *privileges: str) -> None:
        """Add privileges to the grant of the enclosing has_permission_on body."""
        if self._current_rule is None:
            raise DSLError("to only allowed in has_permission_on blocks", {"privileges": list(privileges)})
        self._current_rule.append_privileges(flatten(privileges))

    def if_attribute(self, attr_conditions: Optional[Mapping] = None, **kwargs: Any) -> None:
        """Restrict the current grant by conditions on the object's attributes.

        Values may be bare (compared for equality), nested mappings for
        attributes of attributes, or leaves built with ``is_``/``contains``:

            auth.if_attribute(branch={"company": auth.is_(lambda user: user.branch.company)})
        """
        if self._current_rule is None:
            raise DSLError("if_attribute only in has_permission blocks")
        if attr_conditions is None:
            attr_conditions = {}
        elif not isinstance(attr_conditions, Mapping):
            raise DSLError(
                "if_attribute expects a mapping of attribute conditions",
                {"got": type(attr_conditions).__name__}
            )
        self._current_rule.append_attribute(parse_attribute_conditions({**attr_conditions, **kwargs}))

    def is_(self, compute: Callable[..., Any]) -> AttributeCondition:
        """The attribute has to equal the computed value."""
        return AttributeCondition(ConditionOperator.IS, compute)

    def contains(self, compute: Callable[..., Any]) -> AttributeCondition:
        """Collection membership between the attribute and the computed value."""
        return AttributeCondition(ConditionOperator.CONTAINS, compute)
