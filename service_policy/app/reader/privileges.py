"""
Privilege hierarchy reader.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from shared.errors import DSLError
from shared.logging import get_logger

from .models import PrivilegeEdge


def flatten(values) -> List[Any]:
    """Flatten nested lists/tuples of names into one list."""
    flat = []
    for value in values:
        if isinstance(value, (list, tuple)):
            flat.extend(flatten(value))
        else:
            flat.append(value)
    return flat


class PrivilegesReader:
    """Handles the ``privileges`` block, where privilege hierarchies are defined.

        reader.privilege("manage", includes=["create", "read", "update", "delete"])
        reader.privilege("read", "employees", body=lambda p: p.includes("list", "show"))
    """

    def __init__(self):
        self.logger = get_logger("policy.privileges_reader")
        self._current_priv: Optional[str] = None
        self._current_context: Optional[str] = None
        self.privileges: List[str] = []
        # {priv => [(priv, ctx), ...]}
        self.privilege_hierarchy: Dict[str, List[PrivilegeEdge]] = {}

    def append_privilege(self, privilege: str) -> None:
        if privilege not in self.privileges:
            self.privileges.append(privilege)

    def privilege(self, privilege: str, context: Optional[Any] = None,
                  options: Optional[Mapping] = None,
                  body: Optional[Callable[["PrivilegesReader"], Any]] = None,
                  **kwargs) -> None:
        """Define part of a privilege hierarchy.

        Lower privileges are given through ``includes`` calls in ``body`` or
        through the ``includes`` option, which is applied after the body.
        With ``context``, the hierarchy edges are limited to that context.
        An options mapping may be passed in place of the context.
        """
        if isinstance(context, Mapping):
            options, context = context, None
        options = {**(options or {}), **kwargs}
        unknown = set(options) - {"includes"}
        if unknown:
            raise TypeError(f"privilege got unexpected options: {', '.join(sorted(map(str, unknown)))}")

        self._current_priv = privilege
        self._current_context = context
        try:
            self.append_privilege(privilege)
            self.logger.debug("Privilege declared", privilege=privilege, context=context)
            if body is not None:
                body(self)
            if options.get("includes"):
                includes = options["includes"]
                self.includes(*(includes if isinstance(includes, (list, tuple)) else [includes]))
        finally:
            self._current_priv = None
            self._current_context = None

    def includes(self, *privileges: str) -> None:
        """Assign ``privileges`` as lower ones of the current privilege."""
        if self._current_priv is None:
            raise DSLError("includes only in privilege block", {"privileges": list(privileges)})
        for priv in flatten(privileges):
            self.append_privilege(priv)
            self.privilege_hierarchy.setdefault(self._current_priv, []).append(
                PrivilegeEdge(priv, self._current_context)
            )
