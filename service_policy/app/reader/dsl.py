"""
Top-level reader for the authorization DSL.

A policy is a YAML stream. Each document maps block kinds to statement
lists:

    privileges:
      - privilege: manage
        includes: [create, read, update, delete]
    authorization:
      - role: branch_admin
        title: Branch administrator
        body:
          - includes: user
          - has_permission_on: employees
            body:
              - to: [read, update]
              - if_attribute:
                  branch: !is user.branch

The first key of a statement names it and holds its argument; the other
keys are options, and ``body`` holds the statements evaluated in its scope.
``!is`` and ``!contains`` tag a ``user.<path>`` expression that the decision
engine resolves against the current user.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional, Union

import yaml

from shared.errors import DSLSyntaxError
from shared.logging import get_logger

from .conditions import UserAttribute, freeze_conditions
from .models import AttributeCondition, AuthorizationModel, CompiledRule, ConditionOperator
from .privileges import PrivilegesReader
from .rules import AuthorizationRulesReader


class DSLLoader(yaml.SafeLoader):
    """Safe YAML loader that understands the operator tags."""


def _operator_constructor(operator: ConditionOperator):
    def construct(loader: DSLLoader, node: yaml.Node) -> AttributeCondition:
        expression = loader.construct_scalar(node)
        try:
            compute = UserAttribute.from_expression(expression)
        except ValueError as e:
            raise yaml.constructor.ConstructorError(
                None, None, str(e), node.start_mark
            ) from e
        return AttributeCondition(operator, compute)
    return construct


DSLLoader.add_constructor("!is", _operator_constructor(ConditionOperator.IS))
DSLLoader.add_constructor("!contains", _operator_constructor(ConditionOperator.CONTAINS))


# Statement shapes
BLOCK = "block"    # method(argument, body=..., **options)
NAMES = "names"    # method(*argument)
VALUE = "value"    # method(argument)

PRIVILEGE_STATEMENTS = {
    "privilege": BLOCK,
    "includes": NAMES,
}

AUTHORIZATION_STATEMENTS = {
    "role": BLOCK,
    "includes": NAMES,
    "title": VALUE,
    "description": VALUE,
    "has_permission_on": BLOCK,
    "to": NAMES,
    "if_attribute": VALUE,
}


def _statement_body(statements: Any, grammar: Dict[str, str]) -> Callable[[Any], None]:
    def body(reader: Any) -> None:
        run_statements(reader, statements, grammar)
    return body


def run_statements(reader: Any, statements: Any, grammar: Dict[str, str]) -> None:
    """Evaluate a list of statements against ``reader``."""
    if statements is None:
        return
    if not isinstance(statements, list):
        raise ValueError(f"expected a list of statements, got {type(statements).__name__}")

    for statement in statements:
        if not isinstance(statement, dict) or not statement:
            raise ValueError(f"expected a statement mapping, got {statement!r}")

        options = dict(statement)
        keyword = next(iter(options))
        argument = options.pop(keyword)
        if keyword not in grammar:
            raise ValueError(f"undefined statement '{keyword}'")
        method = getattr(reader, keyword)
        shape = grammar[keyword]

        if shape == BLOCK:
            if "body" in options:
                options["body"] = _statement_body(options["body"], grammar)
            method(argument, **options)
            continue

        if options:
            raise ValueError(f"'{keyword}' takes no options, got: {', '.join(map(str, options))}")
        if shape == NAMES:
            names = argument if isinstance(argument, list) else [argument]
            for name in names:
                if name is None or isinstance(name, (dict, list)):
                    raise ValueError(f"'{keyword}' expects a name or a list of names, got {argument!r}")
            method(*names)
        else:
            method(argument)


class DSLReader:
    """Parses the ``privileges`` and ``authorization`` blocks of a policy.

    The ``authorization`` statements are handled by an
    AuthorizationRulesReader, the ``privileges`` statements by a
    PrivilegesReader. ``contexts`` blocks are accepted and ignored.
    """

    def __init__(self):
        self.logger = get_logger("policy.dsl_reader")
        self.privileges_reader = PrivilegesReader()
        self.auth_rules_reader = AuthorizationRulesReader()

    def privileges(self, body: Callable[[PrivilegesReader], Any]) -> None:
        body(self.privileges_reader)

    def authorization(self, body: Callable[[AuthorizationRulesReader], Any]) -> None:
        body(self.auth_rules_reader)

    def contexts(self, body: Optional[Callable[..., Any]] = None) -> None:
        # Reserved; context definitions are not read yet
        pass

    def parse(self, dsl_data: Union[str, bytes], file_name: Optional[str] = None) -> None:
        """Parse an authorization DSL specification from ``dsl_data``.

        Raises DSLSyntaxError if the data is not a valid DSL document.
        Scope violations raise DSLError.
        """
        try:
            for document in yaml.load_all(dsl_data, Loader=DSLLoader):
                self._read_document(document)
        except (yaml.YAMLError, TypeError, ValueError) as e:
            self.logger.warning("Illegal DSL syntax", source=file_name, error=str(e))
            raise DSLSyntaxError(f"Illegal DSL syntax: {e}", source=file_name) from e

        self.logger.info(
            "Authorization DSL parsed",
            source=file_name,
            privileges=len(self.privileges_reader.privileges),
            roles=len(self.auth_rules_reader.roles),
            rules=len(self.auth_rules_reader.auth_rules)
        )

    def _read_document(self, document: Any) -> None:
        if document is None:
            return
        if not isinstance(document, dict):
            raise ValueError(f"expected a mapping of blocks, got {type(document).__name__}")

        for kind, statements in document.items():
            if kind == "privileges":
                self.privileges(_statement_body(statements, PRIVILEGE_STATEMENTS))
            elif kind == "authorization":
                self.authorization(_statement_body(statements, AUTHORIZATION_STATEMENTS))
            elif kind == "contexts":
                self.contexts()
            else:
                raise ValueError(f"undefined block '{kind}'")

    @property
    def model(self) -> AuthorizationModel:
        """Immutable snapshot of everything read so far."""
        privileges = self.privileges_reader
        rules = self.auth_rules_reader
        return AuthorizationModel(
            privileges=tuple(privileges.privileges),
            privilege_hierarchy=MappingProxyType({
                priv: tuple(edges) for priv, edges in privileges.privilege_hierarchy.items()
            }),
            roles=tuple(rules.roles),
            role_hierarchy=MappingProxyType({
                role: tuple(lower) for role, lower in rules.role_hierarchy.items()
            }),
            role_titles=MappingProxyType(dict(rules.role_titles)),
            role_descriptions=MappingProxyType(dict(rules.role_descriptions)),
            auth_rules=tuple(
                CompiledRule(
                    role=rule.role,
                    privileges=tuple(rule.privileges),
                    context=tuple(rule.context) if isinstance(rule.context, list) else rule.context,
                    attributes=tuple(freeze_conditions(tree) for tree in rule.attributes),
                )
                for rule in rules.auth_rules
            ),
        )

    @classmethod
    def load(cls, dsl_file: Union[str, Path]) -> "DSLReader":
        """Load and parse a DSL from the given file."""
        reader = cls()
        try:
            dsl_data = Path(dsl_file).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DSLSyntaxError(f"Illegal DSL syntax: {e}", source=str(dsl_file)) from e
        reader.parse(dsl_data, str(dsl_file))
        return reader


def compile_policy(dsl_data: Union[str, bytes], file_name: Optional[str] = None) -> AuthorizationModel:
    """Parse ``dsl_data`` with a fresh reader and return the compiled model."""
    reader = DSLReader()
    reader.parse(dsl_data, file_name)
    return reader.model
