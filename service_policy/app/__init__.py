"""
Policy Service package for the Access Layer.

This package compiles declarative authorization policies into the rule
model consumed by entitlement decisions. It provides:

- app.reader: DSL reader for privilege hierarchies, roles and grants.
- app.cli: Command line validation of policy files.

Guidelines:
- Compilation is pure and in-memory; each parse uses fresh readers.
- The compiled model is immutable and owned by the caller.
"""
