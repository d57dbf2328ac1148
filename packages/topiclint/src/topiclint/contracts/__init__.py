"""Published JSON contracts: the policy file and the check-run report."""

from .schema import lint_catalog, load_schema, validate, validate_self

__all__ = ["lint_catalog", "load_schema", "validate", "validate_self"]
