"""Schema catalog and validation APIs."""

from .catalog import CatalogEntry, lint_catalog, load_catalog, load_schema, schema_path_for
from .validate import validate, validate_self

__all__ = ["CatalogEntry", "lint_catalog", "load_catalog", "load_schema", "schema_path_for", "validate", "validate_self"]
