from __future__ import annotations

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from ...core.errors import ScriptError
from ...core.exit_codes import ERR_VALIDATION
from .schemas import schemas_root

SCHEMA_NAME_RE = re.compile(r"^topiclint\.(?P<stem>[a-z][a-z0-9-]*)\.v(?P<version>[1-9][0-9]*)$")


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    version: int
    file: str

    @property
    def path(self) -> Path:
        return schemas_root() / self.file


def catalog_path() -> Path:
    return schemas_root() / "catalog.json"


def list_catalog_entries() -> list[CatalogEntry]:
    """Catalog rows in file order; rows without a name or file are skipped."""
    rows = json.loads(catalog_path().read_text(encoding="utf-8")).get("schemas", [])
    return [
        CatalogEntry(name=str(row["name"]).strip(), version=int(row["version"]), file=str(row["file"]).strip())
        for row in rows
        if str(row.get("name", "")).strip() and str(row.get("file", "")).strip()
    ]


def load_catalog() -> dict[str, CatalogEntry]:
    return {entry.name: entry for entry in list_catalog_entries()}


def _lint_entry(entry: CatalogEntry) -> list[str]:
    match = SCHEMA_NAME_RE.match(entry.name)
    if match is None:
        return [f"invalid schema name: {entry.name}"]
    errors: list[str] = []
    if int(match.group("version")) != entry.version:
        errors.append(f"{entry.name}: catalog version {entry.version} does not match the name")
    if entry.file != f"{entry.name}.schema.json":
        errors.append(f"{entry.name}: schema file must be named {entry.name}.schema.json")
    if not entry.path.exists():
        errors.append(f"{entry.name}: missing schema file {entry.file}")
    elif json.loads(entry.path.read_text(encoding="utf-8")).get("$id") != entry.name:
        errors.append(f"{entry.name}: schema $id does not match the catalog name")
    return errors


def lint_catalog() -> list[str]:
    entries = list_catalog_entries()
    names = [entry.name for entry in entries]
    errors: list[str] = []
    if names != sorted(names):
        errors.append("schema catalog must be sorted by schema name")
    if len(set(names)) != len(names):
        errors.append("schema catalog lists a schema name twice")
    for entry in entries:
        errors.extend(_lint_entry(entry))
    listed = {entry.file for entry in entries}
    unlisted = sorted(path.name for path in schemas_root().glob("*.schema.json") if path.name not in listed)
    if unlisted:
        errors.append(f"schema files missing from the catalog: {unlisted}")
    return sorted(errors)


def schema_path_for(schema_name: str) -> Path:
    entry = load_catalog().get(schema_name)
    if entry is None:
        raise ScriptError(f"unknown schema: {schema_name}", ERR_VALIDATION, "unknown_schema")
    if Path(entry.file).name != entry.file:
        raise ScriptError(f"schema file for {schema_name} must sit in the schema directory", ERR_VALIDATION)
    if not entry.path.exists():
        raise ScriptError(f"missing schema file for {schema_name}: {entry.file}", ERR_VALIDATION)
    return entry.path


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> dict[str, Any]:
    return json.loads(schema_path_for(schema_name).read_text(encoding="utf-8"))


__all__ = ["CatalogEntry", "SCHEMA_NAME_RE", "lint_catalog", "list_catalog_entries", "load_catalog", "load_schema", "schema_path_for"]
