from __future__ import annotations

import logging
from typing import List, Set

from .model import RESERVED_AUDIT_FIELDS, SUPPORTED_TYPES, Schema, ValidationResult

logger = logging.getLogger(__name__)


def _blank(value: object) -> bool:
    return value is None or not str(value).strip()


def validate_schema(schema: Schema) -> ValidationResult:
    """Check a schema before generation.

    Errors make the schema unusable. Warnings describe what the generator
    will fill in or drop on its own. The schema is never modified.
    """
    errors: List[str] = []
    warnings: List[str] = []

    fields = schema.fields or []
    has_name = not _blank(schema.entity_name)

    if not has_name:
        errors.append("Entity name is required")
        if not fields:
            errors.append("Schema is empty: no entity name and no fields")

    seen: Set[str] = set()
    for i, f in enumerate(fields, start=1):
        label = f.name if not _blank(f.name) else f"#{i}"
        if _blank(f.name):
            errors.append(f"Field #{i} name is required")
        elif f.name in seen:
            errors.append(f"Duplicate field name: {f.name}")
        else:
            seen.add(f.name)

        if _blank(f.type):
            errors.append(f"Field type is required for field: {label}")
        elif f.type not in SUPPORTED_TYPES:
            warnings.append(f"Field '{label}' uses unsupported type '{f.type}'; it will be emitted as-is")

        if f.name in RESERVED_AUDIT_FIELDS:
            warnings.append(f"Field '{f.name}' is reserved for audit timestamps and will be replaced")

        for rule in f.validations or []:
            kind = rule.kind
            if kind is None:
                warnings.append(f"Unknown validation rule '{rule.type}' on field '{label}' will be ignored")
                continue
            expected = {name for name, _ in kind.expected_params}
            for param in rule.parameters or {}:
                if param not in expected:
                    warnings.append(
                        f"Validation rule {kind.annotation} on field '{label}' has unexpected parameter '{param}'"
                    )

    pk_fields = [f for f in fields if f.primary_key]
    if has_name and not fields:
        warnings.append("No fields defined; a default 'id' field will be generated")
    elif fields and not pk_fields:
        warnings.append("No primary key defined; a surrogate 'id' field and audit timestamps will be generated")
        for f in fields:
            if f.name == "id":
                warnings.append("Field 'id' is not a primary key; the generated surrogate 'id' replaces it")
    if len(pk_fields) > 1:
        warnings.append(
            f"Multiple primary key fields; only '{pk_fields[0].name}' is used as the identifier"
        )

    for i, rel in enumerate(schema.relationships or [], start=1):
        if _blank(rel.source_field):
            errors.append(f"Relationship #{i} source field is required")
        elif rel.source_field in seen:
            errors.append(f"Relationship #{i} source field '{rel.source_field}' clashes with a field")
        if _blank(rel.target_entity):
            errors.append(f"Relationship #{i} target entity is required")

    result = ValidationResult.of(errors, warnings)
    logger.debug(
        "Validated %s: %d error(s), %d warning(s)",
        schema.entity_name or "<unnamed>", len(errors), len(warnings),
    )
    return result
