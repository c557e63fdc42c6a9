"""Schema validation used by the schema-checked table overlay."""

from chainsql.validation.schema import (
    Issue,
    SchemaDescriptor,
    ValidationResult,
    issues_from_error,
)

__all__ = [
    "Issue",
    "SchemaDescriptor",
    "ValidationResult",
    "issues_from_error",
]
