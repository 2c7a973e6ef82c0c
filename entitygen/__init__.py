"""entitygen: schema-driven Spring Boot entity generator."""

from .analyzer import analyze_source
from .config import GeneratorConfig, load_config
from .errors import AnalysisError, EntityGenError, GenerationError, SchemaError, StoreError
from .generator import artifact_file_names, generate_artifacts
from .hub import EntityGenHub
from .model import (
    ArtifactKind,
    BatchResult,
    Field,
    GenerationOptions,
    GenerationResult,
    Relationship,
    RelationshipKind,
    Schema,
    ValidationKind,
    ValidationResult,
    ValidationRule,
    schema_from_dict,
    schema_to_dict,
)
from .naming import canonical_name
from .store import ArtifactStore
from .validator import validate_schema

__all__ = [
    "AnalysisError",
    "ArtifactKind",
    "ArtifactStore",
    "BatchResult",
    "EntityGenError",
    "EntityGenHub",
    "Field",
    "GenerationError",
    "GenerationOptions",
    "GenerationResult",
    "GeneratorConfig",
    "Relationship",
    "RelationshipKind",
    "Schema",
    "SchemaError",
    "StoreError",
    "ValidationKind",
    "ValidationResult",
    "ValidationRule",
    "analyze_source",
    "artifact_file_names",
    "canonical_name",
    "generate_artifacts",
    "load_config",
    "schema_from_dict",
    "schema_to_dict",
    "validate_schema",
]
