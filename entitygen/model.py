"""
Schema model for entitygen.

Plain records describing one entity (fields, validation rules, relationships,
generation options) plus the closed catalogs the generator and analyzer share,
and the read-only result records returned by the hub.

Payloads use the camelCase shape of the original REST API
(``entityName``, ``primaryKey``, ``swaggerConfig`` ...); snake_case keys are
accepted as well.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import GenerationError, SchemaError
from .naming import canonical_name


# ---------------- catalogs ----------------

SUPPORTED_TYPES = [
    "String", "Integer", "Long", "Double", "Float", "Boolean",
    "BigDecimal", "LocalDate", "LocalDateTime", "Instant", "UUID",
]

RESERVED_AUDIT_FIELDS = ("createdAt", "updatedAt")


def _norm(value: str) -> str:
    return value.replace("_", "").replace("-", "").strip().lower()


class ValidationKind(str, Enum):
    NOT_NULL = "NotNull"
    NOT_BLANK = "NotBlank"
    SIZE = "Size"
    PATTERN = "Pattern"
    MIN = "Min"
    MAX = "Max"
    EMAIL = "Email"
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    DIGITS = "Digits"
    DECIMAL_MIN = "DecimalMin"
    DECIMAL_MAX = "DecimalMax"
    FUTURE = "Future"
    PAST = "Past"
    FUTURE_OR_PRESENT = "FutureOrPresent"
    PAST_OR_PRESENT = "PastOrPresent"

    @property
    def annotation(self) -> str:
        return self.value

    @property
    def expected_params(self) -> Tuple[Tuple[str, str], ...]:
        return VALIDATION_PARAMS.get(self, ())

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["ValidationKind"]:
        """Resolve ``NotNull`` / ``NOT_NULL`` / ``not_null``; unknown -> None."""
        if not raw or not str(raw).strip():
            return None
        key = _norm(str(raw))
        for kind in cls:
            if _norm(kind.name) == key:
                return kind
        return None


# (param name, param type) in emission order
VALIDATION_PARAMS: Dict[ValidationKind, Tuple[Tuple[str, str], ...]] = {
    ValidationKind.SIZE: (("min", "int"), ("max", "int")),
    ValidationKind.PATTERN: (("regexp", "string"),),
    ValidationKind.MIN: (("value", "int"),),
    ValidationKind.MAX: (("value", "int"),),
    ValidationKind.DIGITS: (("integer", "int"), ("fraction", "int")),
    ValidationKind.DECIMAL_MIN: (("value", "decimal"), ("inclusive", "bool")),
    ValidationKind.DECIMAL_MAX: (("value", "decimal"), ("inclusive", "bool")),
}


class RelationshipKind(str, Enum):
    ONE_TO_ONE = "OneToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_ONE = "ManyToOne"
    MANY_TO_MANY = "ManyToMany"

    @property
    def annotation(self) -> str:
        return self.value

    @property
    def is_collection(self) -> bool:
        return self in (RelationshipKind.ONE_TO_MANY, RelationshipKind.MANY_TO_MANY)

    @classmethod
    def parse(cls, raw: Optional[str]) -> "RelationshipKind":
        if raw is not None and str(raw).strip():
            key = _norm(str(raw))
            for kind in cls:
                if _norm(kind.name) == key:
                    return kind
        raise GenerationError(f"Unsupported relationship type: {raw}")


class FetchKind(str, Enum):
    LAZY = "LAZY"
    EAGER = "EAGER"

    @classmethod
    def parse(cls, raw: str) -> "FetchKind":
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise GenerationError(f"Unsupported fetch type: {raw}") from None


class CascadeKind(str, Enum):
    ALL = "ALL"
    PERSIST = "PERSIST"
    MERGE = "MERGE"
    REMOVE = "REMOVE"
    REFRESH = "REFRESH"
    DETACH = "DETACH"

    @classmethod
    def parse(cls, raw: str) -> "CascadeKind":
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise GenerationError(f"Unsupported cascade type: {raw}") from None


class ArtifactKind(str, Enum):
    ENTITY = "entity"
    DTO = "dto"
    REPOSITORY = "repository"
    SERVICE = "service"
    CONTROLLER = "controller"

    @property
    def suffix(self) -> str:
        return ARTIFACT_SUFFIXES[self]

    def class_name(self, entity_name: str) -> str:
        return f"{entity_name}{self.suffix}"

    def file_name(self, entity_name: str) -> str:
        return f"{self.class_name(entity_name)}.java"


ARTIFACT_SUFFIXES: Dict[ArtifactKind, str] = {
    ArtifactKind.ENTITY: "",
    ArtifactKind.DTO: "DTO",
    ArtifactKind.REPOSITORY: "Repository",
    ArtifactKind.SERVICE: "Service",
    ArtifactKind.CONTROLLER: "Controller",
}


# ---------------- schema records ----------------

@dataclass
class ValidationRule:
    type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None
    groups: List[str] = field(default_factory=list)

    @property
    def kind(self) -> Optional[ValidationKind]:
        return ValidationKind.parse(self.type)


@dataclass
class DocumentationConfig:
    description: Optional[str] = None
    example: Optional[str] = None
    format: Optional[str] = None
    required: bool = False
    hidden: bool = False
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass
class SerializationConfig:
    property_name: Optional[str] = None
    ignore: bool = False
    format: Optional[str] = None
    pattern: Optional[str] = None
    timezone: Optional[str] = None
    read_only: bool = False
    write_only: bool = False


@dataclass
class Field:
    name: str
    type: str
    primary_key: bool = False
    nullable: bool = True
    unique: bool = False
    column_name: Optional[str] = None
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default_value: Optional[str] = None
    validations: List[ValidationRule] = field(default_factory=list)
    documentation: Optional[DocumentationConfig] = None
    serialization: Optional[SerializationConfig] = None

    @property
    def wants_column(self) -> bool:
        return bool(
            self.column_name
            or not self.nullable
            or self.unique
            or self.length is not None
            or self.precision is not None
            or self.scale is not None
        )


@dataclass
class JoinColumn:
    name: Optional[str] = None
    referenced_column_name: Optional[str] = None
    nullable: bool = True
    unique: bool = False
    foreign_key: Optional[str] = None


@dataclass
class JoinTable:
    name: Optional[str] = None
    join_columns: List[JoinColumn] = field(default_factory=list)
    inverse_join_columns: List[JoinColumn] = field(default_factory=list)
    schema: Optional[str] = None
    catalog: Optional[str] = None


@dataclass
class Relationship:
    type: str
    source_field: str
    target_entity: str
    target_field: Optional[str] = None
    mapped_by: Optional[str] = None
    fetch: Optional[str] = None
    cascade: List[str] = field(default_factory=list)
    optional: bool = True
    join_column: Optional[JoinColumn] = None
    join_table: Optional[JoinTable] = None


@dataclass
class GenerationOptions:
    enable_validation: bool = True
    enable_documentation: bool = True
    enable_serialization: bool = True


@dataclass
class Schema:
    entity_name: str
    package_name: Optional[str] = None
    fields: List[Field] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    options: GenerationOptions = field(default_factory=GenerationOptions)
    description: Optional[str] = None

    @property
    def canonical_name(self) -> str:
        return canonical_name(self.entity_name)

    @property
    def primary_key(self) -> Optional[Field]:
        for f in self.fields:
            if f.primary_key:
                return f
        return None


# ---------------- results ----------------

@dataclass(frozen=True)
class GeneratedArtifact:
    kind: ArtifactKind
    file_name: str
    path: str
    written: bool


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    message: str
    entity_name: Optional[str] = None
    artifacts: Tuple[GeneratedArtifact, ...] = ()
    skipped: Tuple[str, ...] = ()
    error_kind: Optional[str] = None

    @property
    def generated_files(self) -> List[str]:
        return [a.path for a in self.artifacts]

    @classmethod
    def ok(cls, message: str, entity_name: str, artifacts: List[GeneratedArtifact]) -> "GenerationResult":
        skipped = tuple(a.path for a in artifacts if not a.written)
        return cls(True, message, entity_name, tuple(artifacts), skipped, None)

    @classmethod
    def failed(cls, message: str, error_kind: str, entity_name: Optional[str] = None) -> "GenerationResult":
        return cls(False, message, entity_name, (), (), error_kind)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def of(cls, errors: List[str], warnings: List[str]) -> "ValidationResult":
        return cls(not errors, tuple(errors), tuple(warnings))

    @classmethod
    def error(cls, message: str) -> "ValidationResult":
        return cls(False, (message,), ())


@dataclass(frozen=True)
class BatchResult:
    total_processed: int
    success_count: int
    error_count: int
    results: Tuple[GenerationResult, ...] = ()

    @classmethod
    def of(cls, results: List[GenerationResult]) -> "BatchResult":
        ok = sum(1 for r in results if r.success)
        return cls(len(results), ok, len(results) - ok, tuple(results))


# ---------------- payload mapping ----------------

def _get(d: Dict[str, Any], camel_key: str, snake_key: Optional[str] = None, default: Any = None) -> Any:
    if camel_key in d:
        return d[camel_key]
    if snake_key and snake_key in d:
        return d[snake_key]
    return default


def _opt_int(value: Any, where: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SchemaError(f"{where} must be an integer, got {value!r}") from None


def _opt_float(value: Any, where: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SchemaError(f"{where} must be a number, got {value!r}") from None


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def parse_bool(value: Any, default: bool, where: str = "value") -> bool:
    """JSON booleans, plus the usual string spellings. Null and "" mean ``default``."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    word = str(value).strip().lower()
    if not word:
        return default
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise SchemaError(f"{where} must be a boolean, got {value!r}")


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_dict(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{where} must be an object")
    return value


def _as_list(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SchemaError(f"{where} must be a list")
    return value


def _rule_from_dict(d: Dict[str, Any], where: str) -> ValidationRule:
    d = _as_dict(d, where)
    params = _get(d, "parameters", default=None) or {}
    groups = _get(d, "groups", default=None) or []
    return ValidationRule(
        type=str(_get(d, "type", default="") or ""),
        parameters=dict(_as_dict(params, f"{where}.parameters")),
        message=_opt_str(_get(d, "message")),
        groups=[str(g) for g in _as_list(groups, f"{where}.groups")],
    )


def _doc_from_dict(d: Dict[str, Any], where: str) -> DocumentationConfig:
    d = _as_dict(d, where)
    return DocumentationConfig(
        description=_opt_str(_get(d, "description")),
        example=_opt_str(_get(d, "example")),
        format=_opt_str(_get(d, "format")),
        required=parse_bool(_get(d, "required"), False, "required"),
        hidden=parse_bool(_get(d, "hidden"), False, "hidden"),
        pattern=_opt_str(_get(d, "pattern")),
        min_length=_opt_int(_get(d, "minLength", "min_length"), f"{where}.minLength"),
        max_length=_opt_int(_get(d, "maxLength", "max_length"), f"{where}.maxLength"),
        minimum=_opt_float(_get(d, "minimum"), f"{where}.minimum"),
        maximum=_opt_float(_get(d, "maximum"), f"{where}.maximum"),
    )


def _json_from_dict(d: Dict[str, Any], where: str) -> SerializationConfig:
    d = _as_dict(d, where)
    return SerializationConfig(
        property_name=_opt_str(_get(d, "propertyName", "property_name")),
        ignore=parse_bool(_get(d, "ignore"), False, "ignore"),
        format=_opt_str(_get(d, "format")),
        pattern=_opt_str(_get(d, "pattern")),
        timezone=_opt_str(_get(d, "timezone")),
        read_only=parse_bool(_get(d, "readOnly", "read_only"), False, "readOnly"),
        write_only=parse_bool(_get(d, "writeOnly", "write_only"), False, "writeOnly"),
    )


def _field_from_dict(d: Dict[str, Any], where: str) -> Field:
    d = _as_dict(d, where)
    doc = _get(d, "swaggerConfig", "documentation")
    if doc is None:
        doc = d.get("swagger_config")
    ser = _get(d, "jsonConfig", "serialization")
    if ser is None:
        ser = d.get("json_config")
    return Field(
        name=str(_get(d, "name", default="") or ""),
        type=str(_get(d, "type", default="") or ""),
        primary_key=parse_bool(_get(d, "primaryKey", "primary_key"), False, "primaryKey"),
        nullable=parse_bool(_get(d, "nullable"), True, "nullable"),
        unique=parse_bool(_get(d, "unique"), False, "unique"),
        column_name=_opt_str(_get(d, "columnName", "column_name")),
        length=_opt_int(_get(d, "length"), f"{where}.length"),
        precision=_opt_int(_get(d, "precision"), f"{where}.precision"),
        scale=_opt_int(_get(d, "scale"), f"{where}.scale"),
        default_value=_opt_str(_get(d, "defaultValue", "default_value")),
        validations=[
            _rule_from_dict(r, f"{where}.validations[{i}]")
            for i, r in enumerate(_as_list(_get(d, "validations"), f"{where}.validations"))
        ],
        documentation=_doc_from_dict(doc, f"{where}.swaggerConfig") if doc is not None else None,
        serialization=_json_from_dict(ser, f"{where}.jsonConfig") if ser is not None else None,
    )


def _join_column_from_dict(d: Dict[str, Any], where: str) -> JoinColumn:
    d = _as_dict(d, where)
    return JoinColumn(
        name=_opt_str(_get(d, "name")),
        referenced_column_name=_opt_str(_get(d, "referencedColumnName", "referenced_column_name")),
        nullable=parse_bool(_get(d, "nullable"), True, "nullable"),
        unique=parse_bool(_get(d, "unique"), False, "unique"),
        foreign_key=_opt_str(_get(d, "foreignKey", "foreign_key")),
    )


def _join_table_from_dict(d: Dict[str, Any], where: str) -> JoinTable:
    d = _as_dict(d, where)
    return JoinTable(
        name=_opt_str(_get(d, "name")),
        join_columns=[
            _join_column_from_dict(c, f"{where}.joinColumns[{i}]")
            for i, c in enumerate(_as_list(_get(d, "joinColumns", "join_columns"), f"{where}.joinColumns"))
        ],
        inverse_join_columns=[
            _join_column_from_dict(c, f"{where}.inverseJoinColumns[{i}]")
            for i, c in enumerate(
                _as_list(_get(d, "inverseJoinColumns", "inverse_join_columns"), f"{where}.inverseJoinColumns")
            )
        ],
        schema=_opt_str(_get(d, "schema")),
        catalog=_opt_str(_get(d, "catalog")),
    )


def _relationship_from_dict(d: Dict[str, Any], where: str) -> Relationship:
    d = _as_dict(d, where)
    jc = _get(d, "joinColumn", "join_column")
    jt = _get(d, "joinTable", "join_table")
    return Relationship(
        type=str(_get(d, "type", default="") or ""),
        source_field=str(_get(d, "sourceField", "source_field", default="") or ""),
        target_entity=str(_get(d, "targetEntity", "target_entity", default="") or ""),
        target_field=_opt_str(_get(d, "targetField", "target_field")),
        mapped_by=_opt_str(_get(d, "mappedBy", "mapped_by")),
        fetch=_opt_str(_get(d, "fetch")),
        cascade=[str(c) for c in _as_list(_get(d, "cascade"), f"{where}.cascade")],
        optional=parse_bool(_get(d, "optional"), True, "optional"),
        join_column=_join_column_from_dict(jc, f"{where}.joinColumn") if jc is not None else None,
        join_table=_join_table_from_dict(jt, f"{where}.joinTable") if jt is not None else None,
    )


def schema_from_dict(data: Any) -> Schema:
    """Build a Schema from a decoded JSON payload."""
    d = _as_dict(data, "schema")
    return Schema(
        entity_name=str(_get(d, "entityName", "entity_name", default="") or ""),
        package_name=_opt_str(_get(d, "packageName", "package_name")),
        fields=[
            _field_from_dict(f, f"fields[{i}]")
            for i, f in enumerate(_as_list(_get(d, "fields"), "fields"))
        ],
        relationships=[
            _relationship_from_dict(r, f"relationships[{i}]")
            for i, r in enumerate(_as_list(_get(d, "relationships"), "relationships"))
        ],
        options=GenerationOptions(
            enable_validation=parse_bool(_get(d, "enableValidation", "enable_validation"), True, "enableValidation"),
            enable_documentation=parse_bool(_get(d, "enableSwagger", "enable_documentation"), True, "enableSwagger"),
            enable_serialization=parse_bool(_get(d, "enableJsonAnnotations", "enable_serialization"), True, "enableJsonAnnotations"),
        ),
        description=_opt_str(_get(d, "description")),
    )


def _prune(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None and v != [] and v != {}}


def _join_column_to_dict(jc: JoinColumn) -> Dict[str, Any]:
    return _prune({
        "name": jc.name,
        "referencedColumnName": jc.referenced_column_name,
        "nullable": jc.nullable,
        "unique": jc.unique,
        "foreignKey": jc.foreign_key,
    })


def schema_to_dict(schema: Schema) -> Dict[str, Any]:
    """Inverse of :func:`schema_from_dict` (camelCase, empty values dropped)."""
    fields: List[Dict[str, Any]] = []
    for f in schema.fields:
        doc = f.documentation
        ser = f.serialization
        fields.append(_prune({
            "name": f.name,
            "type": f.type,
            "primaryKey": f.primary_key,
            "nullable": f.nullable,
            "unique": f.unique,
            "columnName": f.column_name,
            "length": f.length,
            "precision": f.precision,
            "scale": f.scale,
            "defaultValue": f.default_value,
            "validations": [
                _prune({
                    "type": r.type,
                    "parameters": dict(r.parameters),
                    "message": r.message,
                    "groups": list(r.groups),
                })
                for r in f.validations
            ],
            "swaggerConfig": _prune({
                "description": doc.description,
                "example": doc.example,
                "format": doc.format,
                "required": doc.required,
                "hidden": doc.hidden,
                "pattern": doc.pattern,
                "minLength": doc.min_length,
                "maxLength": doc.max_length,
                "minimum": doc.minimum,
                "maximum": doc.maximum,
            }) if doc else None,
            "jsonConfig": _prune({
                "propertyName": ser.property_name,
                "ignore": ser.ignore,
                "format": ser.format,
                "pattern": ser.pattern,
                "timezone": ser.timezone,
                "readOnly": ser.read_only,
                "writeOnly": ser.write_only,
            }) if ser else None,
        }))

    relationships: List[Dict[str, Any]] = []
    for r in schema.relationships:
        jt = r.join_table
        relationships.append(_prune({
            "type": r.type,
            "sourceField": r.source_field,
            "targetEntity": r.target_entity,
            "targetField": r.target_field,
            "mappedBy": r.mapped_by,
            "fetch": r.fetch,
            "cascade": list(r.cascade),
            "optional": r.optional,
            "joinColumn": _join_column_to_dict(r.join_column) if r.join_column else None,
            "joinTable": _prune({
                "name": jt.name,
                "joinColumns": [_join_column_to_dict(c) for c in jt.join_columns],
                "inverseJoinColumns": [_join_column_to_dict(c) for c in jt.inverse_join_columns],
                "schema": jt.schema,
                "catalog": jt.catalog,
            }) if jt else None,
        }))

    return _prune({
        "entityName": schema.entity_name,
        "packageName": schema.package_name,
        "description": schema.description,
        "fields": fields,
        "relationships": relationships,
        "enableValidation": schema.options.enable_validation,
        "enableSwagger": schema.options.enable_documentation,
        "enableJsonAnnotations": schema.options.enable_serialization,
    })
