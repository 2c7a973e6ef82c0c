"""
Artifact generator: Schema -> five Spring Boot source files.

entity      JPA entity with audit timestamps and lifecycle hooks
dto         transfer object (documentation + serialization annotations)
repository  JpaRepository<Entity, IdType>
service     thin pass-through over the repository
controller  REST controller with explicit DTO <-> entity mapping

Rendering is pure string assembly: the same schema always produces the same
text, imports are sorted, nothing depends on time or dict ordering beyond the
schema's own field order.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from .errors import GenerationError
from .model import (
    RESERVED_AUDIT_FIELDS,
    ArtifactKind,
    CascadeKind,
    DocumentationConfig,
    FetchKind,
    Field,
    GenerationOptions,
    JoinColumn,
    JoinTable,
    Relationship,
    RelationshipKind,
    Schema,
    SerializationConfig,
    ValidationKind,
    ValidationRule,
)
from .naming import camel, canonical_name, java_string, route_name, to_snake_case

logger = logging.getLogger(__name__)

# ---------------- constants ----------------

GENERATOR_NAME = "entitygen"
BOT_MARKER = f'@Generated("{GENERATOR_NAME}")'
DEFAULT_PACKAGE = "com.example.generated"
DEFAULT_API_PREFIX = "/api"

INDENT = "    "

PRIMITIVE_TO_WRAPPER = {
    "int": "Integer",
    "long": "Long",
    "double": "Double",
    "float": "Float",
    "short": "Short",
    "byte": "Byte",
    "boolean": "Boolean",
    "char": "Character",
}
TYPE_IMPORTS = {
    "BigDecimal": "java.math.BigDecimal",
    "UUID": "java.util.UUID",
    "LocalDate": "java.time.LocalDate",
    "LocalDateTime": "java.time.LocalDateTime",
    "Instant": "java.time.Instant",
    "OffsetDateTime": "java.time.OffsetDateTime",
    "ZonedDateTime": "java.time.ZonedDateTime",
    "List": "java.util.List",
    "Set": "java.util.Set",
}
GENERATED_ID_TYPES = {"Long", "Integer", "long", "int", "UUID"}
INTEGRAL_TYPES = {"Integer", "Short", "Byte", "int", "short", "byte"}

_INT_RE = re.compile(r"^[+-]?\d+$")
_CONST_RE = re.compile(r"^[A-Za-z_][\w.]*$")

# ---------------- import helpers ----------------


def wrapper_type(t: str) -> str:
    return PRIMITIVE_TO_WRAPPER.get(t, t)


def add_type_imports(type_name: str, imports: Set[str]) -> None:
    t = type_name.strip()
    if "<" in t and ">" in t:
        inner = t.split("<", 1)[1].rsplit(">", 1)[0]
        for part in inner.split(","):
            add_type_imports(part, imports)
        t = t.split("<", 1)[0].strip()
    t = wrapper_type(t)
    if t in TYPE_IMPORTS:
        imports.add(TYPE_IMPORTS[t])
    elif "." in t:
        imports.add(t)


def simple_type(type_name: str) -> str:
    """``java.math.BigDecimal`` -> ``BigDecimal``; generics kept."""
    t = type_name.strip()
    head, sep, rest = t.partition("<")
    if "." in head:
        head = head.rsplit(".", 1)[1]
    return head + sep + rest


def render_import_block(items: Set[str]) -> str:
    """Render sorted, de-duplicated ``import x.y.Z;`` lines (or nothing)."""
    out: Set[str] = set()
    for raw in items:
        s = re.sub(r"^\s*import\s+", "", str(raw).strip()).rstrip(";").strip()
        if s:
            out.add(f"import {s};")
    return ("\n".join(sorted(out)) + "\n") if out else ""


# ---------------- annotation helpers ----------------


def annotation(name: str, members: Optional[List[Tuple[str, str]]] = None) -> str:
    members = members or []
    if not members:
        return f"@{name}"
    if len(members) == 1 and members[0][0] == "value":
        return f"@{name}({members[0][1]})"
    return f"@{name}(" + ", ".join(f"{k} = {v}" for k, v in members) + ")"


def _decimal_text(value: object) -> str:
    if isinstance(value, bool):
        raise GenerationError(f"Expected a number, got {value!r}")
    if isinstance(value, (int, float)):
        f = float(value)
        return str(int(f)) if f.is_integer() else repr(f)
    return str(value).strip()


def _int_literal(value: object, where: str) -> str:
    if isinstance(value, bool):
        raise GenerationError(f"{where} must be an integer, got {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    s = str(value).strip()
    if _INT_RE.match(s):
        return s
    if _CONST_RE.match(s):
        # constant reference, e.g. Limits.MAX_NAME
        return s
    raise GenerationError(f"{where} must be an integer, got {value!r}")


def _bool_literal(value: object, where: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    s = str(value).strip().lower()
    if s in {"true", "false"}:
        return s
    raise GenerationError(f"{where} must be a boolean, got {value!r}")


def _param_literal(kind: ValidationKind, name: str, ptype: str, value: object) -> str:
    where = f"@{kind.annotation}.{name}"
    if ptype == "int":
        return _int_literal(value, where)
    if ptype == "bool":
        return _bool_literal(value, where)
    if ptype == "decimal":
        return java_string(_decimal_text(value))
    return java_string(value)


def validation_annotation(rule: ValidationRule, imports: Set[str]) -> Optional[str]:
    """Map one rule to its constraint annotation; unknown kinds give None."""
    kind = rule.kind
    if kind is None:
        logger.debug("Dropping unsupported validation rule %r", rule.type)
        return None
    params = rule.parameters or {}
    members: List[Tuple[str, str]] = []
    for pname, ptype in kind.expected_params:
        if pname in params and params[pname] is not None:
            members.append((pname, _param_literal(kind, pname, ptype, params[pname])))
    if rule.message:
        members.append(("message", java_string(rule.message)))
    if rule.groups:
        classes = [f"{simple_type(g)}.class" for g in rule.groups]
        members.append(("groups", classes[0] if len(classes) == 1 else "{" + ", ".join(classes) + "}"))
        for g in rule.groups:
            if "." in g:
                imports.add(g)
    imports.add(f"jakarta.validation.constraints.{kind.annotation}")
    return annotation(kind.annotation, members)


def column_annotation(f: Field) -> str:
    members: List[Tuple[str, str]] = [("name", java_string(f.column_name or to_snake_case(f.name)))]
    if not f.nullable:
        members.append(("nullable", "false"))
    if f.unique:
        members.append(("unique", "true"))
    if f.length is not None:
        members.append(("length", str(int(f.length))))
    if f.precision is not None:
        members.append(("precision", str(int(f.precision))))
    if f.scale is not None:
        members.append(("scale", str(int(f.scale))))
    return annotation("Column", members)


def default_literal(type_name: str, value: str, imports: Set[str]) -> str:
    """Typed Java initializer for a field default value."""
    t = wrapper_type(simple_type(type_name))
    v = str(value)
    where = f"default value {v!r} for {type_name}"
    try:
        if t == "String":
            return java_string(v)
        if t in {"Integer", "Short", "Byte"}:
            return str(int(v))
        if t == "Long":
            return f"{int(v)}L"
        if t == "Double":
            return repr(float(v))
        if t == "Float":
            return f"{float(v)!r}f"
        if t == "Boolean":
            return _bool_literal(v, where)
        if t == "Character":
            return "'" + v[:1].replace("\\", "\\\\").replace("'", "\\'") + "'"
    except ValueError:
        raise GenerationError(f"Invalid {where}") from None
    if t == "BigDecimal":
        imports.add(TYPE_IMPORTS["BigDecimal"])
        return f"new BigDecimal({java_string(v)})"
    if t in {"LocalDate", "LocalDateTime", "Instant", "OffsetDateTime", "ZonedDateTime"}:
        imports.add(TYPE_IMPORTS[t])
        return f"{t}.parse({java_string(v)})"
    if t == "UUID":
        imports.add(TYPE_IMPORTS["UUID"])
        return f"UUID.fromString({java_string(v)})"
    # enum constants and other expressions are taken verbatim
    return v


def getter_name(type_name: str, name: str) -> str:
    prefix = "is" if type_name.strip() == "boolean" else "get"
    return f"{prefix}{camel(name)}"


def setter_name(name: str) -> str:
    return f"set{camel(name)}"


def accessors(type_name: str, name: str) -> List[str]:
    return [
        f"{INDENT}public {type_name} {getter_name(type_name, name)}() {{",
        f"{INDENT}{INDENT}return {name};",
        f"{INDENT}}}",
        "",
        f"{INDENT}public void {setter_name(name)}({type_name} {name}) {{",
        f"{INDENT}{INDENT}this.{name} = {name};",
        f"{INDENT}}}",
        "",
    ]


# ---------------- plan ----------------


@dataclass
class ResolvedRelationship:
    source: Relationship
    kind: RelationshipKind
    target: str
    fetch: Optional[FetchKind]
    cascade: List[CascadeKind]

    @property
    def field_type(self) -> str:
        return f"List<{self.target}>" if self.kind.is_collection else self.target


@dataclass
class EntityPlan:
    """Everything the renderers need, resolved once per schema."""

    name: str
    package: str
    api_prefix: str
    options: GenerationOptions
    description: Optional[str]
    id_name: str
    id_type: str
    id_generated: bool
    id_field: Optional[Field]
    fields: List[Field]
    relationships: List[ResolvedRelationship]

    @property
    def data_fields(self) -> List[Field]:
        """Declared fields that are not primary keys, in declaration order."""
        return [f for f in self.fields if not f.primary_key and f is not self.id_field]

    def class_name(self, kind: ArtifactKind) -> str:
        return kind.class_name(self.name)


def _blank(value: object) -> bool:
    return value is None or not str(value).strip()


def resolve_relationship(rel: Relationship) -> ResolvedRelationship:
    kind = RelationshipKind.parse(rel.type)
    if _blank(rel.source_field):
        raise GenerationError(f"Relationship {kind.annotation} is missing its source field")
    if _blank(rel.target_entity):
        raise GenerationError(f"Relationship '{rel.source_field}' is missing its target entity")
    fetch = FetchKind.parse(rel.fetch) if not _blank(rel.fetch) else None
    cascade = [CascadeKind.parse(c) for c in rel.cascade or []]
    return ResolvedRelationship(
        source=rel,
        kind=kind,
        target=canonical_name(rel.target_entity),
        fetch=fetch,
        cascade=cascade,
    )


def plan_entity(schema: Schema, api_prefix: str = DEFAULT_API_PREFIX,
                default_package: str = DEFAULT_PACKAGE) -> EntityPlan:
    if _blank(schema.entity_name):
        raise GenerationError("Entity name is required")
    name = canonical_name(schema.entity_name)

    for i, f in enumerate(schema.fields or [], start=1):
        if _blank(f.name):
            raise GenerationError(f"Field #{i} has no name")
        if _blank(f.type):
            raise GenerationError(f"Field '{f.name}' has no type")

    pk = schema.primary_key
    declared = [f for f in schema.fields or [] if f.name not in RESERVED_AUDIT_FIELDS]
    if pk is None:
        # the surrogate identifier takes the 'id' slot
        declared = [f for f in declared if f.name != "id"]
        id_name, id_type, id_generated = "id", "Long", True
    else:
        id_name, id_type = pk.name, pk.type.strip()
        id_generated = id_type in GENERATED_ID_TYPES

    relationships = [resolve_relationship(r) for r in schema.relationships or []]

    return EntityPlan(
        name=name,
        package=(schema.package_name or "").strip() or default_package,
        api_prefix=(api_prefix or "").rstrip("/"),
        options=schema.options or GenerationOptions(),
        description=schema.description,
        id_name=id_name,
        id_type=id_type,
        id_generated=id_generated,
        id_field=pk,
        fields=declared,
        relationships=relationships,
    )


def _source_file(package: str, imports: Set[str], body: List[str]) -> str:
    imports = set(imports)
    imports.add("jakarta.annotation.Generated")
    head = f"package {package};\n\n{render_import_block(imports)}\n"
    return head + "\n".join(body).rstrip() + "\n"


def _javadoc(text: Optional[str], indent: str = "") -> List[str]:
    if _blank(text):
        return []
    lines = [f"{indent}/**"]
    for line in str(text).strip().splitlines():
        line = line.rstrip().replace("*/", "*&#47;")
        lines.append(f"{indent} * {line}".rstrip())
    lines.append(f"{indent} */")
    return lines


def _close_class(lines: List[str]) -> List[str]:
    while lines and lines[-1] == "":
        lines.pop()
    lines.append("}")
    return lines


# ---------------- entity ----------------


def _join_column_annotation(jc: JoinColumn) -> str:
    members: List[Tuple[str, str]] = []
    if jc.name:
        members.append(("name", java_string(jc.name)))
    if jc.referenced_column_name:
        members.append(("referencedColumnName", java_string(jc.referenced_column_name)))
    if not jc.nullable:
        members.append(("nullable", "false"))
    if jc.unique:
        members.append(("unique", "true"))
    if jc.foreign_key:
        members.append(("foreignKey", f"@ForeignKey(name = {java_string(jc.foreign_key)})"))
    return annotation("JoinColumn", members)


def _join_columns_value(columns: List[JoinColumn]) -> str:
    rendered = [_join_column_annotation(c) for c in columns]
    return rendered[0] if len(rendered) == 1 else "{" + ", ".join(rendered) + "}"


def _join_table_annotation(jt: JoinTable) -> str:
    members: List[Tuple[str, str]] = []
    if jt.name:
        members.append(("name", java_string(jt.name)))
    if jt.join_columns:
        members.append(("joinColumns", _join_columns_value(jt.join_columns)))
    if jt.inverse_join_columns:
        members.append(("inverseJoinColumns", _join_columns_value(jt.inverse_join_columns)))
    if jt.schema:
        members.append(("schema", java_string(jt.schema)))
    if jt.catalog:
        members.append(("catalog", java_string(jt.catalog)))
    return annotation("JoinTable", members)


def relationship_lines(rel: ResolvedRelationship, imports: Set[str]) -> List[str]:
    src = rel.source
    members: List[Tuple[str, str]] = []
    if src.mapped_by and rel.kind is not RelationshipKind.MANY_TO_ONE:
        members.append(("mappedBy", java_string(src.mapped_by)))
    if rel.fetch is not None:
        imports.add("jakarta.persistence.FetchType")
        members.append(("fetch", f"FetchType.{rel.fetch.value}"))
    if rel.cascade:
        imports.add("jakarta.persistence.CascadeType")
        values = [f"CascadeType.{c.value}" for c in rel.cascade]
        members.append(("cascade", values[0] if len(values) == 1 else "{" + ", ".join(values) + "}"))
    if not src.optional and not rel.kind.is_collection:
        members.append(("optional", "false"))

    imports.add(f"jakarta.persistence.{rel.kind.annotation}")
    lines = [f"{INDENT}{annotation(rel.kind.annotation, members)}"]

    if src.join_column is not None and src.join_table is None:
        imports.add("jakarta.persistence.JoinColumn")
        if src.join_column.foreign_key:
            imports.add("jakarta.persistence.ForeignKey")
        lines.append(f"{INDENT}{_join_column_annotation(src.join_column)}")
    if src.join_table is not None:
        imports.add("jakarta.persistence.JoinTable")
        cols = list(src.join_table.join_columns) + list(src.join_table.inverse_join_columns)
        if cols:
            imports.add("jakarta.persistence.JoinColumn")
        if any(c.foreign_key for c in cols):
            imports.add("jakarta.persistence.ForeignKey")
        lines.append(f"{INDENT}{_join_table_annotation(src.join_table)}")

    if rel.kind.is_collection:
        imports.update({"java.util.List", "java.util.ArrayList"})
        lines.append(f"{INDENT}private {rel.field_type} {src.source_field} = new ArrayList<>();")
    else:
        lines.append(f"{INDENT}private {rel.field_type} {src.source_field};")
    return lines


def _entity_field_lines(plan: EntityPlan, f: Field, imports: Set[str]) -> List[str]:
    lines: List[str] = []
    ftype = simple_type(f.type)
    add_type_imports(f.type, imports)

    if f is plan.id_field:
        imports.add("jakarta.persistence.Id")
        lines.append(f"{INDENT}@Id")
        if plan.id_generated:
            imports.update({"jakarta.persistence.GeneratedValue", "jakarta.persistence.GenerationType"})
            lines.append(f"{INDENT}@GeneratedValue(strategy = GenerationType.AUTO)")

    if f.wants_column:
        imports.add("jakarta.persistence.Column")
        lines.append(f"{INDENT}{column_annotation(f)}")

    if plan.options.enable_validation:
        for rule in f.validations or []:
            ann = validation_annotation(rule, imports)
            if ann:
                lines.append(f"{INDENT}{ann}")

    if f.default_value is not None:
        lines.append(f"{INDENT}private {ftype} {f.name} = {default_literal(f.type, f.default_value, imports)};")
    else:
        lines.append(f"{INDENT}private {ftype} {f.name};")
    return lines


def render_entity(plan: EntityPlan) -> str:
    imports: Set[str] = {
        "jakarta.persistence.Entity",
        "jakarta.persistence.Table",
        "jakarta.persistence.Column",
        "jakarta.persistence.PrePersist",
        "jakarta.persistence.PreUpdate",
        "java.time.LocalDateTime",
    }
    name = plan.name
    members: List[List[str]] = []

    if plan.id_field is None:
        imports.update({
            "jakarta.persistence.Id",
            "jakarta.persistence.GeneratedValue",
            "jakarta.persistence.GenerationType",
        })
        members.append([
            f"{INDENT}@Id",
            f"{INDENT}@GeneratedValue(strategy = GenerationType.IDENTITY)",
            f"{INDENT}private Long id;",
        ])

    for f in plan.fields:
        members.append(_entity_field_lines(plan, f, imports))

    for rel in plan.relationships:
        members.append(relationship_lines(rel, imports))

    members.append([
        f'{INDENT}@Column(name = "created_at", nullable = false, updatable = false)',
        f"{INDENT}private LocalDateTime createdAt;",
    ])
    members.append([
        f'{INDENT}@Column(name = "updated_at", nullable = false)',
        f"{INDENT}private LocalDateTime updatedAt;",
    ])

    lines: List[str] = []
    lines += _javadoc(plan.description)
    lines += [
        BOT_MARKER,
        "@Entity",
        f"@Table(name = {java_string(to_snake_case(name))})",
        f"public class {name} {{",
        "",
    ]
    for block in members:
        lines += block
        lines.append("")

    lines += [
        f"{INDENT}@PrePersist",
        f"{INDENT}protected void onCreate() {{",
        f"{INDENT}{INDENT}createdAt = LocalDateTime.now();",
        f"{INDENT}{INDENT}updatedAt = createdAt;",
        f"{INDENT}}}",
        "",
        f"{INDENT}@PreUpdate",
        f"{INDENT}protected void onUpdate() {{",
        f"{INDENT}{INDENT}updatedAt = LocalDateTime.now();",
        f"{INDENT}}}",
        "",
    ]

    if plan.id_field is None:
        lines += accessors("Long", "id")
    for f in plan.fields:
        lines += accessors(simple_type(f.type), f.name)
    for rel in plan.relationships:
        lines += accessors(rel.field_type, rel.source.source_field)
    lines += accessors("LocalDateTime", "createdAt")
    lines += accessors("LocalDateTime", "updatedAt")

    return _source_file(plan.package, imports, _close_class(lines))


# ---------------- dto ----------------


def documentation_annotation(doc: DocumentationConfig) -> Optional[str]:
    members: List[Tuple[str, str]] = []
    if doc.description:
        members.append(("description", java_string(doc.description)))
    if doc.example:
        members.append(("example", java_string(doc.example)))
    if doc.format:
        members.append(("format", java_string(doc.format)))
    if doc.required:
        members.append(("required", "true"))
    if doc.hidden:
        members.append(("hidden", "true"))
    if doc.pattern:
        members.append(("pattern", java_string(doc.pattern)))
    if doc.min_length is not None:
        members.append(("minLength", str(int(doc.min_length))))
    if doc.max_length is not None:
        members.append(("maxLength", str(int(doc.max_length))))
    if doc.minimum is not None:
        members.append(("minimum", java_string(_decimal_text(doc.minimum))))
    if doc.maximum is not None:
        members.append(("maximum", java_string(_decimal_text(doc.maximum))))
    if not members:
        return None
    return annotation("Schema", members)


def serialization_annotations(ser: SerializationConfig, imports: Set[str]) -> List[str]:
    out: List[str] = []
    access = None
    if ser.read_only:
        access = "JsonProperty.Access.READ_ONLY"
    elif ser.write_only:
        access = "JsonProperty.Access.WRITE_ONLY"

    if ser.property_name or access:
        imports.add("com.fasterxml.jackson.annotation.JsonProperty")
        members: List[Tuple[str, str]] = []
        if ser.property_name:
            members.append(("value", java_string(ser.property_name)))
        if access:
            members.append(("access", access))
        out.append(annotation("JsonProperty", members))

    if ser.ignore:
        imports.add("com.fasterxml.jackson.annotation.JsonIgnore")
        out.append("@JsonIgnore")

    pattern = ser.pattern or ser.format
    if pattern or ser.timezone:
        imports.add("com.fasterxml.jackson.annotation.JsonFormat")
        members = []
        if pattern:
            members.append(("shape", "JsonFormat.Shape.STRING"))
            members.append(("pattern", java_string(pattern)))
        if ser.timezone:
            members.append(("timezone", java_string(ser.timezone)))
        out.append(annotation("JsonFormat", members))
    return out


def _dto_field_lines(plan: EntityPlan, f: Optional[Field], type_name: str, name: str,
                     imports: Set[str]) -> List[str]:
    lines: List[str] = []
    if f is not None:
        if plan.options.enable_documentation and f.documentation is not None:
            ann = documentation_annotation(f.documentation)
            if ann:
                imports.add("io.swagger.v3.oas.annotations.media.Schema")
                lines.append(f"{INDENT}{ann}")
        if plan.options.enable_serialization and f.serialization is not None:
            for ann in serialization_annotations(f.serialization, imports):
                lines.append(f"{INDENT}{ann}")
    lines.append(f"{INDENT}private {type_name} {name};")
    return lines


def render_dto(plan: EntityPlan) -> str:
    imports: Set[str] = {"java.time.LocalDateTime"}
    dto = plan.class_name(ArtifactKind.DTO)
    id_type = simple_type(plan.id_type)
    add_type_imports(plan.id_type, imports)

    blocks: List[List[str]] = [_dto_field_lines(plan, plan.id_field, id_type, plan.id_name, imports)]
    for f in plan.data_fields:
        add_type_imports(f.type, imports)
        blocks.append(_dto_field_lines(plan, f, simple_type(f.type), f.name, imports))
    blocks.append([f"{INDENT}private LocalDateTime createdAt;"])
    blocks.append([f"{INDENT}private LocalDateTime updatedAt;"])

    lines: List[str] = [BOT_MARKER]
    if plan.options.enable_documentation and not _blank(plan.description):
        imports.add("io.swagger.v3.oas.annotations.media.Schema")
        lines.append(f"@Schema(description = {java_string(str(plan.description).strip())})")
    lines += [f"public class {dto} {{", ""]
    for block in blocks:
        lines += block
        lines.append("")

    lines += accessors(id_type, plan.id_name)
    for f in plan.data_fields:
        lines += accessors(simple_type(f.type), f.name)
    lines += accessors("LocalDateTime", "createdAt")
    lines += accessors("LocalDateTime", "updatedAt")

    return _source_file(plan.package, imports, _close_class(lines))


# ---------------- repository / service / controller ----------------


def render_repository(plan: EntityPlan) -> str:
    imports: Set[str] = {
        "org.springframework.data.jpa.repository.JpaRepository",
        "org.springframework.stereotype.Repository",
    }
    add_type_imports(plan.id_type, imports)
    id_type = wrapper_type(simple_type(plan.id_type))
    repo = plan.class_name(ArtifactKind.REPOSITORY)
    lines = [
        BOT_MARKER,
        "@Repository",
        f"public interface {repo} extends JpaRepository<{plan.name}, {id_type}> {{",
        "}",
    ]
    return _source_file(plan.package, imports, lines)


def render_service(plan: EntityPlan) -> str:
    imports: Set[str] = {
        "jakarta.persistence.EntityNotFoundException",
        "java.util.List",
        "org.springframework.stereotype.Service",
    }
    add_type_imports(plan.id_type, imports)
    name = plan.name
    repo = plan.class_name(ArtifactKind.REPOSITORY)
    service = plan.class_name(ArtifactKind.SERVICE)
    id_type = wrapper_type(simple_type(plan.id_type))

    lines = f"""{BOT_MARKER}
@Service
public class {service} {{

    private final {repo} repository;

    public {service}({repo} repository) {{
        this.repository = repository;
    }}

    public List<{name}> findAll() {{
        return repository.findAll();
    }}

    public {name} findById({id_type} id) {{
        return repository.findById(id)
                .orElseThrow(() -> new EntityNotFoundException("{name} not found with id: " + id));
    }}

    public {name} save({name} entity) {{
        return repository.save(entity);
    }}

    public void deleteById({id_type} id) {{
        repository.deleteById(id);
    }}
}}""".splitlines()
    return _source_file(plan.package, imports, lines)


def render_controller(plan: EntityPlan) -> str:
    imports: Set[str] = {
        "java.util.List",
        "java.util.stream.Collectors",
        "org.springframework.http.HttpStatus",
        "org.springframework.http.ResponseEntity",
        "org.springframework.web.bind.annotation.DeleteMapping",
        "org.springframework.web.bind.annotation.GetMapping",
        "org.springframework.web.bind.annotation.PathVariable",
        "org.springframework.web.bind.annotation.PostMapping",
        "org.springframework.web.bind.annotation.PutMapping",
        "org.springframework.web.bind.annotation.RequestBody",
        "org.springframework.web.bind.annotation.RequestMapping",
        "org.springframework.web.bind.annotation.RestController",
    }
    add_type_imports(plan.id_type, imports)
    name = plan.name
    dto = plan.class_name(ArtifactKind.DTO)
    service = plan.class_name(ArtifactKind.SERVICE)
    controller = plan.class_name(ArtifactKind.CONTROLLER)
    id_type = wrapper_type(simple_type(plan.id_type))
    route = f"{plan.api_prefix}/{route_name(name)}"

    valid = ""
    if plan.options.enable_validation:
        imports.add("jakarta.validation.Valid")
        valid = "@Valid "

    id_getter = getter_name(plan.id_type, plan.id_name)
    id_setter = setter_name(plan.id_name)
    to_dto = [f"{INDENT}{INDENT}dto.{id_setter}(entity.{id_getter}());"]
    apply = []
    for f in plan.data_fields:
        to_dto.append(f"{INDENT}{INDENT}dto.{setter_name(f.name)}(entity.{getter_name(f.type, f.name)}());")
        apply.append(f"{INDENT}{INDENT}entity.{setter_name(f.name)}(dto.{getter_name(f.type, f.name)}());")
    to_dto.append(f"{INDENT}{INDENT}dto.setCreatedAt(entity.getCreatedAt());")
    to_dto.append(f"{INDENT}{INDENT}dto.setUpdatedAt(entity.getUpdatedAt());")

    create_id = ""
    if not plan.id_generated:
        # assigned identifiers come from the request body
        create_id = f"\n        entity.{id_setter}(dto.{id_getter}());"

    nl = "\n"
    lines = f"""{BOT_MARKER}
@RestController
@RequestMapping({java_string(route)})
public class {controller} {{

    private final {service} service;

    public {controller}({service} service) {{
        this.service = service;
    }}

    @GetMapping
    public List<{dto}> list() {{
        return service.findAll().stream()
                .map(this::toDto)
                .collect(Collectors.toList());
    }}

    @GetMapping("/{{id}}")
    public {dto} getById(@PathVariable {id_type} id) {{
        return toDto(service.findById(id));
    }}

    @PostMapping
    public ResponseEntity<{dto}> create({valid}@RequestBody {dto} dto) {{
        {name} entity = new {name}();{create_id}
        applyDto(dto, entity);
        {name} saved = service.save(entity);
        return ResponseEntity.status(HttpStatus.CREATED).body(toDto(saved));
    }}

    @PutMapping("/{{id}}")
    public {dto} update(@PathVariable {id_type} id, {valid}@RequestBody {dto} dto) {{
        {name} entity = service.findById(id);
        applyDto(dto, entity);
        return toDto(service.save(entity));
    }}

    @DeleteMapping("/{{id}}")
    public ResponseEntity<Void> delete(@PathVariable {id_type} id) {{
        service.findById(id);
        service.deleteById(id);
        return ResponseEntity.noContent().build();
    }}

    private {dto} toDto({name} entity) {{
        {dto} dto = new {dto}();
{nl.join(to_dto)}
        return dto;
    }}

    private void applyDto({dto} dto, {name} entity) {{
{nl.join(apply)}
    }}
}}""".splitlines()
    # an entity without data fields leaves applyDto empty; drop the blank line
    lines = [ln for i, ln in enumerate(lines) if not (ln == "" and i > 0 and lines[i - 1].endswith("entity) {"))]
    return _source_file(plan.package, imports, lines)


# ---------------- entry points ----------------

RENDERERS = {
    ArtifactKind.ENTITY: render_entity,
    ArtifactKind.DTO: render_dto,
    ArtifactKind.REPOSITORY: render_repository,
    ArtifactKind.SERVICE: render_service,
    ArtifactKind.CONTROLLER: render_controller,
}


def artifact_file_names(entity_name: str) -> Dict[ArtifactKind, str]:
    name = canonical_name(entity_name)
    return {kind: kind.file_name(name) for kind in ArtifactKind}


def render_artifact(schema: Schema, kind: ArtifactKind, api_prefix: str = DEFAULT_API_PREFIX,
                    default_package: str = DEFAULT_PACKAGE) -> str:
    plan = plan_entity(schema, api_prefix, default_package)
    return RENDERERS[kind](plan)


def generate_artifacts(schema: Schema, api_prefix: str = DEFAULT_API_PREFIX,
                       default_package: str = DEFAULT_PACKAGE) -> Dict[ArtifactKind, str]:
    """Render all five artifacts; raises GenerationError before returning anything."""
    plan = plan_entity(schema, api_prefix, default_package)
    out: Dict[ArtifactKind, str] = {}
    for kind, render in RENDERERS.items():
        out[kind] = render(plan)
    logger.debug("Rendered %d artifacts for %s in %s", len(out), plan.name, plan.package)
    return out
