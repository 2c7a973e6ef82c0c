"""
Reverse model analyzer: Java source text -> Schema.

This is a pattern scan, not a parse. It recognizes a simple entity/DTO shape:
one public class, field declarations on their own lines, annotations on the
lines above each field. Anything else degrades to "not found" instead of
failing. The one hard failure is a source without a public class.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import AnalysisError
from .model import (
    DocumentationConfig,
    Field,
    JoinColumn,
    JoinTable,
    Relationship,
    RelationshipKind,
    Schema,
    SerializationConfig,
    ValidationKind,
    ValidationRule,
)
from .naming import JAVA_KEYWORDS

logger = logging.getLogger(__name__)

PACKAGE_RE = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.M)
CLASS_RE = re.compile(r"\bpublic\s+(?:(?:abstract|final)\s+)*class\s+(\w+)")
FIELD_RE = re.compile(
    r"^[ \t]*(?:@[\w.]+(?:\([^)\n]*\))?[ \t]+)*"
    r"((?:(?:private|protected|public|static|final|transient|volatile)\s+)*)"
    r"([\w.]+(?:\s*<[^;=(){}]*?>)?(?:\[\])*)\s+(\w+)\s*(?:=\s*([^;]*))?;",
    re.M,
)
DECL_RE = re.compile(
    r"((?:(?:private|protected|public|static|final|transient|volatile)\s+)*)"
    r"([\w.]+(?:\s*<[^;=(){}]*?>)?(?:\[\])*)\s+(\w+)\s*(?:=\s*([^;]*))?;"
)
COMMENT_OR_STRING_RE = re.compile(r'"(?:\\.|[^"\\\n])*"|//[^\n]*|/\*.*?\*/', re.S)
ANNOTATION_RE = re.compile(r"@\s*([A-Za-z_][\w.]*)")
GENERIC_RE = re.compile(r"^(?:java\.util\.)?(?:List|Set|Collection)\s*<\s*([\w.]+)\s*>$")
INT_RE = re.compile(r"^[+-]?\d+$")
FLOAT_RE = re.compile(r"^[+-]?\d+\.\d+$")
NAMED_ARG_RE = re.compile(r"^\s*(\w+)\s*=\s*(.*)$", re.S)

PRIMITIVES = {"int", "long", "double", "float", "short", "byte", "boolean", "char"}
NOT_A_TYPE = JAVA_KEYWORDS - PRIMITIVES

VALIDATION_ANNOTATIONS = {k.annotation: k for k in ValidationKind}
RELATIONSHIP_ANNOTATIONS = {k.annotation: k for k in RelationshipKind}


# ---------------- lexical helpers ----------------


def strip_comments(text: str) -> str:
    """Blank out comments, leaving string literals and line breaks intact."""

    def repl(m: "re.Match[str]") -> str:
        s = m.group(0)
        if s.startswith('"'):
            return s
        return "\n" * s.count("\n") or " "

    return COMMENT_OR_STRING_RE.sub(repl, text)


def _skip_string(text: str, i: int) -> int:
    """``text[i]`` is a quote; return the index just past the closing quote."""
    quote = text[i]
    i += 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return i


def matching_paren(text: str, open_idx: int) -> int:
    depth = 0
    i = open_idx
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            i = _skip_string(text, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def split_top_level(s: str, sep: str = ",") -> List[str]:
    parts: List[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(s):
        ch = s[i]
        if ch in "\"'":
            i = _skip_string(s, i)
            continue
        if ch in "({[":
            depth += 1
        elif ch in ")}]":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(s[start:i])
            start = i + 1
        i += 1
    parts.append(s[start:])
    return [p.strip() for p in parts if p.strip()]


def iter_annotations(text: str, start: int = 0, end: Optional[int] = None) -> Iterator[Tuple[str, str, int, int]]:
    """Yield ``(simple name, argument text, start, end)`` for each annotation."""
    end = len(text) if end is None else end
    i = start
    while i < end:
        m = ANNOTATION_RE.search(text, i, end)
        if not m:
            return
        name = m.group(1).rsplit(".", 1)[-1]
        j = m.end()
        k = j
        while k < end and text[k].isspace():
            k += 1
        args = ""
        if k < end and text[k] == "(":
            close = matching_paren(text, k)
            if close == -1 or close >= end:
                args, j = text[k + 1:end], end
            else:
                args, j = text[k + 1:close], close + 1
        yield name, args, m.start(), j
        i = j


def skip_annotations(text: str, pos: int) -> Tuple[int, List[Tuple[str, str]]]:
    """Advance past whitespace and consecutive annotations starting at ``pos``."""
    found: List[Tuple[str, str]] = []
    while True:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text) or text[pos] != "@":
            return pos, found
        ann = next(iter_annotations(text, pos), None)
        if ann is None or ann[2] != pos:
            return pos, found
        found.append((ann[0], ann[1]))
        pos = ann[3]


def block_start(text: str, pos: int) -> int:
    """Index just after the previous ``;``, ``{`` or ``}`` outside parentheses."""
    depth = 0
    i = pos - 1
    while i >= 0:
        ch = text[i]
        if ch == ")":
            depth += 1
        elif ch == "(":
            depth = max(depth - 1, 0)
        elif depth == 0 and ch in ";{}":
            return i + 1
        i -= 1
    return 0


# ---------------- value parsing ----------------


def _unquote(raw: str) -> str:
    s = raw.strip()
    if len(s) >= 2 and s[0] == s[-1] == '"':
        s = s[1:-1]
        return s.replace('\\"', '"').replace("\\\\", "\\")
    return s.replace('"', "")


def parse_value(raw: str) -> Any:
    """``12`` -> int, ``"1.5"`` -> float, ``true`` -> bool, anything else a string."""
    s = raw.strip()
    if s in ("true", "false"):
        return s == "true"
    s = _unquote(s)
    if INT_RE.match(s):
        return int(s)
    if FLOAT_RE.match(s):
        return float(s)
    return s


def _class_refs(raw: str) -> List[str]:
    s = raw.strip()
    if s.startswith("{") and s.endswith("}"):
        s = s[1:-1]
    out = []
    for part in split_top_level(s):
        part = part.strip()
        if part.endswith(".class"):
            part = part[: -len(".class")]
        if part:
            out.append(part)
    return out


def _enum_refs(raw: str) -> List[str]:
    """``{CascadeType.PERSIST, MERGE}`` -> ``["PERSIST", "MERGE"]``."""
    return [r.rsplit(".", 1)[-1] for r in _class_refs(raw)]


def parse_arguments(args: str) -> Dict[str, str]:
    """Split annotation arguments into raw ``name -> value`` text.

    A lone unnamed argument is stored under ``value``.
    """
    out: Dict[str, str] = {}
    parts = split_top_level(args)
    for part in parts:
        m = NAMED_ARG_RE.match(part)
        if m and not part.lstrip().startswith('"'):
            out[m.group(1)] = m.group(2).strip()
        elif len(parts) == 1:
            out["value"] = part.strip()
    return out


def _bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip() == "true"


def _int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not INT_RE.match(raw.strip()):
        return None
    return int(raw.strip())


def _float(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    v = parse_value(_unquote(raw))
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v)


def _literal_default(init: Optional[str]) -> Optional[str]:
    """Keep simple literal initializers; drop expressions like ``new ArrayList<>()``."""
    if init is None:
        return None
    s = init.strip()
    if len(s) >= 2 and s[0] == s[-1] == '"':
        return _unquote(s)
    if s in ("true", "false"):
        return s
    num = s.rstrip("lLfFdD")
    if INT_RE.match(num) or FLOAT_RE.match(num):
        return num
    return None


# ---------------- annotation -> record ----------------


def validation_rule(kind: ValidationKind, args: str) -> ValidationRule:
    params: Dict[str, Any] = {}
    message = None
    groups: List[str] = []
    for key, raw in parse_arguments(args).items():
        if key == "message":
            message = _unquote(raw)
        elif key == "groups":
            groups = _class_refs(raw)
        elif key != "payload":
            params[key] = parse_value(raw)
    return ValidationRule(type=kind.annotation, parameters=params, message=message, groups=groups)


def _apply_column(f: Field, args: str) -> None:
    a = parse_arguments(args)
    if "name" in a:
        f.column_name = _unquote(a["name"])
    f.nullable = _bool(a.get("nullable"), True)
    f.unique = _bool(a.get("unique"), False)
    f.length = _int(a.get("length"))
    f.precision = _int(a.get("precision"))
    f.scale = _int(a.get("scale"))


def _documentation(args: str) -> DocumentationConfig:
    a = parse_arguments(args)

    def text(key: str) -> Optional[str]:
        return _unquote(a[key]) if key in a else None

    return DocumentationConfig(
        description=text("description"),
        example=text("example"),
        format=text("format"),
        required=_bool(a.get("required"), False),
        hidden=_bool(a.get("hidden"), False),
        pattern=text("pattern"),
        min_length=_int(a.get("minLength")),
        max_length=_int(a.get("maxLength")),
        minimum=_float(a.get("minimum")),
        maximum=_float(a.get("maximum")),
    )


def _apply_json(ser: SerializationConfig, name: str, args: str) -> None:
    a = parse_arguments(args)
    if name == "JsonIgnore":
        ser.ignore = True
    elif name == "JsonProperty":
        if "value" in a:
            ser.property_name = _unquote(a["value"])
        access = a.get("access", "")
        ser.read_only = access.endswith("READ_ONLY")
        ser.write_only = access.endswith("WRITE_ONLY")
    elif name == "JsonFormat":
        if "pattern" in a:
            ser.pattern = _unquote(a["pattern"])
        if "timezone" in a:
            ser.timezone = _unquote(a["timezone"])


def join_column(args: str) -> JoinColumn:
    a = parse_arguments(args)
    fk = a.get("foreignKey")
    fk_name = None
    if fk:
        m = re.search(r'name\s*=\s*"([^"]*)"', fk)
        fk_name = m.group(1) if m else None
    return JoinColumn(
        name=_unquote(a["name"]) if "name" in a else None,
        referenced_column_name=_unquote(a["referencedColumnName"]) if "referencedColumnName" in a else None,
        nullable=_bool(a.get("nullable"), True),
        unique=_bool(a.get("unique"), False),
        foreign_key=fk_name,
    )


def _join_columns(raw: Optional[str]) -> List[JoinColumn]:
    if not raw:
        return []
    s = raw.strip()
    if s.startswith("{") and s.endswith("}"):
        s = s[1:-1]
    out = []
    for part in split_top_level(s):
        for name, args, _, _ in iter_annotations(part):
            if name == "JoinColumn":
                out.append(join_column(args))
    return out


def join_table(args: str) -> JoinTable:
    a = parse_arguments(args)
    return JoinTable(
        name=_unquote(a["name"]) if "name" in a else None,
        join_columns=_join_columns(a.get("joinColumns")),
        inverse_join_columns=_join_columns(a.get("inverseJoinColumns")),
        schema=_unquote(a["schema"]) if "schema" in a else None,
        catalog=_unquote(a["catalog"]) if "catalog" in a else None,
    )


def _collection_target(type_name: str) -> str:
    t = re.sub(r"\s+", "", type_name)
    m = GENERIC_RE.match(t)
    target = m.group(1) if m else t
    return target.rsplit(".", 1)[-1]


# ---------------- scans ----------------


def scan_fields(text: str) -> List[Field]:
    fields: List[Field] = []
    for m in FIELD_RE.finditer(text):
        modifiers, ftype, fname, init = m.group(1), m.group(2), m.group(3), m.group(4)
        if ftype in NOT_A_TYPE or fname in JAVA_KEYWORDS or "static" in modifiers.split():
            continue

        block = text[block_start(text, m.start()):m.end()]
        annotations = list(iter_annotations(block))
        if any(name in RELATIONSHIP_ANNOTATIONS for name, _, _, _ in annotations):
            continue

        f = Field(name=fname, type=re.sub(r"\s+", "", ftype), default_value=_literal_default(init))
        ser = SerializationConfig()
        has_json = False
        for name, args, _, _ in annotations:
            if name == "Id":
                f.primary_key = True
            elif name == "Column":
                _apply_column(f, args)
            elif name in VALIDATION_ANNOTATIONS:
                f.validations.append(validation_rule(VALIDATION_ANNOTATIONS[name], args))
            elif name == "Schema":
                f.documentation = _documentation(args)
            elif name in ("JsonProperty", "JsonIgnore", "JsonFormat"):
                _apply_json(ser, name, args)
                has_json = True
        if has_json:
            f.serialization = ser
        fields.append(f)
    return fields


def scan_relationships(text: str) -> List[Relationship]:
    rels: List[Relationship] = []
    for name, args, _, end in iter_annotations(text):
        kind = RELATIONSHIP_ANNOTATIONS.get(name)
        if kind is None:
            continue
        a = parse_arguments(args)
        rel = Relationship(type=kind.annotation, source_field="", target_entity="")

        m = re.search(r'mappedBy\s*=\s*"(\w+)"', args)
        if m:
            rel.mapped_by = m.group(1)
        m = re.search(r"fetch\s*=\s*(?:FetchType\.)?(\w+)", args)
        if m:
            rel.fetch = m.group(1)
        rel.optional = _bool(a.get("optional"), True)
        if "cascade" in a:
            rel.cascade = _enum_refs(a["cascade"])

        pos, following = skip_annotations(text, end)
        for ann, ann_args in following:
            if ann == "JoinColumn":
                rel.join_column = join_column(ann_args)
            elif ann == "JoinTable":
                rel.join_table = join_table(ann_args)

        decl = DECL_RE.match(text, pos)
        if decl:
            rel.source_field = decl.group(3)
            rel.target_entity = _collection_target(decl.group(2))
        rels.append(rel)
    return rels


def analyze_source(text: str) -> Schema:
    """Best-effort reconstruction of a Schema from Java source.

    Raises AnalysisError when no public class declaration is present.
    """
    clean = strip_comments(text or "")

    cls = CLASS_RE.search(clean)
    if not cls:
        raise AnalysisError("No public class declaration found")

    pkg = PACKAGE_RE.search(clean)
    schema = Schema(
        entity_name=cls.group(1),
        package_name=pkg.group(1) if pkg else None,
        fields=scan_fields(clean),
        relationships=scan_relationships(clean),
    )
    logger.debug(
        "Analyzed %s: %d field(s), %d relationship(s)",
        schema.entity_name, len(schema.fields), len(schema.relationships),
    )
    return schema
