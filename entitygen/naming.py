from __future__ import annotations

import re

# Singular nouns ending in "s" that must not lose their last letter.
# Only one known case; a real inflection table would replace this.
SINGULAR_EXCEPTION = "Status"

JAVA_KEYWORDS = {
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while", "var", "yield", "record",
}


def canonical_name(name: str) -> str:
    """Singularize an entity name by stripping one trailing 's'.

    ``Products`` -> ``Product``, ``Person`` -> ``Person``. ``Status`` is the
    single hard-coded exception and comes back unchanged.
    """
    s = (name or "").strip()
    if s.lower() == SINGULAR_EXCEPTION.lower():
        return s
    if len(s) > 1 and s[-1] in "sS":
        return s[:-1]
    return s


def camel(s: str) -> str:
    return s[:1].upper() + s[1:] if s else s


def pluralize(name: str) -> str:
    if name.endswith("y") and len(name) > 1 and name[-2].lower() not in "aeiou":
        return name[:-1] + "ies"
    if name.endswith("s"):
        return name + "es"
    return name + "s"


def route_name(entity_name: str) -> str:
    return pluralize(entity_name).lower()


def to_snake_case(camel_str: str) -> str:
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", camel_str)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def java_string(value: object) -> str:
    """Quote a value as a Java string literal."""
    s = str(value)
    s = s.replace("\\", "\\\\").replace('"', '\\"')
    s = s.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{s}"'
