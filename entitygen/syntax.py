from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

import javalang

from .errors import GenerationError


def _type_text(node) -> str:
    name = node.name
    args = getattr(node, "arguments", None) or []
    if args:
        inner = ", ".join(_type_text(a.type) for a in args if getattr(a, "type", None) is not None)
        name = f"{name}<{inner}>"
    sub = getattr(node, "sub_type", None)
    if sub is not None:
        name = f"{name}.{_type_text(sub)}"
    return name + "[]" * len(getattr(node, "dimensions", None) or [])


def check_java_syntax(source: str) -> Optional[str]:
    """Return None when javalang accepts ``source``, else a one-line reason."""
    try:
        javalang.parse.parse(source)
    except javalang.parser.JavaSyntaxError as e:
        where = ""
        at = getattr(e, "at", None)
        pos = getattr(at, "position", None)
        if pos is not None:
            where = f" at line {pos[0]}"
        return f"{e.description or 'syntax error'}{where}"
    except javalang.tokenizer.LexerError as e:
        return f"lexer error: {e}"
    return None


def verify_artifacts(sources: Mapping[object, str]) -> None:
    """Raise GenerationError naming the first artifact javalang rejects."""
    for key, source in sources.items():
        problem = check_java_syntax(source)
        if problem:
            label = getattr(key, "value", key)
            raise GenerationError(f"Rendered {label} is not valid Java: {problem}")


def declared_fields(source: str) -> Dict[str, List[Tuple[str, str]]]:
    """Instance fields per top-level type as ``(type, name)`` pairs."""
    tree = javalang.parse.parse(source)
    out: Dict[str, List[Tuple[str, str]]] = {}
    for t in tree.types or []:
        pairs: List[Tuple[str, str]] = []
        for node in getattr(t, "body", None) or []:
            if not isinstance(node, javalang.tree.FieldDeclaration):
                continue
            if "static" in (node.modifiers or set()):
                continue
            for d in node.declarators:
                pairs.append((_type_text(node.type), d.name))
        out[t.name] = pairs
    return out
