from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

from .errors import SchemaError
from .generator import DEFAULT_API_PREFIX, DEFAULT_PACKAGE
from .model import parse_bool
from .store import DEFAULT_SOURCE_DIR, read_text

logger = logging.getLogger(__name__)

CONFIG_DIR = ".entitygen"
CONFIG_FILE = "config.json"

_CAMEL_KEYS = {
    "sourceDir": "source_dir",
    "defaultPackage": "default_package",
    "apiPrefix": "api_prefix",
    "verifySyntax": "verify_syntax",
}


@dataclass
class GeneratorConfig:
    project_root: Path
    source_dir: str = DEFAULT_SOURCE_DIR
    default_package: str = DEFAULT_PACKAGE
    api_prefix: str = DEFAULT_API_PREFIX
    verify_syntax: bool = True


def config_path(proj_root: Path) -> Path:
    return Path(proj_root) / CONFIG_DIR / CONFIG_FILE


def read_config_file(proj_root: Path) -> Dict[str, Any]:
    """Settings from ``.entitygen/config.json``; unreadable files count as empty."""
    cfg = config_path(proj_root)
    if not cfg.exists():
        return {}
    try:
        data = json.loads(read_text(cfg))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring %s: %s", cfg, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", cfg)
        return {}

    known = {f.name for f in fields(GeneratorConfig)} - {"project_root"}
    out: Dict[str, Any] = {}
    for k, v in data.items():
        key = _CAMEL_KEYS.get(k, k)
        if key == "verify_syntax":
            try:
                out[key] = parse_bool(v, True, k)
            except SchemaError as e:
                logger.warning("Ignoring %s in %s: %s", k, cfg, e)
        elif key in known:
            out[key] = str(v)
        else:
            logger.debug("Unknown config key %r in %s", k, cfg)
    return out


def load_config(proj_root: Path, **overrides: Any) -> GeneratorConfig:
    """Defaults, then the project's config file, then non-None overrides."""
    root = Path(proj_root).resolve()
    cfg = replace(GeneratorConfig(project_root=root), **read_config_file(root))
    given = {k: v for k, v in overrides.items() if v is not None}
    return replace(cfg, **given)
