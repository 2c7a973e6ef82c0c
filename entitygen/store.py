from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from .errors import StoreError
from .model import ARTIFACT_SUFFIXES

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_DIR = "src/main/java"

NON_ENTITY_SUFFIXES = tuple(s for s in ARTIFACT_SUFFIXES.values() if s)


def read_text(pth: Path) -> str:
    return pth.read_text(encoding="utf-8", errors="replace")


def write_text(pth: Path, txt: str) -> None:
    pth.parent.mkdir(parents=True, exist_ok=True)
    with pth.open("w", encoding="utf-8", errors="replace", newline="\n") as fh:
        fh.write(txt)


def relpath(pth: Path, root: Path) -> str:
    try:
        return str(pth.relative_to(root))
    except ValueError:
        return str(pth)


def to_pkg_dir(src_main_java: Path, pkg: str) -> Path:
    return src_main_java / Path(pkg.replace(".", "/"))


class ArtifactStore:
    """Local file store for generated sources under ``<root>/<source_dir>``.

    Writers are not coordinated: two processes writing the same path leave
    whichever finished last.
    """

    def __init__(self, project_root: Path, source_dir: str = DEFAULT_SOURCE_DIR) -> None:
        self.project_root = Path(project_root)
        self.base = self.project_root / source_dir

    def package_dir(self, package: str) -> Path:
        return to_pkg_dir(self.base, package)

    def path_for(self, package: str, file_name: str) -> Path:
        return self.package_dir(package) / file_name

    def write(self, package: str, file_name: str, content: str, overwrite: bool = False) -> Tuple[Path, bool]:
        """Write one artifact. Returns ``(path, written)``; existing files are
        left alone unless ``overwrite`` is set."""
        target = self.path_for(package, file_name)
        if target.exists() and not overwrite:
            logger.info("Skipped existing %s", relpath(target, self.project_root))
            return target, False
        try:
            write_text(target, content.rstrip() + "\n")
        except OSError as e:
            raise StoreError(f"Cannot write {target}: {e}", target) from e
        logger.debug("Wrote %s", relpath(target, self.project_root))
        return target, True

    def delete(self, package: str, file_names: Iterable[str]) -> List[Path]:
        removed: List[Path] = []
        for name in file_names:
            target = self.path_for(package, name)
            if not target.exists():
                continue
            try:
                target.unlink()
            except OSError as e:
                raise StoreError(f"Cannot delete {target}: {e}", target) from e
            removed.append(target)
        return removed

    def list_entities(self, package: str) -> List[str]:
        d = self.package_dir(package)
        if not d.is_dir():
            return []
        try:
            stems = [p.stem for p in d.glob("*.java") if p.is_file()]
        except OSError as e:
            raise StoreError(f"Cannot list {d}: {e}", d) from e
        return sorted(s for s in stems if not s.endswith(NON_ENTITY_SUFFIXES))
