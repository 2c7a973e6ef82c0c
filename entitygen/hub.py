from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .analyzer import analyze_source
from .config import GeneratorConfig
from .errors import AnalysisError, GenerationError, StoreError
from .generator import artifact_file_names, generate_artifacts
from .model import (
    SUPPORTED_TYPES,
    BatchResult,
    GeneratedArtifact,
    GenerationResult,
    RelationshipKind,
    Schema,
    ValidationKind,
    ValidationResult,
)
from .naming import canonical_name
from .store import ArtifactStore
from .syntax import verify_artifacts
from .validator import validate_schema

logger = logging.getLogger(__name__)


class EntityGenHub:
    """Validate -> render -> write, for one schema or a batch of them."""

    def __init__(self, config: GeneratorConfig, store: Optional[ArtifactStore] = None) -> None:
        self.config = config
        self.store = store or ArtifactStore(config.project_root, config.source_dir)

    def _package(self, package: Optional[str]) -> str:
        return (package or "").strip() or self.config.default_package

    def validate(self, schema: Schema) -> ValidationResult:
        return validate_schema(schema)

    def render(self, schema: Schema):
        sources = generate_artifacts(
            schema,
            api_prefix=self.config.api_prefix,
            default_package=self.config.default_package,
        )
        if self.config.verify_syntax:
            verify_artifacts(sources)
        return sources

    def generate(self, schema: Schema, overwrite: bool = False) -> GenerationResult:
        label = schema.entity_name or "<unnamed>"
        check = self.validate(schema)
        if not check.valid:
            msg = "Validation failed: " + "; ".join(check.errors)
            logger.error("%s: %s", label, msg)
            return GenerationResult.failed(msg, "validation", schema.entity_name or None)
        for w in check.warnings:
            logger.warning("%s: %s", label, w)

        name = canonical_name(schema.entity_name)
        try:
            sources = self.render(schema)
        except GenerationError as e:
            logger.error("%s: generation failed: %s", label, e)
            return GenerationResult.failed(f"Generation failed: {e}", "generation", name)

        package = self._package(schema.package_name)
        names = artifact_file_names(schema.entity_name)
        artifacts: List[GeneratedArtifact] = []
        try:
            for kind, source in sources.items():
                path, written = self.store.write(package, names[kind], source, overwrite=overwrite)
                artifacts.append(GeneratedArtifact(kind, names[kind], str(path), written))
        except (StoreError, OSError) as e:
            logger.error("%s: write failed: %s", label, e)
            return GenerationResult.failed(f"I/O error: {e}", "io", name)

        written = sum(1 for a in artifacts if a.written)
        msg = f"Generated {written} of {len(artifacts)} artifact(s) for {name}"
        if written < len(artifacts):
            msg += f" ({len(artifacts) - written} existing file(s) skipped)"
        logger.info(msg)
        return GenerationResult.ok(msg, name, artifacts)

    def generate_from_source(self, text: str, overwrite: bool = False) -> GenerationResult:
        try:
            schema = self.analyze(text)
        except AnalysisError as e:
            logger.error("Analysis failed: %s", e)
            return GenerationResult.failed(f"Analysis failed: {e}", "analysis")
        return self.generate(schema, overwrite=overwrite)

    def analyze(self, text: str) -> Schema:
        return analyze_source(text)

    def generate_batch(self, schemas: Iterable[Schema], overwrite: bool = False) -> BatchResult:
        results = [self.generate(s, overwrite=overwrite) for s in schemas]
        batch = BatchResult.of(results)
        logger.info(
            "Batch finished: %d processed, %d succeeded, %d failed",
            batch.total_processed, batch.success_count, batch.error_count,
        )
        return batch

    def preview(self, schema: Schema) -> Dict[str, str]:
        """Rendered sources keyed by file name; nothing touches the store."""
        sources = self.render(schema)
        names = artifact_file_names(schema.entity_name)
        return {names[kind]: src for kind, src in sources.items()}

    def delete(self, entity_name: str, package: Optional[str] = None) -> GenerationResult:
        name = canonical_name(entity_name)
        if not name:
            return GenerationResult.failed("Entity name is required", "validation")
        pkg = self._package(package)
        try:
            removed = self.store.delete(pkg, artifact_file_names(entity_name).values())
        except (StoreError, OSError) as e:
            logger.error("%s: delete failed: %s", name, e)
            return GenerationResult.failed(f"I/O error: {e}", "io", name)
        msg = f"Deleted {len(removed)} artifact(s) for {name}"
        logger.info(msg)
        return GenerationResult(True, msg, name)

    def list_generated(self, package: Optional[str] = None) -> List[str]:
        return self.store.list_entities(self._package(package))

    @staticmethod
    def supported_types() -> List[str]:
        return list(SUPPORTED_TYPES)

    @staticmethod
    def supported_validation_rules() -> List[str]:
        return [k.annotation for k in ValidationKind]

    @staticmethod
    def relationship_types() -> List[str]:
        return [k.annotation for k in RelationshipKind]
