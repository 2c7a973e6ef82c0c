from __future__ import annotations


class EntityGenError(Exception):
    """Base class for every error raised by entitygen."""


class SchemaError(EntityGenError):
    """Inbound payload could not be turned into a Schema."""


class GenerationError(EntityGenError):
    """Schema cannot be rendered (unsupported relationship kind, blank field, ...)."""


class AnalysisError(EntityGenError):
    """Source text could not be analyzed into a Schema."""


class StoreError(EntityGenError):
    """Artifact store I/O failure."""

    def __init__(self, message: str, path: object = None) -> None:
        super().__init__(message)
        self.path = path
