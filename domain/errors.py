"""
Exception hierarchy of the transformation engine.

Field-level problems (a template that cannot be resolved, a price that cannot be
parsed) never raise: they degrade and are logged. Only the errors below cross
the engine boundary.
"""

from __future__ import annotations


class TransformError(RuntimeError):
    """Base class for every error raised by the transformation engine."""
    pass


class ProfileError(TransformError):
    """Raised when the field schema is missing or malformed."""
    pass


class CatalogUnavailableError(TransformError):
    """Raised when catalog entries cannot be fetched from the backing store at all."""
    pass


class ItemProcessingError(TransformError):
    """Raised in strict mode when a single item fails structurally."""

    def __init__(self, index: int, message: str):
        super().__init__(f"Item {index + 1} failed: {message}")
        self.index = index
        self.message = message


class NoComputedFieldsError(TransformError):
    """Raised when regeneration is requested but no computed field is selected."""
    pass
