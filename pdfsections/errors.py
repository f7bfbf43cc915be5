from __future__ import annotations

# pdfsections/errors.py


class AssemblyError(Exception):
    """Raised when a merged document cannot be produced."""


class SourceLoadError(AssemblyError):
    """A section's source PDF could not be read or parsed."""

    def __init__(self, section, cause: Exception | None = None):
        self.section = section
        self.cause = cause
        name = getattr(section, "display_name", None) or "section"
        message = f"Could not load {name}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class FlattenError(Exception):
    """Ghostscript is missing or failed to flatten a document."""
