from __future__ import annotations


class GraphMLError(Exception):
    """Raised when the document cannot be written to its sink."""


class WriterStateError(GraphMLError, RuntimeError):
    """Raised when a writer operation is called out of sequence."""
