"""Export error types."""


class ExportError(RuntimeError):
    """Raised when a transcript export cannot be rendered or written."""
