"""Exception types raised by the layout engine and its collaborators."""


class ConfigurationError(ValueError):
    """Paper, layout and margin combination cannot produce a valid page.

    Raised when margins leave no drawable area inside a slot, or when the paper
    is too small for the fixed outer margins and gutters.
    """


class SourceUnavailable(RuntimeError):
    """A photo or photo directory could not be read or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Cannot load {source}: {reason}")
        self.source = source
        self.reason = reason


class DocumentWriteFailure(RuntimeError):
    """The output document could not be written; nothing was left on disk."""


class RenderCancelled(DocumentWriteFailure):
    """Rendering was cancelled before the document was complete."""
