"""Error taxonomy for the retrieval-augmented chat pipeline."""


class RAGError(Exception):
    """Base class for pipeline errors that map to a user-visible failure."""


class ConfigError(RAGError):
    """A required credential or identifier is not configured."""


class NotInitializedError(RAGError):
    """A client handle was used before the registry was initialized."""


class UpstreamError(RAGError):
    """The embedding, vector index or language model service failed."""


class EmptyResultError(RAGError):
    """The vector index returned zero matches."""


class ValidationError(RAGError):
    """The inbound request is malformed."""


class SessionStateError(RuntimeError):
    """A streaming session was driven out of order (local bug, never sent to clients)."""
