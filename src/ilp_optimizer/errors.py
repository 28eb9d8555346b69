class SolveInputError(ValueError):
    """Raised when a request is inconsistent; the caller can fix it and resubmit."""

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details


class SolverEngineError(RuntimeError):
    """Raised when a native engine fails in a way that invalidates the whole request."""


class UnrecognizedStatusError(SolverEngineError):
    """Raised when an engine reports a status or return code outside its documented vocabulary."""


class UnknownSolverError(ValueError):
    """Raised when the configured backend name does not match any adapter."""
