class GradingError(Exception):
    """Base class for errors raised by the grading core."""


class InvalidMarkRange(GradingError, ValueError):
    def __init__(self, mark):
        self.mark = mark
        super().__init__(f"Mark must be a number within [0, 100], got {mark!r}")


class UnknownPerformanceLevel(GradingError, ValueError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Unknown performance level {code!r}; expected one of EM, AP, PR, AD")


class NotFoundError(GradingError, LookupError):
    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier!r} not found")


class UpstreamFetchError(GradingError):
    """
    The assessment/attendance store failed. Retryable by the caller.
    """
