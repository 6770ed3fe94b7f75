"""
Exception hierarchy for the request-to-graph compiler.
"""


class CompilerError(Exception):
    """Base class for all compiler related errors."""


class PlanExtractionError(CompilerError):
    """Raised when the completion text contains no JSON object."""


class PlanParseError(CompilerError):
    """Raised when the extracted candidate is not valid JSON."""


class PlanShapeError(CompilerError):
    """Raised when the parsed analysis lacks required fields or has bad values."""


class UpstreamCallError(CompilerError):
    """Raised when the text-completion call itself fails."""

    def __init__(self, message: str, upstream: BaseException | None = None):
        self.upstream = upstream
        super().__init__(message)
