"""Exception types raised by the evidence engine.

Upstream source failures are never raised: they travel as data
(``SearchError`` / ``EvidenceWarning``).  Only the classes below exist.
"""

from __future__ import annotations


class EvidenceEngineError(Exception):
    """Base class for evidence engine errors."""


class EmptyInputError(EvidenceEngineError, ValueError):
    """No usable keywords (or no buildable query) could be derived.

    The one failure that propagates to callers of the orchestrator.
    """

    def __init__(self, message: str, code: str = "NO_KEYWORDS"):
        super().__init__(message)
        self.code = code


class InternalExtractionFailure(EvidenceEngineError):
    """A heuristic stage (competitor extraction / signal scoring) crashed.

    Caught inside the pipeline and turned into neutral data plus an
    ``internal_error`` warning.
    """

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
