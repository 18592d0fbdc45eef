"""
Typed failures for the analysis pipeline.

Every pipeline stage raises one of these instead of returning error strings, so
the HTTP layer (and tests) can branch on the failure kind. Each class carries a
fixed ``category`` label that is safe to show to callers and the HTTP status
it maps to.
"""


class AnalysisError(Exception):
    category = "AnalysisError"
    status_code = 500

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


# ---- Client-caused (400) ----

class InvalidInput(AnalysisError):
    category = "InvalidInput"
    status_code = 400


class InvalidUrlFormat(AnalysisError):
    category = "InvalidUrlFormat"
    status_code = 400


# ---- Upstream / server-caused (500) ----

class FetchFailed(AnalysisError):
    category = "FetchFailed"


class EmailParseFailed(AnalysisError):
    category = "EmailParseFailed"


class ClassifierUnavailable(AnalysisError):
    category = "ClassifierUnavailable"


class ClassifierResponseMalformed(AnalysisError):
    category = "ClassifierResponseMalformed"


class PersistenceFailed(AnalysisError):
    category = "PersistenceFailed"
