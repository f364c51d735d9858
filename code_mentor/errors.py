"""Error taxonomy for analysis requests and diagram rendering.

Every error carries a user-facing ``message``. None of them are retried:
the caller surfaces the message and the user re-triggers the operation.
"""

from typing import Optional


class CodeMentorError(Exception):
    """Base class for all errors surfaced to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(CodeMentorError):
    """Required input for the active mode is missing. Raised before any network call."""


class TransportError(CodeMentorError):
    """The request could not complete and no response was received."""


class ServerError(CodeMentorError):
    """The analysis service answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(CodeMentorError):
    """A success response whose body is not a valid AnalysisResult."""


class RenderError(CodeMentorError):
    """The diagram description could not be turned into markup."""
