"""
Exception types shared by the client, services and API layers.
"""


class FichajesError(Exception):
    """Base class for all application errors."""


class AuthError(FichajesError):
    """Bad credentials or a failed login round-trip."""


class StateError(FichajesError):
    """Operation attempted without the state it needs (e.g. no active session)."""


class FetchError(FichajesError):
    """Transport failure or non-success response from the vendor API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(FetchError):
    """
    A week submission stopped part-way through.

    Events already accepted by the vendor are not rolled back; `submitted`
    lists them so the caller can report the partial result.
    """

    def __init__(self, message: str, submitted: list, failed, status_code: int | None = None):
        super().__init__(message, status_code)
        self.submitted = submitted
        self.failed = failed


class ScheduleValidationError(FichajesError):
    """Configured week fails chronology or completeness checks."""

    def __init__(self, messages: list[str], fields: dict | None = None):
        super().__init__("\n".join(messages))
        self.messages = messages
        self.fields = fields or {}
