"""Exception hierarchy for jira-import.

Every failure aborts the enclosing operation (a fetch or a conversion batch);
nothing is retried and no partial result is returned.
"""

__all__ = [
    "APIError",
    "ConfigError",
    "ConversionError",
    "DeadlineExceeded",
    "DecodeError",
    "IDGenerationError",
    "JiraClientError",
    "JiraImportError",
    "ParseError",
]


class JiraImportError(Exception):
    """Base class for all jira-import errors."""

    pass


class ConfigError(JiraImportError):
    """Raised when connection configuration or query inputs are invalid.

    Always raised before any network call is made.
    """

    pass


class JiraClientError(JiraImportError):
    """Raised when a Jira API request fails.

    Transport failures (timeouts, connection errors) are raised as this class;
    HTTP and decoding failures use the subclasses below.
    """

    pass


class APIError(JiraClientError):
    """Raised for a non-2xx Jira API response.

    Attributes:
        status_code: HTTP status code
        hint: Human-readable remediation guidance
        body: Raw response body
    """

    def __init__(self, status_code: int, hint: str = "", body: str = ""):
        self.status_code = status_code
        self.hint = hint
        self.body = body
        message = f"Jira API error {status_code}"
        if hint:
            message += f"\n{hint}"
        super().__init__(message)


class DecodeError(JiraClientError):
    """Raised when a response body is not the expected JSON shape.

    The underlying exception is available as ``__cause__``.
    """

    pass


class DeadlineExceeded(JiraClientError):
    """Raised when the caller's deadline expires before a fetch completes."""

    pass


class ConversionError(JiraImportError):
    """Raised when a raw issue cannot be converted; aborts the whole batch."""

    pass


class ParseError(ConversionError):
    """Raised for an empty or unrecognised Jira timestamp.

    Attributes:
        value: The offending input string
    """

    def __init__(self, value: str, message: str | None = None):
        self.value = value
        super().__init__(message or f"unrecognised Jira timestamp: {value!r}")


class IDGenerationError(ConversionError):
    """Raised when the configured ID generator fails for an issue.

    Attributes:
        title: Title of the issue being converted
    """

    def __init__(self, title: str, message: str):
        self.title = title
        super().__init__(message)
