from __future__ import annotations


class ApiClientError(RuntimeError):
    """Base error for requests issued against a configured target API."""


class NetworkError(ApiClientError):
    """Raised when the target API cannot be reached at the transport level."""

    def __init__(self, *, method: str, url: str, detail: str) -> None:
        self.method = method.upper()
        self.url = url
        self.detail = detail
        super().__init__(f"Unable to reach the API ({self.method} {self.url}): {self.detail}")


class HttpStatusError(ApiClientError):
    """Raised when the target API answers with a non-success status code."""

    def __init__(
        self,
        *,
        method: str,
        url: str,
        status_code: int,
        status_text: str,
        detail: str = "",
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.status_code = status_code
        self.status_text = status_text
        self.detail = detail
        super().__init__(f"HTTP {self.status_code}: {self.status_text}")


class NotJsonError(ApiClientError):
    """Raised when a response body cannot be read as JSON."""

    HTML_PAGE = "html-page"
    UNPARSEABLE = "unparseable"

    def __init__(self, *, reason: str, preview: str = "") -> None:
        self.reason = reason
        self.preview = preview
        if reason == self.HTML_PAGE:
            message = (
                "API returned HTML instead of JSON. Please check if the URL is correct "
                "and points to a JSON API endpoint."
            )
        else:
            message = f"API returned non-JSON content: {preview}..."
        super().__init__(message)


class ValidationError(ApiClientError):
    """Raised when user supplied connection settings or fields are unusable."""


class SessionBusyError(RuntimeError):
    """Raised when a console session is asked to run two operations at once."""
