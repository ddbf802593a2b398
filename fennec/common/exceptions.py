"""Exception types for fetch and extraction failures.

Fetch-level failures surface as a single SiteError carrying the logical
status, the requested URL and a plain-text rendering of the body. Missing
fields are never errors; the remaining exceptions here flag problems in the
field maps themselves or in the shape of the extracted data.
"""

from typing import Any


class FennecException(Exception):
    """Base class for every exception raised by this package."""


class SiteError(FennecException):
    """Raised when the site answers with an unrecoverable error.

    The status is the *logical* status produced by the error classifier, so
    a 200 response whose body says "This user cannot be found." surfaces as
    a 404 here.

    Attributes:
        status: Logical HTTP status code.
        url: The absolute URL that was requested.
        body: Best-effort plain text of the response body, for diagnostics.
        message: Human-readable error message.
    """

    def __init__(self, status: int, url: str, body: str = "") -> None:
        """Initialize the exception.

        Args:
            status: Logical HTTP status code.
            url: The absolute URL that was requested.
            body: Plain text rendering of the response body.
        """
        self.status = status
        self.url = url
        self.body = body
        self.message = f"Got HTTP error {status} from {url}"
        super().__init__(self.message)

    @property
    def is_transient(self) -> bool:
        """Server-side errors (5xx) might resolve on retry."""
        return self.status >= 500


class FieldMapException(FennecException):
    """Raised when a field map cannot be applied to a page.

    This is a programming error in the field map (for example an invalid CSS
    selector), as opposed to a field that is simply absent from the page.

    Attributes:
        selector: The selector that failed.
        field_name: Name of the field being extracted, when known.
        request_url: URL of the page being extracted.
    """

    def __init__(
        self,
        message: str,
        selector: str | None = None,
        field_name: str | None = None,
        request_url: str = "",
    ) -> None:
        self.message = message
        self.selector = selector
        self.field_name = field_name
        self.request_url = request_url
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.field_name:
            parts.append(f"Field: {self.field_name}")
        if self.selector is not None:
            parts.append(f"Selector: {self.selector}")
        if self.request_url:
            parts.append(f"URL: {self.request_url}")
        return "\n".join(parts)


class DataFormatAssumptionException(FennecException):
    """Raised when an extracted record doesn't match its output model.

    This is raised during Pydantic validation when the extracted data
    doesn't conform to the record model. This indicates that the site's
    markup changed in a way the field maps did not anticipate.
    """

    def __init__(
        self,
        errors: list[dict[str, Any]],
        failed_doc: dict[str, Any],
        model_name: str,
        request_url: str,
    ) -> None:
        """Initialize the exception.

        Args:
            errors: List of Pydantic validation errors.
            failed_doc: The record that failed validation.
            model_name: Name of the Pydantic model that was being validated against.
            request_url: The URL of the page that produced this record.
        """
        self.errors = errors
        self.failed_doc = failed_doc
        self.model_name = model_name
        self.request_url = request_url

        error_summary = ", ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in errors
        )
        self.message = (
            f"Data validation failed for model '{model_name}': {error_summary}"
        )
        super().__init__(f"{self.message}\nURL: {request_url}")
