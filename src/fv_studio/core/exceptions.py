"""Centralized exception hierarchy for fv-studio.

Every error the generation engine raises inherits from StudioError, so
callers can catch one type and still read the kind, message and details
of what went wrong.

Exception Hierarchy:
    StudioError (base for all project exceptions)
    ├── ConfigurationError (settings / API key issues)
    ├── ValidationError (session guard preconditions not met)
    ├── AuthorizationError (caller lacks access to the model services)
    └── ExternalServiceError (collaborator failures)
        ├── AnalysisError (strategy extraction failed or unparseable)
        └── SynthesisError (image synthesis failed or returned no image)

Usage:
    from fv_studio.core.exceptions import StudioError, ValidationError

    try:
        await orchestrator.synthesize_initial()
    except ValidationError as e:
        print(e.details)
    except StudioError as e:
        return {"error": e.to_dict()}
"""

from __future__ import annotations

from typing import Any


class StudioError(Exception):
    """Base exception for all fv-studio errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context about the error (optional).
        error_code: Machine-readable error code (optional).

    Example:
        >>> raise StudioError("Something went wrong", error_code="ERR001")
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Additional context as key-value pairs.
            error_code: Machine-readable error code.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    @property
    def kind(self) -> str:
        """Name of the error kind, as reported to the caller."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary.

        Returns:
            Dictionary with error details suitable for JSON serialization.
        """
        result: dict[str, Any] = {
            "error": self.kind,
            "message": self.message,
        }
        if self.error_code:
            result["code"] = self.error_code
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(StudioError):
    """Configuration-related errors.

    Raised when settings are invalid or a required value such as the
    Gemini API key is missing.

    Example:
        >>> raise ConfigurationError(
        ...     "GEMINI_API_KEY is not set",
        ...     details={"missing_keys": ["GEMINI_API_KEY"]},
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message, details=details, error_code=error_code or "CONFIGURATION_ERROR"
        )


class ValidationError(StudioError):
    """Session guard violations.

    Raised synchronously when an operation's precondition is not met
    (no assets, no strategy, an operation already in flight). The session
    is never modified when this is raised.

    Example:
        >>> raise ValidationError(
        ...     "At least one asset is required",
        ...     field="assets",
        ...     value=0,
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Description of the validation failure.
            field: Name of the input that failed validation.
            value: The offending value (truncated when long).
            details: Additional validation context.
            error_code: Machine-readable error code.
        """
        details = dict(details or {})
        if field:
            details["field"] = field
        if value is not None:
            str_value = str(value)
            details["value"] = (
                str_value[:100] + "..." if len(str_value) > 100 else str_value
            )
        super().__init__(
            message, details=details, error_code=error_code or "VALIDATION_ERROR"
        )


class AuthorizationError(StudioError):
    """Authorization/permission errors.

    Raised when the model services report that the caller lacks access,
    or when re-authorization is refused. The orchestrator invalidates its
    cached authorization signal when it sees this error.

    Example:
        >>> raise AuthorizationError(
        ...     "API key rejected",
        ...     service_name="gemini",
        ...     status_code=403,
        ... )
    """

    def __init__(
        self,
        message: str = "Permission denied",
        *,
        service_name: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize authorization error.

        Args:
            message: Description of permission failure.
            service_name: The service that refused access.
            status_code: HTTP status code if applicable.
            details: Additional context (avoid including credentials).
            error_code: Machine-readable error code.
        """
        details = dict(details or {})
        if service_name:
            details["service_name"] = service_name
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details, error_code=error_code or "FORBIDDEN")


class ExternalServiceError(StudioError):
    """External collaborator errors.

    Base class for failures reported by (or while calling) the analysis
    and synthesis services.

    Example:
        >>> raise ExternalServiceError(
        ...     "Model service unavailable",
        ...     service_name="gemini",
        ...     status_code=503,
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        service_name: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize external service error.

        Args:
            message: Description of the service error.
            service_name: Name of the external service.
            status_code: HTTP status code if applicable.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = dict(details or {})
        if service_name:
            details["service_name"] = service_name
        if status_code:
            details["status_code"] = status_code
        super().__init__(
            message, details=details, error_code=error_code or "EXTERNAL_SERVICE_ERROR"
        )


class AnalysisError(ExternalServiceError):
    """Strategy extraction errors.

    Raised when the extractor call fails or its result cannot be parsed
    into the expected Strategy shape.

    Example:
        >>> raise AnalysisError(
        ...     "Result not parseable as a structured strategy",
        ...     service_name="gemini",
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        service_name: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message,
            service_name=service_name,
            status_code=status_code,
            details=details,
            error_code=error_code or "ANALYSIS_FAILED",
        )


class SynthesisError(ExternalServiceError):
    """Image synthesis errors.

    Raised when the synthesizer call fails or its result carries no
    image payload.

    Example:
        >>> raise SynthesisError(
        ...     "No image payload present in result",
        ...     service_name="gemini",
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        service_name: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message,
            service_name=service_name,
            status_code=status_code,
            details=details,
            error_code=error_code or "SYNTHESIS_FAILED",
        )


__all__ = [
    "AnalysisError",
    "AuthorizationError",
    "ConfigurationError",
    "ExternalServiceError",
    "StudioError",
    "SynthesisError",
    "ValidationError",
]
