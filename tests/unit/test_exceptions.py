"""Tests for centralized exception hierarchy.

Covers:
- Exception initialization with various parameters
- Details dictionary population
- Error code assignment
- to_dict() serialization
- Exception inheritance
"""

import pytest


class TestStudioError:
    """Tests for StudioError base exception class."""

    @pytest.mark.unit
    def test_basic_initialization(self) -> None:
        """Verify basic initialization with message only."""
        from fv_studio.core.exceptions import StudioError

        error = StudioError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}
        assert error.error_code is None
        assert error.kind == "StudioError"

    @pytest.mark.unit
    def test_initialization_with_details(self) -> None:
        """Verify initialization with details dictionary."""
        from fv_studio.core.exceptions import StudioError

        details = {"key": "value", "count": 42}
        error = StudioError("Error with details", details=details)

        assert error.details == details

    @pytest.mark.unit
    def test_to_dict_basic(self) -> None:
        """Verify to_dict returns correct structure for basic error."""
        from fv_studio.core.exceptions import StudioError

        assert StudioError("Basic error").to_dict() == {
            "error": "StudioError",
            "message": "Basic error",
        }

    @pytest.mark.unit
    def test_to_dict_full(self) -> None:
        """Verify to_dict includes code and details when present."""
        from fv_studio.core.exceptions import StudioError

        error = StudioError(
            "Full error", details={"context": "test"}, error_code="FULL_ERR"
        )

        assert error.to_dict() == {
            "error": "StudioError",
            "message": "Full error",
            "code": "FULL_ERR",
            "details": {"context": "test"},
        }


class TestConfigurationError:
    """Tests for ConfigurationError."""

    @pytest.mark.unit
    def test_default_error_code(self) -> None:
        """Verify default error code is set."""
        from fv_studio.core.exceptions import ConfigurationError

        error = ConfigurationError("GEMINI_API_KEY is not set")

        assert error.error_code == "CONFIGURATION_ERROR"

    @pytest.mark.unit
    def test_custom_error_code(self) -> None:
        """Verify custom error code overrides default."""
        from fv_studio.core.exceptions import ConfigurationError

        error = ConfigurationError("Bad value", error_code="BAD_VALUE")

        assert error.error_code == "BAD_VALUE"


class TestValidationError:
    """Tests for ValidationError."""

    @pytest.mark.unit
    def test_field_and_value(self) -> None:
        """Verify field and value land in details."""
        from fv_studio.core.exceptions import ValidationError

        error = ValidationError("At least one asset is required", field="assets", value=0)

        assert error.error_code == "VALIDATION_ERROR"
        assert error.details == {"field": "assets", "value": "0"}

    @pytest.mark.unit
    def test_long_value_truncated(self) -> None:
        """Verify long values are truncated to 100 characters."""
        from fv_studio.core.exceptions import ValidationError

        error = ValidationError("Too long", field="request", value="x" * 150)

        assert error.details["value"] == "x" * 100 + "..."

    @pytest.mark.unit
    def test_caller_details_not_mutated(self) -> None:
        """Verify the details dict passed in is copied, not modified."""
        from fv_studio.core.exceptions import AuthorizationError, SynthesisError, ValidationError

        shared = {"attempt": 1}
        ValidationError("Bad", field="assets", value=0, details=shared)
        AuthorizationError("Denied", service_name="gemini", details=shared)
        SynthesisError("Failed", service_name="gemini", status_code=500, details=shared)

        assert shared == {"attempt": 1}

    @pytest.mark.unit
    def test_without_context(self) -> None:
        """Verify no field or value keys without context."""
        from fv_studio.core.exceptions import ValidationError

        error = ValidationError("Generation in progress")

        assert error.details == {}


class TestServiceErrors:
    """Tests for AuthorizationError and the collaborator errors."""

    @pytest.mark.unit
    def test_authorization_defaults(self) -> None:
        """Verify AuthorizationError default message and code."""
        from fv_studio.core.exceptions import AuthorizationError

        error = AuthorizationError()

        assert error.message == "Permission denied"
        assert error.error_code == "FORBIDDEN"

    @pytest.mark.unit
    def test_authorization_context(self) -> None:
        """Verify service name and status code are recorded."""
        from fv_studio.core.exceptions import AuthorizationError

        error = AuthorizationError("Key rejected", service_name="gemini", status_code=403)

        assert error.details == {"service_name": "gemini", "status_code": 403}

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("cls_name", "code"),
        [
            ("ExternalServiceError", "EXTERNAL_SERVICE_ERROR"),
            ("AnalysisError", "ANALYSIS_FAILED"),
            ("SynthesisError", "SYNTHESIS_FAILED"),
        ],
    )
    def test_default_codes(self, cls_name: str, code: str) -> None:
        """Verify each collaborator error has its own default code."""
        from fv_studio.core import exceptions

        error = getattr(exceptions, cls_name)("failed", service_name="gemini", status_code=500)

        assert error.error_code == code
        assert error.details["service_name"] == "gemini"
        assert error.details["status_code"] == 500
        assert error.kind == cls_name


class TestExceptionInheritance:
    """Tests for exception hierarchy relationships."""

    @pytest.mark.unit
    def test_all_inherit_from_base(self) -> None:
        """Verify every exception is catchable as StudioError."""
        from fv_studio.core.exceptions import (
            AnalysisError,
            AuthorizationError,
            ConfigurationError,
            ExternalServiceError,
            StudioError,
            SynthesisError,
            ValidationError,
        )

        for cls in (
            AnalysisError,
            AuthorizationError,
            ConfigurationError,
            ExternalServiceError,
            SynthesisError,
            ValidationError,
        ):
            assert issubclass(cls, StudioError)
            assert issubclass(cls, Exception)

    @pytest.mark.unit
    def test_collaborator_errors_are_service_errors(self) -> None:
        """Verify analysis and synthesis errors share a parent."""
        from fv_studio.core.exceptions import (
            AnalysisError,
            AuthorizationError,
            ExternalServiceError,
            SynthesisError,
        )

        assert issubclass(AnalysisError, ExternalServiceError)
        assert issubclass(SynthesisError, ExternalServiceError)
        assert not issubclass(AuthorizationError, ExternalServiceError)

    @pytest.mark.unit
    def test_catch_by_base_class(self) -> None:
        """Verify specific errors can be caught by the base class."""
        from fv_studio.core.exceptions import StudioError, SynthesisError

        with pytest.raises(StudioError) as exc_info:
            raise SynthesisError("No image payload present in result")

        assert exc_info.value.kind == "SynthesisError"
