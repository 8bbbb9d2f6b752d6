"""Unit tests for custom exception handling."""

from patchwarden.exceptions import (
    AIProviderException,
    ConfigurationException,
    GitHubAPIException,
    PatchWardenException,
    ResponseParseException,
    SchemaViolationException,
)


class TestPatchWardenException:
    """Test the base PatchWardenException exception."""

    def test_basic_error_creation(self):
        error = PatchWardenException("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}
        assert error.original_error is None

    def test_error_with_details(self):
        error = PatchWardenException("Test error", details={"key": "value"})

        assert error.details == {"key": "value"}
        assert "Details: " in str(error)

    def test_error_with_original_error(self):
        original = ValueError("Original error")
        error = PatchWardenException("Wrapped error", original_error=original)

        assert error.original_error is original

    def test_empty_details_not_rendered(self):
        error = PatchWardenException("Test", details={})

        assert str(error) == "Test"


class TestTaxonomy:
    """Every pipeline failure shares the PatchWardenException base."""

    def test_all_errors_share_base(self):
        errors = [
            ConfigurationException("config"),
            AIProviderException("provider"),
            ResponseParseException("parse"),
            SchemaViolationException("schema"),
            GitHubAPIException("github"),
        ]
        for error in errors:
            assert isinstance(error, PatchWardenException)

    def test_configuration_exception_records_key(self):
        error = ConfigurationException("Missing base URL", config_key="base_url")

        assert error.config_key == "base_url"
        assert error.details["config_key"] == "base_url"

    def test_provider_exception_records_provider_and_model(self):
        original = RuntimeError("429 Too Many Requests")
        error = AIProviderException(
            "Call failed", provider="anthropic", model="claude-sonnet-4-5", original_error=original
        )

        assert error.provider == "anthropic"
        assert error.model == "claude-sonnet-4-5"
        assert error.details == {"provider": "anthropic", "model": "claude-sonnet-4-5"}
        assert error.original_error is original

    def test_parse_exception_records_provider(self):
        error = ResponseParseException("Refused", provider="openai")

        assert error.provider == "openai"
        assert "openai" in str(error)

    def test_schema_violation_keeps_full_violation_list(self):
        violations = [
            {"location": "issues.0.title", "message": "Field required", "type": "missing"},
            {"location": "issues.1.severity", "message": "Input should be ...", "type": "literal_error"},
        ]
        error = SchemaViolationException("Bad schema", violations=violations)

        assert error.violations == violations
        assert error.details["violation_count"] == 2

    def test_github_exception_with_status_code(self):
        error = GitHubAPIException(
            "Request failed", status_code=404, response_body='{"message": "Not Found"}'
        )

        assert error.status_code == 404
        assert "404" in str(error)
        assert "Not Found" in str(error)
