"""
Tests for patchwarden/models/review_models.py
"""

import pytest
from pydantic import ValidationError

from patchwarden.models.review_models import (
    INLINE_SEVERITIES,
    SEVERITY_ORDER,
    AnalysisResult,
    Issue,
    ProviderConfig,
    ReviewResult,
)


class TestIssue:
    """Test Issue model validation"""

    def test_minimal_issue(self):
        issue = Issue.model_validate({"title": "Unused variable", "severity": "info"})

        assert issue.title == "Unused variable"
        assert issue.severity == "info"
        assert issue.security_category is None
        assert issue.location is None

    def test_wire_names_map_to_attributes(self, sql_injection_issue):
        assert sql_injection_issue.security_category == "injection"
        assert sql_injection_issue.location.file == "src/db.ts"
        assert sql_injection_issue.location.start_line == 10
        assert sql_injection_issue.location.end_line == 12
        assert sql_injection_issue.code_snippet.startswith("db.query")

    def test_field_names_accepted(self):
        issue = Issue(
            title="Hardcoded token",
            severity="critical",
            security_category="secrets",
            code_snippet="token = os.environ['TOKEN']",
        )

        assert issue.security_category == "secrets"

    def test_dump_uses_wire_names(self, sql_injection_issue):
        data = sql_injection_issue.model_dump(by_alias=True)

        assert data["securityCategory"] == "injection"
        assert data["location"]["startLine"] == 10
        assert "codeSnippet" in data

    @pytest.mark.parametrize("severity", ["critical", "high", "medium", "low", "info"])
    def test_all_severities_accepted(self, severity):
        assert Issue(title="t", severity=severity).severity == severity

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValidationError):
            Issue.model_validate({"title": "t", "severity": "urgent"})

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            Issue.model_validate(
                {"title": "t", "severity": "low", "securityCategory": "phishing"}
            )

    def test_title_required(self):
        with pytest.raises(ValidationError):
            Issue.model_validate({"severity": "low"})

    def test_location_requires_file(self):
        with pytest.raises(ValidationError):
            Issue.model_validate(
                {"title": "t", "severity": "low", "location": {"startLine": 3}}
            )


class TestSeverityConstants:
    def test_order_is_total_and_ascending_in_leniency(self):
        ordered = sorted(SEVERITY_ORDER, key=SEVERITY_ORDER.get)
        assert ordered == ["critical", "high", "medium", "low", "info"]

    def test_inline_severities(self):
        assert INLINE_SEVERITIES == {"critical", "high"}


class TestReviewResult:
    def test_issues_required(self):
        with pytest.raises(ValidationError):
            ReviewResult.model_validate({})

    def test_empty_issue_list_is_valid(self):
        assert ReviewResult.model_validate({"issues": []}).issues == []

    def test_json_schema_uses_wire_names(self):
        schema = ReviewResult.model_json_schema()
        issue_schema = schema["$defs"]["Issue"]

        assert "securityCategory" in issue_schema["properties"]
        assert "codeSnippet" in issue_schema["properties"]
        assert set(issue_schema["required"]) == {"title", "severity"}


class TestProviderConfig:
    def test_repr_hides_api_key(self):
        config = ProviderConfig(provider="openai", api_key="sk-secret")

        assert "sk-secret" not in repr(config)


class TestAnalysisResult:
    def test_defaults_describe_clean_review(self):
        result = AnalysisResult()

        assert result.inline_comments == []
        assert result.aggregated_comment is None
        assert result.issues == []
        assert result.has_issues is False
