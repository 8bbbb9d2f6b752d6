"""Pytest configuration and fixtures for the PatchWarden tests."""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from patchwarden.config.settings import get_settings
from patchwarden.models.github_models import FileChange
from patchwarden.models.review_models import Issue, ProviderConfig, RepoContext

# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """get_settings() is cached per process; isolate every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_env_vars(monkeypatch) -> Dict[str, str]:
    """Set up mock environment variables for testing."""
    env_vars = {
        "GITHUB_TOKEN": "ghp_test_token_1234567890",
        "PROVIDER": "openai",
        "API_KEY": "sk-test-key",
        "LOG_LEVEL": "INFO",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    for key in (
        "BASE_URL",
        "MODEL",
        "TARGET_BRANCH",
        "POST_COMMENT_WHEN_NO_ISSUES",
        "IGNORE_PATTERNS",
        "PING_USERS",
    ):
        monkeypatch.delenv(key, raising=False)
    return env_vars


# ============================================================================
# Model Fixtures
# ============================================================================


@pytest.fixture
def repo_context() -> RepoContext:
    return RepoContext(
        owner="acme",
        repo="webshop",
        head_commit_sha="0123456789abcdef0123456789abcdef01234567",
    )


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(provider="openai", api_key="sk-test-key")


@pytest.fixture
def anthropic_config() -> ProviderConfig:
    return ProviderConfig(provider="anthropic", api_key="sk-ant-test-key")


@pytest.fixture
def compatible_config() -> ProviderConfig:
    return ProviderConfig(
        provider="openai-compatible",
        api_key="local-key",
        base_url="http://localhost:11434/v1",
        model="qwen2.5-coder",
    )


@pytest.fixture
def make_issue():
    """Factory for issues; keyword arguments use wire (camelCase) or field names."""

    def _make(title: str = "Finding", severity: str = "medium", **fields: Any) -> Issue:
        return Issue.model_validate({"title": title, "severity": severity, **fields})

    return _make


@pytest.fixture
def sql_injection_issue(make_issue) -> Issue:
    return make_issue(
        title="SQL injection",
        severity="critical",
        securityCategory="injection",
        exploitability="easy",
        impact="data_breach",
        location={"file": "src/db.ts", "startLine": 10, "endLine": 12},
        description="User input is concatenated into a SQL query.",
        explanation="An attacker can terminate the string literal.\n\nThis exposes every row.",
        suggestion="Use parameterized queries.",
        codeSnippet="db.query('SELECT * FROM users WHERE id = $1', [id])",
    )


@pytest.fixture
def sample_files() -> list:
    return [
        FileChange(filename="src/db.ts", patch="@@ -1,2 +1,3 @@\n+const q = 'SELECT ' + id;"),
        FileChange(filename="assets/logo.png"),
        FileChange(filename="src/app.ts", patch="@@ -5 +5 @@\n-var x = 1;\n+let x = 1;"),
    ]


@pytest.fixture
def review_payload() -> Dict[str, Any]:
    """Raw provider JSON with one finding per routing channel."""
    return {
        "issues": [
            {
                "title": "Weak header",
                "severity": "medium",
                "securityCategory": "config",
                "exploitability": None,
                "impact": None,
                "location": None,
                "description": "Missing Content-Security-Policy header.",
                "explanation": None,
                "suggestion": None,
                "codeSnippet": None,
            },
            {
                "title": "SQL injection",
                "severity": "critical",
                "securityCategory": "injection",
                "exploitability": "easy",
                "impact": "data_breach",
                "location": {"file": "src/db.ts", "startLine": 2, "endLine": None},
                "description": "Query built by string concatenation.",
                "explanation": None,
                "suggestion": "Use bound parameters.",
                "codeSnippet": None,
            },
        ]
    }


@pytest.fixture
def review_payload_text(review_payload) -> str:
    return json.dumps(review_payload)


@pytest.fixture
def event_payload_file(tmp_path: Path):
    """Write a GitHub event payload to disk and return its path."""

    def _write(payload: Dict[str, Any]) -> str:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return _write
