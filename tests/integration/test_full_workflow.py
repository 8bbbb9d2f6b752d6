"""
End-to-end tests from changed files to rendered GitHub comments

The provider SDK clients are the only thing mocked; prompt building, response
validation, routing and rendering all run for real.
"""

import json
from unittest.mock import AsyncMock, Mock, patch

import pytest

from patchwarden.agents.providers import ANTHROPIC_STRUCTURED_OUTPUTS_BETA
from patchwarden.exceptions import ResponseParseException, SchemaViolationException
from patchwarden.review.formatting import parse_metadata_line
from patchwarden.services.review_service import ReviewService


def _anthropic_message(text, stop_reason="end_turn"):
    return Mock(stop_reason=stop_reason, content=[Mock(type="text", text=text)])


@pytest.mark.integration
class TestAnthropicWorkflow:
    """Full analysis pipeline on top of a mocked Anthropic client"""

    @pytest.fixture
    def mock_anthropic(self):
        with patch("patchwarden.agents.providers.AsyncAnthropic") as mock_cls:
            client = mock_cls.return_value
            client.messages.create = AsyncMock()
            client.close = AsyncMock()
            yield client

    async def test_review_rendered(
        self, mock_anthropic, anthropic_config, repo_context, sample_files, review_payload_text
    ):
        mock_anthropic.messages.create.return_value = _anthropic_message(review_payload_text)

        result = await ReviewService(ping_users=["alice"]).analyze(
            sample_files, anthropic_config, repo_context
        )

        kwargs = mock_anthropic.messages.create.await_args.kwargs
        assert kwargs["extra_headers"] == {"anthropic-beta": ANTHROPIC_STRUCTURED_OUTPUTS_BETA}
        assert kwargs["extra_body"]["output_format"]["type"] == "json_schema"
        assert kwargs["max_tokens"] == 4096
        assert "--- a/src/db.ts" in kwargs["messages"][0]["content"]
        mock_anthropic.close.assert_awaited_once()

        inline = result.inline_comments[0]
        assert (inline.path, inline.start_line, inline.end_line) == ("src/db.ts", 2, 2)
        metadata = inline.body.split("\n\n")[1]
        assert parse_metadata_line(metadata)["severity"] == "critical"

        assert result.aggregated_comment.startswith(
            "## PatchWarden Code Review - Additional Findings"
        )
        assert result.aggregated_comment.endswith("CC: @alice</sub>")

    async def test_fenced_json_accepted(
        self, mock_anthropic, anthropic_config, repo_context, sample_files
    ):
        text = "```json\n" + json.dumps({"issues": []}) + "\n```"
        mock_anthropic.messages.create.return_value = _anthropic_message(text)

        result = await ReviewService().analyze(sample_files, anthropic_config, repo_context)

        assert not result.has_issues

    async def test_refusal(self, mock_anthropic, anthropic_config, repo_context, sample_files):
        mock_anthropic.messages.create.return_value = _anthropic_message("", "refusal")

        with pytest.raises(ResponseParseException):
            await ReviewService().analyze(sample_files, anthropic_config, repo_context)

    async def test_schema_violation(
        self, mock_anthropic, anthropic_config, repo_context, sample_files
    ):
        payload = {"issues": [{"title": "x", "severity": "urgent"}]}
        mock_anthropic.messages.create.return_value = _anthropic_message(json.dumps(payload))

        with pytest.raises(SchemaViolationException) as exc_info:
            await ReviewService().analyze(sample_files, anthropic_config, repo_context)

        assert exc_info.value.violations
