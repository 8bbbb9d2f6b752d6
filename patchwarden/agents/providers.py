"""
LLM provider gateway: one review call per invocation, uniform error taxonomy
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Type

import anthropic
import httpx
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.exceptions import (
    AgentRunError,
    ModelHTTPError,
    UnexpectedModelBehavior,
)
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from patchwarden.agents.prompts import (
    build_analysis_prompt,
    build_schema_instructions,
    get_system_prompt,
)
from patchwarden.agents.response_validator import validate_review
from patchwarden.exceptions import (
    AIProviderException,
    ConfigurationException,
    ResponseParseException,
)
from patchwarden.models.review_models import ProviderConfig, ReviewResult

logger = logging.getLogger(__name__)

# Output budget for backends that need max_tokens declared up front
CHARS_PER_TOKEN = 4
MIN_OUTPUT_TOKENS = 4096
MAX_OUTPUT_TOKENS = 32000

ANTHROPIC_STRUCTURED_OUTPUTS_BETA = "structured-outputs-2025-11-13"


class ProviderKind(str, Enum):
    """Closed set of supported LLM backends"""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OPENAI_COMPATIBLE = "openai-compatible"


def compute_output_token_budget(diff: str) -> int:
    """Scale the response budget with the diff, never below the floor"""
    estimated_input_tokens = len(diff) // CHARS_PER_TOKEN
    return min(MAX_OUTPUT_TOKENS, max(MIN_OUTPUT_TOKENS, estimated_input_tokens))


def build_strict_json_schema() -> Dict[str, Any]:
    """Issue-list schema with closed objects, as schema-enforcing backends require"""
    schema = copy.deepcopy(ReviewResult.model_json_schema())

    def _close(node: Any) -> None:
        if isinstance(node, dict):
            if node.get("type") == "object":
                node["additionalProperties"] = False
            for value in node.values():
                _close(value)
        elif isinstance(node, list):
            for item in node:
                _close(item)

    _close(schema)
    return schema


class ReviewProvider(ABC):
    """Turns a combined diff into a validated ReviewResult or fails"""

    kind: ProviderKind
    default_model: Optional[str] = None

    def __init__(self, config: ProviderConfig):
        if not config.api_key:
            raise ConfigurationException(
                message=f"API key not provided for {self.kind.value} provider",
                config_key="api_key",
                details={"provider": self.kind.value},
            )
        self.config = config
        self.model_name = config.model or self.default_model

    @abstractmethod
    async def produce_issues(self, diff: str) -> ReviewResult:
        """Run exactly one provider call for the diff"""

    def _call_failed(self, error: Exception) -> AIProviderException:
        logger.error(
            f"{self.kind.value} API error: {error}",
            extra={
                "operation": "provider_call_failed",
                "provider": self.kind.value,
                "error_type": type(error).__name__,
            },
        )
        return AIProviderException(
            message=f"{self.kind.value} provider call failed",
            provider=self.kind.value,
            model=self.model_name,
            original_error=error,
        )


class OpenAIReviewProvider(ReviewProvider):
    """OpenAI Responses API with server-side structured output"""

    kind = ProviderKind.OPENAI
    default_model = "gpt-5.1-codex-mini"

    def _build_client(self) -> AsyncOpenAI:
        if self.config.base_url:
            logger.info(f"Using custom OpenAI base URL: {self.config.base_url}")
        return AsyncOpenAI(api_key=self.config.api_key, base_url=self.config.base_url)

    async def produce_issues(self, diff: str) -> ReviewResult:
        client = self._build_client()
        try:
            response = await client.responses.parse(
                model=self.model_name,
                input=[
                    {"role": "system", "content": get_system_prompt()},
                    {"role": "user", "content": build_analysis_prompt(diff)},
                ],
                text_format=ReviewResult,
            )
        except ValidationError as e:
            raise ResponseParseException(
                message="Model response could not be parsed into the review schema",
                provider=self.kind.value,
                original_error=e,
            )
        except openai.OpenAIError as e:
            raise self._call_failed(e)
        finally:
            await client.close()

        if response.output_parsed is None:
            raise ResponseParseException(
                message=(
                    "Model response could not be parsed. The model may have refused "
                    "to respond or the response format was invalid."
                ),
                provider=self.kind.value,
            )
        return validate_review(response.output_parsed, provider=self.kind.value)


class AnthropicReviewProvider(ReviewProvider):
    """Anthropic Messages API with JSON-schema output format"""

    kind = ProviderKind.ANTHROPIC
    default_model = "claude-sonnet-4-5"

    def _build_client(self) -> AsyncAnthropic:
        if self.config.base_url:
            logger.info(f"Using custom Anthropic base URL: {self.config.base_url}")
        return AsyncAnthropic(api_key=self.config.api_key, base_url=self.config.base_url)

    async def produce_issues(self, diff: str) -> ReviewResult:
        max_tokens = compute_output_token_budget(diff)
        logger.debug(f"Anthropic output budget: {max_tokens} tokens for {len(diff)} chars")

        client = self._build_client()
        try:
            message = await client.messages.create(
                model=self.model_name,
                max_tokens=max_tokens,
                system=get_system_prompt(),
                messages=[{"role": "user", "content": build_analysis_prompt(diff)}],
                extra_headers={"anthropic-beta": ANTHROPIC_STRUCTURED_OUTPUTS_BETA},
                extra_body={
                    "output_format": {
                        "type": "json_schema",
                        "schema": build_strict_json_schema(),
                    }
                },
            )
        except anthropic.AnthropicError as e:
            raise self._call_failed(e)
        finally:
            await client.close()

        if message.stop_reason == "refusal":
            raise ResponseParseException(
                message="Model refused to review the diff",
                provider=self.kind.value,
                details={"stop_reason": message.stop_reason},
            )

        text = next(
            (block.text for block in message.content if block.type == "text"), None
        )
        if not text:
            raise ResponseParseException(
                message="Model response contained no text content",
                provider=self.kind.value,
                details={"stop_reason": message.stop_reason},
            )
        return validate_review(text, provider=self.kind.value)


class OpenAICompatibleReviewProvider(ReviewProvider):
    """Any OpenAI-compatible chat endpoint, schema requested in the prompt"""

    kind = ProviderKind.OPENAI_COMPATIBLE

    def __init__(self, config: ProviderConfig):
        for key in ("base_url", "model"):
            if not getattr(config, key):
                raise ConfigurationException(
                    message=f"{key} is required when provider is 'openai-compatible'",
                    config_key=key,
                )
        super().__init__(config)

    def _build_agent(self, client: AsyncOpenAI) -> Agent:
        model = OpenAIChatModel(
            self.model_name, provider=OpenAIProvider(openai_client=client)
        )
        return Agent(model=model, output_type=str, system_prompt=get_system_prompt())

    async def produce_issues(self, diff: str) -> ReviewResult:
        logger.info(f"Using OpenAI-compatible endpoint: {self.config.base_url}")
        client = AsyncOpenAI(api_key=self.config.api_key, base_url=self.config.base_url)
        agent = self._build_agent(client)
        prompt = f"{build_analysis_prompt(diff)}\n\n{build_schema_instructions()}"
        try:
            result = await agent.run(prompt)
        except ModelHTTPError as e:
            raise self._call_failed(e)
        except UnexpectedModelBehavior as e:
            raise ResponseParseException(
                message="Model returned no usable text response",
                provider=self.kind.value,
                original_error=e,
            )
        except (AgentRunError, openai.OpenAIError, httpx.HTTPError) as e:
            raise self._call_failed(e)
        finally:
            await client.close()

        return validate_review(result.output, provider=self.kind.value)


PROVIDER_REGISTRY: Dict[ProviderKind, Type[ReviewProvider]] = {
    provider_cls.kind: provider_cls
    for provider_cls in (
        OpenAIReviewProvider,
        AnthropicReviewProvider,
        OpenAICompatibleReviewProvider,
    )
}

_unhandled_kinds = set(ProviderKind) - set(PROVIDER_REGISTRY)
if _unhandled_kinds:
    raise RuntimeError(f"No review provider registered for: {sorted(_unhandled_kinds)}")


def get_review_provider(config: ProviderConfig) -> ReviewProvider:
    """
    Resolve the backend for a provider config

    Raises:
        ConfigurationException: Unknown provider id or missing provider settings
    """
    try:
        kind = ProviderKind(config.provider)
    except ValueError:
        raise ConfigurationException(
            message=f"Unknown provider '{config.provider}'",
            config_key="provider",
            details={"supported": [k.value for k in ProviderKind]},
        )
    return PROVIDER_REGISTRY[kind](config)


async def invoke_provider(config: ProviderConfig, diff: str) -> ReviewResult:
    """Request a review of the diff from the configured provider"""
    provider = get_review_provider(config)
    logger.info(
        f"Requesting review from {provider.kind.value} model {provider.model_name}",
        extra={
            "operation": "provider_call_start",
            "provider": provider.kind.value,
            "diff_chars": len(diff),
        },
    )

    review = await provider.produce_issues(diff)

    logger.info(
        f"Review received with {len(review.issues)} issue(s)",
        extra={"operation": "provider_call_success", "provider": provider.kind.value},
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(json.dumps(review.model_dump(by_alias=True), indent=2))
    return review
