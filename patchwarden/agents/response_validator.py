"""
Schema validation for untrusted provider output
"""

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Union

from pydantic import BaseModel, ValidationError

from patchwarden.exceptions import ResponseParseException, SchemaViolationException
from patchwarden.models.review_models import ReviewResult

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"^```(?:json)?\s*\n(.*?)\n?```$", re.DOTALL)

RawResponse = Union[str, bytes, Mapping[str, Any], BaseModel]


def extract_json_text(text: str) -> str:
    """Strip a surrounding markdown code fence, if any"""
    text = text.strip()
    match = _FENCED_JSON.match(text)
    if match:
        return match.group(1).strip()
    return text


def _violations(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "location": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


def validate_review(raw: RawResponse, provider: str = "unknown") -> ReviewResult:
    """
    Validate a provider response against the issue-list schema

    Args:
        raw: JSON text, a decoded mapping, or an already-typed model
        provider: Provider id, used only for error details

    Returns:
        ReviewResult with every issue well-formed

    Raises:
        ResponseParseException: If text input is undecodable, empty or not valid JSON
        SchemaViolationException: If the decoded content violates the schema
    """
    if isinstance(raw, BaseModel):
        data: Any = raw.model_dump(by_alias=True)
    elif isinstance(raw, (str, bytes)):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ResponseParseException(
                    message="Model response is not valid UTF-8",
                    provider=provider,
                    details={"position": e.start},
                    original_error=e,
                )
        text = extract_json_text(raw)
        if not text:
            raise ResponseParseException(
                message="Model response was empty", provider=provider
            )
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ResponseParseException(
                message="Model response is not valid JSON",
                provider=provider,
                details={"position": e.pos, "preview": text[:200]},
                original_error=e,
            )
    else:
        data = raw

    try:
        return ReviewResult.model_validate(data)
    except ValidationError as e:
        violations = _violations(e)
        logger.error(
            f"Provider response failed schema validation with {len(violations)} violation(s)",
            extra={"operation": "validate_review", "provider": provider},
        )
        raise SchemaViolationException(
            message="Model response does not match the issue-list schema",
            violations=violations,
            details={"provider": provider},
            original_error=e,
        )
