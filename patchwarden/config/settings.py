"""
Application configuration management
"""

import logging
import re
from functools import lru_cache
from typing import Annotated, List, Literal, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from patchwarden.exceptions import ConfigurationException
from patchwarden.models.review_models import ProviderConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

MUTUALLY_EXCLUSIVE_MESSAGE = (
    "target_branch and post_comment_when_no_issues are mutually exclusive. "
    "Use target_branch for push events (creates issues) and "
    "post_comment_when_no_issues for pull request events (creates comments)."
)


class Settings(BaseSettings):
    """Review run settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("INFO")

    # GitHub
    github_token: str = Field(..., min_length=1)
    github_api_url: str = Field("https://api.github.com")
    request_timeout: float = Field(30.0)

    # LLM provider
    provider: Literal["openai", "anthropic", "openai-compatible"] = Field("openai")
    api_key: str = Field(..., min_length=1)
    base_url: Optional[str] = Field(None)
    model: Optional[str] = Field(None)

    # Review behaviour
    post_comment_when_no_issues: Optional[bool] = Field(None)
    target_branch: Optional[str] = Field(None)
    ignore_patterns: Annotated[List[str], NoDecode] = Field(default_factory=list)
    ping_users: Annotated[List[str], NoDecode] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Must name a standard logging level"""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("base_url", "model", "target_branch", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty inputs as unset and trim the rest"""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("post_comment_when_no_issues", mode="before")
    @classmethod
    def parse_post_comment_flag(cls, v):
        """Only accept the literal strings 'true' and 'false'"""
        if v is None or isinstance(v, bool):
            return v
        v = str(v).strip()
        if v == "":
            return None
        if v not in ("true", "false"):
            raise ValueError(
                "post_comment_when_no_issues must be 'true' or 'false' if specified"
            )
        return v == "true"

    @field_validator("ignore_patterns", mode="before")
    @classmethod
    def split_ignore_patterns(cls, v) -> List[str]:
        """One glob per line, blank lines dropped"""
        if v is None:
            return []
        if isinstance(v, str):
            return [line.strip() for line in v.splitlines() if line.strip()]
        return list(v)

    @field_validator("ping_users", mode="before")
    @classmethod
    def split_ping_users(cls, v) -> List[str]:
        """Usernames separated by commas, whitespace or newlines"""
        if v is None:
            return []
        if isinstance(v, str):
            return [name for name in re.split(r"[,\s]+", v) if name]
        return list(v)

    @field_validator("github_api_url")
    @classmethod
    def validate_github_api_url(cls, v: str) -> str:
        """Validate GitHub API URL format"""
        if not v.startswith(("http://", "https://")):
            raise ValueError("GitHub API URL must include protocol (http:// or https://)")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_provider_requirements(self) -> "Settings":
        """Cross-field rules that depend on the selected provider and event mode"""
        if self.target_branch is not None and self.post_comment_when_no_issues is not None:
            raise ValueError(MUTUALLY_EXCLUSIVE_MESSAGE)

        if self.provider == "openai-compatible":
            missing = [name for name in ("base_url", "model") if not getattr(self, name)]
            if missing:
                raise ValueError(
                    f"{' and '.join(missing)} required when provider is 'openai-compatible'"
                )
        return self

    def provider_config(self) -> ProviderConfig:
        """Provider settings handed to the analysis core"""
        return ProviderConfig(
            provider=self.provider,
            api_key=self.api_key,
            base_url=self.base_url,
            model=self.model,
        )

    def __repr__(self) -> str:
        """Secure representation that doesn't expose secrets"""
        return f"<{self.__class__.__name__} provider={self.provider} model={self.model}>"


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process, surfacing validation errors as configuration errors"""
    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigurationException(
            message="Invalid review configuration",
            details={
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ]
            },
            original_error=e,
        )

    if settings.provider == "anthropic":
        logger.warning(
            "Anthropic provider is being used. OpenAI is recommended for better "
            "performance and reliability. Consider switching to provider 'openai'."
        )
    return settings
