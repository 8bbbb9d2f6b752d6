"""
Data models shared across the review pipeline
"""

from .github_models import EventContext, FileChange
from .review_models import (
    INLINE_SEVERITIES,
    SEVERITY_ORDER,
    AnalysisResult,
    InlineComment,
    Issue,
    IssueLocation,
    ProviderConfig,
    RepoContext,
    ReviewResult,
    RoutedIssues,
)

__all__ = [
    "AnalysisResult",
    "EventContext",
    "FileChange",
    "INLINE_SEVERITIES",
    "InlineComment",
    "Issue",
    "IssueLocation",
    "ProviderConfig",
    "RepoContext",
    "ReviewResult",
    "RoutedIssues",
    "SEVERITY_ORDER",
]
