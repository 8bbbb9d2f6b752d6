"""
Data models for code review findings and analysis results
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["critical", "high", "medium", "low", "info"]

SecurityCategory = Literal[
    "injection",
    "authentication",
    "authorization",
    "cryptography",
    "xss",
    "xxe",
    "deserialization",
    "ssrf",
    "csrf",
    "idor",
    "secrets",
    "config",
    "logging",
    "api",
    "other",
]

Exploitability = Literal["easy", "medium", "hard"]

Impact = Literal[
    "system_compromise",
    "data_breach",
    "privilege_escalation",
    "information_disclosure",
    "denial_of_service",
    "data_modification",
    "minimal",
]

# Ascending order means increasing leniency
SEVERITY_ORDER: Dict[str, int] = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
    "info": 4,
}

# Severities that are posted as inline, line-anchored comments
INLINE_SEVERITIES: FrozenSet[str] = frozenset({"critical", "high"})


class IssueLocation(BaseModel):
    """Where in the change set a finding applies"""

    model_config = ConfigDict(populate_by_name=True)

    file: str = Field(..., description="Path of the file, relative to the repository root")
    start_line: Optional[int] = Field(
        None,
        alias="startLine",
        description="First line of the affected range in the new version of the file",
    )
    end_line: Optional[int] = Field(
        None,
        alias="endLine",
        description="Last line of the affected range; omit for single-line findings",
    )


class Issue(BaseModel):
    """Individual finding produced by a review pass"""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Short, specific title of the finding")
    severity: Severity = Field(
        ..., description="Urgency of the finding: critical, high, medium, low or info"
    )
    security_category: Optional[SecurityCategory] = Field(
        None,
        alias="securityCategory",
        description="Security category; null for non-security findings",
    )
    exploitability: Optional[Exploitability] = Field(
        None, description="How easily the flaw can be exploited; null if not applicable"
    )
    impact: Optional[Impact] = Field(
        None, description="Worst-case impact if exploited; null if not applicable"
    )
    location: Optional[IssueLocation] = Field(
        None, description="File and line range; null when the finding is diff-wide"
    )
    description: Optional[str] = Field(
        None, description="One or two sentences stating what is wrong"
    )
    explanation: Optional[str] = Field(
        None, description="Why this is a problem and how it could be triggered"
    )
    suggestion: Optional[str] = Field(
        None, description="Concrete, actionable fix in prose"
    )
    code_snippet: Optional[str] = Field(
        None,
        alias="codeSnippet",
        description="Corrected code illustrating the fix, without markdown fences",
    )


class ReviewResult(BaseModel):
    """Validated output of one provider call, issues kept in provider order"""

    issues: List[Issue] = Field(..., description="Findings, most severe first")


class ProviderConfig(BaseModel):
    """Provider selection and credentials for a single analysis"""

    provider: str
    api_key: str
    base_url: Optional[str] = None
    model: Optional[str] = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} provider={self.provider} model={self.model}>"


class RepoContext(BaseModel):
    """Repository coordinates used for permalinks and footers"""

    owner: str
    repo: str
    head_commit_sha: str


@dataclass
class RoutedIssues:
    """Strict partition of a review result by severity"""

    critical_high: List[Issue] = field(default_factory=list)
    medium_low_info: List[Issue] = field(default_factory=list)


@dataclass
class InlineComment:
    """Review annotation anchored to a file and line range"""

    path: str
    start_line: int
    end_line: int
    body: str


@dataclass
class AnalysisResult:
    """Rendered output of one analysis, plus the raw issue list"""

    inline_comments: List[InlineComment] = field(default_factory=list)
    aggregated_comment: Optional[str] = None
    issues: List[Issue] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)
