"""
Inline review comments for line-anchored findings
"""

from typing import Iterable, List, Optional

from patchwarden.models.review_models import InlineComment, Issue, RepoContext
from patchwarden.review.footer import build_footer
from patchwarden.review.formatting import (
    build_metadata_line,
    format_explanation,
    format_paragraphs,
    format_solution,
    get_severity_emoji,
)


def is_inline_locatable(issue: Issue) -> bool:
    """Only issues with both a file and a start line can anchor to a diff line"""
    location = issue.location
    return bool(location and location.file and location.start_line)


def format_inline_comment(
    issue: Issue,
    repo_context: RepoContext,
    ping_users: Optional[Iterable[str]] = None,
) -> str:
    """Render one issue as a concise, actionable inline comment body"""
    output = f"### {get_severity_emoji(issue.severity)} {issue.title}\n\n"
    output += f"{build_metadata_line(issue)}\n\n"

    if issue.description:
        output += f"{format_paragraphs(issue.description)}\n\n"

    output += format_explanation(issue.explanation)
    output += format_solution(issue.suggestion, issue.code_snippet)
    output += build_footer(
        repo_context.owner,
        repo_context.repo,
        commit_sha=repo_context.head_commit_sha,
        ping_users=ping_users,
    )
    return output


def generate_inline_comments(
    issues: Iterable[Issue],
    repo_context: RepoContext,
    ping_users: Optional[Iterable[str]] = None,
) -> List[InlineComment]:
    """
    Build inline comments for issues that carry a file and a start line

    Issues without a locatable position are skipped here; they still appear
    in the aggregated output path.
    """
    ping_users = list(ping_users or [])
    comments: List[InlineComment] = []

    for issue in issues:
        if not is_inline_locatable(issue):
            continue

        location = issue.location
        start_line = location.start_line
        end_line = (
            location.end_line
            if location.end_line and location.end_line > start_line
            else start_line
        )
        comments.append(
            InlineComment(
                path=location.file,
                start_line=start_line,
                end_line=end_line,
                body=format_inline_comment(issue, repo_context, ping_users),
            )
        )

    return comments
