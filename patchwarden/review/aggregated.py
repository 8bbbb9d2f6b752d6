"""
Aggregated summary comment for findings without an inline channel
"""

from typing import Iterable, List, Optional

from patchwarden.models.review_models import Issue, RepoContext
from patchwarden.review.footer import PROJECT_NAME, build_footer
from patchwarden.review.formatting import (
    build_file_permalink,
    build_metadata_line,
    format_explanation,
    format_paragraphs,
    format_solution,
    get_severity_emoji,
)
from patchwarden.review.routing import sort_issues


def build_aggregated_header(has_critical_high_issues: bool) -> str:
    """Header wording only; it never changes which issues are listed"""
    title = f"## {PROJECT_NAME} Code Review"
    if has_critical_high_issues:
        title += " - Additional Findings"
    return f"{title}\n\n"


def format_aggregated_comment(
    issues: Iterable[Issue],
    repo_context: RepoContext,
    has_critical_high_issues: bool = False,
    ping_users: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Render issues as one numbered summary comment

    Args:
        issues: Findings to list, in any order
        repo_context: Repository coordinates for permalinks and footer
        has_critical_high_issues: Whether critical/high findings were posted inline
        ping_users: Users to mention in the footer

    Returns:
        Markdown body, or None when there is nothing to summarize
    """
    sorted_issues: List[Issue] = sort_issues(issues)
    if not sorted_issues:
        return None

    output = build_aggregated_header(has_critical_high_issues)

    for index, issue in enumerate(sorted_issues, start=1):
        output += f"### {index}. {get_severity_emoji(issue.severity)} {issue.title}\n\n"
        output += f"{build_metadata_line(issue)}\n\n"

        if issue.description:
            output += f"{format_paragraphs(issue.description)}\n\n"

        if issue.location and issue.location.file:
            permalink = build_file_permalink(
                repo_context.owner,
                repo_context.repo,
                repo_context.head_commit_sha,
                issue.location.file,
                issue.location.start_line,
                issue.location.end_line,
            )
            output += f"{permalink}\n\n"

        output += format_explanation(issue.explanation)
        output += format_solution(issue.suggestion, issue.code_snippet)

    output += build_footer(
        repo_context.owner,
        repo_context.repo,
        commit_sha=repo_context.head_commit_sha,
        ping_users=ping_users,
    )
    return output
