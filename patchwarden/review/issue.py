"""
Standalone tracker issues for findings on pushed commits
"""

from patchwarden.models.review_models import Issue, RepoContext
from patchwarden.review.footer import build_footer
from patchwarden.review.formatting import (
    build_file_permalink,
    build_metadata_line,
    format_explanation,
    format_paragraphs,
    format_solution,
    get_severity_emoji,
)

# Title marker, also used to recognise issues opened by earlier runs
ISSUE_TITLE_PREFIX = "[PATCHWARDEN]"


def format_issue_title(issue: Issue) -> str:
    return f"{ISSUE_TITLE_PREFIX} {issue.title}"


def format_issue_body(issue: Issue, repo_context: RepoContext) -> str:
    output = (
        f"## {ISSUE_TITLE_PREFIX} {get_severity_emoji(issue.severity)} {issue.title}\n\n"
    )
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
        output += f"**Location:** {permalink}\n\n"

    output += format_explanation(issue.explanation)
    output += format_solution(issue.suggestion, issue.code_snippet)
    output += build_footer(
        repo_context.owner, repo_context.repo, commit_sha=repo_context.head_commit_sha
    )
    return output
