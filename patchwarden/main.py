"""
PatchWarden GitHub Actions entry point
"""

import asyncio
import fnmatch
import logging
import os
import sys
from typing import Iterable, List, Mapping, Optional

from patchwarden.config.settings import Settings, get_settings
from patchwarden.exceptions import PatchWardenException
from patchwarden.models.github_models import EventContext, FileChange
from patchwarden.models.review_models import RepoContext
from patchwarden.review.footer import PROJECT_NAME, build_footer
from patchwarden.review.issue import format_issue_body, format_issue_title
from patchwarden.services.github_service import GitHubService
from patchwarden.services.review_service import ReviewService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def filter_ignored_files(
    files: Iterable[FileChange], ignore_patterns: Iterable[str]
) -> List[FileChange]:
    """Drop files whose path matches any ignore glob"""
    patterns = list(ignore_patterns)
    kept = []
    for file in files:
        if any(fnmatch.fnmatch(file.filename, pattern) for pattern in patterns):
            logger.debug(f"Ignoring {file.filename}")
            continue
        kept.append(file)
    return kept


def build_no_issues_comment(repo_context: RepoContext, ping_users: Iterable[str]) -> str:
    return (
        f"## {PROJECT_NAME} Code Review\n\n"
        "✅ No issues found in this change set.\n\n"
        + build_footer(
            repo_context.owner,
            repo_context.repo,
            commit_sha=repo_context.head_commit_sha,
            ping_users=ping_users,
        )
    )


async def review_pull_request(
    settings: Settings, event: EventContext, github: GitHubService
) -> None:
    repo_context = RepoContext(
        owner=event.owner, repo=event.repo, head_commit_sha=event.commit_sha
    )
    files = await github.list_pull_request_files(event.owner, event.repo, event.pr_number)
    files = filter_ignored_files(files, settings.ignore_patterns)

    service = ReviewService(ping_users=settings.ping_users)
    result = await service.analyze(files, settings.provider_config(), repo_context)
    if result is None:
        logger.info("No text changes to review")
        return

    if result.inline_comments:
        await github.create_review(
            event.owner,
            event.repo,
            event.pr_number,
            event.commit_sha,
            result.inline_comments,
        )
    if result.aggregated_comment:
        await github.create_issue_comment(
            event.owner, event.repo, event.pr_number, result.aggregated_comment
        )
    if not result.has_issues and settings.post_comment_when_no_issues:
        await github.create_issue_comment(
            event.owner,
            event.repo,
            event.pr_number,
            build_no_issues_comment(repo_context, settings.ping_users),
        )


async def review_push(settings: Settings, event: EventContext, github: GitHubService) -> None:
    if settings.target_branch and event.branch != settings.target_branch:
        logger.info(
            f"Push to '{event.branch}' does not match target branch "
            f"'{settings.target_branch}', skipping review"
        )
        return

    repo_context = RepoContext(
        owner=event.owner, repo=event.repo, head_commit_sha=event.commit_sha
    )
    files = await github.get_commit_files(event.owner, event.repo, event.commit_sha)
    files = filter_ignored_files(files, settings.ignore_patterns)

    service = ReviewService(ping_users=settings.ping_users)
    result = await service.analyze(files, settings.provider_config(), repo_context)
    if result is None or not result.has_issues:
        logger.info("No issues to report for pushed commit")
        return

    open_titles = await github.list_open_issue_titles(event.owner, event.repo)
    for issue in result.issues:
        title = format_issue_title(issue)
        if title in open_titles:
            logger.info(f"Issue already open, skipping: {title}")
            continue
        await github.create_issue(
            event.owner, event.repo, title, format_issue_body(issue, repo_context)
        )
        open_titles.add(title)


async def run(env: Optional[Mapping[str, str]] = None) -> int:
    """Run one review for the triggering event; returns the process exit status"""
    env = os.environ if env is None else env
    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        event = EventContext.from_environment(env)
        logger.info(
            f"Starting {PROJECT_NAME} review for {event.owner}/{event.repo} "
            f"({event.event_type}, commit {event.commit_sha[:7]})"
        )

        async with GitHubService(settings) as github:
            if event.event_type == "pull_request":
                await review_pull_request(settings, event, github)
            else:
                await review_push(settings, event, github)
    except PatchWardenException as e:
        logger.error(f"Review failed: {e}")
        return 1

    return 0


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
