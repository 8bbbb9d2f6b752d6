"""
Review service for orchestrating a single diff analysis
"""

import logging
from typing import Iterable, List, Optional

from patchwarden.agents.providers import invoke_provider
from patchwarden.models.github_models import FileChange
from patchwarden.models.review_models import (
    AnalysisResult,
    ProviderConfig,
    RepoContext,
)
from patchwarden.review.aggregated import format_aggregated_comment
from patchwarden.review.inline import generate_inline_comments, is_inline_locatable
from patchwarden.review.routing import route_issues

logger = logging.getLogger(__name__)


class ReviewService:
    """Runs the analysis pipeline; holds no state between invocations"""

    def __init__(self, ping_users: Optional[Iterable[str]] = None):
        self.ping_users: List[str] = list(ping_users or [])

    @staticmethod
    def filter_reviewable_files(files: Iterable[FileChange]) -> List[FileChange]:
        """Drop binary, oversized and content-unchanged files (no patch)"""
        return [file for file in files if file.is_reviewable]

    @staticmethod
    def format_diff_content(files: Iterable[FileChange]) -> str:
        """
        Combine per-file patches into one unified-diff style payload

        Each patch is headed with its filename so the model can attribute
        findings to files; input order is preserved.
        """
        return "\n\n".join(
            f"--- a/{file.filename}\n+++ b/{file.filename}\n{file.patch}"
            for file in files
        )

    async def analyze(
        self,
        files: Iterable[FileChange],
        provider_config: ProviderConfig,
        repo_context: RepoContext,
    ) -> Optional[AnalysisResult]:
        """
        Review a change set and render the findings

        Args:
            files: Changed files supplied by the host
            provider_config: LLM provider selection and credentials
            repo_context: Repository coordinates for links

        Returns:
            None when no file has a reviewable patch, otherwise an
            AnalysisResult (empty when the review found nothing)

        Raises:
            PatchWardenException: Any provider, parse or schema failure, unmodified
        """
        files = list(files)
        reviewable = self.filter_reviewable_files(files)
        if not reviewable:
            logger.info(
                f"No reviewable files among {len(files)} changed file(s), skipping analysis",
                extra={"operation": "analyze_skipped", "files_changed": len(files)},
            )
            return None

        diff_content = self.format_diff_content(reviewable)
        logger.info(
            f"Analyzing {len(reviewable)} file(s) for {repo_context.owner}/{repo_context.repo}",
            extra={
                "operation": "analyze_start",
                "files_reviewed": len(reviewable),
                "diff_chars": len(diff_content),
                "commit_sha": repo_context.head_commit_sha,
            },
        )

        review = await invoke_provider(provider_config, diff_content)

        if not review.issues:
            logger.info("Review completed with no issues", extra={"operation": "analyze_clean"})
            return AnalysisResult(inline_comments=[], aggregated_comment=None, issues=[])

        routed = route_issues(review.issues)
        inline_comments = generate_inline_comments(
            routed.critical_high, repo_context, self.ping_users
        )
        # Critical/high findings that cannot anchor to a line go to the summary
        unanchored = [
            issue for issue in routed.critical_high if not is_inline_locatable(issue)
        ]
        aggregated_comment = format_aggregated_comment(
            routed.medium_low_info + unanchored,
            repo_context,
            has_critical_high_issues=bool(inline_comments),
            ping_users=self.ping_users,
        )

        logger.info(
            f"Review completed: {len(routed.critical_high)} critical/high, "
            f"{len(routed.medium_low_info)} medium/low/info issue(s)",
            extra={
                "operation": "analyze_success",
                "issues_found": len(review.issues),
                "inline_comments": len(inline_comments),
            },
        )
        return AnalysisResult(
            inline_comments=inline_comments,
            aggregated_comment=aggregated_comment,
            issues=list(review.issues),
        )
