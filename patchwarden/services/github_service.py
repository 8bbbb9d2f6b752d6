"""
GitHub API integration service
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Set

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from patchwarden.config.settings import Settings, get_settings
from patchwarden.exceptions import GitHubAPIException
from patchwarden.models.github_models import FileChange
from patchwarden.models.review_models import InlineComment

logger = logging.getLogger(__name__)

PER_PAGE = 100
# GitHub stops listing pull request files after 3000 entries
MAX_PAGES = 30
INTEGRATION_PERMISSION_ERROR = "Resource not accessible by integration"


def _is_retryable(error: BaseException) -> bool:
    """Transport failures and 5xx responses; 4xx are final"""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


class GitHubService:
    """Thin client for the GitHub endpoints a review run needs"""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.base_url = settings.github_api_url
        self.headers = {
            "Authorization": f"Bearer {settings.github_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=settings.request_timeout,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        response: httpx.Response = await self.client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> Any:
        """Issue a request and translate transport and status failures"""
        try:
            response = await self._send(method, url, **kwargs)
        except httpx.HTTPStatusError as e:
            logger.error(
                f"GitHub API error {e.response.status_code} during {operation}: {e.response.text}",
                extra={
                    "operation": operation,
                    "error_type": "api_error",
                    "status_code": e.response.status_code,
                },
            )
            raise GitHubAPIException(
                message=f"GitHub API error during {operation}",
                status_code=e.response.status_code,
                response_body=e.response.text,
                details={"url": url},
                original_error=e,
            )
        except httpx.RequestError as e:
            logger.error(
                f"Network error during {operation}: {e}",
                extra={"operation": operation, "error_type": "network_error"},
            )
            raise GitHubAPIException(
                message=f"Network error during {operation}",
                details={"url": url},
                original_error=e,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def list_pull_request_files(
        self, owner: str, repo: str, pr_number: int
    ) -> List[FileChange]:
        """Fetch every changed file of a pull request, following pagination"""
        files: List[FileChange] = []
        try:
            for page in range(1, MAX_PAGES + 1):
                batch: List[Dict[str, Any]] = await self._request(
                    "GET",
                    f"/repos/{owner}/{repo}/pulls/{pr_number}/files",
                    "list_pull_request_files",
                    params={"per_page": PER_PAGE, "page": page},
                )
                files.extend(FileChange.model_validate(item) for item in batch or [])
                if not batch or len(batch) < PER_PAGE:
                    break
        except GitHubAPIException as e:
            if e.status_code == 403 and INTEGRATION_PERMISSION_ERROR in e.details.get(
                "response_body", ""
            ):
                raise GitHubAPIException(
                    message=(
                        "Permission denied: the GitHub token cannot list pull request files. "
                        "Ensure the workflow has 'pull-requests: read' permission."
                    ),
                    status_code=403,
                    original_error=e,
                )
            raise

        logger.info(
            f"Fetched {len(files)} file(s) for pull request #{pr_number}",
            extra={"operation": "list_pull_request_files", "pr_number": pr_number},
        )
        return files

    async def get_commit_files(self, owner: str, repo: str, sha: str) -> List[FileChange]:
        commit: Dict[str, Any] = await self._request(
            "GET", f"/repos/{owner}/{repo}/commits/{sha}", "get_commit_files"
        )
        return [FileChange.model_validate(item) for item in commit.get("files", [])]

    async def create_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        commit_sha: str,
        comments: Sequence[InlineComment],
    ) -> Dict[str, Any]:
        """Post inline comments as a single COMMENT review pinned to a commit"""
        payload: Dict[str, Any] = {
            "commit_id": commit_sha,
            "event": "COMMENT",
            "comments": [self._review_comment_payload(c) for c in comments],
        }

        result: Dict[str, Any] = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews",
            "create_review",
            json=payload,
        )
        logger.info(f"Posted review with {len(comments)} inline comment(s) to #{pr_number}")
        return result

    @staticmethod
    def _review_comment_payload(comment: InlineComment) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "path": comment.path,
            "line": comment.end_line,
            "side": "RIGHT",
            "body": comment.body,
        }
        if comment.end_line > comment.start_line:
            payload["start_line"] = comment.start_line
            payload["start_side"] = "RIGHT"
        return payload

    async def create_issue_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> Dict[str, Any]:
        result: Dict[str, Any] = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            "create_issue_comment",
            json={"body": body},
        )
        logger.info(f"Posted comment to #{issue_number}")
        return result

    async def list_open_issue_titles(self, owner: str, repo: str) -> Set[str]:
        """Titles of open issues, pull requests excluded"""
        titles: Set[str] = set()
        for page in range(1, MAX_PAGES + 1):
            batch: List[Dict[str, Any]] = await self._request(
                "GET",
                f"/repos/{owner}/{repo}/issues",
                "list_open_issues",
                params={"state": "open", "per_page": PER_PAGE, "page": page},
            )
            titles.update(
                item["title"] for item in batch or [] if "pull_request" not in item
            )
            if not batch or len(batch) < PER_PAGE:
                break
        return titles

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
    ) -> Dict[str, Any]:
        result: Dict[str, Any] = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues",
            "create_issue",
            json={"title": title, "body": body},
        )
        logger.info(f"Opened issue #{result.get('number')}: {title}")
        return result

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit with proper cleanup"""
        await self.close()

    async def close(self):
        """Close the HTTP client"""
        if self.client and not self.client.is_closed:
            await self.client.aclose()
            logger.info("GitHub service HTTP client closed")
