"""
GitHub payload models
"""

import json
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel

from patchwarden.exceptions import ConfigurationException

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


class FileChange(BaseModel):
    """One changed file as reported by the GitHub files endpoints"""

    filename: str
    patch: Optional[str] = None
    status: Optional[str] = None

    @property
    def is_reviewable(self) -> bool:
        """Binary, oversized and content-unchanged files carry no patch"""
        return bool(self.patch)


class EventContext(BaseModel):
    """Triggering GitHub Actions event, reduced to what a review run needs"""

    event_type: Literal["pull_request", "push"]
    owner: str
    repo: str
    commit_sha: str
    username: str
    pr_number: Optional[int] = None
    branch: Optional[str] = None

    @classmethod
    def from_environment(cls, env: Mapping[str, str]) -> "EventContext":
        """Build the context from the variables GitHub Actions exports"""
        event_name = env.get("GITHUB_EVENT_NAME", "")
        repository = env.get("GITHUB_REPOSITORY", "")
        if "/" not in repository:
            raise ConfigurationException(
                message="GITHUB_REPOSITORY must be set as 'owner/repo'",
                config_key="GITHUB_REPOSITORY",
            )
        owner, repo = repository.split("/", 1)
        payload = _load_event_payload(env.get("GITHUB_EVENT_PATH"))

        if event_name in PULL_REQUEST_EVENTS:
            pull_request = payload.get("pull_request")
            if not pull_request:
                raise ConfigurationException(
                    message="Expected pull request event but payload.pull_request is missing",
                    config_key="GITHUB_EVENT_PATH",
                )
            return cls(
                event_type="pull_request",
                owner=owner,
                repo=repo,
                pr_number=pull_request["number"],
                username=pull_request["user"]["login"],
                commit_sha=pull_request["head"]["sha"],
            )

        if event_name == "push":
            head_commit = payload.get("head_commit")
            if not head_commit:
                raise ConfigurationException(
                    message="Expected push event but payload.head_commit is missing",
                    config_key="GITHUB_EVENT_PATH",
                )
            ref = env.get("GITHUB_REF", "")
            author = head_commit.get("author") or {}
            return cls(
                event_type="push",
                owner=owner,
                repo=repo,
                username=author.get("username") or env.get("GITHUB_ACTOR", ""),
                commit_sha=env.get("GITHUB_SHA") or head_commit["id"],
                branch=ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else None,
            )

        raise ConfigurationException(
            message="This action must be run on a pull request or push event",
            config_key="GITHUB_EVENT_NAME",
            details={"event_name": event_name},
        )


def _load_event_payload(event_path: Optional[str]) -> Dict[str, Any]:
    if not event_path:
        raise ConfigurationException(
            message="GITHUB_EVENT_PATH is not set", config_key="GITHUB_EVENT_PATH"
        )
    try:
        with open(Path(event_path), "r", encoding="utf-8") as f:
            payload: Dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationException(
            message="Failed to read GitHub event payload",
            config_key="GITHUB_EVENT_PATH",
            details={"event_path": event_path},
            original_error=e,
        )
    return payload
