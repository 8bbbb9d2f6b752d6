"""
Attribution footer appended to every rendered comment
"""

from typing import Iterable, List, Optional

from patchwarden.review.formatting import GITHUB_URL

PROJECT_NAME = "PatchWarden"
PROJECT_URL = "https://github.com/patchwarden/patchwarden"
SHORT_SHA_LENGTH = 7


def normalize_mentions(users: Optional[Iterable[str]]) -> List[str]:
    """Prefix '@' where missing and drop duplicates, keeping first occurrence"""
    mentions: List[str] = []
    for user in users or ():
        user = user.strip()
        if not user:
            continue
        mention = user if user.startswith("@") else f"@{user}"
        if mention not in mentions:
            mentions.append(mention)
    return mentions


def build_footer(
    owner: str,
    repo: str,
    commit_sha: Optional[str] = None,
    ping_users: Optional[Iterable[str]] = None,
) -> str:
    footer = f"<sub>\n\n---\n\nWritten by [{PROJECT_NAME}]({PROJECT_URL})"

    mentions = normalize_mentions(ping_users)
    mentions_text = f"\n\nCC: {' '.join(mentions)}" if mentions else ""

    if commit_sha:
        short_sha = commit_sha[:SHORT_SHA_LENGTH]
        commit_url = f"{GITHUB_URL}/{owner}/{repo}/commit/{commit_sha}"
        return f"{footer} for commit [{short_sha}]({commit_url}).{mentions_text}</sub>"

    return f"{footer}.{mentions_text}</sub>"
