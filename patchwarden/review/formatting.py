"""
Markdown fragments shared by inline, aggregated and issue renderings
"""

import re
from typing import Dict, Optional

from patchwarden.models.review_models import Issue

GITHUB_URL = "https://github.com"
METADATA_SEPARATOR = " | "

SEVERITY_EMOJI: Dict[str, str] = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
    "info": "ℹ️",
}

SECURITY_CATEGORY_LABELS: Dict[str, str] = {
    "injection": "Injection",
    "authentication": "Authentication",
    "authorization": "Authorization",
    "cryptography": "Cryptography",
    "xss": "XSS",
    "xxe": "XXE",
    "deserialization": "Deserialization",
    "ssrf": "SSRF",
    "csrf": "CSRF",
    "idor": "IDOR",
    "secrets": "Secrets",
    "config": "Configuration",
    "logging": "Logging",
    "api": "API Security",
    "other": "Security",
}

EXPLOITABILITY_LABELS: Dict[str, str] = {
    "easy": "Easy",
    "medium": "Medium",
    "hard": "Hard",
}

IMPACT_LABELS: Dict[str, str] = {
    "system_compromise": "System Compromise",
    "data_breach": "Data Breach",
    "privilege_escalation": "Privilege Escalation",
    "information_disclosure": "Information Disclosure",
    "denial_of_service": "Denial of Service",
    "data_modification": "Data Modification",
    "minimal": "Minimal",
}

# Metadata line key -> (issue attribute, value -> label)
_METADATA_FIELDS = (
    ("Category", "security_category", SECURITY_CATEGORY_LABELS),
    ("Exploitability", "exploitability", EXPLOITABILITY_LABELS),
    ("Impact", "impact", IMPACT_LABELS),
)

_METADATA_ENTRY = re.compile(r"^\*\*(?P<key>[A-Za-z]+):\*\* (?P<label>.+)$")


def get_severity_emoji(severity: str) -> str:
    return SEVERITY_EMOJI[severity]


def format_paragraphs(text: str) -> str:
    """Reflow text into markdown paragraphs split on blank lines"""
    paragraphs = (paragraph.strip() for paragraph in re.split(r"\n\s*\n", text))
    return "\n\n".join(paragraph for paragraph in paragraphs if paragraph)


def build_metadata_line(issue: Issue) -> str:
    """Severity first, then category, exploitability and impact when present"""
    entries = [f"**Severity:** {issue.severity.capitalize()}"]
    for key, attribute, labels in _METADATA_FIELDS:
        value = getattr(issue, attribute)
        if value:
            entries.append(f"**{key}:** {labels[value]}")
    return METADATA_SEPARATOR.join(entries)


def parse_metadata_line(line: str) -> Dict[str, Optional[str]]:
    """
    Recover the structured fields from a rendered metadata line

    Returns:
        Mapping of severity, security_category, exploitability and impact to
        their enum values, None for fields absent from the line
    """
    parsed: Dict[str, Optional[str]] = {
        "severity": None,
        "security_category": None,
        "exploitability": None,
        "impact": None,
    }
    reverse = {
        key: (attribute, {label: value for value, label in labels.items()})
        for key, attribute, labels in _METADATA_FIELDS
    }

    for entry in line.strip().split(METADATA_SEPARATOR):
        match = _METADATA_ENTRY.match(entry)
        if not match:
            raise ValueError(f"Malformed metadata entry: {entry!r}")
        key, label = match.group("key"), match.group("label")
        if key == "Severity":
            parsed["severity"] = label.lower()
        elif key in reverse:
            attribute, values = reverse[key]
            parsed[attribute] = values[label]
        else:
            raise ValueError(f"Unknown metadata key: {key!r}")
    return parsed


def build_file_permalink(
    owner: str,
    repo: str,
    commit_sha: str,
    file: str,
    start_line: Optional[int] = None,
    end_line: Optional[int] = None,
) -> str:
    """Link pinned to a commit sha, never to a branch"""
    base_url = f"{GITHUB_URL}/{owner}/{repo}/blob/{commit_sha}/{file}"
    if not start_line:
        return base_url
    if end_line and end_line > start_line:
        return f"{base_url}#L{start_line}-L{end_line}"
    return f"{base_url}#L{start_line}"


def format_code_snippet(code_snippet: Optional[str]) -> str:
    if not code_snippet:
        return ""
    return f"```\n{code_snippet}\n```\n\n"


def format_explanation(explanation: Optional[str]) -> str:
    if not explanation:
        return ""
    return (
        "<details>\n<summary><strong>💡 Explanation</strong></summary>\n\n"
        f"{format_paragraphs(explanation)}\n\n</details>\n\n"
    )


def format_solution(suggestion: Optional[str], code_snippet: Optional[str]) -> str:
    """Collapsible fix block; the code example only renders alongside a suggestion"""
    if not suggestion:
        return ""

    output = "<details>\n<summary><strong>🛠️ Fix</strong></summary>\n\n"
    output += f"{format_paragraphs(suggestion)}\n\n"
    formatted_code = format_code_snippet(code_snippet)
    if formatted_code:
        output += f"**Code example:**\n\n{formatted_code}"
    output += "</details>\n\n"
    return output
