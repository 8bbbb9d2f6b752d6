"""
Routing and rendering of review findings
"""

from .aggregated import format_aggregated_comment
from .inline import generate_inline_comments
from .issue import format_issue_body, format_issue_title
from .routing import route_issues, sort_issues

__all__ = [
    "format_aggregated_comment",
    "format_issue_body",
    "format_issue_title",
    "generate_inline_comments",
    "route_issues",
    "sort_issues",
]
