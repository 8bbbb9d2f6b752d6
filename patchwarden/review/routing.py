"""
Severity-based routing of findings to presentation channels
"""

from typing import Iterable, List

from patchwarden.models.review_models import (
    INLINE_SEVERITIES,
    SEVERITY_ORDER,
    Issue,
    RoutedIssues,
)


def route_issues(issues: Iterable[Issue]) -> RoutedIssues:
    """Stable partition: critical/high go inline, everything else to the summary"""
    routed = RoutedIssues()
    for issue in issues:
        if issue.severity in INLINE_SEVERITIES:
            routed.critical_high.append(issue)
        else:
            routed.medium_low_info.append(issue)
    return routed


def sort_issues(issues: Iterable[Issue]) -> List[Issue]:
    """Most severe first; sorted() keeps ties in input order"""
    return sorted(issues, key=lambda issue: SEVERITY_ORDER[issue.severity])
