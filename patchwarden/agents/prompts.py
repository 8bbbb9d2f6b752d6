"""
Prompt templates for diff review
"""

import json

from patchwarden.models.review_models import ReviewResult

SYSTEM_PROMPT = """
You are a comprehensive full-stack code reviewer and security specialist (VAPT).
Your mission is to perform a holistic analysis of code changes across four pillars:

1. **Security Vulnerabilities**: High-priority flaws (injection, broken auth, secrets, OWASP Top 10).
2. **Code Integrity**: Architectural consistency, naming conventions and adherence to project-wide patterns.
3. **Syntax & Best Practices**: Language-specific anti-patterns, deprecated methods, modern clean code standards.
4. **Potential Breaks & Logic**: Logical flaws, unhandled edge cases, resource leaks, or code that is valid but likely to crash in production.

CRITICAL INSTRUCTIONS:
- Do NOT ignore low-severity issues. Code integrity and syntax findings must be reported alongside security findings.
- Be specific about line numbers, using the line numbers of the new version of each file.
- Provide a clear, actionable suggestion for every issue found.
- Think like both an attacker (for security) and a senior architect (for quality).
""".strip()

ANALYSIS_PROMPT_TEMPLATE = """
Please analyze this code diff with a security-first approach. Prioritize security vulnerabilities above all other issues.

Code diff:
```
{diff}
```

## Severity Guide

### Critical
- Injection (SQL, NoSQL, command, LDAP, XPath, template), remote code execution, unsafe eval
- Authentication/authorization bypass, IDOR, privilege escalation
- Hardcoded secrets: API keys, passwords, tokens, private keys
- XXE, SSRF, insecure deserialization of untrusted data

### High
- XSS in authenticated areas, CSRF on state-changing operations
- Weak cryptography (MD5, SHA1, weak ciphers, improper key management)
- Insecure file uploads, path traversal, missing rate limiting on sensitive endpoints
- Broken access control

### Medium
- XSS in less critical areas, information disclosure (stack traces, sensitive data in logs)
- Weak password policies, missing security headers, insecure randomness
- Insecure session management

### Low
- Missing non-critical headers, verbose errors without sensitive data
- Code quality issues with minimal security impact, deprecated but not exploitable functions

### Info
- Best practice suggestions, informational security notes, documentation improvements

## For Each Security Issue
1. Classify the security category (injection, authentication, xss, ...)
2. Assess exploitability and impact
3. Determine severity from exploitability and impact using VAPT urgency standards

Non-security findings (code integrity, syntax, logic) leave securityCategory, exploitability and impact null.

## Code Integrity, Syntax & Potential Breaks
- Naming consistency and adherence to best practices
- Logical flaws that could lead to unexpected behavior
- Valid but error-prone patterns (anti-patterns)
- Missing error handling, unhandled promises, null dereferences, out-of-bounds access

## Output Priority
1. Vulnerabilities (critical -> high -> medium -> low -> info)
2. Misconfigurations
3. Best practices

When in doubt about severity, err on the side of caution for security issues.
""".strip()

SCHEMA_INSTRUCTIONS_TEMPLATE = """
Respond with a single JSON object and nothing else: no prose, no markdown fences.
The object must validate against this JSON schema:

{schema}
""".strip()


def get_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_analysis_prompt(diff: str) -> str:
    """Embed the combined diff in the review instructions"""
    return ANALYSIS_PROMPT_TEMPLATE.format(diff=diff)


def build_schema_instructions() -> str:
    """Schema block appended for backends without server-side schema enforcement"""
    schema = json.dumps(ReviewResult.model_json_schema(), indent=2)
    return SCHEMA_INSTRUCTIONS_TEMPLATE.format(schema=schema)
