"""
Log sanitizer utilities to keep router credentials out of the logs.

LuCI passes its session token in the query string (`?auth=`) and in the
`sysauth` cookie, and the login call carries the password in its params.
"""

import re
from typing import Any, Dict


# (pattern, replacement) pairs applied in order
SENSITIVE_PATTERNS = [
    # Session token in exec URLs and cookies
    (r'([?&]auth=)[^&\s]+', r'\1***REDACTED***'),
    (r'(sysauth=)[^;\s]+', r'\1***REDACTED***'),

    # Token / password assignments
    (r'(token|password|passwd|pwd)\s*[:=]\s*["\']?([^\s"\']+)', r'\1=***REDACTED***'),

    # URLs with embedded credentials
    (r'(https?://)([^:/\s]+):([^@/\s]+)@', r'\1***:***@'),
]

# Fields to redact in dictionaries
SENSITIVE_FIELDS = {
    'password', 'passwd', 'pwd', 'token', 'auth', 'sysauth', 'auth_token', 'credentials',
}


def sanitize_string(text: str) -> str:
    """
    Sanitize a string by removing sensitive data patterns.

    Args:
        text: The string to sanitize

    Returns:
        The sanitized string
    """
    if not isinstance(text, str):
        return text

    sanitized = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a copy of `data` with sensitive keys masked and string values scrubbed."""
    sanitized = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            sanitized[key] = '***REDACTED***'
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value)
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """loguru patcher: scrubs the formatted message before it reaches any sink."""
    record["message"] = sanitize_string(record["message"])
    return record
