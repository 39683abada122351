"""Log sanitization for provisioning messages.

Pattern-based redaction of secrets that can leak through SDK error text or
payload dumps:
- VM admin passwords (adminPassword / admin_password)
- Service principal client secrets
- Bearer tokens and access tokens
- cloud-init custom data

Design Philosophy:
- Security first: err on side of over-redaction
- Pattern-based, applied to every wrapped error message
"""

import re
from re import Pattern
from typing import Any


class LogSanitizer:
    """Sanitize sensitive data from logs and error messages.

    All methods are class methods and can be called without instantiation.
    """

    REDACTED = "[REDACTED]"

    # Order matters: more specific patterns come first
    SECRET_PATTERNS: dict[str, Pattern] = {
        "admin_password": re.compile(
            r'(admin[_-]?password["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)\}]+)',
            re.IGNORECASE,
        ),
        "client_secret_assignment": re.compile(
            r'(client[_-]?secret["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)\}]+)',
            re.IGNORECASE,
        ),
        "client_secret_env": re.compile(
            r"((?:AZURE_CLIENT_SECRET|AZPROVISION_SP_CLIENT_SECRET)[\"']?\s*[:=]\s*[\"']?)"
            r"([^\s\"'&,\)]+)",
            re.IGNORECASE,
        ),
        "password": re.compile(
            r'((?<![a-z_])password["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)\}]+)', re.IGNORECASE
        ),
        "authorization_bearer": re.compile(r"(Authorization:\s*Bearer\s+)([^\s]+)", re.IGNORECASE),
        "access_token": re.compile(
            r'(access[_-]?token["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)\}]+)',
            re.IGNORECASE,
        ),
        "custom_data": re.compile(
            r'(custom[_-]?data["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)\}]+)', re.IGNORECASE
        ),
    }

    # Dict keys whose values are always redacted
    SENSITIVE_KEYS = (
        "password",
        "secret",
        "token",
        "credential",
        "authorization",
        "custom_data",
        "customdata",
    )

    @classmethod
    def sanitize(cls, message: Any) -> str:
        """Redact every known secret pattern.

        Examples:
            >>> LogSanitizer.sanitize("adminPassword=Hunter2!")
            'adminPassword=[REDACTED]'
            >>> LogSanitizer.sanitize("client_secret: abc123")
            'client_secret: [REDACTED]'
        """
        result = message if isinstance(message, str) else str(message)
        for pattern in cls.SECRET_PATTERNS.values():
            result = pattern.sub(r"\1" + cls.REDACTED, result)
        return result

    @classmethod
    def create_safe_error_message(cls, error: BaseException, context: str = "") -> str:
        """Create an error message with secrets sanitized.

        Example:
            >>> err = ValueError("rejected admin_password=abc")
            >>> LogSanitizer.create_safe_error_message(err, "failed to create VM vm1")
            'failed to create VM vm1: rejected admin_password=[REDACTED]'
        """
        sanitized = cls.sanitize(str(error))
        if context:
            return f"{context}: {sanitized}"
        return sanitized

    @classmethod
    def sanitize_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``data`` with sensitive values redacted recursively."""
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(word in key_lower for word in cls.SENSITIVE_KEYS):
                result[key] = cls.REDACTED
            elif isinstance(value, dict):
                result[key] = cls.sanitize_dict(value)
            elif isinstance(value, (list, tuple)):
                result[key] = type(value)(
                    cls.sanitize_dict(item)
                    if isinstance(item, dict)
                    else cls.sanitize(item)
                    if isinstance(item, str)
                    else item
                    for item in value
                )
            elif isinstance(value, str):
                result[key] = cls.sanitize(value)
            else:
                result[key] = value
        return result


__all__ = ["LogSanitizer"]
