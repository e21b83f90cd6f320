"""
Secret redaction for invocation logs and the audit trail.

Tool inputs are logged and audited as parameter summaries. Callers may pass
credentials (the bridge's own auth_token, server passwords forwarded to
actions), so summaries are redacted before they leave the process.

Per project patterns:
- detect-secrets plugin scan over string values
- Recursive handling of nested dictionaries
- Case-insensitive key matching for sensitive field names
"""

import re
from typing import Any

from detect_secrets.core.scan import scan_line
from detect_secrets.settings import default_settings

REDACTED = "[REDACTED]"


class SecretRedactor:
    """
    Redacts secrets from dictionaries before logging.

    Uses three detection strategies:
    1. Key-based: Field names like 'password', 'token', 'auth_token'
    2. detect-secrets: Values flagged by its default plugin set
    3. Pattern-based: Env var assignments (API_KEY=xxx), Bearer tokens

    Game parameter names such as "name", "item" or "key" (a chest slot key)
    are deliberately not treated as sensitive.

    Example:
        redactor = SecretRedactor()
        redactor.redact_dict({"auth_token": "abc", "blockName": "dirt"})
        # {"auth_token": "[REDACTED]", "blockName": "dirt"}
    """

    # Sensitive key names (case-insensitive)
    SENSITIVE_KEYS = {
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "auth_token",
        "api_key",
        "apikey",
        "access_token",
        "refresh_token",
        "bearer",
        "authorization",
        "credentials",
        "private_key",
        "cookie",
        "jwt",
    }

    # Patterns for env var style secrets (KEY=value)
    ENV_VAR_PATTERNS = [
        re.compile(r"(API_KEY|APIKEY|TOKEN|PASSWORD|SECRET)=([^\s]+)", re.IGNORECASE),
    ]

    # Pattern for Bearer tokens
    BEARER_PATTERN = re.compile(r"Bearer\s+([^\s]+)", re.IGNORECASE)

    def redact(self, value: Any) -> Any:
        """Redact any JSON-like value (dict, list, str or scalar)."""
        if isinstance(value, dict):
            return self.redact_dict(value)
        if isinstance(value, list):
            return [self.redact(item) for item in value]
        if isinstance(value, str):
            return self._redact_string(value)
        return value

    def redact_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Redact secrets from a dictionary.

        Args:
            data: Dictionary potentially containing secrets

        Returns:
            Dictionary with secrets replaced by '[REDACTED]'
        """
        if not isinstance(data, dict):
            return data

        result = {}
        for key, value in data.items():
            if str(key).lower() in self.SENSITIVE_KEYS:
                result[key] = REDACTED
            else:
                result[key] = self.redact(value)
        return result

    def _redact_string(self, value: str) -> str:
        if not value:
            return value

        result = value
        for secret in self._detect_secrets(value):
            result = result.replace(secret, REDACTED)
        for pattern in self.ENV_VAR_PATTERNS:
            result = pattern.sub(rf"\1={REDACTED}", result)
        return self.BEARER_PATTERN.sub(f"Bearer {REDACTED}", result)

    @staticmethod
    def _detect_secrets(value: str) -> list[str]:
        """Secret values found by the detect-secrets plugins, longest first."""
        with default_settings():
            found = {s.secret_value for s in scan_line(value) if s.secret_value}
        return sorted(found, key=len, reverse=True)
