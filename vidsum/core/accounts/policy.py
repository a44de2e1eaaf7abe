"""
Credential format rules.

Shared by the request models (first line of defence) and the services
(which re-check before persisting a new password).
"""

import re

PASSWORD_MIN_LENGTH = 8

_PASSWORD_RULES = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
    (re.compile(r"[^A-Za-z0-9]"), "Password must contain at least one special character"),
]

_OTP_PATTERN = re.compile(r"^\d{6}$")


def password_policy_violations(password: str) -> list[str]:
    """Return every rule the password breaks; empty when it is acceptable."""
    violations = []
    if len(password) < PASSWORD_MIN_LENGTH:
        violations.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            violations.append(message)
    return violations


def is_valid_otp_format(otp: str) -> bool:
    return bool(_OTP_PATTERN.match(otp))
