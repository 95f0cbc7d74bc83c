"""
Security Helpers

Constant-time comparison, code and token generation, and the trailing-window
bookkeeping used for login throttling.
"""

import hmac
import re
import secrets

EMAIL_SHAPE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
CODE_DIGITS = 6


def constant_time_equals(submitted, expected):
    """Compare two strings without leaking where they differ.

    Unequal lengths are a mismatch straight away; equal-length values are
    compared over their UTF-8 bytes in constant time.
    """
    if submitted is None or expected is None:
        return False
    a = str(submitted).encode('utf-8')
    b = str(expected).encode('utf-8')
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def generate_code():
    """Uniform 6-digit code; leading zeros are kept."""
    return f'{secrets.randbelow(10 ** CODE_DIGITS):0{CODE_DIGITS}d}'


def generate_csrf_token():
    return secrets.token_hex(32)


def generate_session_key():
    return secrets.token_urlsafe(32)


def looks_like_email(value):
    return bool(value) and EMAIL_SHAPE.match(value) is not None


def prune_attempts(attempts, now, window_seconds):
    """Drop attempt timestamps that fell out of the trailing window."""
    return [t for t in attempts or [] if now - t < window_seconds]
