"""ID generation utility."""

import secrets


def gen_id(prefix: str) -> str:
    """Generate prefixed opaque IDs: ses_xxx, tool_xxx"""
    return f"{prefix}{secrets.token_urlsafe(12)}"
