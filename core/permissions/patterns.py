"""Pattern matching logic for permission mode tool lists."""

import fnmatch


def match_pattern(pattern: str, value: str) -> bool:
    """
    Check if a tool name matches a mode list entry.

    Supports:
    - Exact matches: "read_file" matches "read_file"
    - Wildcard: "*" matches every tool
    - Glob patterns: "web_*" matches "web_search", "web_fetch"

    Args:
        pattern: The list entry to match against (supports * and ? wildcards)
        value: The tool name to check

    Returns:
        True if value matches pattern, False otherwise
    """
    if pattern == "*":
        return True

    if pattern == value:
        return True

    return fnmatch.fnmatchcase(value, pattern)


def matches_any(patterns: list[str], value: str) -> bool:
    return any(match_pattern(pattern, value) for pattern in patterns)
