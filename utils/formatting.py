import math


def format_time(seconds: float | None) -> str:
    """Format a position in seconds as m:ss.

    Examples:
        >>> format_time(0)
        '0:00'
        >>> format_time(125.9)
        '2:05'
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        seconds = 0
    minutes = int(seconds // 60)
    remaining = int(seconds % 60)
    return f"{minutes}:{remaining:02d}"


def format_digest(digest: str | None) -> str:
    """Shorten an on-chain id to its first char and last three chars."""
    if not digest:
        return "Not available"
    return f"{digest[0]}...{digest[-3:]}"
