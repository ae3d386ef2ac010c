def parse_score(value) -> int:
    """Lenient integer parse for score inputs; anything unreadable is 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def clamp_score(value: int) -> int:
    return max(0, int(value))
