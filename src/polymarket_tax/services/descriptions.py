"""Form 8949 column (a) descriptions."""

DEFAULT_MAX_LENGTH = 55
ELLIPSIS = "..."


def truncate_title(title: str, max_len: int = DEFAULT_MAX_LENGTH) -> str:
    """Shorten a market title, preferring to break between words.

    A word break is used only when it falls past half of max_len; otherwise
    the title is cut hard at max_len - 3. The ellipsis is always appended.
    """
    if not title or len(title) <= max_len:
        return title

    cut_point = max_len - len(ELLIPSIS)
    last_space = title[:cut_point].rfind(" ")
    if last_space > max_len * 0.5:
        cut_point = last_space

    return title[:cut_point].strip() + ELLIPSIS


def describe_position(
    outcome: str, title: str, max_len: int = DEFAULT_MAX_LENGTH
) -> str:
    return f"{outcome.upper()} token - {truncate_title(title, max_len)}"
