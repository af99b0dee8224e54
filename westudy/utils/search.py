LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """`%term%` for ILIKE with the term's own wildcards matched literally."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
