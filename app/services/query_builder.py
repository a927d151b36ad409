"""GitHub search query assembly."""

import re

MIN_STARS_CLAUSE = "stars:>50"
EXAMPLE_SCOPE = "in:name,description,readme"

_UNSAFE_CHARS = re.compile(r"[^\w\s-]")


def sanitize_term(term: str) -> str:
    """Drop everything except word characters, whitespace and hyphens.

    Keeps free text from smuggling GitHub qualifiers such as ``user:`` or
    quoted phrases into the query.
    """
    return _UNSAFE_CHARS.sub("", term).strip()


def build_search_query(language: str, term: str, example: str | None = None) -> str:
    """Build a ``/search/repositories`` query for one search term."""
    example = (example or "").strip()
    parts = [
        f"language:{language}",
        sanitize_term(term),
        f"{example} {EXAMPLE_SCOPE}" if example else "",
        MIN_STARS_CLAUSE,
    ]
    return " ".join(part for part in parts if part)
