import re
from typing import Optional

MAX_SLUG_BASE_LENGTH = 80


def slugify(text: str) -> str:
    """Convert text to URL-friendly slug"""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[-\s_]+', '-', text)
    return text.strip('-')


def derive_slug(name: str, disambiguator: Optional[str] = None) -> str:
    """
    Build the slug stored alongside a court, case type or case.

    The disambiguator (a code or case number) is unique per row, so appending
    it keeps two rows with the same name on distinct slugs.
    """
    base = slugify(name or "")[:MAX_SLUG_BASE_LENGTH].strip('-')
    suffix = slugify(disambiguator or "")
    parts = [part for part in (base, suffix) if part]
    if not parts:
        raise ValueError("cannot derive a slug from empty name and disambiguator")
    return "-".join(parts)
