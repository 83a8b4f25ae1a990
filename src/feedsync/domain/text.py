"""Canonical text forms used for grouping keys, handles and comparisons."""

from __future__ import annotations

import re
import unicodedata

_NON_WORD = re.compile(r"[^\w\s-]")
_NON_SLUG = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")


def strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def normalize(value: str | None) -> str:
    """Return the accent-free, lowercase, single-spaced form of ``value``.

    Punctuation other than hyphens becomes whitespace. Never raises; ``None``
    and blank input yield an empty string.
    """

    if not value:
        return ""
    text = strip_accents(value)
    text = _NON_WORD.sub(" ", text)
    return collapse_whitespace(text).lower()


def slugify(value: str | None, max_length: int = 100) -> str:
    """Hyphenated ``[a-z0-9-]`` handle, at most ``max_length`` characters long."""

    if max_length < 1:
        raise ValueError("max_length must be positive")
    text = strip_accents(value or "").lower()
    slug = _NON_SLUG.sub("-", text).strip("-")
    return slug[:max_length].rstrip("-")


def title_case(value: str) -> str:
    """Capitalise all-lowercase words; words with capitals of their own are kept."""

    return " ".join(
        word[:1].upper() + word[1:] if word.islower() else word for word in value.split()
    )


__all__ = ["collapse_whitespace", "normalize", "slugify", "strip_accents", "title_case"]
