"""Language code normalization shared by parsing and negotiation."""

from __future__ import annotations

from collections.abc import Iterable

FALLBACK_LANGUAGE = "bg"


def normalize_language(raw: str | None) -> str:
    """Normalize a language code to its lowercase primary subtag.

    ``" de-DE "`` becomes ``"de"`` and ``"EN_us"`` becomes ``"en"``.
    Returns an empty string when nothing usable remains.
    """
    value = str(raw or "").strip().lower()
    if not value:
        return ""
    return value.replace("_", "-").split("-")[0]


def normalize_language_set(
    raw: Iterable[str | None] | None,
    fallback: str = FALLBACK_LANGUAGE,
) -> tuple[str, ...]:
    """Normalize a declared language list, keeping first-seen order.

    Empty input collapses to ``(fallback,)`` so callers always have at least
    one language to render.
    """
    seen: list[str] = []
    for item in raw or ():
        code = normalize_language(item)
        if code and code not in seen:
            seen.append(code)
    return tuple(seen) if seen else (normalize_language(fallback) or FALLBACK_LANGUAGE,)


def pick_default(raw_default: str | None, languages: tuple[str, ...]) -> str:
    """Return the normalized default if it belongs to ``languages``, else the first one."""
    code = normalize_language(raw_default)
    if code and code in languages:
        return code
    return languages[0]
