"""Reading and rewriting the language query parameter of a public URL."""

from __future__ import annotations

import httpx

from public_config.domain.languages import normalize_language

DEFAULT_LANGUAGE_PARAM = "lang"


def read_language_hint(
    url: str | httpx.URL | None, param: str = DEFAULT_LANGUAGE_PARAM
) -> str | None:
    """Return the normalized language the URL asks for, if any.

    A URL that cannot be parsed carries no hint.
    """
    if not url:
        return None
    try:
        value = httpx.URL(url).params.get(param)
    except httpx.InvalidURL:
        return None
    return normalize_language(value) or None


def rewrite_language_param(
    url: str | httpx.URL,
    language: str,
    show: bool,
    param: str = DEFAULT_LANGUAGE_PARAM,
) -> str:
    """Set ``param`` to ``language`` when ``show``, otherwise remove it.

    Single-language tenants never carry the parameter. A URL that cannot
    be parsed is returned unchanged.
    """
    try:
        parsed = httpx.URL(url)
        if show:
            return str(parsed.copy_set_param(param, language))
        if param in parsed.params:
            return str(parsed.copy_remove_param(param))
    except httpx.InvalidURL:
        return str(url)
    return str(parsed)
