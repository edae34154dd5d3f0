"""Language negotiation.

Pure functions: given what the server declares, what the URL asks for and
what the visitor picked last time, decide which language to render. Persisting
the result and rewriting the URL are left to the caller.
"""

from __future__ import annotations

from public_config.domain.languages import FALLBACK_LANGUAGE, normalize_language
from public_config.domain.value_objects import ConfigRecord, NegotiatedLanguage


def allowed_languages(
    record: ConfigRecord, fallback: str = FALLBACK_LANGUAGE
) -> tuple[str, ...]:
    """Languages usable for both interface and content, in UI order.

    Disjoint sets fall back to the content languages, then the UI languages,
    then ``fallback``.
    """
    content = set(record.content_languages)
    intersection = tuple(lang for lang in record.ui_languages if lang in content)
    if intersection:
        return intersection
    if record.content_languages:
        return record.content_languages
    if record.ui_languages:
        return record.ui_languages
    return (normalize_language(fallback) or FALLBACK_LANGUAGE,)


def server_default(record: ConfigRecord, allowed: tuple[str, ...]) -> str:
    """The language the tenant wants visitors to start in."""
    if record.ui_default and record.ui_default == record.content_default:
        candidate = record.ui_default
    else:
        candidate = record.ui_default or record.content_default

    if candidate in allowed:
        return candidate
    return allowed[0]


def select_language(candidate: str | None, negotiated: NegotiatedLanguage) -> str:
    """Normalize ``candidate`` and accept it only if it is allowed."""
    code = normalize_language(candidate)
    if code in negotiated.allowed:
        return code
    return negotiated.default


def negotiate(
    record: ConfigRecord,
    url_hint: str | None = None,
    preference: str | None = None,
    fallback: str = FALLBACK_LANGUAGE,
) -> NegotiatedLanguage:
    """Compute the active language for a tenant.

    Candidate order is URL hint (only when there is something to choose
    from), then the stored preference, then the server default. The first
    non-empty candidate is validated; an unknown one yields the server
    default rather than the next candidate.

    Args:
        record: Normalized tenant configuration.
        url_hint: Raw value of the URL language parameter, if any.
        preference: Previously persisted language for this tenant, if any.
        fallback: Language used when the record declares nothing usable.

    Returns:
        NegotiatedLanguage with the active language and the allowed set.
    """
    allowed = allowed_languages(record, fallback)
    default = server_default(record, allowed)
    negotiated = NegotiatedLanguage(active=default, allowed=allowed, default=default)

    from_url = url_hint if negotiated.has_choice else None
    candidate = from_url or preference or default

    return negotiated.with_active(select_language(candidate, negotiated))
