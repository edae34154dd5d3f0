"""Message-catalog localization runtime."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Iterable, Mapping
from pathlib import Path

from public_config.domain.languages import normalize_language
from public_config.ports.exceptions import LanguageApplyError
from public_config.ports.preferences import ILocalizationRuntime

SUPPORTED_LANGUAGES = ("bg", "en", "de", "fr", "tr")

CatalogLoader = Callable[[str], Awaitable[Mapping[str, str]]]


def json_catalog_loader(directory: Path) -> CatalogLoader:
    """Loader reading ``<directory>/<code>.json`` message catalogs.

    Each file is read once; later calls for the same code reuse it.
    """
    loaded: dict[str, Mapping[str, str]] = {}

    async def load(code: str) -> Mapping[str, str]:
        if code not in loaded:
            path = directory / f"{code}.json"
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            loaded[code] = json.loads(text)
        return loaded[code]

    return load


class CatalogLocalizationRuntime(ILocalizationRuntime):
    """Renders interface strings from per-language message catalogs.

    Languages outside ``supported`` map to their primary subtag, and to
    ``default_language`` when even that is unsupported. Catalogs are loaded
    once per language through ``loader`` and kept. Lookups fall back to the
    ``fallback_language`` catalog and finally to the key itself.
    """

    def __init__(
        self,
        supported: Iterable[str] = SUPPORTED_LANGUAGES,
        default_language: str = "bg",
        fallback_language: str = "en",
        loader: CatalogLoader | None = None,
        catalogs: Mapping[str, Mapping[str, str]] | None = None,
    ):
        self._supported = tuple(supported)
        self._default_language = default_language
        self._fallback_language = fallback_language
        self._loader = loader
        self._catalogs: dict[str, Mapping[str, str]] = dict(catalogs or {})
        self._language = default_language
        self._lock = asyncio.Lock()

    @property
    def language(self) -> str:
        return self._language

    @property
    def supported(self) -> tuple[str, ...]:
        return self._supported

    def resolve_language(self, language: str | None) -> str:
        code = normalize_language(language)
        if code in self._supported:
            return code
        return self._default_language

    async def change_language(self, language: str) -> str:
        """Load the catalog for ``language`` if needed, then switch to it.

        Raises:
            LanguageApplyError: If the catalog loader fails.
        """
        code = self.resolve_language(language)
        async with self._lock:
            await self._ensure_catalog(code)
            if code != self._fallback_language:
                await self._ensure_catalog(self._fallback_language)
            self._language = code
        return code

    async def _ensure_catalog(self, code: str) -> None:
        if code in self._catalogs or self._loader is None:
            return
        try:
            self._catalogs[code] = await self._loader(code)
        except Exception as e:
            raise LanguageApplyError(
                f"Failed to load message catalog for '{code}': {e}"
            ) from e

    def translate(self, key: str, default: str | None = None) -> str:
        for code in (self._language, self._fallback_language):
            value = self._catalogs.get(code, {}).get(key)
            if value:
                return value
        return default if default is not None else key
