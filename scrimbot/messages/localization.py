"""Localization system using Mozilla Fluent."""

import logging
from pathlib import Path

from fluent_compiler.bundle import FluentBundle
from babel.lists import format_list

logger = logging.getLogger(__name__)

_DEFAULT_LOCALES_DIR = Path(__file__).parent.parent / "locales"
FALLBACK_LOCALE = "en"


class Localization:
    """
    Renders bot messages from the .ftl catalogs via fluent-compiler.

    Catalogs live in `<locales_dir>/<locale>/*.ftl`. Unknown locales fall
    back to English; unknown message ids render as the id itself.
    """

    _bundles: dict[str, FluentBundle] = {}
    _locales_dir: Path = _DEFAULT_LOCALES_DIR

    @classmethod
    def init(cls, locales_dir: Path | str | None = None) -> None:
        """Point the system at a locales directory and drop compiled bundles."""
        cls._locales_dir = Path(locales_dir) if locales_dir else _DEFAULT_LOCALES_DIR
        cls._bundles = {}

    @classmethod
    def available_locales(cls) -> list[str]:
        if not cls._locales_dir.is_dir():
            return []
        return sorted(d.name for d in cls._locales_dir.iterdir() if d.is_dir())

    @classmethod
    def _get_bundle(cls, locale: str) -> FluentBundle:
        """Get or compile the bundle for a locale."""
        if locale in cls._bundles:
            return cls._bundles[locale]

        locale_dir = cls._locales_dir / locale
        actual_locale = locale
        if not locale_dir.exists():
            locale_dir = cls._locales_dir / FALLBACK_LOCALE
            actual_locale = FALLBACK_LOCALE
            if not locale_dir.exists():
                raise RuntimeError(f"No locale files found for {locale} or {FALLBACK_LOCALE}")

        ftl_content = [
            ftl_file.read_text(encoding="utf-8")
            for ftl_file in sorted(locale_dir.glob("*.ftl"))
        ]
        if not ftl_content:
            raise RuntimeError(f"No .ftl files found in {locale_dir}")

        bundle = FluentBundle.from_string(actual_locale, "\n".join(ftl_content))
        cls._bundles[locale] = bundle
        return bundle

    # Unicode bidi isolation characters that Fluent adds around variables
    _BIDI_CHARS = "\u2068\u2069"  # FIRST STRONG ISOLATE, POP DIRECTIONAL ISOLATE

    @classmethod
    def get(cls, locale: str, message_id: str, **kwargs) -> str:
        """
        Get a localized message.

        Args:
            locale: The locale code (e.g., 'en').
            message_id: The message ID from the .ftl file.
            **kwargs: Variables to substitute into the message.

        Returns:
            The formatted message string, or the message ID if it cannot be
            rendered.
        """
        bundle = cls._get_bundle(locale)
        try:
            result, errors = bundle.format(message_id, kwargs)
        except LookupError:
            logger.warning("Unknown message id %s", message_id)
            return message_id
        if errors:
            logger.debug("Errors rendering %s: %s", message_id, errors)
        for char in cls._BIDI_CHARS:
            result = result.replace(char, "")
        return result

    @classmethod
    def format_list_and(cls, locale: str, items: list[str]) -> str:
        """
        Format a list with 'and' conjunction using Babel.

        Returns:
            Formatted list string (e.g., "A, B, and C").
        """
        if not items:
            return ""
        return format_list(items, style="standard", locale=locale)
