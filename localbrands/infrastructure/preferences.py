"""User preferences passed explicitly into each wizard session."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .analysis import Language, normalise_language
from .storage import LANGUAGE_KEY, THEME_KEY, JsonStore

Theme = Literal["light", "dark"]


@dataclass(frozen=True, slots=True)
class Preferences:
    language: Language = "en"
    theme: Theme | None = None


def load_preferences(store: JsonStore) -> Preferences:
    theme = store.get_value(THEME_KEY)
    return Preferences(
        language=normalise_language(store.get_value(LANGUAGE_KEY)),
        theme=theme if theme in ("light", "dark") else None,  # type: ignore[arg-type]
    )


def save_preferences(store: JsonStore, preferences: Preferences) -> None:
    store.set_value(LANGUAGE_KEY, preferences.language)
    if preferences.theme is not None:
        store.set_value(THEME_KEY, preferences.theme)


_store: JsonStore | None = None


def configure_preferences_store(store: JsonStore | None) -> None:
    """Install the store new wizard sessions read and write preferences through."""

    global _store
    _store = store


def get_preferences_store() -> JsonStore | None:
    return _store


__all__ = [
    "Preferences",
    "Theme",
    "configure_preferences_store",
    "get_preferences_store",
    "load_preferences",
    "save_preferences",
]
