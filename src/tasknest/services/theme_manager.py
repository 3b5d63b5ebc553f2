# Rev 0.2.0
from __future__ import annotations

from PySide6.QtCore import QObject, QSettings, Signal

PREF_NAME = "theme_prefs"
PREF_DARK_MODE = "dark_mode"


class ThemeManager(QObject):
    """Dark/light choice persisted in QSettings; read at start and on every toggle."""

    themeChanged = Signal(bool)

    def __init__(self, settings: QSettings | None = None, organization: str = "tasknest"):
        super().__init__()
        self._settings = settings if settings is not None else QSettings(organization, PREF_NAME)

    def is_dark_mode(self) -> bool:
        return bool(self._settings.value(PREF_DARK_MODE, False, type=bool))

    def set_dark_mode(self, is_dark: bool) -> None:
        self._settings.setValue(PREF_DARK_MODE, bool(is_dark))
        self._settings.sync()
        self.themeChanged.emit(bool(is_dark))

    def toggle(self) -> bool:
        dark = not self.is_dark_mode()
        self.set_dark_mode(dark)
        return dark
