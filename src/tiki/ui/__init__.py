"""Textual user interface for tiki."""

from tiki.ui.app import ConfirmInitScreen, TikiApp
from tiki.ui.main import MainScreen

__all__ = ["ConfirmInitScreen", "MainScreen", "TikiApp"]
